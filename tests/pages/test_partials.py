"""
Партиалы: передача аргументов, области видимости и привязки.
"""

import pytest

from tpages import PageResult, TemplatePagesContext
from tpages.config import MAX_DEPTH_LIMIT, settings_from_dict
from tpages.errors import RenderDepthError, TemplateNotFoundError

from tests.infrastructure.page_utils import make_context, render, sanitize


LAYOUT_HEAD = "\n<html>\n  <title>{{ title }}</title>\n</head>\n<body>\n"


class TestPartials:

    def test_pass_variables_into_partials(self):
        context = TemplatePagesContext(args={"defaultMessage": "this is the default message"}).init()

        context.virtual_files.write_file(
            "_layout.html",
            LAYOUT_HEAD
            + "{{ 'header' | partial({ id: 'the-page', message: 'in your header' }) }}\n"
            + "{{ page }}\n</body>",
        )
        context.virtual_files.write_file(
            "header.html",
            "\n<header id='{{ id | otherwise('header') }}'>\n"
            "  {{ message | otherwise(defaultMessage) }}\n</header>",
        )
        context.virtual_files.write_file("page.html", "<h1>{{ title }}</h1>")

        result = PageResult(context.get_page("page"), {"title": "The title"}).result

        assert sanitize(result) == sanitize(
            "\n<html>\n  <title>The title</title>\n</head>\n<body>\n"
            "<header id='the-page'>\n  in your header\n</header>\n"
            "<h1>The title</h1>\n</body>\n"
        )

    def test_partial_defaults_fall_back_to_context(self):
        context = make_context(
            {
                "header.html": "<header id='{{ id | otherwise('header') }}'>{{ message | otherwise(defaultMessage) }}</header>",
                "page.html": "{{ 'header' | partial }}",
            },
            args={"defaultMessage": "default"},
        )
        assert render(context, "page") == "<header id='header'>default</header>"

    def test_partial_with_scoped_variables(self):
        context = make_context(
            {
                "_layout.html": LAYOUT_HEAD
                + "{{ 'my-partial' | partial({ title: 'with-partial', tag: 'h2' }) }}\n"
                + "{{ myPartial | partial({ title: 'with-partial-binding', tag: 'h2' }) }}\n"
                + "<footer>{{ title }}</footer>\n</body>",
                "my-partial.html": "<{{ tag }}>{{ title }}</{{ tag }}>",
            },
            args={"myPartial": "my-partial"},
        )

        result = render(context, "my-partial", {"title": "The title"})

        assert sanitize(result) == sanitize(
            "\n<html>\n  <title>The title</title>\n</head>\n<body>\n"
            "<h2>with-partial</h2>\n<h2>with-partial-binding</h2>\n"
            "<footer>The title</footer>\n</body>\n"
        )

    def test_partial_arguments_containing_bindings(self):
        context = make_context(
            {
                "_layout.html": LAYOUT_HEAD
                + "{{ 'my-partial' | partial({ title: title, tag: headingTag }) }}\n"
                + "{{ myPartial | partial({ title: partialTitle, tag: headingTag }) }}\n</body>",
                "my-partial.html": "<{{ tag }}>{{ title }}</{{ tag }}>",
            },
            args={"myPartial": "my-partial", "headingTag": "h2"},
        )

        result = render(context, "my-partial", {"title": "The title", "partialTitle": "Partial Title"})

        assert sanitize(result) == sanitize(
            "\n<html>\n  <title>The title</title>\n</head>\n<body>\n"
            "<h2>The title</h2>\n<h2>Partial Title</h2>\n</body>\n"
        )

    def test_replace_bindings(self):
        context = make_context(
            {
                "_layout.html": LAYOUT_HEAD
                + "{{ contextPartial | partial({ title: contextTitle, tag: contextTag, items: [a,b] }) }}\n"
                + "{{ page }}\n</body>",
                "bind-partial.html": "\n<{{ tag }}>{{ title | upper }}</{{ tag }}>\n<p>{{ items | join(', ') }}</p>",
                "bind-page.html": "\n<section>\n{{ pagePartial | partial({ tag: pageTag, items: items }) }}\n</section>\n",
            },
            args={
                "contextTitle": "The title",
                "contextPartial": "bind-partial",
                "contextTag": "h2",
                "a": "foo",
                "b": "bar",
            },
        )

        result = render(context, "bind-page", {
            "title": "Page title",
            "pagePartial": "bind-partial",
            "pageTag": "h3",
            "items": [1, 2, 3],
        })

        assert sanitize(result) == sanitize(
            "\n<html>\n  <title>Page title</title>\n</head>\n<body>\n"
            "<h2>THE TITLE</h2>\n<p>foo, bar</p>\n"
            "<section>\n<h3>PAGE TITLE</h3>\n<p>1, 2, 3</p>\n</section>\n\n"
            "</body>\n"
        )

    def test_partial_arguments_evaluated_in_caller_scope(self):
        """Аргумент со ссылкой на своё же имя берёт значение вызывающего шаблона."""
        context = make_context({
            "item.html": "[{{ name }}]",
            "page.html": "{{ 'item' | partial({ name: name | upper }) }}{{ name }}",
        })
        assert render(context, "page", {"name": "x"}) == "[X]x"

    def test_partial_front_matter_defaults(self):
        context = make_context({
            "badge.html": "---\ncolor: grey\n---\n<b class='{{ color }}'>{{ text }}</b>",
            "page.html": "{{ 'badge' | partial({ text: 'a' }) }}{{ 'badge' | partial({ text: 'b', color: 'red' }) }}",
        })
        assert render(context, "page") == "<b class='grey'>a</b><b class='red'>b</b>"

    def test_partial_bindings_do_not_leak(self):
        context = make_context({
            "p.html": "{{ tag }}",
            "page.html": "{{ 'p' | partial({ tag: 'inner' }) }}|{{ tag | otherwise('none') }}",
        })
        assert render(context, "page") == "inner|none"

    def test_nested_partials(self):
        context = make_context({
            "outer.html": "<outer>{{ 'inner' | partial({ level: 2 }) }}</outer>",
            "inner.html": "<inner>{{ level }}/{{ root }}</inner>",
            "page.html": "{{ 'outer' | partial({ level: 1 }) }}",
        })
        assert render(context, "page", {"root": "r"}) == "<outer><inner>2/r</inner></outer>"

    def test_partial_in_subdirectory(self):
        context = make_context({
            "partials/nav.html": "<nav/>",
            "page.html": "{{ 'partials/nav' | partial }}{{ 'partials/nav.html' | partial }}",
        })
        assert render(context, "page") == "<nav/><nav/>"

    def test_missing_partial(self):
        context = make_context({"page.html": "{{ 'nope' | partial }}"})
        with pytest.raises(TemplateNotFoundError, match="Template partial not found: 'nope'") as exc:
            render(context, "page")
        assert exc.value.kind == "partial"

    def test_recursive_partial_hits_depth_limit(self):
        context = make_context({
            "loop.html": "x{{ 'loop' | partial }}",
            "page.html": "{{ 'loop' | partial }}",
        })
        with pytest.raises(RenderDepthError, match="Maximum composition depth 64 exceeded"):
            render(context, "page")

    def test_recursive_partial_at_largest_depth(self):
        context = make_context(
            {"loop.html": "x{{ 'loop' | partial }}", "page.html": "{{ 'loop' | partial }}"},
            settings=settings_from_dict({"max_depth": MAX_DEPTH_LIMIT}),
        )
        with pytest.raises(RenderDepthError, match=f"depth {MAX_DEPTH_LIMIT} exceeded"):
            render(context, "page")
