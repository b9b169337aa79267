from pathlib import Path

import pytest

from tpages import TemplatePagesContext

from tests.infrastructure.file_utils import write_pages
from tests.infrastructure.page_utils import make_context


@pytest.fixture
def context() -> TemplatePagesContext:
    """Пустой контекст в памяти со стандартными фильтрами."""
    return make_context()


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """Каталог шаблонов на диске: layout, страница, partial и вложенный раздел."""
    return write_pages(tmp_path, {
        "_layout.html": "<html>\n<title>{{ title | otherwise('Site') }}</title>\n{{ page }}\n</html>\n",
        "index.html": "---\ntitle: Home\n---\n<h1>{{ title }}</h1>\n",
        "header.html": "<header>{{ message | otherwise('hello') }}</header>",
        "docs/_layout.html": "<docs>{{ page }}</docs>",
        "docs/intro.html": "{{ 'header' | partial({ message: title }) }}<p>{{ items | join(', ') }}</p>",
        "tpages.yaml": "args:\n  title: Default title\n",
    })
