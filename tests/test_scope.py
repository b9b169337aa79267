"""Тесты цепочки областей видимости."""

import pytest

from tpages.scope import MISSING, ScopeChain


class TestScopeChain:

    def test_resolve_from_root(self):
        scope = ScopeChain({"a": 1})
        assert scope.resolve("a") == 1

    def test_missing_name(self):
        scope = ScopeChain({"a": 1})
        assert scope.resolve("b") is MISSING
        assert not MISSING
        assert scope.lookup("b", "dflt") == "dflt"

    def test_explicit_none_is_not_missing(self):
        scope = ScopeChain({"a": None})
        assert scope.resolve("a") is None

    def test_inner_frame_shadows_outer(self):
        scope = ScopeChain({"title": "context"})
        scope.extend({"title": "page"})
        assert scope.resolve("title") == "page"
        assert scope.depth == 2

    def test_child_frame_is_temporary(self):
        scope = ScopeChain({"title": "outer", "tag": "h1"})

        with scope.child({"title": "inner"}, label="partial:x"):
            assert scope.resolve("title") == "inner"
            assert scope.resolve("tag") == "h1"
            assert scope.nesting == 1

        assert scope.resolve("title") == "outer"
        assert scope.nesting == 0
        assert scope.depth == 1

    def test_child_restored_on_error(self):
        scope = ScopeChain({"a": 1})

        with pytest.raises(RuntimeError):
            with scope.child({"a": 2}):
                raise RuntimeError("boom")

        assert scope.resolve("a") == 1
        assert scope.nesting == 0

    def test_nested_children(self):
        scope = ScopeChain({"a": 1})
        with scope.child({"b": 2}):
            with scope.child({"c": 3}):
                assert (scope.resolve("a"), scope.resolve("b"), scope.resolve("c")) == (1, 2, 3)
                assert scope.nesting == 2
            assert scope.resolve("c") is MISSING

    def test_push_does_not_change_current(self):
        scope = ScopeChain({"a": 1})
        scope.push({"a": 2})
        assert scope.resolve("a") == 1

    def test_bindings_are_copied(self):
        args = {"a": 1}
        scope = ScopeChain(args)
        args["a"] = 2
        assert scope.resolve("a") == 1

    def test_empty_chain(self):
        scope = ScopeChain()
        assert scope.resolve("a") is MISSING
        assert scope.depth == 0
