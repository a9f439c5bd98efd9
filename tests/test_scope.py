"""Tests for the layered variable Scope."""

from __future__ import annotations

import pytest

from sprig import MISSING, Scope


class TestScope:
    """Frame stack behavior."""

    def test_bases_merge_into_root(self) -> None:
        scope = Scope({"a": 1, "b": 1}, {"b": 2})
        assert scope["a"] == 1
        assert scope["b"] == 2
        assert scope.depth == 1

    def test_lookup_falls_through(self) -> None:
        scope = Scope({"a": 1})
        scope.push({"b": 2})
        assert scope["a"] == 1
        assert scope["b"] == 2

    def test_writes_go_to_top_frame(self) -> None:
        scope = Scope({"a": 1})
        scope.push()
        scope["a"] = 2
        scope.set("c", 3)
        assert scope.top == {"a": 2, "c": 3}
        scope.pop()
        assert scope["a"] == 1
        assert "c" not in scope

    def test_frame_context_restores_on_error(self) -> None:
        scope = Scope()
        with pytest.raises(ValueError), scope.frame({"x": 1}) as frame:
            assert frame == {"x": 1}
            raise ValueError("boom")
        assert scope.depth == 1
        assert "x" not in scope

    def test_root_cannot_be_popped(self) -> None:
        with pytest.raises(RuntimeError):
            Scope().pop()

    def test_missing_lookups(self) -> None:
        scope = Scope({"none": None})
        assert scope.find("nope") is MISSING
        assert scope.find("none") is None
        assert scope.get("nope") is None
        assert scope.get("nope", 5) == 5
        with pytest.raises(KeyError):
            scope["nope"]

    def test_names(self) -> None:
        scope = Scope({"a": 1})
        scope.push({"b": 2})
        assert scope.names() == {"a", "b"}

    def test_top_is_read_only(self) -> None:
        scope = Scope({"a": 1})
        with pytest.raises(TypeError):
            scope.top["a"] = 2  # type: ignore[index]

    def test_missing_is_falsy(self) -> None:
        assert not MISSING
        assert repr(MISSING) == "MISSING"
