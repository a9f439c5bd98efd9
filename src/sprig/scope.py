"""Layered variable scope used during rendering.

A Scope is a stack of frames. Lookups search from the top frame down;
writes always land in the top frame. Tags that introduce local bindings
(``include``, ``for``, ``ifchanged``) push a frame and pop it again when
their body is done, whether it finished, returned early, or raised:

    >>> scope = Scope({"user": "ada"})
    >>> with scope.frame():
    ...     scope["user"] = "grace"
    ...     scope["user"]
    'grace'
    >>> scope["user"]
    'ada'

"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from types import MappingProxyType
from typing import Any, Final


class _Missing:
    """Sentinel for lookups that found nothing (distinct from ``None``)."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()


class Scope:
    """Stack of binding frames with fall-through lookup.

    The bottom frame holds the render's variables (and environment
    globals); it can never be popped.
    """

    __slots__ = ("_frames",)

    def __init__(self, *bases: Mapping[str, Any]):
        root: dict[str, Any] = {}
        for base in bases:
            root.update(base)
        self._frames: list[dict[str, Any]] = [root]

    def push(self, bindings: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Push a new top frame, optionally pre-populated."""
        frame = dict(bindings) if bindings else {}
        self._frames.append(frame)
        return frame

    def pop(self) -> dict[str, Any]:
        """Remove and return the top frame.

        Raises:
            RuntimeError: If only the root frame is left
        """
        if len(self._frames) == 1:
            raise RuntimeError("Cannot pop the root scope frame")
        return self._frames.pop()

    @contextmanager
    def frame(self, bindings: Mapping[str, Any] | None = None) -> Iterator[dict[str, Any]]:
        """Push a frame for the duration of a ``with`` block."""
        pushed = self.push(bindings)
        try:
            yield pushed
        finally:
            self.pop()

    def find(self, key: str, default: Any = MISSING) -> Any:
        """Look ``key`` up from the top frame down, returning ``default`` if absent."""
        for frame in reversed(self._frames):
            if key in frame:
                return frame[key]
        return default

    def get(self, key: str, default: Any = None) -> Any:
        return self.find(key, default)

    def set(self, key: str, value: Any) -> None:
        self._frames[-1][key] = value

    def __getitem__(self, key: str) -> Any:
        value = self.find(key)
        if value is MISSING:
            raise KeyError(key)
        return value

    def __setitem__(self, key: str, value: Any) -> None:
        self._frames[-1][key] = value

    def __contains__(self, key: object) -> bool:
        return any(key in frame for frame in self._frames)

    @property
    def depth(self) -> int:
        """Number of frames, root included."""
        return len(self._frames)

    @property
    def top(self) -> Mapping[str, Any]:
        """Read-only view of the top frame."""
        return MappingProxyType(self._frames[-1])

    def names(self) -> frozenset[str]:
        """Every name visible from the top frame."""
        return frozenset().union(*self._frames)
