"""Token types shared by the lexer, parser, and literal scanner."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    """Kinds of raw token produced by the lexer."""

    TEXT = "text"
    OUTPUT = "output"  # {{ ... }}
    TAG = "tag"  # {% ... %}


@dataclass(frozen=True, slots=True)
class Token:
    """A raw slice of template source.

    ``value`` is the exact source text, delimiters included, so that
    consumers such as the literal scanner can pass it through verbatim.
    """

    type: TokenType
    value: str
    lineno: int

    @property
    def markup(self) -> str:
        """Inner text of an OUTPUT or TAG token without delimiters or trim dashes."""
        if self.type is TokenType.TEXT:
            return self.value
        inner = self.value[2:-2]
        if inner.startswith("-"):
            inner = inner[1:]
        if inner.endswith("-"):
            inner = inner[:-1]
        return inner.strip()

    @property
    def trim_left(self) -> bool:
        """True for ``{%-`` / ``{{-``: strip whitespace before this token."""
        return self.type is not TokenType.TEXT and self.value[2:3] == "-"

    @property
    def trim_right(self) -> bool:
        """True for ``-%}`` / ``-}}``: strip whitespace after this token."""
        return (
            self.type is not TokenType.TEXT
            and len(self.value) >= 5
            and self.value[-3:-2] == "-"
        )
