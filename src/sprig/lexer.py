"""Sprig lexer — splits template source into raw tokens.

The lexer is deliberately shallow: it only finds ``{% ... %}`` and
``{{ ... }}`` markers and leaves their contents untouched. Tag markup is
interpreted later by the parser (or, for literal blocks, not at all).

Example:
    >>> [t.value for t in tokenize("Hi {{ name }}!")]
    ['Hi ', '{{ name }}', '!']

An opening marker without a matching close stays part of the surrounding
TEXT token, so ``"a {% b"`` lexes as a single TEXT token. Likewise
``"{{ a {% endraw %} }}"`` lexes as TEXT, TAG, TEXT.

"""

from __future__ import annotations

import re
from collections.abc import Iterator

from sprig._types import Token, TokenType

# Non-greedy: a marker ends at the first closing delimiter after it opens.
# An output marker never spans a tag opener, so an unclosed "{{" stays text.
_MARKER_RE = re.compile(r"\{%.*?%\}|\{\{(?:(?!\{%).)*?\}\}", re.DOTALL)


def tokenize(source: str) -> list[Token]:
    """Tokenize template source into TEXT, OUTPUT, and TAG tokens.

    Concatenating the ``value`` of every token reproduces ``source``.
    """
    tokens: list[Token] = []
    lineno = 1
    pos = 0

    for match in _MARKER_RE.finditer(source):
        start, end = match.span()
        if start > pos:
            text = source[pos:start]
            tokens.append(Token(TokenType.TEXT, text, lineno))
            lineno += text.count("\n")
        value = match.group()
        kind = TokenType.TAG if value.startswith("{%") else TokenType.OUTPUT
        tokens.append(Token(kind, value, lineno))
        lineno += value.count("\n")
        pos = end

    if pos < len(source):
        tokens.append(Token(TokenType.TEXT, source[pos:], lineno))

    return tokens


class TokenStream:
    """Consuming iterator over a token list.

    Tags that own their body (blocks, literal scanners) pull tokens from the
    same stream the parser is reading, so whatever they consume is never
    seen by the enclosing body.
    """

    __slots__ = ("_pos", "_tokens")

    def __init__(self, tokens: list[Token]):
        self._tokens = tokens
        self._pos = 0

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        if self._pos >= len(self._tokens):
            raise StopIteration
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    @property
    def exhausted(self) -> bool:
        return self._pos >= len(self._tokens)

    @property
    def last_lineno(self) -> int:
        """Line of the most recently consumed token (1 before any)."""
        if self._pos == 0:
            return 1
        return self._tokens[self._pos - 1].lineno
