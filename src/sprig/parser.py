"""Sprig parser — builds node trees from a token stream.

The parser walks the token stream once. Text and ``{{ }}`` tokens become
``Text`` and ``Output`` nodes; ``{% %}`` tokens are dispatched by tag name
through the environment's tag registry. Block tags call back into
``parse_body()`` to read their body up to one of their end tags, so the
whole tree is built in a single pass over a single stream.

Whitespace control:
    ``{%-`` / ``{{-`` strip whitespace before the marker, ``-%}`` / ``-}}``
    strip whitespace after it.

"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sprig._types import Token, TokenType
from sprig.environment.exceptions import (
    ErrorCode,
    TemplateSyntaxError,
    UnterminatedBlockError,
)
from sprig.nodes import Node, Output, Text

if TYPE_CHECKING:
    from sprig.environment import Environment
    from sprig.lexer import TokenStream

_TAG_RE = re.compile(r"(\w+)\s*(.*)", re.DOTALL)

# Tag names that only make sense inside a block.
_INTERMEDIATE_TAGS = frozenset({"else", "elsif"})


@dataclass(frozen=True, slots=True)
class BlockEnd:
    """The tag that stopped ``parse_body()``."""

    name: str
    markup: str
    lineno: int


class Parser:
    """Single-use parser for one template source.

    Attributes:
        name: Template name (for error messages)
        source: Template source (for error snippets)
        partial: True when parsing a partial loaded by ``include``
    """

    __slots__ = ("_env", "_trim_next", "name", "partial", "source")

    def __init__(
        self,
        env: Environment,
        *,
        name: str | None = None,
        source: str | None = None,
        partial: bool = False,
    ):
        self._env = env
        self.name = name
        self.source = source
        self.partial = partial
        self._trim_next = False

    @property
    def environment(self) -> Environment:
        return self._env

    def parse(self, stream: TokenStream) -> tuple[Node, ...]:
        """Parse a whole template."""
        nodes, _ = self.parse_body(stream)
        return tuple(nodes)

    def parse_body(
        self,
        stream: TokenStream,
        end_tags: frozenset[str] = frozenset(),
        block_name: str | None = None,
        lineno: int | None = None,
    ) -> tuple[list[Node], BlockEnd | None]:
        """Parse nodes until one of ``end_tags`` or the end of the stream.

        Returns the nodes and the end tag that stopped parsing (``None`` at
        end of stream).

        Raises:
            UnterminatedBlockError: If ``block_name`` is set and the stream
                runs out before an end tag
        """
        nodes: list[Node] = []

        for token in stream:
            if token.type is TokenType.TEXT:
                value = token.value
                if self._trim_next:
                    value = value.lstrip()
                    self._trim_next = False
                if value:
                    nodes.append(Text(lineno=token.lineno, value=value))
                continue

            if token.trim_left:
                self._strip_trailing_whitespace(nodes)
            self._trim_next = token.trim_right

            if token.type is TokenType.OUTPUT:
                try:
                    nodes.append(Output.from_markup(token.markup, token.lineno))
                except TemplateSyntaxError as e:
                    e.attach_location(token.lineno, self.name, self.source, self.partial)
                    raise
                continue

            tag_name, markup = self._split_tag(token)
            if tag_name in end_tags:
                return nodes, BlockEnd(tag_name, markup, token.lineno)
            nodes.append(self._parse_tag(tag_name, markup, token, stream))

        if block_name is not None:
            raise UnterminatedBlockError(
                block_name,
                lineno,
                name=self.name,
                source=self.source,
                partial=self.partial,
            )
        return nodes, None

    def _parse_tag(self, tag_name: str, markup: str, token: Token, stream: TokenStream) -> Node:
        tag_cls = self._env.tags.get(tag_name)
        if tag_cls is None:
            raise self._unknown_tag(tag_name, token)

        try:
            node = tag_cls.parse(
                tag_name,
                markup,
                lineno=token.lineno,
                stream=stream,
                parser=self,
            )
        except TemplateSyntaxError as e:
            e.attach_location(token.lineno, self.name, self.source, self.partial)
            raise

        if tag_cls.literal:
            # Literal bodies are consumed without the parser seeing them.
            self._trim_next = False
        return node

    def _split_tag(self, token: Token) -> tuple[str, str]:
        match = _TAG_RE.fullmatch(token.markup)
        if match is None:
            raise self.error(f"Invalid tag '{token.value}'", token.lineno)
        return match.group(1), match.group(2).strip()

    def _unknown_tag(self, tag_name: str, token: Token) -> TemplateSyntaxError:
        if tag_name.startswith("end") or tag_name in _INTERMEDIATE_TAGS:
            return self.error(
                f"Unexpected tag '{tag_name}'",
                token.lineno,
                suggestion="Check that block tags are opened and closed in matching order",
            )

        from difflib import get_close_matches

        suggestion = None
        matches = get_close_matches(tag_name, list(self._env.tags.keys()), n=1, cutoff=0.6)
        if matches:
            suggestion = f"Did you mean '{matches[0]}'?"
        err = self.error(f"Unknown tag '{tag_name}'", token.lineno, suggestion=suggestion)
        err.code = ErrorCode.UNKNOWN_TAG
        return err

    def _strip_trailing_whitespace(self, nodes: list[Node]) -> None:
        if nodes and isinstance(nodes[-1], Text):
            last = nodes[-1]
            stripped = last.value.rstrip()
            if stripped:
                nodes[-1] = Text(lineno=last.lineno, value=stripped)
            else:
                nodes.pop()

    def error(
        self,
        message: str,
        lineno: int | None = None,
        *,
        suggestion: str | None = None,
    ) -> TemplateSyntaxError:
        """Build a syntax error located in the template being parsed."""
        return TemplateSyntaxError(
            message,
            lineno,
            self.name,
            self.source,
            partial=self.partial,
            suggestion=suggestion,
        )
