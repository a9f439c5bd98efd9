"""Node classes for Sprig template trees.

A parsed template is a tuple of nodes. Every node renders itself by
appending strings to an output list (``''.join`` happens once, at the top)
and reads whatever render state it needs from the RenderSession:

    def render_into(self, output: list[str], session: RenderSession) -> None

Nodes are immutable after parsing, so a parsed template can be rendered
any number of times, from any number of sessions.

Tags subclass ``Tag`` and build themselves in ``Tag.parse()``; block tags
pull their body from the same token stream the parser is reading.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from sprig.expression import Expr, parse_expression

if TYPE_CHECKING:
    from sprig.lexer import TokenStream
    from sprig.parser import Parser
    from sprig.session import RenderSession


def to_text(value: Any) -> str:
    """Convert a rendered value to output text.

    ``None`` renders as nothing, booleans as ``true`` / ``false``, and
    lists by concatenating their items.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "".join(to_text(item) for item in value)
    return str(value)


def render_nodes(nodes: Iterable[Node], output: list[str], session: RenderSession) -> None:
    for node in nodes:
        node.render_into(output, session)


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all template nodes."""

    lineno: int

    @property
    def blank(self) -> bool:
        """True when the node renders nothing but whitespace."""
        return False

    def render_into(self, output: list[str], session: RenderSession) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class Text(Node):
    """Literal text between markers."""

    value: str

    @property
    def blank(self) -> bool:
        return not self.value.strip()

    def render_into(self, output: list[str], session: RenderSession) -> None:
        output.append(self.value)


@dataclass(frozen=True, slots=True)
class Output(Node):
    """Output marker: {{ expr }}"""

    expr: Expr
    markup: str

    @classmethod
    def from_markup(cls, markup: str, lineno: int) -> Output:
        return cls(lineno=lineno, expr=parse_expression(markup), markup=markup)

    def render_into(self, output: list[str], session: RenderSession) -> None:
        output.append(to_text(session.evaluate(self.expr, self.lineno)))


@dataclass(frozen=True, slots=True)
class Tag(Node):
    """Base class for ``{% name markup %}`` tags.

    Subclasses declare their own fields and override ``parse``. Block tags
    list their closing and intermediate tag names in ``end_tags``; tags
    whose body is read verbatim set ``literal``.
    """

    end_tags: ClassVar[frozenset[str]] = frozenset()
    literal: ClassVar[bool] = False

    @classmethod
    def parse(
        cls,
        tag_name: str,
        markup: str,
        *,
        lineno: int,
        stream: TokenStream,
        parser: Parser,
    ) -> Tag:
        raise NotImplementedError(f"{cls.__name__} does not implement parse()")


def blank_body(nodes: Sequence[Node]) -> bool:
    return all(node.blank for node in nodes)
