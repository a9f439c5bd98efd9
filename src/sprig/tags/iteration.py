"""Loops: ``{% for %}``.

    {% for product in products reversed limit: 3 offset: 1 %}
      {{ forloop.index }}. {{ product.title }}
    {% else %}
      No products.
    {% endfor %}

The loop runs in one scope frame pushed for the whole loop; the loop
variable and ``forloop`` are rebound in that frame on each iteration.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sprig.environment.exceptions import EvaluationError, TemplateSyntaxError
from sprig.expression import QUOTED_FRAGMENT, TAG_ATTRIBUTES, Expr, parse_expression
from sprig.nodes import Node, Tag, render_nodes

if TYPE_CHECKING:
    from sprig.lexer import TokenStream
    from sprig.parser import Parser
    from sprig.session import RenderSession

SYNTAX = re.compile(rf"(\w+)\s+in\s+({QUOTED_FRAGMENT})(\s+reversed\b)?")


class ForLoop:
    """Loop metadata available as ``forloop`` inside ``{% for %}``.

    Properties:
        index: 1-based iteration count
        index0: 0-based iteration count
        rindex: Iterations left, counting this one (ends at 1)
        rindex0: Iterations left after this one (ends at 0)
        first: True on the first iteration
        last: True on the final iteration
        length: Total number of iterations
    """

    __slots__ = ("_index", "_length")

    def __init__(self, length: int) -> None:
        self._length = length
        self._index = 0

    def advance(self, index: int) -> None:
        self._index = index

    @property
    def index(self) -> int:
        return self._index + 1

    @property
    def index0(self) -> int:
        return self._index

    @property
    def rindex(self) -> int:
        return self._length - self._index

    @property
    def rindex0(self) -> int:
        return self._length - self._index - 1

    @property
    def first(self) -> bool:
        return self._index == 0

    @property
    def last(self) -> bool:
        return self._index == self._length - 1

    @property
    def length(self) -> int:
        return self._length

    def __repr__(self) -> str:
        return f"<ForLoop {self.index}/{self._length}>"


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, Mapping):
        return [[key, item] for key, item in value.items()]
    if isinstance(value, Iterable):
        return list(value)
    return [value]


@dataclass(frozen=True, slots=True)
class For(Tag):
    """Loop over a collection: {% for x in items %}...{% else %}...{% endfor %}"""

    variable: str
    collection_expr: Expr
    body: tuple[Node, ...]
    else_body: tuple[Node, ...]
    reversed: bool = False
    limit_expr: Expr | None = None
    offset_expr: Expr | None = None

    end_tags = frozenset({"else", "endfor"})

    @classmethod
    def parse(
        cls,
        tag_name: str,
        markup: str,
        *,
        lineno: int,
        stream: TokenStream,
        parser: Parser,
    ) -> For:
        match = SYNTAX.match(markup)
        if match is None:
            raise TemplateSyntaxError(
                f"Invalid 'for' tag: '{markup}'",
                suggestion="Valid syntax: for [item] in [collection]",
            )
        attributes = dict(TAG_ATTRIBUTES.findall(markup, match.end()))

        body, end = parser.parse_body(stream, cls.end_tags, tag_name, lineno)
        else_body: list[Node] = []
        if end is not None and end.name == "else":
            else_body, _ = parser.parse_body(stream, frozenset({"endfor"}), tag_name, lineno)

        return cls(
            lineno=lineno,
            variable=match.group(1),
            collection_expr=parse_expression(match.group(2)),
            body=tuple(body),
            else_body=tuple(else_body),
            reversed=match.group(3) is not None,
            limit_expr=parse_expression(attributes["limit"]) if "limit" in attributes else None,
            offset_expr=parse_expression(attributes["offset"]) if "offset" in attributes else None,
        )

    def _slice(self, items: list[Any], session: RenderSession) -> list[Any]:
        if self.offset_expr is not None:
            offset = self._int_arg(self.offset_expr, session)
            if offset is not None:
                items = items[max(offset, 0) :]
        if self.limit_expr is not None:
            # nil limit means no limit
            limit = self._int_arg(self.limit_expr, session)
            if limit is not None:
                items = items[: max(limit, 0)]
        return items

    def _int_arg(self, expr: Expr, session: RenderSession) -> int | None:
        value = session.evaluate(expr, self.lineno)
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise EvaluationError(
                f"Loop limit and offset must be integers, got {value!r}",
                template_name=session.template_name,
                lineno=self.lineno,
            ) from e

    def render_into(self, output: list[str], session: RenderSession) -> None:
        items = self._slice(_as_list(session.evaluate(self.collection_expr, self.lineno)), session)
        if self.reversed:
            items.reverse()

        if not items:
            render_nodes(self.else_body, output, session)
            return

        loop = ForLoop(len(items))
        with session.scope.frame() as frame:
            frame["forloop"] = loop
            for index, item in enumerate(items):
                loop.advance(index)
                frame[self.variable] = item
                render_nodes(self.body, output, session)
