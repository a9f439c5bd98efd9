"""Conditionals: ``{% if %}`` and ``{% unless %}``.

    {% if user.admin %}...{% elsif user.size > 2 and user.active %}...{% else %}...{% endif %}
    {% unless items == empty %}...{% endunless %}

Only ``nil`` and ``false`` are falsy. ``and`` / ``or`` chains are grouped
right to left, so ``a or b and c`` means ``a or (b and c)`` and
``a and b or c`` means ``a and (b or c)``.

Comparison operators: ``== != <> < > <= >= contains``.
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from sprig.environment.exceptions import EvaluationError, TemplateSyntaxError
from sprig.expression import QUOTED_STRING, Expr, parse_expression
from sprig.nodes import Node, Tag, render_nodes

if TYPE_CHECKING:
    from sprig.lexer import TokenStream
    from sprig.parser import Parser
    from sprig.session import RenderSession

_WORD_RE = re.compile(rf"(?:{QUOTED_STRING}|[^\s'\"])+")


def _contains(left: Any, right: Any) -> bool:
    if isinstance(left, str):
        return isinstance(right, str) and right in left
    if isinstance(left, (list, tuple, Mapping)):
        return right in left
    return False


OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<>": operator.ne,
    "<": operator.lt,
    ">": operator.gt,
    "<=": operator.le,
    ">=": operator.ge,
    "contains": _contains,
}


def is_truthy(value: Any) -> bool:
    return value is not None and value is not False


@dataclass(frozen=True, slots=True)
class Condition:
    """One comparison, or a bare value tested for truthiness."""

    left: Expr
    op: str | None = None
    right: Expr | None = None

    def evaluate(self, session: RenderSession, lineno: int) -> bool:
        left = session.evaluate(self.left, lineno)
        if self.op is None or self.right is None:
            return is_truthy(left)
        right = session.evaluate(self.right, lineno)
        try:
            return bool(OPERATORS[self.op](left, right))
        except TypeError as e:
            raise EvaluationError(
                f"Comparison of {type(left).__name__} with {type(right).__name__} failed",
                expression=f"{left!r} {self.op} {right!r}",
                template_name=session.template_name,
                lineno=lineno,
            ) from e


@dataclass(frozen=True, slots=True)
class ConditionChain:
    """Conditions joined by ``and`` / ``or``, grouped right to left."""

    conditions: tuple[Condition, ...]
    connectors: tuple[str, ...]

    def evaluate(self, session: RenderSession, lineno: int) -> bool:
        result = self.conditions[-1].evaluate(session, lineno)
        for condition, connector in zip(
            reversed(self.conditions[:-1]), reversed(self.connectors), strict=True
        ):
            value = condition.evaluate(session, lineno)
            result = (value and result) if connector == "and" else (value or result)
        return result


def parse_condition(markup: str) -> ConditionChain:
    """Parse ``a == b and c`` style markup.

    Raises:
        TemplateSyntaxError: If the markup is not a valid condition
    """
    words = _WORD_RE.findall(markup)
    if not words:
        raise TemplateSyntaxError("Missing condition")

    conditions: list[Condition] = []
    connectors: list[str] = []
    clause: list[str] = []
    for word in [*words, None]:
        if word is not None and word not in ("and", "or"):
            clause.append(word)
            continue
        if len(clause) == 1:
            conditions.append(Condition(parse_expression(clause[0])))
        elif len(clause) == 3 and clause[1] in OPERATORS:
            conditions.append(
                Condition(parse_expression(clause[0]), clause[1], parse_expression(clause[2]))
            )
        else:
            raise TemplateSyntaxError(f"Invalid condition '{' '.join(clause)}' in '{markup}'")
        if word is not None:
            connectors.append(word)
        clause = []

    return ConditionChain(tuple(conditions), tuple(connectors))


@dataclass(frozen=True, slots=True)
class If(Tag):
    """Conditional: {% if cond %}...{% elsif cond %}...{% else %}...{% endif %}"""

    branches: tuple[tuple[ConditionChain, tuple[Node, ...]], ...]
    else_body: tuple[Node, ...]

    close_tag: ClassVar[str] = "endif"
    negate_first: ClassVar[bool] = False

    @classmethod
    def parse(
        cls,
        tag_name: str,
        markup: str,
        *,
        lineno: int,
        stream: TokenStream,
        parser: Parser,
    ) -> If:
        end_tags = frozenset({"elsif", "else", cls.close_tag})
        branches: list[tuple[ConditionChain, tuple[Node, ...]]] = []
        else_body: list[Node] = []

        condition = parse_condition(markup)
        while True:
            body, end = parser.parse_body(stream, end_tags, tag_name, lineno)
            branches.append((condition, tuple(body)))
            assert end is not None
            if end.name == "elsif":
                condition = parse_condition(end.markup)
                continue
            if end.name == "else":
                else_body, _ = parser.parse_body(
                    stream, frozenset({cls.close_tag}), tag_name, lineno
                )
            break

        return cls(lineno=lineno, branches=tuple(branches), else_body=tuple(else_body))

    def render_into(self, output: list[str], session: RenderSession) -> None:
        for index, (condition, body) in enumerate(self.branches):
            matched = condition.evaluate(session, self.lineno)
            if index == 0 and self.negate_first:
                matched = not matched
            if matched:
                render_nodes(body, output, session)
                return
        render_nodes(self.else_body, output, session)


@dataclass(frozen=True, slots=True)
class Unless(If):
    """Negated conditional: {% unless cond %}...{% endunless %}"""

    close_tag: ClassVar[str] = "endunless"
    negate_first: ClassVar[bool] = True
