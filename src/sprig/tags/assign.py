"""Variable assignment: ``{% assign name = expr %}``.

The binding is written to the current scope frame, so an assignment made
inside an include or a loop body is gone once that include or loop ends.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sprig.environment.exceptions import TemplateSyntaxError
from sprig.expression import Expr, parse_expression
from sprig.nodes import Tag

if TYPE_CHECKING:
    from sprig.lexer import TokenStream
    from sprig.parser import Parser
    from sprig.session import RenderSession

SYNTAX = re.compile(r"([\w-]+)\s*=\s*(.+)", re.DOTALL)


@dataclass(frozen=True, slots=True)
class Assign(Tag):
    """Assign a variable: {% assign name = expr %}"""

    target: str
    expr: Expr

    @classmethod
    def parse(
        cls,
        tag_name: str,
        markup: str,
        *,
        lineno: int,
        stream: TokenStream,
        parser: Parser,
    ) -> Assign:
        match = SYNTAX.fullmatch(markup)
        if match is None:
            raise TemplateSyntaxError(
                f"Invalid 'assign' tag: '{markup}'",
                suggestion="Valid syntax: assign [var] = [source]",
            )
        return cls(lineno=lineno, target=match.group(1), expr=parse_expression(match.group(2)))

    @property
    def blank(self) -> bool:
        return True

    def render_into(self, output: list[str], session: RenderSession) -> None:
        session.scope[self.target] = session.evaluate(self.expr, self.lineno)
