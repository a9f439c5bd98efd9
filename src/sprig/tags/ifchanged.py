"""Repeat suppression: ``{% ifchanged %}``.

Outputs its body only when the rendered text differs from what the last
``ifchanged`` block in the same render produced:

    {% for post in posts %}
      {% ifchanged %}<h2>{{ post.date }}</h2>{% endifchanged %}
      {{ post.title }}
    {% endfor %}

prints each date heading once per run of posts sharing that date.

The last output is kept in one session register shared by every
``ifchanged`` block in the render, so sibling blocks compare against each
other rather than each keeping its own history.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sprig.nodes import Node, Tag, render_nodes

if TYPE_CHECKING:
    from sprig.lexer import TokenStream
    from sprig.parser import Parser
    from sprig.session import RenderSession

REGISTER = "ifchanged"


@dataclass(frozen=True, slots=True)
class IfChanged(Tag):
    """Suppress repeated output: {% ifchanged %}...{% endifchanged %}"""

    body: tuple[Node, ...]

    end_tags = frozenset({"endifchanged"})

    @classmethod
    def parse(
        cls,
        tag_name: str,
        markup: str,
        *,
        lineno: int,
        stream: TokenStream,
        parser: Parser,
    ) -> IfChanged:
        body, _ = parser.parse_body(stream, cls.end_tags, tag_name, lineno)
        return cls(lineno=lineno, body=tuple(body))

    def render_into(self, output: list[str], session: RenderSession) -> None:
        buf: list[str] = []
        with session.scope.frame():
            render_nodes(self.body, buf, session)

        rendered = "".join(buf)
        if rendered != session.registers.get(REGISTER):
            session.registers[REGISTER] = rendered
            output.append(rendered)
