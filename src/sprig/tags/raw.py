"""Literal blocks: ``{% raw %}`` and ``{% comment %}``.

Everything between ``{% raw %}`` and ``{% endraw %}`` is output exactly as
written, including text that looks like template markup:

    {% raw %}{{ not_a_variable }} {% if x %}{% endraw %}

renders ``{{ not_a_variable }} {% if x %}``.

Only a marker whose tag name is exactly ``end<block name>`` closes the
block. When a token holds several ``{%`` openers, the last one followed by
a tag name is the marker. Any other marker, however malformed, is passed through, so a
nested ``{% raw %}`` inside a raw block is just more literal text.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

from sprig.environment.exceptions import (
    ErrorCode,
    TemplateSyntaxError,
    UnterminatedBlockError,
)
from sprig.nodes import Tag

if TYPE_CHECKING:
    from sprig._types import Token
    from sprig.lexer import TokenStream
    from sprig.parser import Parser
    from sprig.session import RenderSession

TAG_START = "{%"
TAG_END = "%}"


class _ScanState(Enum):
    IN_LITERAL = auto()
    SEEN_OPEN_MARKER = auto()


def _marker_name(inner: str) -> str:
    if inner.startswith("-"):
        inner = inner[1:]
    inner = inner.lstrip()

    end = 0
    while end < len(inner) and (inner[end].isalnum() or inner[end] == "_"):
        end += 1
    return inner[:end]


def split_marker(value: str) -> tuple[str, str | None]:
    """Split a raw token into leading text and the tag name of its marker.

    The marker is the last ``{%`` in the token that is followed by a tag
    name, and it only counts if the token ends with ``%}``. Earlier openers
    are tried when later ones have no tag name, so ``{% endraw {% %}`` is
    an ``endraw`` marker. Returns ``(value, None)`` when there is no such
    marker.

        >>> split_marker("abc {% endraw %}")
        ('abc ', 'endraw')
        >>> split_marker("{% b{%- endraw -%}")
        ('{% b', 'endraw')
        >>> split_marker("{{ x }}")
        ('{{ x }}', None)
    """
    state = _ScanState.IN_LITERAL
    openers: list[int] = []
    pos = 0
    while (found := value.find(TAG_START, pos)) != -1:
        state = _ScanState.SEEN_OPEN_MARKER
        openers.append(found)
        pos = found + len(TAG_START)

    if state is _ScanState.IN_LITERAL or not value.endswith(TAG_END):
        return value, None

    for open_at in reversed(openers):
        inner = value[open_at + len(TAG_START) : len(value) - len(TAG_END)]
        if name := _marker_name(inner):
            return value[:open_at], name
    return value, None


def scan_literal(tokens: Iterable[Token], block_name: str) -> str:
    """Consume tokens up to ``{% end<block_name> %}`` and return the text before it.

    Raises:
        UnterminatedBlockError: If the tokens run out first
    """
    close_name = f"end{block_name}"
    body: list[str] = []

    for token in tokens:
        leading, tag_name = split_marker(token.value)
        if tag_name == close_name:
            if leading:
                body.append(leading)
            return "".join(body)
        if token.value:
            body.append(token.value)

    raise UnterminatedBlockError(block_name)


@dataclass(frozen=True, slots=True)
class Raw(Tag):
    """Literal passthrough: {% raw %}...{% endraw %}"""

    name: str
    body: str

    literal = True

    @classmethod
    def parse(
        cls,
        tag_name: str,
        markup: str,
        *,
        lineno: int,
        stream: TokenStream,
        parser: Parser,
    ) -> Raw:
        if markup:
            err = TemplateSyntaxError(
                f"'{tag_name}' tag does not take arguments",
                suggestion=f"Use {{% {tag_name} %}} with nothing after the tag name",
            )
            err.code = ErrorCode.UNEXPECTED_ARGUMENTS
            raise err
        return cls(lineno=lineno, name=tag_name, body=scan_literal(stream, tag_name))

    @property
    def blank(self) -> bool:
        return self.body == ""

    def render_into(self, output: list[str], session: RenderSession) -> None:
        output.append(self.body)


@dataclass(frozen=True, slots=True)
class Comment(Raw):
    """Ignored block: {% comment %}...{% endcomment %}"""

    @property
    def blank(self) -> bool:
        return True

    def render_into(self, output: list[str], session: RenderSession) -> None:
        pass
