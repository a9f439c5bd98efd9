"""Template inclusion: ``{% include %}``.

Render another template in place:

    {% include 'product' %}

Bind a value to the partial's implicit variable (the last segment of the
template name, here ``product``):

    {% include 'product' with products[0] %}

Render the partial once per item of a list:

    {% include 'product' for products %}

Pass extra variables (``key: value`` or ``key=value``):

    {% include 'sections/footer' with page, year: 2024, dark=true %}

Without ``with``/``for``, the implicit variable is read from a variable of
the same name as the template, if one exists.

Partials are parsed once per render session and cached by exact name.
The partial renders inside its own scope frame; nothing it binds is
visible to the caller afterwards.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sprig.environment.exceptions import (
    MissingTemplateNameError,
    TemplateArgumentError,
    TemplateSyntaxError,
)
from sprig.expression import QUOTED_FRAGMENT, TAG_ATTRIBUTES, Expr, parse_expression
from sprig.nodes import Tag
from sprig.scope import MISSING

if TYPE_CHECKING:
    from sprig.lexer import TokenStream
    from sprig.parser import Parser
    from sprig.session import RenderSession
    from sprig.template import Template

logger = logging.getLogger(__name__)

SYNTAX = re.compile(rf"({QUOTED_FRAGMENT})(?:\s+(with|for)\s+({QUOTED_FRAGMENT}))?")


@dataclass(frozen=True, slots=True)
class ScalarValue:
    """Bound value rendered once."""

    value: Any


@dataclass(frozen=True, slots=True)
class SequenceValue:
    """Bound value rendered once per item."""

    values: tuple[Any, ...]


BoundValue = ScalarValue | SequenceValue


def resolve_bound_value(value: Any) -> BoundValue:
    """Classify an include's bound value. Lists and tuples iterate; nothing else does."""
    if isinstance(value, (list, tuple)):
        return SequenceValue(tuple(value))
    return ScalarValue(value)


def load_partial(template_name: str, session: RenderSession) -> Template:
    """Return the parsed partial, reading and parsing it at most once per session.

    Raises:
        TemplateNotFoundError: If the loader has no such template
        TemplateSyntaxError: If the partial does not parse
    """
    cached = session.partials.get(template_name)
    if cached is not None:
        return cached

    env = session.environment
    source, filename = env.get_source(template_name)
    partial = env.parse(source, name=template_name, filename=filename, partial=True)
    session.partials[template_name] = partial
    logger.debug("Loaded partial %r (%d cached)", template_name, len(session.partials))
    return partial


@dataclass(frozen=True, slots=True)
class Include(Tag):
    """Include a partial: {% include 'name' [with|for expr] [key: expr ...] %}"""

    template_expr: Expr
    variable_expr: Expr | None
    attributes: tuple[tuple[str, Expr], ...]
    markup: str

    @classmethod
    def parse(
        cls,
        tag_name: str,
        markup: str,
        *,
        lineno: int,
        stream: TokenStream,
        parser: Parser,
    ) -> Include:
        match = SYNTAX.match(markup)
        if match is None:
            raise TemplateSyntaxError(
                f"Invalid '{tag_name}' tag: '{markup}'",
                suggestion=f"Valid syntax: {tag_name} '[template]' (with|for) [object|collection]",
            )

        template_markup, _, variable_markup = match.groups()
        attributes = tuple(
            (key, parse_expression(value))
            for key, value in TAG_ATTRIBUTES.findall(markup, match.end())
        )
        return cls(
            lineno=lineno,
            template_expr=parse_expression(template_markup),
            variable_expr=parse_expression(variable_markup) if variable_markup else None,
            attributes=attributes,
            markup=markup,
        )

    def render_into(self, output: list[str], session: RenderSession) -> None:
        template_name = session.evaluate(self.template_expr, self.lineno)
        if template_name is None or template_name == "":
            raise MissingTemplateNameError(
                self.markup,
                template_name=session.template_name,
                lineno=self.lineno,
            )
        if not isinstance(template_name, str):
            raise TemplateArgumentError(
                f"Include template name must be a string, got {type(template_name).__name__}",
                expression=self.markup,
                template_name=session.template_name,
                lineno=self.lineno,
            )

        partial = load_partial(template_name, session)
        binding_name = template_name.split("/")[-1]
        bound = resolve_bound_value(self._bound_value(template_name, session))

        with session.partial_flags(template_name, self.lineno), session.scope.frame() as frame:
            for key, expr in self.attributes:
                frame[key] = session.evaluate(expr, self.lineno)

            if isinstance(bound, SequenceValue):
                for item in bound.values:
                    frame[binding_name] = item
                    partial.render_into(output, session)
            else:
                frame[binding_name] = bound.value
                partial.render_into(output, session)

    def _bound_value(self, template_name: str, session: RenderSession) -> Any:
        if self.variable_expr is not None:
            return session.evaluate(self.variable_expr, self.lineno)
        value = session.scope.find(template_name)
        return None if value is MISSING else value
