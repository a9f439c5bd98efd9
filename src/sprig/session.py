"""Sprig RenderSession — mutable state owned by one top-level render.

Everything that nested includes and ``ifchanged`` blocks share during a
render lives on a RenderSession, and a fresh one is built for every
``Template.render()`` call:

- ``partials``: partial cache (template name -> parsed Template)
- ``template_name`` / ``partial``: which template is rendering, and whether
  it was pulled in by an include (used for error attribution)
- ``registers``: free-form slots for tags (``ifchanged`` keeps its last
  output here)
- ``scope``: the variable scope

Sessions are never shared between renders, so concurrent renders of the
same Template need no locking. A host that drives rendering itself can
build one with ``Environment.new_session()`` and pass it to
``Template.render_into()``.

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sprig.environment.exceptions import IncludeDepthError
from sprig.expression import evaluate

if TYPE_CHECKING:
    from sprig.environment import Environment
    from sprig.expression import Expr
    from sprig.scope import Scope
    from sprig.template import Template


@dataclass
class RenderSession:
    """Per-render state passed explicitly to every node.

    Attributes:
        environment: Environment that supplies the loader and settings
        scope: Variable scope for this render
        template_name: Template currently rendering (for error messages)
        partial: True while rendering inside an include
        include_depth: Current include nesting depth
        partials: Partial cache keyed by exact template name
        registers: Tag-owned state slots
        template_stack: Include chain as (including template, line) pairs
    """

    environment: Environment
    scope: Scope
    template_name: str | None = None
    partial: bool = False
    include_depth: int = 0
    partials: dict[str, Template] = field(default_factory=dict)
    registers: dict[str, Any] = field(default_factory=dict)
    template_stack: list[tuple[str, int]] = field(default_factory=list)

    @property
    def strict(self) -> bool:
        return self.environment.strict_variables

    def evaluate(self, expr: Expr, lineno: int | None = None) -> Any:
        """Evaluate ``expr`` against this session's scope."""
        return evaluate(
            expr,
            self.scope,
            strict=self.environment.strict_variables,
            template_name=self.template_name,
            lineno=lineno,
        )

    @contextmanager
    def partial_flags(self, template_name: str, lineno: int = 0) -> Iterator[None]:
        """Mark the session as rendering partial ``template_name``.

        ``template_name``, ``partial``, ``include_depth`` and the template
        stack are restored when the block exits, however it exits.

        Raises:
            IncludeDepthError: If the include would exceed ``max_include_depth``
        """
        max_depth = self.environment.max_include_depth
        if self.include_depth >= max_depth:
            raise IncludeDepthError(
                f"Maximum include depth exceeded ({max_depth}) when including '{template_name}'",
                template_name=self.template_name,
                lineno=lineno or None,
                template_stack=list(self.template_stack),
                suggestion="Check for circular includes: A -> B -> A",
            )

        saved = (self.template_name, self.partial, self.include_depth)
        saved_stack_len = len(self.template_stack)
        if self.template_name and lineno:
            self.template_stack.append((self.template_name, lineno))

        self.template_name = template_name
        self.partial = True
        self.include_depth += 1
        try:
            yield
        finally:
            self.template_name, self.partial, self.include_depth = saved
            del self.template_stack[saved_stack_len:]
