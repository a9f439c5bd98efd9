"""Sprig Template — a parsed template ready for rendering.

The Template class wraps an immutable tuple of nodes and provides the
``render()`` API. The same Template serves as a top-level template and,
when loaded by ``{% include %}``, as a cached partial.

Architecture:
    ```
    Template
    ├── environment: Environment        # Loader and settings
    ├── nodes: tuple[Node, ...]         # Parsed node tree
    └── name, filename, partial         # For error messages
    ```

StringBuilder Pattern:
Nodes append to a shared ``list[str]``; the list is joined once at the
end of ``render()``.

Thread-Safety:
- Templates are immutable after construction
- ``render()`` builds a fresh RenderSession (scope, partial cache,
  registers) per call
- Multiple threads can call ``render()`` concurrently

"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sprig.nodes import blank_body, render_nodes

if TYPE_CHECKING:
    from sprig.environment import Environment
    from sprig.nodes import Node
    from sprig.session import RenderSession


class Template:
    """Parsed template ready for rendering.

    Attributes:
        name: Template identifier (for error messages)
        filename: Source file path (for error messages)
        nodes: Parsed node tree
        partial: True when parsed as a partial by ``include``

    Example:
            >>> from sprig import Environment
            >>> env = Environment()
            >>> t = env.from_string("Hello, {{ name }}!")
            >>> t.render(name="World")
            'Hello, World!'

            >>> t.render({"name": "World"})  # Dict context also works
            'Hello, World!'

    """

    __slots__ = ("environment", "filename", "name", "nodes", "partial", "source")

    def __init__(
        self,
        env: Environment,
        nodes: tuple[Node, ...],
        name: str | None = None,
        filename: str | None = None,
        *,
        partial: bool = False,
        source: str | None = None,
    ):
        self.environment = env
        self.nodes = nodes
        self.name = name
        self.filename = filename
        self.partial = partial
        self.source = source

    @property
    def blank(self) -> bool:
        """True when the template renders nothing but whitespace."""
        return blank_body(self.nodes)

    def render(self, context: Mapping[str, Any] | None = None, /, **kwargs: Any) -> str:
        """Render with a fresh session and return the output text.

        Args:
            context: Variables as a mapping
            **kwargs: Variables as keyword arguments (win over ``context``)
        """
        variables = dict(context) if context else {}
        variables.update(kwargs)

        session = self.environment.new_session(variables, template_name=self.name)
        buf: list[str] = []
        self.render_into(buf, session)
        return "".join(buf)

    def render_into(self, output: list[str], session: RenderSession) -> None:
        """Render into a caller-supplied output list using ``session``."""
        render_nodes(self.nodes, output, session)

    def __repr__(self) -> str:
        kind = "partial" if self.partial else "template"
        return f"<Template {self.name or '<string>'!r} ({kind})>"
