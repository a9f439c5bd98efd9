"""Sprig Environment — configuration and entry point for templates.

The Environment holds everything that is fixed across renders: the
template loader, the tag table, globals, and render settings. It parses
templates; it does not cache them. Caching of partials happens per render
session (see ``sprig.session``).

Example:
    >>> from sprig import DictLoader, Environment
    >>> env = Environment(loader=DictLoader({"card": "[{{ card }}]"}))
    >>> env.from_string("{% include 'card' for items %}").render(items=[1, 2])
    '[1][2]'

"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sprig.environment.exceptions import TemplateNotFoundError
from sprig.environment.loaders import Loader
from sprig.environment.registry import TagRegistry
from sprig.lexer import TokenStream, tokenize
from sprig.nodes import Tag
from sprig.parser import Parser
from sprig.scope import Scope
from sprig.session import RenderSession
from sprig.tags import DEFAULT_TAGS
from sprig.template import Template

logger = logging.getLogger(__name__)


class Environment:
    """Shared configuration for parsing and rendering templates.

    Attributes:
        loader: Template source for ``get_template`` and ``include``
        strict_variables: Raise ``UndefinedError`` for undefined variables
        max_include_depth: Include nesting limit (catches circular includes)
        globals: Variables visible to every render, below render variables
        tags: TagRegistry of tag name -> tag class

    Thread-Safety:
        Parsing and rendering do not mutate the environment. Tag
        registration replaces the tag table rather than editing it.
    """

    def __init__(
        self,
        loader: Loader | None = None,
        *,
        strict_variables: bool = False,
        max_include_depth: int = 50,
        globals: Mapping[str, Any] | None = None,
    ):
        if max_include_depth < 1:
            raise ValueError(f"max_include_depth must be at least 1, got {max_include_depth}")
        self.loader = loader
        self.strict_variables = strict_variables
        self.max_include_depth = max_include_depth
        self.globals: dict[str, Any] = dict(globals) if globals else {}
        self._tags: dict[str, type[Tag]] = dict(DEFAULT_TAGS)
        self.tags = TagRegistry(self, "_tags")

    def register_tag(self, name: str, tag_cls: type[Tag]) -> None:
        """Make ``{% name ... %}`` parse with ``tag_cls``."""
        self.tags[name] = tag_cls

    def get_source(self, name: str) -> tuple[str, str | None]:
        """Read template source through the loader.

        Raises:
            TemplateNotFoundError: If there is no loader or it lacks ``name``
        """
        if self.loader is None:
            raise TemplateNotFoundError(
                f"Template '{name}' not found: no loader configured on this Environment"
            )
        return self.loader.get_source(name)

    def parse(
        self,
        source: str,
        name: str | None = None,
        filename: str | None = None,
        *,
        partial: bool = False,
    ) -> Template:
        """Parse template source into a Template.

        ``partial`` marks templates parsed for ``include`` so syntax errors
        say so.

        Raises:
            TemplateSyntaxError: If the source does not parse
        """
        parser = Parser(self, name=name, source=source, partial=partial)
        nodes = parser.parse(TokenStream(tokenize(source)))
        logger.debug("Parsed %s %r (%d nodes)", "partial" if partial else "template", name, len(nodes))
        return Template(self, nodes, name, filename, partial=partial, source=source)

    def from_string(self, source: str, name: str | None = None) -> Template:
        """Parse a template from a source string."""
        return self.parse(source, name=name)

    def get_template(self, name: str) -> Template:
        """Load and parse a template by name.

        Raises:
            TemplateNotFoundError: If the loader has no such template
            TemplateSyntaxError: If the template does not parse
        """
        source, filename = self.get_source(name)
        return self.parse(source, name=name, filename=filename)

    def render(self, name: str, context: Mapping[str, Any] | None = None, /, **kwargs: Any) -> str:
        """Load, parse and render a template in one call."""
        return self.get_template(name).render(context, **kwargs)

    def new_session(
        self,
        variables: Mapping[str, Any] | None = None,
        *,
        template_name: str | None = None,
    ) -> RenderSession:
        """Build a fresh RenderSession for one top-level render.

        The scope's root frame holds the environment globals overlaid with
        ``variables``.
        """
        scope = Scope(self.globals, variables or {})
        return RenderSession(environment=self, scope=scope, template_name=template_name)
