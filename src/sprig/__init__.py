"""Sprig — Liquid-style templates with scoped partial inclusion.

Quickstart:
    >>> from sprig import DictLoader, Environment
    >>> env = Environment(loader=DictLoader({"product": "<li>{{ product.title }}</li>"}))
    >>> template = env.from_string("<ul>{% include 'product' for products %}</ul>")
    >>> template.render(products=[{"title": "Hat"}, {"title": "Scarf"}])
    '<ul><li>Hat</li><li>Scarf</li></ul>'

Architecture:
Template Source → Lexer → Parser → node tree (Template) → render_into(output, session)

Pipeline stages:
1. **Lexer**: Splits source into TEXT, OUTPUT (``{{ }}``) and TAG (``{% %}``) tokens
2. **Parser**: Dispatches tags through the environment's tag registry
3. **Template**: Immutable node tree with a ``render()`` interface
4. **RenderSession**: Per-render scope, partial cache, flags and registers

Tags:
- ``include``: render a partial once, with a value, or once per list item
- ``raw`` / ``comment``: literal blocks that never interpret inner markup
- ``ifchanged``: emit a block only when its output changed
- ``for``, ``if``, ``unless``, ``assign``

Thread-Safety:
Templates are immutable and every ``render()`` builds its own session,
so one Template can be rendered from many threads at once.

"""

from sprig.environment import (
    ChoiceLoader,
    DictLoader,
    Environment,
    ErrorCode,
    EvaluationError,
    FileSystemLoader,
    FunctionLoader,
    IncludeDepthError,
    MissingTemplateNameError,
    TemplateArgumentError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedError,
    UnterminatedBlockError,
)
from sprig._types import Token, TokenType
from sprig.scope import MISSING, Scope
from sprig.session import RenderSession
from sprig.template import Template

__version__ = "0.1.0"

__all__ = [
    "ChoiceLoader",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "EvaluationError",
    "FileSystemLoader",
    "FunctionLoader",
    "IncludeDepthError",
    "MISSING",
    "MissingTemplateNameError",
    "RenderSession",
    "Scope",
    "Template",
    "TemplateArgumentError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "Token",
    "TokenType",
    "UndefinedError",
    "UnterminatedBlockError",
    "__version__",
]
