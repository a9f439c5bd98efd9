"""Sprig environment: configuration, loaders, tag registry, and exceptions."""

from sprig.environment.exceptions import (
    ErrorCode,
    EvaluationError,
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
from sprig.environment.loaders import (
    ChoiceLoader,
    DictLoader,
    FileSystemLoader,
    FunctionLoader,
    Loader,
)
from sprig.environment.registry import TagRegistry
from sprig.environment.core import Environment

__all__ = [
    "ChoiceLoader",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "EvaluationError",
    "FileSystemLoader",
    "FunctionLoader",
    "IncludeDepthError",
    "Loader",
    "MissingTemplateNameError",
    "TagRegistry",
    "TemplateArgumentError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "UndefinedError",
    "UnterminatedBlockError",
]
