"""Exceptions for the Sprig template system.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError          # Template source not found by loader
├── TemplateSyntaxError            # Parse-time syntax error
│   └── UnterminatedBlockError     # Block or literal never closed
├── TemplateRuntimeError           # Render-time error with context
│   ├── TemplateArgumentError      # Directive argument has an unusable value
│   │   └── MissingTemplateNameError  # include name evaluated to nothing
│   ├── EvaluationError            # Expression lookup raised
│   └── IncludeDepthError          # Include nesting limit reached
└── UndefinedError                 # Undefined variable (strict mode)

None of these are retried. Render-time errors leave the component that
raised them only after its scope frames and session flags are restored.

Example:
    ```
    S-RUN-009: Include template name evaluated to an empty value
      Location: page.html:3
      Expression: section_name
    ```

"""

from __future__ import annotations

from enum import Enum
from typing import Any

from sprig.environment import terminal


class ErrorCode(Enum):
    """Searchable error codes for Sprig template errors.

    Format: S-{CATEGORY}-{NUMBER}
    Categories: PAR (parser), RUN (runtime), TPL (template loading)
    """

    # Parser errors (S-PAR-xxx)
    UNKNOWN_TAG = "S-PAR-001"
    UNCLOSED_BLOCK = "S-PAR-002"
    INVALID_EXPRESSION = "S-PAR-003"
    UNEXPECTED_ARGUMENTS = "S-PAR-004"

    # Runtime errors (S-RUN-xxx)
    UNDEFINED_VARIABLE = "S-RUN-001"
    EVALUATION_ERROR = "S-RUN-002"
    INCLUDE_DEPTH = "S-RUN-006"
    RUNTIME_ERROR = "S-RUN-007"
    INVALID_ARGUMENT = "S-RUN-008"
    MISSING_TEMPLATE_NAME = "S-RUN-009"

    # Template loading errors (S-TPL-xxx)
    TEMPLATE_NOT_FOUND = "S-TPL-001"
    SYNTAX_ERROR = "S-TPL-002"

    @property
    def category(self) -> str:
        """Error category (e.g., 'runtime', 'parser', 'template')."""
        prefix = self.value.split("-")[1]
        return {
            "PAR": "parser",
            "RUN": "runtime",
            "TPL": "template",
        }.get(prefix, "unknown")


def format_template_stack(stack: list[tuple[str, int]] | None) -> str:
    """Format the include chain for error messages.

    Example:
        >>> print(format_template_stack([("page.html", 4), ("card.html", 2)]))
        Template stack:
          • page.html:4
          • card.html:2
    """
    if not stack:
        return ""

    lines = [terminal.dim_text("Template stack:")]
    for template_name, line_num in stack:
        lines.append(f"  • {terminal.location(f'{template_name}:{line_num}')}")
    return "\n".join(lines)


def _location(name: str | None, lineno: int | None) -> str:
    loc = name or "<template>"
    if lineno:
        loc += f":{lineno}"
    return loc


class TemplateError(Exception):
    """Base exception for all Sprig template errors.

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a one-screen diagnostic prefixed with its code."""
        header = str(self)
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        return header


class TemplateNotFoundError(TemplateError):
    """Template not found by the configured loader.

    Example:
            >>> env.get_template("missing.html")
        TemplateNotFoundError: Template 'missing.html' not found
    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateSyntaxError(TemplateError):
    """Parse-time syntax error in template source.

    Raised while a template (or a partial loaded by ``include``) is being
    compiled. ``partial`` is True when the failing template was parsed as a
    partial, so the message can say which include pulled it in.
    """

    code: ErrorCode | None = ErrorCode.SYNTAX_ERROR

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        source: str | None = None,
        *,
        partial: bool = False,
        suggestion: str | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.source = source
        self.partial = partial
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def attach_location(
        self,
        lineno: int | None,
        name: str | None,
        source: str | None,
        partial: bool = False,
    ) -> None:
        """Fill in location details the raiser did not know about."""
        if self.lineno is None:
            self.lineno = lineno
        if self.name is None:
            self.name = name
        if self.source is None:
            self.source = source
        self.partial = self.partial or partial
        self.args = (self._format_message(),)

    def _format_message(self) -> str:
        location = _location(self.name, self.lineno)
        if self.partial:
            location += " (partial)"
        parts = [f"Syntax Error: {self.message}", f"  --> {terminal.location(location)}"]

        if self.source and self.lineno:
            lines = self.source.splitlines()
            if 0 < self.lineno <= len(lines):
                parts.append("   |")
                parts.append(f"{self.lineno:>3} | {lines[self.lineno - 1]}")
                parts.append("   |")

        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")

        return "\n".join(parts)


class UnterminatedBlockError(TemplateSyntaxError):
    """A block tag ran to the end of the template without its closing tag.

    Example:
            >>> env.from_string("{% raw %}never closed")
        UnterminatedBlockError: 'raw' tag was never closed
    """

    code: ErrorCode | None = ErrorCode.UNCLOSED_BLOCK

    def __init__(self, block_name: str, lineno: int | None = None, **kwargs: Any):
        self.block_name = block_name
        super().__init__(
            f"'{block_name}' tag was never closed",
            lineno,
            suggestion=f"Add {{% end{block_name} %}} to close the block",
            **kwargs,
        )


class TemplateRuntimeError(TemplateError):
    """Render-time error with debugging context.

    Attributes:
        message: Error description
        expression: Template expression that failed
        template_name: Template rendering when the error occurred
        lineno: Line number in template source
        suggestion: Actionable fix suggestion
        template_stack: Include chain as (template_name, line) pairs

    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        template_name: str | None = None,
        lineno: int | None = None,
        suggestion: str | None = None,
        template_stack: list[tuple[str, int]] | None = None,
    ):
        self.message = message
        self.expression = expression
        self.template_name = template_name
        self.lineno = lineno
        self.suggestion = suggestion
        self.template_stack = template_stack or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]

        if self.template_name or self.lineno:
            parts.append(
                f"  Location: {terminal.location(_location(self.template_name, self.lineno))}"
            )

        if self.template_stack:
            parts.append("")
            parts.append(format_template_stack(self.template_stack))

        if self.expression:
            parts.append(f"  Expression: {self.expression}")

        if self.suggestion:
            parts.append(f"\n  {terminal.hint('Suggestion:')} {self.suggestion}")

        return "\n".join(parts)

    def format_compact(self) -> str:
        """Format runtime error as structured terminal diagnostic."""
        parts = [
            terminal.format_error_header(self.code.value if self.code else None, self.message),
            f"  Location: {terminal.location(_location(self.template_name, self.lineno))}",
        ]
        if self.expression:
            parts.append(f"  Expression: {self.expression}")
        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")
        return "\n".join(parts)


class TemplateArgumentError(TemplateRuntimeError):
    """A directive argument evaluated to a value the directive cannot use."""

    code: ErrorCode | None = ErrorCode.INVALID_ARGUMENT


class MissingTemplateNameError(TemplateArgumentError):
    """The template name expression of an include evaluated to nothing.

    Example:
            >>> env.from_string("{% include section %}").render()
        MissingTemplateNameError: Include template name evaluated to an empty value
    """

    code: ErrorCode | None = ErrorCode.MISSING_TEMPLATE_NAME

    def __init__(self, expression: str | None = None, **kwargs: Any):
        super().__init__(
            "Include template name evaluated to an empty value",
            expression=expression,
            suggestion="Pass a non-empty template name, e.g. {% include 'card' %}",
            **kwargs,
        )


class EvaluationError(TemplateRuntimeError):
    """An object raised while an expression was being evaluated against it.

    The original exception is chained as ``__cause__``.
    """

    code: ErrorCode | None = ErrorCode.EVALUATION_ERROR


class IncludeDepthError(TemplateRuntimeError):
    """Include nesting exceeded the environment's ``max_include_depth``."""

    code: ErrorCode | None = ErrorCode.INCLUDE_DEPTH


class UndefinedError(TemplateError):
    """Raised when a strict environment looks up an undefined variable.

    If ``available_names`` is given, a "Did you mean?" hint is included when
    a close match exists.

    Example:
            >>> env = Environment(strict_variables=True)
            >>> env.from_string("{{ usr }}").render(user="ada")
        UndefinedError: Undefined variable 'usr' in <template>. Did you mean 'user'?

    """

    code: ErrorCode | None = ErrorCode.UNDEFINED_VARIABLE

    def __init__(
        self,
        name: str,
        template: str | None = None,
        lineno: int | None = None,
        available_names: frozenset[str] | None = None,
    ):
        self.name = name
        self.template = template or "<template>"
        self.lineno = lineno
        self._available_names = available_names
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"Undefined variable '{self.name}' in {terminal.location(_location(self.template, self.lineno))}"

        if self._available_names:
            from difflib import get_close_matches

            root = self.name.split(".", 1)[0].split("[", 1)[0]
            matches = get_close_matches(root, self._available_names, n=1, cutoff=0.6)
            if matches and matches[0] != root:
                msg += f". Did you mean '{terminal.suggestion(matches[0])}'?"

        return msg
