"""Expression parsing and evaluation for Sprig.

Expressions are the values inside tags and output markers: literals,
ranges, and variable lookups.

    'card'              string literal
    42, -1.5            numbers
    true false nil      keywords (``null`` is an alias of ``nil``)
    empty blank         compare equal to empty / blank values
    (1..limit)          inclusive integer range
    products[0].title   variable lookup with index and attribute access
    items.size          ``size``, ``first`` and ``last`` on sequences

Filters and arithmetic are not supported.

Parsing is pure and cached: the same markup always yields the same
immutable expression tree.

"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from sprig.environment.exceptions import (
    ErrorCode,
    EvaluationError,
    TemplateError,
    TemplateSyntaxError,
    UndefinedError,
)
from sprig.scope import MISSING

if TYPE_CHECKING:
    from sprig.scope import Scope

# Shared markup fragments used by tag syntax patterns.
QUOTED_STRING = r"\"[^\"]*\"|'[^']*'"
QUOTED_FRAGMENT = rf"(?:{QUOTED_STRING}|(?:[^\s,\|'\"]|{QUOTED_STRING})+)"
TAG_ATTRIBUTES = re.compile(rf"(\w[\w-]*)\s*[:=]\s*({QUOTED_FRAGMENT})")

_TOKEN_RE = re.compile(
    r"""
    \s*(?:
        (?P<string>"[^"]*"|'[^']*')
      | (?P<number>-?\d+(?:\.\d+)?)
      | (?P<dotdot>\.\.)
      | (?P<punct>[.\[\]()])
      | (?P<ident>[A-Za-z_][\w-]*\??)
    )
    """,
    re.VERBOSE,
)


class _EmptyValue:
    """Value of the ``empty`` / ``blank`` keywords."""

    __slots__ = ("_blank",)

    def __init__(self, blank: bool):
        self._blank = blank

    def __eq__(self, other: object) -> bool:
        if other is None:
            return self._blank
        if isinstance(other, str):
            return other.strip() == "" if self._blank else other == ""
        if isinstance(other, (list, tuple, Mapping)):
            return len(other) == 0
        return False

    def __hash__(self) -> int:
        return hash(self._blank)

    def __repr__(self) -> str:
        return "blank" if self._blank else "empty"


EMPTY = _EmptyValue(blank=False)
BLANK = _EmptyValue(blank=True)

_KEYWORDS: dict[str, Any] = {
    "true": True,
    "false": False,
    "nil": None,
    "null": None,
    "empty": EMPTY,
    "blank": BLANK,
}

_SIZED_PROPERTIES = frozenset({"size", "first", "last"})


@dataclass(frozen=True, slots=True)
class Expr:
    """Base class for expressions."""


@dataclass(frozen=True, slots=True)
class Literal(Expr):
    """Constant value."""

    value: Any


@dataclass(frozen=True, slots=True)
class RangeExpr(Expr):
    """Inclusive integer range: (start..stop)"""

    start: Expr
    stop: Expr


@dataclass(frozen=True, slots=True)
class Lookup(Expr):
    """Variable lookup: ``name.attr[key]``.

    ``root`` is a name, or an expression for ``['quoted name']`` roots.
    Path entries are attribute names or index expressions.
    """

    root: str | Expr
    path: tuple[str | Expr, ...]
    markup: str


class _ExpressionParser:
    """Recursive-descent parser over the expression token list."""

    __slots__ = ("_markup", "_pos", "_tokens")

    def __init__(self, markup: str):
        self._markup = markup
        self._tokens = self._tokenize(markup)
        self._pos = 0

    def _tokenize(self, markup: str) -> list[tuple[str, str]]:
        tokens: list[tuple[str, str]] = []
        pos = 0
        end = len(markup.rstrip())
        while pos < end:
            match = _TOKEN_RE.match(markup, pos)
            if match is None or match.end() == pos:
                raise self._error(f"Unexpected character {markup[pos:].lstrip()[:1]!r}")
            kind = match.lastgroup
            assert kind is not None
            tokens.append((kind, match.group(kind)))
            pos = match.end()
        return tokens

    def _error(self, message: str) -> TemplateSyntaxError:
        err = TemplateSyntaxError(f"{message} in expression '{self._markup}'")
        err.code = ErrorCode.INVALID_EXPRESSION
        return err

    def _peek(self) -> tuple[str, str] | None:
        return self._tokens[self._pos] if self._pos < len(self._tokens) else None

    def _advance(self) -> tuple[str, str]:
        token = self._peek()
        if token is None:
            raise self._error("Unexpected end")
        self._pos += 1
        return token

    def _expect(self, text: str) -> None:
        kind, value = self._advance()
        if value != text:
            raise self._error(f"Expected '{text}', got '{value}'")

    def parse(self) -> Expr:
        if not self._tokens:
            return Literal(None)
        expr = self._expression()
        if self._pos < len(self._tokens):
            raise self._error(f"Unexpected '{self._tokens[self._pos][1]}'")
        return expr

    def _expression(self) -> Expr:
        kind, text = self._advance()
        if kind == "string":
            return Literal(text[1:-1])
        if kind == "number":
            return Literal(float(text) if "." in text else int(text))
        if text == "(":
            start = self._expression()
            kind, _ = self._advance()
            if kind != "dotdot":
                raise self._error("Expected '..' in range")
            stop = self._expression()
            self._expect(")")
            return RangeExpr(start, stop)
        if kind == "ident":
            path = self._path()
            if not path and text in _KEYWORDS:
                return Literal(_KEYWORDS[text])
            return Lookup(text, path, self._markup)
        if text == "[":
            root = self._expression()
            self._expect("]")
            return Lookup(root, self._path(), self._markup)
        raise self._error(f"Unexpected '{text}'")

    def _path(self) -> tuple[str | Expr, ...]:
        path: list[str | Expr] = []
        while (token := self._peek()) is not None:
            if token[1] == ".":
                self._advance()
                kind, name = self._advance()
                if kind != "ident":
                    raise self._error(f"Expected attribute name after '.', got '{name}'")
                path.append(name)
            elif token[1] == "[":
                self._advance()
                path.append(self._expression())
                self._expect("]")
            else:
                break
        return tuple(path)


@lru_cache(maxsize=1024)
def parse_expression(markup: str) -> Expr:
    """Parse expression markup into an immutable expression tree.

    Raises:
        TemplateSyntaxError: If the markup is not a valid expression
    """
    return _ExpressionParser(markup.strip()).parse()


def evaluate(
    expr: Expr,
    scope: Scope,
    *,
    strict: bool = False,
    template_name: str | None = None,
    lineno: int | None = None,
) -> Any:
    """Evaluate ``expr`` against ``scope``.

    Undefined lookups yield ``None``, or raise ``UndefinedError`` when
    ``strict`` is set.

    Raises:
        UndefinedError: Strict mode and the lookup found nothing
        EvaluationError: An object raised while being read
    """
    if isinstance(expr, Literal):
        return expr.value
    if isinstance(expr, Lookup):
        return _evaluate_lookup(expr, scope, strict, template_name, lineno)
    if isinstance(expr, RangeExpr):
        start = evaluate(expr.start, scope, strict=strict, template_name=template_name, lineno=lineno)
        stop = evaluate(expr.stop, scope, strict=strict, template_name=template_name, lineno=lineno)
        try:
            return range(int(start), int(stop) + 1)
        except (TypeError, ValueError) as e:
            raise EvaluationError(
                f"Range bounds must be integers, got {start!r}..{stop!r}",
                template_name=template_name,
                lineno=lineno,
            ) from e
    raise TypeError(f"Unknown expression type: {type(expr).__name__}")


def _evaluate_lookup(
    expr: Lookup,
    scope: Scope,
    strict: bool,
    template_name: str | None,
    lineno: int | None,
) -> Any:
    if isinstance(expr.root, str):
        value = scope.find(expr.root)
    else:
        key = evaluate(expr.root, scope, strict=strict, template_name=template_name, lineno=lineno)
        value = scope.find(key) if isinstance(key, str) else MISSING

    for key in expr.path:
        if value is MISSING:
            break
        if isinstance(key, Expr):
            key = evaluate(key, scope, strict=strict, template_name=template_name, lineno=lineno)
        try:
            value = _get_item(value, key)
        except TemplateError:
            raise
        except Exception as e:
            raise EvaluationError(
                f"Error reading {key!r} from {type(value).__name__}: {e}",
                expression=expr.markup,
                template_name=template_name,
                lineno=lineno,
            ) from e

    if value is MISSING:
        if strict:
            raise UndefinedError(
                expr.markup,
                template_name,
                lineno,
                available_names=scope.names(),
            )
        return None
    return value


def _get_item(obj: Any, key: Any) -> Any:
    if isinstance(obj, Mapping):
        if key in obj:
            return obj[key]
    elif isinstance(obj, (list, tuple, str)) and isinstance(key, int) and not isinstance(key, bool):
        try:
            return obj[key]
        except IndexError:
            return MISSING

    if not isinstance(key, str):
        return MISSING

    if key in _SIZED_PROPERTIES:
        if isinstance(obj, (list, tuple)):
            if key == "size":
                return len(obj)
            if not obj:
                return None
            return obj[0] if key == "first" else obj[-1]
        if key == "size" and isinstance(obj, (str, Mapping)):
            return len(obj)

    if key.startswith("_") or isinstance(obj, (str, int, float, list, tuple, Mapping)):
        return MISSING
    value = getattr(obj, key, MISSING)
    if callable(value) and not isinstance(value, type):
        return MISSING
    return value
