"""Terminal color helpers for error messages.

Colors are used only when stdout is a TTY. ``NO_COLOR`` disables them and
``FORCE_COLOR`` forces them on (it wins over ``NO_COLOR``).
"""

from __future__ import annotations

import os
import sys
from typing import Literal

_COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "cyan": "\033[36m",
    "green": "\033[32m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
}

ColorName = Literal["reset", "bold", "dim", "cyan", "green", "bright_red", "bright_green"]


def _should_use_colors() -> bool:
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


_USE_COLORS = _should_use_colors()


def supports_color() -> bool:
    """Whether error messages are colorized in this process."""
    return _USE_COLORS


def colorize(text: str, *colors: ColorName) -> str:
    """Wrap ``text`` in ANSI codes, or return it unchanged when colors are off."""
    if not _USE_COLORS or not colors:
        return text
    prefix = "".join(_COLORS[color] for color in colors)
    return f"{prefix}{text}{_COLORS['reset']}"


def location(text: str) -> str:
    return colorize(text, "cyan")


def hint(text: str) -> str:
    return colorize(text, "green")


def suggestion(text: str) -> str:
    return colorize(text, "bright_green", "bold")


def dim_text(text: str) -> str:
    return colorize(text, "dim")


def format_error_header(code: str | None, message: str) -> str:
    """Prefix ``message`` with a highlighted error code when one is given."""
    if code:
        return f"{colorize(code, 'bright_red', 'bold')}: {message}"
    return message
