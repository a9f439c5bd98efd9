"""Built-in Sprig tags.

``DEFAULT_TAGS`` is the tag table every Environment starts from.
"""

from __future__ import annotations

from sprig.nodes import Tag
from sprig.tags.assign import Assign
from sprig.tags.conditional import If, Unless
from sprig.tags.ifchanged import IfChanged
from sprig.tags.include import Include
from sprig.tags.iteration import For, ForLoop
from sprig.tags.raw import Comment, Raw

DEFAULT_TAGS: dict[str, type[Tag]] = {
    "assign": Assign,
    "comment": Comment,
    "for": For,
    "if": If,
    "ifchanged": IfChanged,
    "include": Include,
    "raw": Raw,
    "unless": Unless,
}

__all__ = [
    "DEFAULT_TAGS",
    "Assign",
    "Comment",
    "For",
    "ForLoop",
    "If",
    "IfChanged",
    "Include",
    "Raw",
    "Unless",
]
