"""Tag registry for the Sprig environment.

Maps tag names (the word after ``{%``) to the node classes that parse them.
"""

from __future__ import annotations

from collections.abc import ItemsView, Iterator, KeysView
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sprig.environment.core import Environment
    from sprig.nodes import Tag


class TagRegistry:
    """Dict-like view over an environment's tag table.

    Supports:
        - env.tags['name'] = TagClass
        - env.tags.update({'name': TagClass})
        - cls = env.tags['name']
        - 'name' in env.tags

    Mutations replace the underlying dict (copy-on-write), so templates
    being parsed on another thread keep a consistent table.
    """

    __slots__ = ("_attr", "_env")

    def __init__(self, env: Environment, attr: str):
        self._env = env
        self._attr = attr

    def _get_dict(self) -> dict[str, type[Tag]]:
        return getattr(self._env, self._attr)

    def _set_dict(self, d: dict[str, type[Tag]]) -> None:
        setattr(self._env, self._attr, d)

    def __getitem__(self, name: str) -> type[Tag]:
        return self._get_dict()[name]

    def __setitem__(self, name: str, tag_cls: type[Tag]) -> None:
        new = self._get_dict().copy()
        new[name] = tag_cls
        self._set_dict(new)

    def __delitem__(self, name: str) -> None:
        new = self._get_dict().copy()
        del new[name]
        self._set_dict(new)

    def __contains__(self, name: object) -> bool:
        return name in self._get_dict()

    def __iter__(self) -> Iterator[str]:
        return iter(self._get_dict())

    def __len__(self) -> int:
        return len(self._get_dict())

    def get(self, name: str, default: type[Tag] | None = None) -> type[Tag] | None:
        return self._get_dict().get(name, default)

    def update(self, mapping: dict[str, type[Tag]]) -> None:
        new = self._get_dict().copy()
        new.update(mapping)
        self._set_dict(new)

    def keys(self) -> KeysView[str]:
        return self._get_dict().keys()

    def items(self) -> ItemsView[str, type[Tag]]:
        return self._get_dict().items()
