"""Template loaders for the Sprig environment.

Loaders are the template source consulted by ``Environment.get_template``
and by ``{% include %}`` on a partial-cache miss. They implement
``get_source(name)`` returning ``(source, filename)`` and raise
``TemplateNotFoundError`` when the name is unknown.

Built-in Loaders:
- `FileSystemLoader`: Load from filesystem directories
- `DictLoader`: Load from an in-memory dictionary (testing/embedded)
- `ChoiceLoader`: Try multiple loaders in order (theme fallback)
- `FunctionLoader`: Wrap a callable as a loader

Custom Loaders:
Any object with a matching ``get_source`` works:
    ```python
    class DatabaseLoader:
        def get_source(self, name: str) -> tuple[str, str | None]:
            row = db.query("SELECT source FROM templates WHERE name = ?", name)
            if not row:
                raise TemplateNotFoundError(f"Template '{name}' not found")
            return row.source, f"db://{name}"
    ```

"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from sprig.environment.exceptions import TemplateNotFoundError


class Loader(Protocol):
    """Template source protocol."""

    def get_source(self, name: str) -> tuple[str, str | None]: ...


class FileSystemLoader:
    """Load templates from filesystem directories.

    Names are mapped to files through ``pattern``, so partials can follow a
    naming convention without the include spelling it out:

        >>> loader = FileSystemLoader("templates/", pattern="_{name}.liquid")
        >>> loader.get_source("products/card")[1]
        'templates/products/_card.liquid'

    The pattern applies to the last path segment only. Directories are
    searched in order and the first match wins. Names that would resolve
    outside a search directory are reported as not found.

    Raises:
        TemplateNotFoundError: If template not found in any search path

    """

    __slots__ = ("_encoding", "_paths", "_pattern")

    def __init__(
        self,
        paths: str | Path | list[str | Path],
        encoding: str = "utf-8",
        pattern: str = "{name}",
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self._paths = [Path(p) for p in paths]
        self._encoding = encoding
        self._pattern = pattern

    def _relative_path(self, name: str) -> Path:
        directory, _, leaf = name.rpartition("/")
        filename = self._pattern.format(name=leaf)
        return Path(directory, filename) if directory else Path(filename)

    def get_source(self, name: str) -> tuple[str, str]:
        """Load template source from the first directory that has it."""
        relative = self._relative_path(name)
        for base in self._paths:
            root = base.resolve()
            path = (root / relative).resolve()
            if not path.is_relative_to(root):
                raise TemplateNotFoundError(
                    f"Template '{name}' resolves outside the template directory"
                )
            if path.is_file():
                return path.read_text(self._encoding), str(base / relative)

        raise TemplateNotFoundError(
            f"Template '{name}' not found in: {', '.join(str(p) for p in self._paths)}"
        )


class DictLoader:
    """Load templates from an in-memory dictionary.

    Example:
            >>> loader = DictLoader({
            ...     "product": "<li>{{ product.title }}</li>",
            ...     "page": "{% include 'product' for products %}",
            ... })
            >>> env = Environment(loader=loader)
            >>> env.get_template("page").render(products=[{"title": "Hat"}])
            '<li>Hat</li>'

    Raises:
        TemplateNotFoundError: If template name not in mapping

    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: dict[str, str]):
        self._mapping = mapping

    def get_source(self, name: str) -> tuple[str, None]:
        if name not in self._mapping:
            from difflib import get_close_matches

            available = sorted(self._mapping.keys())
            msg = f"Template '{name}' not found"
            matches = get_close_matches(name, available, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"
            elif available:
                msg += f". Available: {', '.join(available[:10])}"
                if len(available) > 10:
                    msg += f" ... ({len(available)} total)"
            raise TemplateNotFoundError(msg)
        return self._mapping[name], None

    def list_templates(self) -> list[str]:
        return sorted(self._mapping.keys())


class ChoiceLoader:
    """Try multiple loaders in order, returning the first match.

    Example:
            >>> custom = DictLoader({"nav": "<nav>Custom</nav>"})
            >>> default = DictLoader({"nav": "<nav>Default</nav>", "footer": "<footer/>"})
            >>> env = Environment(loader=ChoiceLoader([custom, default]))
            >>> env.from_string("{% include 'nav' %}{% include 'footer' %}").render()
            '<nav>Custom</nav><footer/>'

    Raises:
        TemplateNotFoundError: If no loader can find the template
    """

    __slots__ = ("_loaders",)

    def __init__(self, loaders: list[Loader]):
        self._loaders = loaders

    def get_source(self, name: str) -> tuple[str, str | None]:
        for loader in self._loaders:
            try:
                return loader.get_source(name)
            except TemplateNotFoundError:
                continue
        raise TemplateNotFoundError(
            f"Template '{name}' not found in any of {len(self._loaders)} loaders"
        )


class FunctionLoader:
    """Wrap a callable as a template loader.

    The function takes a template name and returns the source string, a
    ``(source, filename)`` tuple, or ``None`` when the template is unknown.

    Example:
            >>> def load(name):
            ...     return "Hello, {{ name }}!" if name == "greeting" else None
            >>> env = Environment(loader=FunctionLoader(load))
            >>> env.get_template("greeting").render(name="World")
            'Hello, World!'

    Raises:
        TemplateNotFoundError: If ``load_func`` returns ``None``
    """

    __slots__ = ("_load_func",)

    def __init__(
        self,
        load_func: Callable[[str], str | tuple[str, str | None] | None],
    ):
        self._load_func = load_func

    def get_source(self, name: str) -> tuple[str, str | None]:
        result = self._load_func(name)

        if result is None:
            raise TemplateNotFoundError(f"Template '{name}' not found")

        if isinstance(result, str):
            return result, "<function>"

        return result
