"""Tests for Environment configuration, loaders, and error formatting."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from sprig import (
    ChoiceLoader,
    DictLoader,
    Environment,
    ErrorCode,
    FileSystemLoader,
    FunctionLoader,
    IncludeDepthError,
    MissingTemplateNameError,
    Template,
    TemplateNotFoundError,
    UndefinedError,
)
from sprig.environment import terminal
from sprig.environment.exceptions import format_template_stack


class TestEnvironment:
    """Environment settings and entry points."""

    def test_from_string(self, env: Environment) -> None:
        tmpl = env.from_string("Hello, {{ name }}!", name="greet")
        assert isinstance(tmpl, Template)
        assert tmpl.name == "greet"
        assert tmpl.partial is False
        assert tmpl.render(name="World") == "Hello, World!"
        assert tmpl.render({"name": "dict"}) == "Hello, dict!"

    def test_kwargs_win_over_context(self, env: Environment) -> None:
        assert env.from_string("{{ x }}").render({"x": 1}, x=2) == "2"

    def test_globals_below_render_variables(self) -> None:
        env = Environment(globals={"site": "Shop", "x": "global"})
        tmpl = env.from_string("{{ site }}/{{ x }}")
        assert tmpl.render() == "Shop/global"
        assert tmpl.render(x="local") == "Shop/local"

    def test_get_template_and_render(self, env_with_loader: Environment) -> None:
        tmpl = env_with_loader.get_template("product")
        assert tmpl.name == "product"
        assert env_with_loader.render("product", product={"title": "T"}) == "<li>T</li>"

    def test_strict_variables(self, env_strict: Environment) -> None:
        with pytest.raises(UndefinedError):
            env_strict.from_string("{{ missing }}").render()

    def test_lenient_by_default(self, env: Environment) -> None:
        assert env.from_string("[{{ missing.deep }}]").render() == "[]"

    @pytest.mark.parametrize("depth", [0, -1])
    def test_max_include_depth_validated(self, depth: int) -> None:
        with pytest.raises(ValueError):
            Environment(max_include_depth=depth)

    def test_new_session(self) -> None:
        env = Environment(globals={"g": 1})
        session = env.new_session({"v": 2}, template_name="page")
        assert session.scope["g"] == 1
        assert session.scope["v"] == 2
        assert session.template_name == "page"
        assert session.partial is False
        assert session.partials == {}
        assert session.registers == {}

    def test_output_conversion(self, env: Environment) -> None:
        tmpl = env.from_string("{{ a }}|{{ b }}|{{ c }}|{{ d }}")
        assert tmpl.render(a=None, b=True, c=["x", 1], d=2.5) == "|true|x1|2.5"

    def test_template_repr(self, env: Environment) -> None:
        assert repr(env.from_string("x", name="page")) == "<Template 'page' (template)>"

    def test_parse_logs_at_debug(self, env: Environment, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="sprig"):
            env.from_string("x", name="logged")
        assert "logged" in caplog.text

    def test_partial_load_logs_at_debug(
        self, env_with_loader: Environment, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="sprig"):
            env_with_loader.from_string("{% include 'product' %}").render()
        assert "Loaded partial 'product'" in caplog.text


class TestFileSystemLoader:
    """Loading templates from directories."""

    @pytest.fixture
    def template_dir(self, tmp_path: Path) -> Path:
        (tmp_path / "sections").mkdir()
        (tmp_path / "page.liquid").write_text("{% include 'sections/footer' %}")
        (tmp_path / "sections" / "_footer.liquid").write_text("footer {{ footer }}")
        (tmp_path / "plain.html").write_text("plain")
        return tmp_path

    def test_plain_names(self, template_dir: Path) -> None:
        source, filename = FileSystemLoader(template_dir).get_source("plain.html")
        assert source == "plain"
        assert filename == str(template_dir / "plain.html")

    def test_pattern_applies_to_last_segment(self, template_dir: Path) -> None:
        loader = FileSystemLoader(template_dir, pattern="_{name}.liquid")
        source, filename = loader.get_source("sections/footer")
        assert source == "footer {{ footer }}"
        assert filename == str(template_dir / "sections" / "_footer.liquid")

    def test_include_through_filesystem(self, template_dir: Path) -> None:
        env = Environment(loader=FileSystemLoader(template_dir, pattern="_{name}.liquid"))
        tmpl = env.from_string("{% include 'sections/footer' with 'ok' %}")
        assert tmpl.render() == "footer ok"

    def test_search_path_order(self, tmp_path: Path) -> None:
        first, second = tmp_path / "first", tmp_path / "second"
        first.mkdir()
        second.mkdir()
        (second / "a").write_text("second a")
        (second / "b").write_text("second b")
        (first / "a").write_text("first a")
        loader = FileSystemLoader([first, second])
        assert loader.get_source("a")[0] == "first a"
        assert loader.get_source("b")[0] == "second b"

    def test_not_found(self, template_dir: Path) -> None:
        with pytest.raises(TemplateNotFoundError) as exc_info:
            FileSystemLoader(template_dir).get_source("missing")
        assert exc_info.value.code is ErrorCode.TEMPLATE_NOT_FOUND

    def test_escape_outside_directory(self, template_dir: Path) -> None:
        (template_dir.parent / "outside.txt").write_text("secret")
        with pytest.raises(TemplateNotFoundError, match="outside"):
            FileSystemLoader(template_dir).get_source("../outside.txt")


class TestOtherLoaders:
    """Dict, choice, and function loaders."""

    def test_dict_loader_lists_templates(self) -> None:
        assert DictLoader({"b": "", "a": ""}).list_templates() == ["a", "b"]

    def test_dict_loader_lists_available_when_no_match(self) -> None:
        with pytest.raises(TemplateNotFoundError, match="Available: alpha"):
            DictLoader({"alpha": ""}).get_source("zzz")

    def test_choice_loader_first_match_wins(self) -> None:
        loader = ChoiceLoader([DictLoader({"nav": "custom"}), DictLoader({"nav": "default", "f": "f"})])
        assert loader.get_source("nav")[0] == "custom"
        assert loader.get_source("f")[0] == "f"
        with pytest.raises(TemplateNotFoundError):
            loader.get_source("nope")

    def test_function_loader(self) -> None:
        def load(name: str) -> str | tuple[str, str] | None:
            if name == "str":
                return "text"
            if name == "pair":
                return "pair text", "pair.liquid"
            return None

        loader = FunctionLoader(load)
        assert loader.get_source("str") == ("text", "<function>")
        assert loader.get_source("pair") == ("pair text", "pair.liquid")
        with pytest.raises(TemplateNotFoundError):
            loader.get_source("none")


class TestErrorFormatting:
    """Error codes and messages."""

    def test_codes_have_categories(self) -> None:
        assert ErrorCode.UNKNOWN_TAG.category == "parser"
        assert ErrorCode.INCLUDE_DEPTH.category == "runtime"
        assert ErrorCode.TEMPLATE_NOT_FOUND.category == "template"

    def test_format_compact_includes_code(self) -> None:
        err = MissingTemplateNameError("section", template_name="page.html", lineno=3)
        compact = err.format_compact()
        assert "S-RUN-009" in compact
        assert "page.html:3" in compact
        assert "section" in compact

    def test_not_found_compact(self) -> None:
        assert TemplateNotFoundError("gone").format_compact() == "S-TPL-001: gone"

    def test_runtime_message_lists_template_stack(self) -> None:
        err = IncludeDepthError("too deep", template_stack=[("page.html", 4), ("card", 2)])
        message = str(err)
        assert "Template stack:" in message
        assert "page.html:4" in message
        assert "card:2" in message

    def test_empty_template_stack(self) -> None:
        assert format_template_stack([]) == ""

    def test_colorize_passthrough_when_disabled(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        assert terminal.colorize("x", "cyan") == "x"

    def test_colorize_wraps_when_enabled(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        assert terminal.colorize("x", "cyan") == "\033[36mx\033[0m"
