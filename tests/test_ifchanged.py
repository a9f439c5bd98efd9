"""Tests for {% ifchanged %}."""

from __future__ import annotations

import pytest

from sprig import DictLoader, Environment, UnterminatedBlockError
from sprig.tags.ifchanged import REGISTER


class TestIfChanged:
    """Output is emitted only when it differs from the previous block's output."""

    def test_first_render_emits(self, env: Environment) -> None:
        assert env.from_string("{% ifchanged %}a{% endifchanged %}").render() == "a"

    def test_repeats_suppressed_in_loop(self, env: Environment) -> None:
        tmpl = env.from_string("{% for x in items %}{% ifchanged %}{{ x }}{% endifchanged %}{% endfor %}")
        assert tmpl.render(items=[1, 1, 2, 2, 1]) == "121"

    def test_emit_suppress_emit(self, env: Environment) -> None:
        tmpl = env.from_string(
            "{% for x in items %}{% ifchanged %}[{{ x }}]{% endifchanged %}{% endfor %}"
        )
        assert tmpl.render(items=["a", "a", "b"]) == "[a][b]"

    def test_grouping_headings(self, env: Environment) -> None:
        tmpl = env.from_string(
            "{% for post in posts %}"
            "{% ifchanged %}<h2>{{ post.date }}</h2>{% endifchanged %}"
            "{{ post.title }};"
            "{% endfor %}"
        )
        posts = [
            {"date": "Mon", "title": "a"},
            {"date": "Mon", "title": "b"},
            {"date": "Tue", "title": "c"},
        ]
        assert tmpl.render(posts=posts) == "<h2>Mon</h2>a;b;<h2>Tue</h2>c;"

    def test_sibling_blocks_share_one_slot(self, env: Environment) -> None:
        tmpl = env.from_string(
            "{% ifchanged %}a{% endifchanged %}"
            "{% ifchanged %}a{% endifchanged %}"
            "{% ifchanged %}b{% endifchanged %}"
            "{% ifchanged %}a{% endifchanged %}"
        )
        assert tmpl.render() == "aba"

    def test_empty_output_is_suppressed_only_after_empty(self, env: Environment) -> None:
        tmpl = env.from_string(
            "{% for x in items %}{% ifchanged %}{{ x }}{% endifchanged %}.{% endfor %}"
        )
        assert tmpl.render(items=[None, None, 1]) == "..1."

    def test_state_is_per_render(self, env: Environment) -> None:
        tmpl = env.from_string("{% ifchanged %}same{% endifchanged %}")
        assert tmpl.render() == "same"
        assert tmpl.render() == "same"

    def test_register_holds_last_output(self, env: Environment) -> None:
        tmpl = env.from_string("{% ifchanged %}{{ x }}{% endifchanged %}")
        session = env.new_session({"x": "v"})
        out: list[str] = []
        tmpl.render_into(out, session)
        assert out == ["v"]
        assert session.registers[REGISTER] == "v"

    def test_body_bindings_are_scoped(self, env: Environment) -> None:
        tmpl = env.from_string("{% ifchanged %}{% assign z = 1 %}{{ z }}{% endifchanged %}[{{ z }}]")
        assert tmpl.render() == "1[]"

    def test_shared_across_includes(self) -> None:
        env = Environment(
            loader=DictLoader({"heading": "{% ifchanged %}{{ heading }}{% endifchanged %}"})
        )
        tmpl = env.from_string("{% include 'heading' for days %}")
        assert tmpl.render(days=["Mon", "Mon", "Tue", "Tue", "Mon"]) == "MonTueMon"

    def test_unterminated(self, env: Environment) -> None:
        with pytest.raises(UnterminatedBlockError) as exc_info:
            env.from_string("{% ifchanged %}a")
        assert exc_info.value.block_name == "ifchanged"
