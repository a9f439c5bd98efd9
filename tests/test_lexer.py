"""Tests for the Sprig lexer and token stream.

Property-based checks use hypothesis to verify invariants for all inputs:

- Tokenization is lossless: token values concatenate back to the source
- Arbitrary input never causes an unhandled crash
- Plain text without markers is a single TEXT token
"""

from __future__ import annotations

from hypothesis import given, settings

from sprig._types import Token, TokenType
from sprig.lexer import TokenStream, tokenize

from .strategies import arbitrary_template_source, plain_text, template_fragment


class TestTokenize:
    """Example-based tokenization."""

    def test_text_output_tag(self) -> None:
        tokens = tokenize("Hi {{ name }}{% if x %}!")
        assert [(t.type, t.value) for t in tokens] == [
            (TokenType.TEXT, "Hi "),
            (TokenType.OUTPUT, "{{ name }}"),
            (TokenType.TAG, "{% if x %}"),
            (TokenType.TEXT, "!"),
        ]

    def test_empty_source(self) -> None:
        assert tokenize("") == []

    def test_line_numbers(self) -> None:
        tokens = tokenize("a\nb{{ x }}\n\n{% y\n%}z")
        assert [(t.value, t.lineno) for t in tokens] == [
            ("a\nb", 1),
            ("{{ x }}", 2),
            ("\n\n", 2),
            ("{% y\n%}", 4),
            ("z", 5),
        ]

    def test_unclosed_marker_stays_text(self) -> None:
        assert [t.value for t in tokenize("a {% b")] == ["a {% b"]

    def test_marker_ends_at_first_close(self) -> None:
        assert [t.value for t in tokenize("{% a %}%}")] == ["{% a %}", "%}"]

    def test_output_marker_does_not_span_tag_opener(self) -> None:
        tokens = tokenize("{{ a {% endraw %} }}")
        assert [(t.type, t.value) for t in tokens] == [
            (TokenType.TEXT, "{{ a "),
            (TokenType.TAG, "{% endraw %}"),
            (TokenType.TEXT, " }}"),
        ]

    def test_unclosed_output_stays_text(self) -> None:
        assert [t.type for t in tokenize("{{ a {% b %}")] == [TokenType.TEXT, TokenType.TAG]


class TestToken:
    """Token markup and whitespace-control flags."""

    def test_markup_strips_delimiters_and_dashes(self) -> None:
        token = Token(TokenType.TAG, "{%- include 'a' -%}", 1)
        assert token.markup == "include 'a'"
        assert token.trim_left
        assert token.trim_right

    def test_plain_markers_do_not_trim(self) -> None:
        token = Token(TokenType.OUTPUT, "{{ x }}", 1)
        assert token.markup == "x"
        assert not token.trim_left
        assert not token.trim_right

    def test_text_markup_is_value(self) -> None:
        token = Token(TokenType.TEXT, " -%} ", 1)
        assert token.markup == " -%} "
        assert not token.trim_right


class TestTokenStream:
    """Consuming iteration."""

    def test_consumed_tokens_are_gone(self) -> None:
        stream = TokenStream(tokenize("a{{ b }}c"))
        assert next(stream).value == "a"
        assert stream.last_lineno == 1
        assert [t.value for t in stream] == ["{{ b }}", "c"]
        assert stream.exhausted
        assert list(stream) == []

    def test_last_lineno_before_any_token(self) -> None:
        assert TokenStream([]).last_lineno == 1


class TestLexerProperties:
    """Property-based lexer invariants."""

    @given(source=arbitrary_template_source)
    @settings(max_examples=300)
    def test_lossless(self, source: str) -> None:
        """Concatenated token values reproduce the source exactly."""
        assert "".join(t.value for t in tokenize(source)) == source

    @given(source=plain_text)
    @settings(max_examples=200)
    def test_plain_text_is_one_token(self, source: str) -> None:
        tokens = tokenize(source)
        assert len(tokens) == 1
        assert tokens[0].type is TokenType.TEXT

    @given(source=template_fragment)
    @settings(max_examples=200)
    def test_markers_are_delimited(self, source: str) -> None:
        """Every non-text token starts and ends with its delimiters."""
        for token in tokenize(source):
            if token.type is TokenType.TAG:
                assert token.value.startswith("{%") and token.value.endswith("%}")
            elif token.type is TokenType.OUTPUT:
                assert token.value.startswith("{{") and token.value.endswith("}}")
            else:
                assert token.value
