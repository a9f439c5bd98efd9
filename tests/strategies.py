"""Shared hypothesis strategies for Sprig property-based testing.

Provides template fragments at two levels:

- **Lexer**: Text and markers with valid delimiter patterns
- **Literal blocks**: Bodies that look like markup but must pass through
  a raw block untouched
"""

from __future__ import annotations

from hypothesis import strategies as st

# ---------------------------------------------------------------------------
# Lexer strategies
# ---------------------------------------------------------------------------

# Plain text that does NOT contain sprig delimiters (no { or })
plain_text = st.text(
    alphabet=st.characters(
        blacklist_categories=("Cs",),  # no surrogates
        blacklist_characters="{}\x00",
    ),
    min_size=1,
    max_size=200,
)

_identifier = st.from_regex(r"[a-z_][a-z0-9_]{0,12}", fullmatch=True)

sprig_output = _identifier.map(lambda name: f"{{{{ {name} }}}}")

sprig_tag = st.one_of(
    _identifier.map(lambda name: f"{{% if {name} %}}"),
    _identifier.map(lambda name: f"{{% for x in {name} %}}"),
    st.sampled_from(["{% endif %}", "{% endfor %}", "{% else %}", "{%- assign a = 1 -%}"]),
)

# Template fragments: plain text interleaved with output and tag markers
template_fragment = st.lists(
    st.one_of(plain_text, sprig_output, sprig_tag),
    min_size=1,
    max_size=8,
).map("".join)

# Arbitrary input that might stress the lexer (fuzz-like)
arbitrary_template_source = st.text(
    alphabet=st.characters(blacklist_categories=("Cs",)),
    min_size=0,
    max_size=300,
)

# ---------------------------------------------------------------------------
# Literal block strategies
# ---------------------------------------------------------------------------

# Markers that must never close a raw block, including a nested raw opener
# and near misses of the closing tag.
_non_closing_markers = st.sampled_from(
    [
        "{% raw %}",
        "{%raw%}",
        "{% endraw_extra %}",
        "{% end raw %}",
        "{% endcomment %}",
        "{% %}",
        "{%- if x -%}",
    ]
)

raw_body = st.lists(
    st.one_of(plain_text, sprig_output, sprig_tag, _non_closing_markers),
    min_size=0,
    max_size=8,
).map("".join)
