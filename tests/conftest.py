"""Pytest configuration and fixtures for Sprig tests."""

import pytest

from sprig import DictLoader, Environment

PARTIALS = {
    "product": "<li>{{ product.title }}</li>",
    "greeting": "Hello {{ greeting }}{% if punctuation %}{{ punctuation }}{% endif %}",
    "sections/footer": "[{{ footer }}|{{ year }}]",
    "assigner": "{% assign leaked = 'inner' %}{{ leaked }}",
    "self": "{% include 'self' %}",
    "broken": "line one\n{% if %}",
    "strict_missing": "{{ not_defined_anywhere }}",
    "nested_outer": "<{% include 'nested_inner' %}>",
    "nested_inner": "{{ nested_inner }}",
}


@pytest.fixture
def env():
    """Create a basic Sprig Environment."""
    return Environment()


@pytest.fixture
def loader():
    """DictLoader holding the shared test partials."""
    return DictLoader(dict(PARTIALS))


@pytest.fixture
def env_with_loader(loader):
    """Create a Sprig Environment backed by the test partials."""
    return Environment(loader=loader)


@pytest.fixture
def env_strict(loader):
    """Create a Sprig Environment that raises on undefined variables."""
    return Environment(loader=loader, strict_variables=True)


class CountingLoader:
    """DictLoader wrapper that records every source read."""

    def __init__(self, mapping: dict[str, str]):
        self._loader = DictLoader(mapping)
        self.reads: list[str] = []

    def get_source(self, name: str) -> tuple[str, str | None]:
        self.reads.append(name)
        return self._loader.get_source(name)


@pytest.fixture
def counting_loader():
    """Loader that counts reads, for partial cache tests."""
    return CountingLoader(dict(PARTIALS))


def assert_template_equal(template_result: str, expected: str) -> None:
    """Assert template result equals expected, normalizing whitespace.

    Args:
        template_result: The actual template rendering result.
        expected: The expected output.
    """
    actual_normalized = " ".join(template_result.split())
    expected_normalized = " ".join(expected.split())
    assert actual_normalized == expected_normalized, (
        f"Template output mismatch:\n"
        f"  Actual: {actual_normalized!r}\n"
        f"  Expected: {expected_normalized!r}"
    )
