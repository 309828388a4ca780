"""Tests for pagequery.query.namespace module."""

import pytest

from pagequery.core.models import QueryContext
from pagequery.core.paths import PathResolver
from pagequery.query.namespace import NamespaceQueryParser, is_namespace_token


@pytest.fixture
def parser(context):
    return NamespaceQueryParser(PathResolver(), context)


class TestNamespaceQueryParser:
    """Test splitting namespace tokens out of a raw query."""

    def test_single_word_is_returned_unchanged(self, parser):
        parsed = parser.parse("  report  ")
        assert parsed.query == "report"
        assert parsed.include == [] and parsed.exclude == []

    def test_single_namespace_token_is_not_parsed(self, parser):
        parsed = parser.parse("ns:wiki")
        assert parsed.query == "ns:wiki"
        assert parsed.include == []

    def test_include_and_exclude_tokens(self, parser):
        parsed = parser.parse("ns:wiki -ns:other report")
        assert parsed.query == "report"
        assert parsed.include == ["wiki"]
        assert parsed.exclude == ["other"]

    def test_short_prefixes(self, parser):
        parsed = parser.parse("@wiki ^other x")
        assert parsed.include == ["wiki"]
        assert parsed.exclude == ["other"]

    def test_token_order_is_kept(self, parser):
        parsed = parser.parse("ns:b ns:a ^d ^c q")
        assert parsed.include == ["b", "a"]
        assert parsed.exclude == ["d", "c"]

    def test_relative_tokens_resolve_against_context(self, parser):
        parsed = parser.parse("ns:.:plugins ^.:private page")
        assert parsed.include == ["wiki:plugins"]
        assert parsed.exclude == ["wiki:private"]

    def test_remaining_words_rejoined_with_single_spaces(self, parser):
        assert parser.parse("alpha   ns:wiki   beta").query == "alpha beta"

    def test_only_namespace_tokens_leaves_empty_query(self, parser):
        parsed = parser.parse("ns:a ns:b")
        assert parsed.query == ""
        assert parsed.include == ["a", "b"]

    def test_resolver_is_consulted_per_token(self, settings):
        class Upper:
            def resolve_namespace(self, token, context_id):
                return token.upper()

        parsed = NamespaceQueryParser(Upper(), QueryContext(settings=settings)).parse("ns:wiki q")
        assert parsed.include == ["WIKI"]


class TestIsNamespaceToken:
    """Test namespace token detection."""

    @pytest.mark.parametrize("token", ["ns:a", "@a", "-ns:a", "^a"])
    def test_tokens(self, token):
        assert is_namespace_token(token)

    @pytest.mark.parametrize("token", ["a", "*", "ns:", "page:ns"])
    def test_non_tokens(self, token):
        assert not is_namespace_token(token)
