"""Tests for pagequery.adapters.memory module."""

import json

import pytest

from pagequery.adapters.memory import CorpusFormat, InMemoryCorpus
from pagequery.core.errors import ErrorCategory, SourceError

from conftest import WIKI_PAGES


class TestLoading:
    """Test reading corpus files."""

    def test_yaml_file(self, corpus_file):
        corpus = InMemoryCorpus.from_file(corpus_file)
        assert list(corpus.all_ids()) == list(WIKI_PAGES)

    def test_json_file(self, tmp_path):
        path = tmp_path / "corpus.json"
        path.write_text(json.dumps({"a:start": {"title": "A"}}), encoding="utf-8")
        corpus = InMemoryCorpus.from_file(path)
        assert corpus.get_metadata("a:start") == {"title": "A"}

    def test_explicit_format_overrides_extension(self, tmp_path):
        path = tmp_path / "corpus.txt"
        path.write_text('{"a": {}}', encoding="utf-8")
        assert "a" in InMemoryCorpus.from_file(path, format=CorpusFormat.JSON)

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceError) as exc_info:
            InMemoryCorpus.from_file(tmp_path / "nope.yaml")
        assert exc_info.value.category is ErrorCategory.SOURCE
        assert exc_info.value.context.source_path.endswith("nope.yaml")

    def test_unknown_extension(self, tmp_path):
        path = tmp_path / "corpus.csv"
        path.write_text("a,b", encoding="utf-8")
        with pytest.raises(SourceError, match="extension"):
            InMemoryCorpus.from_file(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("pages: [unclosed", encoding="utf-8")
        with pytest.raises(SourceError) as exc_info:
            InMemoryCorpus.from_file(path)
        assert exc_info.value.category is ErrorCategory.PARSE

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(SourceError):
            InMemoryCorpus.from_file(path)

    def test_non_mapping_content(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(SourceError, match="mapping"):
            InMemoryCorpus.from_file(path)

    def test_non_mapping_record(self):
        with pytest.raises(SourceError) as exc_info:
            InMemoryCorpus.from_dict({"a": "just text"})
        assert exc_info.value.context.record_id == "a"

    def test_empty_file_is_empty_corpus(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert len(InMemoryCorpus.from_file(path)) == 0

    def test_pages_key_is_optional(self):
        assert list(InMemoryCorpus.from_dict({"x": {}, "y": None}).all_ids()) == ["x", "y"]


class TestContracts:
    """Test the collaborator contracts."""

    def test_metadata_excludes_control_keys(self, corpus):
        meta = corpus.get_metadata("wiki:plugins:pagequery")
        assert meta["title"] == "Pagequery Plugin"
        assert "text" not in meta

    def test_metadata_of_unknown_record(self, corpus):
        assert corpus.get_metadata("nope") == {}

    def test_fulltext_requires_every_term(self, corpus):
        assert list(corpus.fulltext_search("QUERY plugin")) == ["wiki:plugins:pagequery"]
        assert list(corpus.fulltext_search("query missing")) == []

    def test_fulltext_empty_query(self, corpus):
        assert list(corpus.fulltext_search("   ")) == []

    def test_backlinks_follow_existing_references(self, corpus):
        found = corpus.backlinks(["wiki:syntax", "wiki:start", "wiki:missing", "other:page1"])
        assert [list(refs) for refs in found] == [
            ["wiki:start", "wiki:plugins:pagequery"],
            ["wiki:syntax"],
            [],
            [],
        ]

    def test_access_control(self, corpus):
        assert corpus.can_read("wiki:start")
        assert not corpus.can_read("wiki:locked")

    def test_registry(self, corpus):
        assert corpus.exists("wiki:start")
        assert not corpus.exists("wiki:ghost")
        assert not corpus.exists("wiki:nope")
        assert corpus.is_hidden("wiki:secret")
        assert not corpus.is_hidden("wiki:start")
