"""Tests for pagequery.query.projector module."""

import pytest

from conftest import ts
from pagequery.core.enums import Collation, Direction, GroupKind
from pagequery.core.models import REALDATE
from pagequery.query.options import QueryOptions, SnippetOptions
from pagequery.query.projector import (
    RecordProjector,
    group_kind,
    metadata_value,
    sort_collation,
    sort_direction,
)


class CountingStore:
    """Metadata store double that counts calls."""

    def __init__(self, corpus):
        self.corpus = corpus
        self.metadata_calls = []
        self.backlink_calls = []

    def get_metadata(self, record_id):
        self.metadata_calls.append(record_id)
        return self.corpus.get_metadata(record_id)

    def backlinks(self, record_ids):
        self.backlink_calls.append(list(record_ids))
        return self.corpus.backlinks(record_ids)


def project(corpus, context, ids, **options):
    projector = RecordProjector(corpus, QueryOptions(**options), context)
    return {row.id: row for row in projector.project(ids)}


class TestRequiredColumns:
    """Test id / name / title / abstract."""

    def test_required_columns(self, corpus, context):
        row = project(corpus, context, ["wiki:syntax"])["wiki:syntax"]
        assert (row.id, row.name, row.title) == ("wiki:syntax", "syntax", "Formatting Syntax")

    def test_title_falls_back_to_name(self, corpus, context):
        row = project(corpus, context, ["wiki:ghost", "wiki:nometa"])["wiki:nometa"]
        assert row.title == "nometa"

    def test_abstract_only_when_needed(self, corpus, context):
        assert project(corpus, context, ["wiki:syntax"])["wiki:syntax"].abstract == ""
        rows = project(corpus, context, ["wiki:syntax"], snippet=SnippetOptions(type="plain"))
        assert rows["wiki:syntax"].abstract.startswith("How to format pages.")

    def test_input_order_is_kept(self, corpus, context):
        ids = ["wiki:page10", "start", "wiki:page2"]
        projector = RecordProjector(corpus, QueryOptions(), context)
        assert [row.id for row in projector.project(ids)] == ids


class TestOptionalColumns:
    """Test every requested column kind."""

    def test_prefix_columns_from_name(self, corpus, context):
        row = project(corpus, context, ["wiki:syntax"], sort={"a": "", "ab": "", "abc": ""})["wiki:syntax"]
        assert (row.get("a"), row.get("ab"), row.get("abc")) == ("s", "sy", "syn")

    def test_prefix_columns_from_title(self, corpus, context):
        row = project(corpus, context, ["wiki:syntax"], sort={"abc": "", "title": ""})["wiki:syntax"]
        assert row.get("abc") == "for"

    def test_prefix_is_case_folded(self, corpus, context):
        row = project(corpus, context, ["wiki:plugins:pagequery"], sort={"ab": "", "title": ""})
        assert row["wiki:plugins:pagequery"].get("ab") == "pa"

    def test_namespace(self, corpus, context):
        rows = project(corpus, context, ["wiki:plugins:pagequery", "start"], sort={"ns": ""})
        assert rows["wiki:plugins:pagequery"].get("ns") == "wiki:plugins"
        assert rows["start"].get("ns") == "[start]"

    def test_creator_and_contributor(self, corpus, context):
        row = project(corpus, context, ["wiki:syntax"], sort={"creator": "", "contributor": ""})["wiki:syntax"]
        assert row.get("creator") == "Bob"
        assert row.get("contributor") == "Bob Carol"

    def test_missing_creator_is_empty(self, corpus, context):
        assert project(corpus, context, ["start"], sort={"creator": ""})["start"].get("creator") == ""

    def test_links_only_true_references(self, corpus, context):
        row = project(corpus, context, ["wiki:start"], sort={"links": ""})["wiki:start"]
        assert row.get("links") == "wiki:syntax"

    def test_backlinks_single_bulk_lookup(self, corpus, context):
        store = CountingStore(corpus)
        ids = ["wiki:syntax", "wiki:start", "other:page1"]
        rows = {row.id: row for row in RecordProjector(store, QueryOptions(sort={"backlinks": ""}), context).project(ids)}
        assert store.backlink_calls == [ids]
        assert rows["wiki:syntax"].get("backlinks") == "wiki:start wiki:plugins:pagequery"
        assert rows["wiki:start"].get("backlinks") == "wiki:syntax"
        assert rows["other:page1"].get("backlinks") == ""

    def test_no_backlink_lookup_unless_requested(self, corpus, context):
        store = CountingStore(corpus)
        RecordProjector(store, QueryOptions(sort={"name": ""}), context).project(["wiki:start"])
        assert store.backlink_calls == []

    def test_metadata_fetched_once_per_record(self, corpus, context):
        store = CountingStore(corpus)
        options = QueryOptions(sort={"cyear": "", "mmonth": "", "creator": "", "color": ""}, display="{title} {cdate}")
        RecordProjector(store, options, context).project(["wiki:start", "wiki:syntax"])
        assert store.metadata_calls == ["wiki:start", "wiki:syntax"]

    def test_raw_dates(self, corpus, context):
        row = project(corpus, context, ["wiki:syntax"], sort={"mdate": "", "cdate": ""})["wiki:syntax"]
        assert row.get("cdate") == ts(2020, 3, 10)
        assert row.get("mdate") == ts(2021, 6, 1)

    def test_missing_dates_default(self, corpus, context):
        rows = project(corpus, context, ["wiki:page10", "wiki:nometa"], sort={"mdate": "", "cdate": ""})
        assert rows["wiki:page10"].get("mdate") == ts(2021, 7, 4)
        assert rows["wiki:nometa"].get("cdate") == 0
        assert rows["wiki:nometa"].get("mdate") == 0

    def test_custom_metadata_columns(self, corpus, context):
        row = project(corpus, context, ["wiki:plugins:pagequery"], sort={"project:status": "", "tags": ""})
        assert row["wiki:plugins:pagequery"].get("project:status") == "stable"
        assert row["wiki:plugins:pagequery"].get("tags") == "query list"

    def test_missing_custom_column_is_empty(self, corpus, context):
        assert project(corpus, context, ["start"], sort={"color": ""})["start"].get("color") == ""


class TestDateParts:
    """Test c*/m* date-part columns and the shared realdate."""

    def test_formatted_values(self, corpus, context):
        row = project(corpus, context, ["wiki:syntax"], sort={"cyear": "", "cmonth-day": ""})["wiki:syntax"]
        assert row.get("cyear") == "2020"
        assert row.get("cmonth-day") == "03-10"

    def test_modified_date_parts(self, corpus, context):
        row = project(corpus, context, ["wiki:syntax"], sort={"myear-month": ""})["wiki:syntax"]
        assert row.get("myear-month") == "2021-06"
        assert row.get(REALDATE) == ts(2021, 6, 1)

    def test_realdate_prefers_created_regardless_of_order(self, corpus, context):
        first = project(corpus, context, ["wiki:syntax"], sort={"myear": "", "cyear": ""})["wiki:syntax"]
        second = project(corpus, context, ["wiki:syntax"], sort={"cyear": "", "myear": ""})["wiki:syntax"]
        assert first.realdate == second.realdate == ts(2020, 3, 10)

    def test_word_formats_only_with_spelldate(self, corpus, context):
        plain = RecordProjector(corpus, QueryOptions(sort={"cyear-month": ""}), context)
        spelled = RecordProjector(corpus, QueryOptions(sort={"cyear-month": ""}, spelldate=True), context)
        assert plain.word_formats == {"cyear-month": ""}
        assert spelled.word_formats == {"cyear-month": "%B %Y"}

    def test_formats_built_once_per_key(self, corpus, context):
        projector = RecordProjector(corpus, QueryOptions(sort={"cyear": "", "mmonth": ""}), context)
        assert projector.date_formats == {"cyear": "%Y", "mmonth": "%m"}


class TestDisplay:
    """Test display template resolution."""

    def test_default_is_name(self, corpus, context):
        assert project(corpus, context, ["wiki:syntax"])["wiki:syntax"].display == "syntax"

    def test_column_name(self, corpus, context):
        assert project(corpus, context, ["wiki:syntax"], display="title")["wiki:syntax"].display == "Formatting Syntax"

    def test_unknown_column_falls_back_to_name(self, corpus, context):
        assert project(corpus, context, ["wiki:syntax"], display="nonsense")["wiki:syntax"].display == "syntax"

    def test_template_with_columns_and_metadata(self, corpus, context):
        row = project(corpus, context, ["wiki:syntax"], display="{title} by {creator}")["wiki:syntax"]
        assert row.display == "Formatting Syntax by Bob"

    def test_template_nested_metadata(self, corpus, context):
        row = project(corpus, context, ["wiki:plugins:pagequery"], display="{name}: {project:status}")
        assert row["wiki:plugins:pagequery"].display == "pagequery: stable"

    def test_template_dates_use_display_format(self, corpus, context):
        row = project(corpus, context, ["wiki:syntax"], display="{name} ({cdate})")["wiki:syntax"]
        assert row.display == "syntax (2020-03-10)"

    def test_template_dates_with_dformat(self, corpus, context):
        row = project(corpus, context, ["wiki:syntax"], display="{mdate}", dformat="%d.%m.%Y")["wiki:syntax"]
        assert row.display == "01.06.2021"

    def test_nested_date_key(self, corpus, context):
        row = project(corpus, context, ["wiki:syntax"], display="{date:created}")["wiki:syntax"]
        assert row.display == "2020-03-10"

    def test_unresolved_placeholder_is_left(self, corpus, context):
        row = project(corpus, context, ["wiki:syntax"], display="{name} {nope}")["wiki:syntax"]
        assert row.display == "syntax {nope}"


class TestSortOptionTable:
    """Test direction / collation / grouping inference."""

    @pytest.mark.parametrize("key", ["a", "ab", "abc", "name", "title", "id", "ns", "creator", "contributor"])
    def test_text_columns_ascending(self, key):
        assert sort_direction(key) is Direction.ASC

    @pytest.mark.parametrize("key", ["mdate", "cdate", "cyear", "links", "backlinks", "color"])
    def test_other_columns_descending(self, key):
        assert sort_direction(key) is Direction.DESC

    @pytest.mark.parametrize("value, expected", [("a", Direction.ASC), ("asc", Direction.ASC),
                                                 ("d", Direction.DESC), ("desc", Direction.DESC)])
    def test_explicit_direction(self, value, expected):
        assert sort_direction("name" if expected is Direction.DESC else "cdate", value) is expected

    def test_collation(self):
        assert sort_collation("cdate", casesort=True, natsort=True) is Collation.NUMERIC
        assert sort_collation("name") is Collation.STRING_CASE
        assert sort_collation("name", natsort=True) is Collation.NATURAL_CASE
        assert sort_collation("name", casesort=True) is Collation.STRING
        assert sort_collation("name", casesort=True, natsort=True) is Collation.NATURAL

    @pytest.mark.parametrize(
        "key, kind",
        [("mdate", GroupKind.NONE), ("cdate", GroupKind.NONE), ("name", GroupKind.NONE),
         ("title", GroupKind.NONE), ("id", GroupKind.NONE), ("ns", GroupKind.NAMESPACE),
         ("cyear", GroupKind.HEADING), ("creator", GroupKind.HEADING), ("abc", GroupKind.HEADING)],
    )
    def test_group_kind(self, key, kind):
        assert group_kind(key) is kind

    def test_build_sort_keys(self, corpus, context):
        projector = RecordProjector(corpus, QueryOptions(sort={"cyear": "", "name": "desc"}, natsort=True), context)
        keys = projector.build_sort_keys()
        assert [(k.column, k.collation, k.direction) for k in keys] == [
            ("cyear", Collation.NATURAL_CASE, Direction.DESC),
            ("name", Collation.NATURAL_CASE, Direction.DESC),
        ]

    def test_build_group_specs_skips_ungroupable(self, corpus, context):
        options = QueryOptions(sort={"ns": "", "name": "", "cyear-month": ""}, spelldate=True)
        specs = RecordProjector(corpus, options, context).build_group_specs()
        assert [(s.column, s.kind, s.word_format) for s in specs] == [
            ("ns", GroupKind.NAMESPACE, ""),
            ("cyear-month", GroupKind.HEADING, "%B %Y"),
        ]


class TestMetadataValue:
    """Test metadata field lookup."""

    def test_nested(self):
        assert metadata_value({"a": {"b": 1}}, "a:b") == 1

    def test_missing(self):
        assert metadata_value({"a": {"b": 1}}, "a:c") is None
        assert metadata_value({"a": 1}, "a:b") is None
