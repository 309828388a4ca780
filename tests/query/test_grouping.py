"""Tests for pagequery.query.grouping module."""

import pytest

from conftest import ts
from pagequery.core.enums import GroupKind
from pagequery.core.models import GroupSpec, Row
from pagequery.query.grouping import HierarchicalGrouper


def make_row(record_id: str, realdate: int | None = None, **columns) -> Row:
    return Row(id=record_id, name=record_id, title=record_id, columns=columns, realdate=realdate)


def outline(results):
    return [(r.level, r.label) for r in results]


def heading_positions(results):
    """Index of the leaf that follows each heading."""
    positions, leaf_index, pending = [], 0, False
    for result in results:
        if result.is_heading:
            pending = True
            continue
        if pending:
            positions.append(leaf_index)
            pending = False
        leaf_index += 1
    return positions


class NoMetadata:
    """Metadata store with nothing recorded for any page."""

    def get_metadata(self, record_id):
        return None


class TestHeadingGroups:
    """Test run-length headings."""

    def test_no_specs_yields_leaves_only(self):
        rows = [make_row("a", cat="x"), make_row("b", cat="y")]
        results = HierarchicalGrouper([]).group(rows, ["id"])
        assert outline(results) == [(0, "a"), (0, "b")]
        assert not any(r.is_heading for r in results)

    def test_headings_mark_value_changes(self):
        rows = [make_row(str(i), cat=v) for i, v in enumerate("AABBBA")]
        results = HierarchicalGrouper([GroupSpec("cat")]).group(rows, ["id"])
        assert heading_positions(results) == [0, 2, 5]
        assert [r.label for r in results if r.is_heading] == ["A", "B", "A"]

    def test_every_leaf_is_kept_in_order(self):
        rows = [make_row(str(i), cat=v) for i, v in enumerate("AABBBA")]
        results = HierarchicalGrouper([GroupSpec("cat")]).group(rows, ["id"])
        assert [r.get("id") for r in results if not r.is_heading] == ["0", "1", "2", "3", "4", "5"]

    def test_leaf_fields_follow_requested_keys(self):
        results = HierarchicalGrouper([]).group([make_row("a", cat="x")], ["cat", "id"])
        assert results[0].fields == (("cat", "x"), ("id", "a"))

    def test_outer_level_emits_before_inner(self):
        rows = [make_row("1", a="x", b="1"), make_row("2", a="x", b="2"), make_row("3", a="y", b="3")]
        results = HierarchicalGrouper([GroupSpec("a"), GroupSpec("b")]).group(rows, ["id"])
        assert outline(results) == [
            (1, "x"), (2, "1"), (0, "1"),
            (2, "2"), (0, "2"),
            (1, "y"), (2, "3"), (0, "3"),
        ]

    def test_inner_level_is_not_reset_by_outer_change(self):
        rows = [make_row("1", a="x", b="same"), make_row("2", a="y", b="same")]
        results = HierarchicalGrouper([GroupSpec("a"), GroupSpec("b")]).group(rows, ["id"])
        assert outline(results) == [(1, "x"), (2, "same"), (0, "1"), (1, "y"), (0, "2")]

    def test_spelled_heading_uses_row_date(self, context):
        rows = [
            make_row("1", realdate=ts(2020, 3, 10), **{"cyear-month": "2020-03"}),
            make_row("2", realdate=ts(2021, 7, 4), **{"cyear-month": "2021-07"}),
        ]
        spec = GroupSpec("cyear-month", word_format="%B %Y")
        results = HierarchicalGrouper([spec], context=context).group(rows, ["id"])
        assert [r.label for r in results if r.is_heading] == ["March 2020", "July 2021"]

    def test_word_format_without_date_falls_back_to_value(self):
        rows = [make_row("1", cyear="2020")]
        results = HierarchicalGrouper([GroupSpec("cyear", word_format="%Y")]).group(rows, ["id"])
        assert results[0].label == "2020"


class TestAdvance:
    """Test the explicit grouping state."""

    def test_initial_state(self):
        grouper = HierarchicalGrouper([GroupSpec("a"), GroupSpec("b")])
        assert grouper.initial_state() == ("", "")

    def test_state_is_threaded(self):
        grouper = HierarchicalGrouper([GroupSpec("a")])
        state, headings = grouper.advance(grouper.initial_state(), make_row("1", a="x"))
        assert state == ("x",)
        assert len(headings) == 1
        state, headings = grouper.advance(state, make_row("2", a="x"))
        assert state == ("x",)
        assert headings == []


class TestNamespaceGroups:
    """Test per-segment namespace headings."""

    @pytest.fixture
    def ns_spec(self):
        return [GroupSpec("ns", kind=GroupKind.NAMESPACE)]

    def test_first_row_gets_every_segment(self, ns_spec):
        results = HierarchicalGrouper(ns_spec).group([make_row("p1", ns="x:y")], ["id"])
        assert outline(results) == [(1, "x"), (2, "y"), (0, "p1")]

    def test_only_changed_segment_is_emitted(self, ns_spec):
        rows = [make_row("p1", ns="x:y"), make_row("p2", ns="x:z")]
        results = HierarchicalGrouper(ns_spec).group(rows, ["id"])
        assert outline(results) == [(1, "x"), (2, "y"), (0, "p1"), (2, "z"), (0, "p2")]

    def test_deeper_segments_follow_divergence(self, ns_spec):
        rows = [make_row("p1", ns="a:b:c"), make_row("p2", ns="a:d:c")]
        results = HierarchicalGrouper(ns_spec).group(rows, ["id"])
        assert outline(results)[4:] == [(2, "d"), (3, "c"), (0, "p2")]

    def test_headings_link_existing_start_pages(self, ns_spec, corpus, context):
        rows = [make_row("wiki:page2", ns="wiki"), make_row("wiki:plugins:pagequery", ns="wiki:plugins")]
        results = HierarchicalGrouper(ns_spec, corpus, corpus, context).group(rows, ["id"])
        headings = [r for r in results if r.is_heading]
        assert [(h.label, h.target_id, h.display_title) for h in headings] == [
            ("wiki", "wiki:start", "Wiki Index"),
            ("plugins", "wiki:plugins:start", "Plugins"),
        ]

    def test_missing_start_page_has_no_target(self, ns_spec, corpus, context):
        results = HierarchicalGrouper(ns_spec, corpus, corpus, context).group([make_row("n:p", ns="nowhere")], ["id"])
        assert (results[0].target_id, results[0].display_title) == ("", "")

    def test_start_page_without_metadata_has_blank_title(self, ns_spec, corpus, context):
        rows = [make_row("wiki:page2", ns="wiki")]
        results = HierarchicalGrouper(ns_spec, corpus, NoMetadata(), context).group(rows, ["id"])
        assert (results[0].target_id, results[0].display_title) == ("wiki:start", "")

    def test_root_namespace_label(self, ns_spec):
        results = HierarchicalGrouper(ns_spec).group([make_row("start", ns="[start]")], ["id"])
        assert outline(results) == [(1, "[start]"), (0, "start")]
