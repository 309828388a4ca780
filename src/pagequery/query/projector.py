"""
Record projection: one ``Row`` per record plus the sort/group option table.

The projector is the only stage that touches the metadata store. Every
record's metadata is fetched exactly once, and backlinks for the whole batch
come from a single bulk lookup, because both are the slow calls of a run.

Manifesto:
    Columns are computed once and then only read. Sorting, filtering and
    grouping all see the same values, so a heading can never disagree with
    the order that produced it.

    - **Once per record:** ``get_metadata`` is called exactly once per id
    - **Once per batch:** ``backlinks`` is called at most once per run
    - **Once per key:** date formats and word formats are built per column
      key, never per row
    - **Degrade, don't fail:** missing metadata becomes ``""`` or ``0``

Architecture:
    ::

        ids ──► RecordProjector.project()
                  │
                  ├─ required:  id, name, title (falls back to name), abstract?
                  ├─ requested: a/ab/abc, ns, creator, contributor, links,
                  │             backlinks, mdate, cdate, <c|m><year|month|day>,
                  │             custom metadata keys (group:field)
                  └─ display:   "{title} ({cdate})" template or a column name
                  ▼
               [Row, ...]            (input order)

        QueryOptions.sort ──► build_sort_keys()    [SortKey, ...]
                          └─► build_group_specs()  [GroupSpec, ...]

Examples:
    >>> from pagequery.adapters.memory import InMemoryCorpus
    >>> corpus = InMemoryCorpus({"wiki:page2": {"title": "Second"}})
    >>> projector = RecordProjector(corpus, QueryOptions(sort={"ns": ""}))
    >>> [row] = projector.project(["wiki:page2"])
    >>> row.title, row.get("ns")
    ('Second', 'wiki')

Tags:
    projection, metadata, columns, sort-options, grouping-options, pagequery
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pagequery.core.enums import Collation, ColumnKind, Direction, GroupKind
from pagequery.core.models import GroupSpec, QueryContext, Row, SortKey
from pagequery.core.paths import get_ns, no_ns
from pagequery.core.protocols import MetadataStore
from pagequery.query.dates import date_key_format, format_timestamp, to_timestamp, word_format
from pagequery.query.options import QueryOptions

TEMPLATE_PLACEHOLDER = re.compile(r"\{(.+?)\}")

ASCENDING_BY_DEFAULT = frozenset(
    {"a", "ab", "abc", "name", "title", "id", "ns", "creator", "contributor"}
)
NEVER_GROUPED = frozenset({"mdate", "cdate", "name", "title", "id"})
NUMERIC_COLUMNS = frozenset({"mdate", "cdate"})

_PREFIX_LENGTHS = {"a": 1, "ab": 2, "abc": 3}


# ── Sort / group option table ──────────────────────────────────────────


def sort_direction(key: str, requested: str = "") -> Direction:
    """Direction of one sort key.

    ``a``/``asc`` and ``d``/``desc`` are explicit; anything else falls back
    to ascending for text-like columns and descending for the rest.

    >>> sort_direction("name")
    <Direction.ASC: 'asc'>
    >>> sort_direction("cyear")
    <Direction.DESC: 'desc'>
    >>> sort_direction("cyear", "a")
    <Direction.ASC: 'asc'>
    """
    requested = requested.strip().lower()
    if requested in ("a", "asc"):
        return Direction.ASC
    if requested in ("d", "desc"):
        return Direction.DESC
    return Direction.ASC if key in ASCENDING_BY_DEFAULT else Direction.DESC


def sort_collation(key: str, *, casesort: bool = False, natsort: bool = False) -> Collation:
    """Collation of one sort key."""
    if key in NUMERIC_COLUMNS:
        return Collation.NUMERIC
    if casesort:
        return Collation.NATURAL if natsort else Collation.STRING
    return Collation.NATURAL_CASE if natsort else Collation.STRING_CASE


def group_kind(key: str) -> GroupKind:
    """How a sort key takes part in grouping."""
    if key in NEVER_GROUPED:
        return GroupKind.NONE
    if key == "ns":
        return GroupKind.NAMESPACE
    return GroupKind.HEADING


# ── Metadata helpers ───────────────────────────────────────────────────


def _section(meta: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = meta.get(name)
    return value if isinstance(value, Mapping) else {}


def _as_text(value: Any) -> str:
    """Flatten a metadata value into a column string."""
    if value is None:
        return ""
    if isinstance(value, Mapping):
        return " ".join(_as_text(v) for v in value.values())
    if isinstance(value, (list, tuple, set, frozenset)):
        return " ".join(_as_text(v) for v in value)
    return str(value)


def metadata_value(meta: Mapping[str, Any], key: str) -> Any:
    """Top-level metadata value, or one level of ``group:field`` nesting.

    Returns ``None`` when the key is not present.

    >>> metadata_value({"date": {"created": 5}}, "date:created")
    5
    >>> metadata_value({"color": "red"}, "color")
    'red'
    >>> metadata_value({}, "missing") is None
    True
    """
    if key in meta:
        return meta[key]
    if ":" in key:
        group, field = key.split(":", 1)
        section = meta.get(group)
        if isinstance(section, Mapping) and field in section:
            return section[field]
    return None


def _true_references(meta: Mapping[str, Any]) -> str:
    references = _section(_section(meta, "relation"), "references")
    return " ".join(target for target, flag in references.items() if flag is True)


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and value.strip().lstrip("-").isdigit()


class RecordProjector:
    """
    Build ``Row`` objects for matched record ids.

    Args:
        metadata: The host's metadata store.
        options: Validated option set of this run.
        context: Per-run context (settings supply the start page name,
            separator, display date format and timezone).
    """

    def __init__(
        self,
        metadata: MetadataStore,
        options: QueryOptions,
        context: QueryContext | None = None,
    ) -> None:
        self.metadata = metadata
        self.options = options
        self.context = context or QueryContext()

        self.column_keys = options.column_keys
        self.kinds = {key: ColumnKind.of(key) for key in self.column_keys}

        # per-key formats, computed once for the whole batch
        date_keys = [key for key, kind in self.kinds.items() if kind is ColumnKind.DATE_PART]
        self.date_formats = {key: date_key_format(key) for key in date_keys}
        self.word_formats = {
            key: word_format(fmt) if options.spelldate else ""
            for key, fmt in self.date_formats.items()
        }
        self.realdate_source = "created" if any(key.startswith("c") for key in date_keys) else "modified"

    # ── Projection ─────────────────────────────────────────────────────

    def project(self, ids: Sequence[str]) -> list[Row]:
        """One row per id, in input order."""
        backlinks = self._bulk_backlinks(ids)
        return [self._project_one(record_id, backlinks.get(record_id, "")) for record_id in ids]

    def _bulk_backlinks(self, ids: Sequence[str]) -> dict[str, str]:
        if ColumnKind.BACKLINKS not in self.kinds.values() or not ids:
            return {}
        found: Sequence[Iterable[str]] = self.metadata.backlinks(list(ids))
        return {record_id: " ".join(refs) for record_id, refs in zip(ids, found)}

    def _project_one(self, record_id: str, backlinks: str) -> Row:
        settings = self.context.settings
        sep = settings.separator

        meta = dict(self.metadata.get_metadata(record_id) or {})
        dates = dict(_section(meta, "date"))
        created = to_timestamp(dates.get("created", 0))
        modified = to_timestamp(dates["modified"]) if "modified" in dates else created
        meta["date"] = {**dates, "created": created, "modified": modified}

        name = no_ns(record_id, sep)
        title = meta.get("title") or name
        abstract = ""
        if self.options.needs_abstract:
            abstract = _as_text(_section(meta, "description").get("abstract"))

        row = Row(id=record_id, name=name, title=str(title), abstract=abstract)
        prefix_source = row.title if self.options.prefix_from_title else name

        for key, kind in self.kinds.items():
            if kind in (ColumnKind.ID, ColumnKind.NAME, ColumnKind.TITLE, ColumnKind.ABSTRACT, ColumnKind.DISPLAY):
                continue
            if kind is ColumnKind.PREFIX:
                value: Any = prefix_source.casefold()[: _PREFIX_LENGTHS[key]]
            elif kind is ColumnKind.NAMESPACE:
                value = get_ns(record_id, sep) or f"[{settings.start_page}]"
            elif kind is ColumnKind.CREATOR:
                value = _as_text(meta.get("creator"))
            elif kind is ColumnKind.CONTRIBUTOR:
                value = _as_text(meta.get("contributor"))
            elif kind is ColumnKind.LINKS:
                value = _true_references(meta)
            elif kind is ColumnKind.BACKLINKS:
                value = backlinks
            elif kind is ColumnKind.MDATE:
                value = modified
            elif kind is ColumnKind.CDATE:
                value = created
            elif kind is ColumnKind.DATE_PART:
                row.set_realdate(created if self.realdate_source == "created" else modified)
                value = format_timestamp(self.date_formats[key], row.realdate, settings.tzinfo)
            else:
                value = _as_text(metadata_value(meta, key))
            row.columns[key] = value

        row.display = self._resolve_display(row, meta)
        return row

    # ── Display template ───────────────────────────────────────────────

    def _resolve_display(self, row: Row, meta: Mapping[str, Any]) -> str:
        template = self.options.display
        placeholders = TEMPLATE_PLACEHOLDER.findall(template)
        if not placeholders:
            return str(row.get(template)) if row.has(template) else row.name

        date_format = self.options.display_date_format(self.context.settings)
        display = template
        for key in placeholders:
            if row.has(key):
                value = row.get(key)
            else:
                value = metadata_value(meta, key)
            if value is None and key in NUMERIC_COLUMNS:
                value = meta["date"]["modified" if key == "mdate" else "created"]
            if value is None:
                continue
            if "date" in key and value != "" and _is_numeric(value):
                text = format_timestamp(date_format, value, self.context.settings.tzinfo)
            else:
                text = _as_text(value)
            display = display.replace("{" + key + "}", text)
        return display

    # ── Option table ───────────────────────────────────────────────────

    def build_sort_keys(self) -> list[SortKey]:
        """Sort keys in sort-option order."""
        return [
            SortKey(
                column=key,
                collation=sort_collation(key, casesort=self.options.casesort, natsort=self.options.natsort),
                direction=sort_direction(key, requested),
            )
            for key, requested in self.options.sort.items()
        ]

    def build_group_specs(self) -> list[GroupSpec]:
        """Group levels in sort-option order, skipping keys that never group."""
        specs = []
        for key in self.options.sort:
            kind = group_kind(key)
            if kind is GroupKind.NONE:
                continue
            specs.append(GroupSpec(column=key, kind=kind, word_format=self.word_formats.get(key, "")))
        return specs


__all__ = [
    "RecordProjector",
    "sort_direction",
    "sort_collation",
    "group_kind",
    "metadata_value",
]
