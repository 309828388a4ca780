"""Pagequery query pipeline.

Architecture::

    options.py     QueryOptions (validated option set)
    namespace.py   NamespaceQueryParser   raw query → bare query + ns filters
    lookup.py      lookup_records / validate_records
    dates.py       date-part formats, word formats, DateRange
    projector.py   RecordProjector        ids → rows, sort/group option table
    filters.py     MetadataFilter         regex / date-range predicates
    sorting.py     sort_rows              stable multi-key sort
    grouping.py    HierarchicalGrouper    rows → headings + leaves
    pipeline.py    Pipeline               resolve → ... → group → QueryReport
"""

from pagequery.query.filters import MetadataFilter
from pagequery.query.grouping import HierarchicalGrouper
from pagequery.query.lookup import lookup_records, validate_records
from pagequery.query.namespace import NamespaceQuery, NamespaceQueryParser
from pagequery.query.options import QueryOptions, SnippetOptions
from pagequery.query.pipeline import Collaborators, Pipeline, QueryReport, QueryStatus
from pagequery.query.projector import RecordProjector
from pagequery.query.sorting import MultiKeyComparator, sort_rows

__all__ = [
    "Collaborators",
    "HierarchicalGrouper",
    "MetadataFilter",
    "MultiKeyComparator",
    "NamespaceQuery",
    "NamespaceQueryParser",
    "Pipeline",
    "QueryOptions",
    "QueryReport",
    "QueryStatus",
    "RecordProjector",
    "SnippetOptions",
    "lookup_records",
    "sort_rows",
    "validate_records",
]
