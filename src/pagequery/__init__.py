"""
pagequery: select, annotate, filter, sort and group records of a corpus.

A query runs as a one-shot pipeline over host-supplied collaborators::

    from pagequery import Collaborators, Pipeline, QueryOptions
    from pagequery.adapters.memory import InMemoryCorpus

    corpus = InMemoryCorpus.from_file("corpus.yaml")
    report = Pipeline(Collaborators.from_corpus(corpus)).run(
        QueryOptions(query="ns:wiki", sort={"ns": "", "name": ""}, group=True)
    )
"""

__version__ = "0.1.0"

from pagequery.core.models import QueryContext, ResultRow, Row
from pagequery.core.settings import PagequerySettings, get_settings
from pagequery.query.options import QueryOptions, SnippetOptions
from pagequery.query.pipeline import Collaborators, Pipeline, QueryReport, QueryStatus

__all__ = [
    "__version__",
    "Collaborators",
    "PagequerySettings",
    "Pipeline",
    "QueryContext",
    "QueryOptions",
    "QueryReport",
    "QueryStatus",
    "ResultRow",
    "Row",
    "SnippetOptions",
    "get_settings",
]
