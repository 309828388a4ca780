"""
Shared pytest fixtures and configuration for pagequery tests.

This module provides:
- An in-memory wiki corpus with namespaces, dates, links and hidden pages
- A ``QueryContext`` with deterministic settings (UTC, ``start`` pages)
- A ``Pipeline`` wired to that corpus
- A YAML corpus file for CLI tests

Usage:
    Fixtures are auto-discovered by pytest. Simply use them as function
    arguments (pytest injects them automatically).

    def test_something(pipeline):
        report = pipeline.run(QueryOptions(query="ns:wiki"))
"""

import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
import yaml

# Ensure pagequery package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pagequery.adapters.memory import InMemoryCorpus
from pagequery.core.models import QueryContext
from pagequery.core.settings import PagequerySettings
from pagequery.query.pipeline import Collaborators, Pipeline


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        # CLI tests go through the whole stack
        if test_path.parts and test_path.parts[0] == "cli":
            item.add_marker(pytest.mark.integration)

        # Mark all tests without explicit markers as unit tests
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Helpers
# =============================================================================


def ts(year: int, month: int = 1, day: int = 1, hour: int = 12) -> int:
    """UTC timestamp for a calendar day (noon by default)."""
    return int(datetime(year, month, day, hour, tzinfo=UTC).timestamp())


WIKI_PAGES: dict[str, dict[str, Any]] = {
    "start": {
        "title": "Home",
        "date": {"created": ts(2019, 1, 1)},
        "text": "welcome home",
    },
    "wiki:start": {
        "title": "Wiki Index",
        "creator": "Alice",
        "date": {"created": ts(2020, 1, 5), "modified": ts(2020, 2, 1)},
        "relation": {"references": {"wiki:syntax": True, "wiki:missing": False}},
        "text": "index of the wiki",
    },
    "wiki:syntax": {
        "title": "Formatting Syntax",
        "creator": "Bob",
        "contributor": {"bob": "Bob", "carol": "Carol"},
        "date": {"created": ts(2020, 3, 10), "modified": ts(2021, 6, 1)},
        "description": {"abstract": "How to format pages.\n\nHeadings, lists and links."},
        "relation": {"references": {"wiki:start": True}},
        "text": "bold italic underline",
    },
    "wiki:page2": {
        "title": "page2",
        "creator": "Alice",
        "date": {"created": ts(2020, 3, 20), "modified": ts(2020, 3, 25)},
        "text": "second page",
    },
    "wiki:page10": {
        "title": "page10",
        "creator": "carol",
        "date": {"created": ts(2021, 7, 4)},
        "text": "tenth page",
    },
    "wiki:plugins:start": {
        "title": "Plugins",
        "date": {"created": ts(2021, 1, 1)},
    },
    "wiki:plugins:pagequery": {
        "title": "Pagequery Plugin",
        "creator": "Dave",
        "project": {"status": "stable"},
        "tags": ["query", "list"],
        "date": {"created": ts(2021, 2, 2), "modified": ts(2022, 2, 2)},
        "description": {"abstract": "Lists pages by query."},
        "relation": {"references": {"wiki:syntax": True}},
        "text": "a query plugin",
    },
    "wiki:secret": {"title": "Secret", "hidden": True},
    "wiki:locked": {"title": "Locked", "readable": False},
    "wiki:ghost": {"title": "Ghost", "exists": False},
    "other:page1": {
        "title": "Other One",
        "date": {"created": ts(2020, 5, 5)},
    },
}


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings() -> PagequerySettings:
    """Deterministic settings independent of the environment."""
    return PagequerySettings(start_page="start", separator=":", date_format="%Y-%m-%d", timezone="UTC")


@pytest.fixture
def context(settings: PagequerySettings) -> QueryContext:
    """Query context rooted at the wiki start page."""
    return QueryContext(page_id="wiki:start", settings=settings)


@pytest.fixture
def corpus() -> InMemoryCorpus:
    """Fresh in-memory wiki corpus."""
    return InMemoryCorpus(WIKI_PAGES)


@pytest.fixture
def pipeline(corpus: InMemoryCorpus, context: QueryContext) -> Pipeline:
    """Pipeline over the wiki corpus."""
    return Pipeline(Collaborators.from_corpus(corpus), context=context)


@pytest.fixture
def corpus_file(tmp_path: Path) -> Path:
    """The wiki corpus written as a YAML file."""
    path = tmp_path / "corpus.yaml"
    path.write_text(yaml.safe_dump({"pages": WIKI_PAGES}, sort_keys=False), encoding="utf-8")
    return path
