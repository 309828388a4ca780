"""Pagequery Core -- primitives shared by every pipeline stage.

Architecture::

    Layer 1 -- Type System & Errors
        errors.py          Structured error hierarchy (PagequeryError, InvalidPatternError)
        result.py          Result[T] envelope (Ok / Err / try_result_with)
        enums.py           Direction, Collation, GroupKind, ColumnKind, ...
        protocols.py       Collaborator contracts (index, metadata, ACL, registry)

    Layer 2 -- Model & Configuration
        models.py          Row, SortKey, GroupSpec, ResultRow, QueryContext
        paths.py           Identifier helpers + PathResolver
        settings.py        PagequerySettings (pydantic-settings)
        logging.py         structlog configuration + log_step
"""

from pagequery.core.enums import (
    Collation,
    ColumnKind,
    Direction,
    GroupKind,
    Layout,
    ProperCase,
    SnippetType,
)
from pagequery.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidPatternError,
    PagequeryError,
    SourceError,
    ValidationError,
)
from pagequery.core.logging import LogContext, configure_logging, get_logger, log_step
from pagequery.core.models import REALDATE, GroupSpec, QueryContext, ResultRow, Row, SortKey
from pagequery.core.paths import PathResolver, get_ns, no_ns
from pagequery.core.protocols import (
    AccessControl,
    MetadataStore,
    NamespaceResolver,
    PageIndex,
    PageRegistry,
)
from pagequery.core.result import Err, Ok, Result, try_result_with
from pagequery.core.settings import PagequerySettings, get_settings

__all__ = [
    # enums
    "Collation",
    "ColumnKind",
    "Direction",
    "GroupKind",
    "Layout",
    "ProperCase",
    "SnippetType",
    # errors
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidPatternError",
    "PagequeryError",
    "SourceError",
    "ValidationError",
    # logging
    "LogContext",
    "configure_logging",
    "get_logger",
    "log_step",
    # models
    "REALDATE",
    "GroupSpec",
    "QueryContext",
    "ResultRow",
    "Row",
    "SortKey",
    # paths
    "PathResolver",
    "get_ns",
    "no_ns",
    # protocols
    "AccessControl",
    "MetadataStore",
    "NamespaceResolver",
    "PageIndex",
    "PageRegistry",
    # result
    "Err",
    "Ok",
    "Result",
    "try_result_with",
    # settings
    "PagequerySettings",
    "get_settings",
]
