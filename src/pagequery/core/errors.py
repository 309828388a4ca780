"""
Structured error types for pagequery.

Provides a small hierarchy of typed errors with metadata for error
categorization, logging, and root cause analysis through error chaining.

The query pipeline itself never raises across its boundary: stages return
``Ok``/``Err`` results (see :mod:`pagequery.core.result`) and the pipeline
turns expected failures into a :class:`~pagequery.query.pipeline.QueryStatus`.
These error types are what travels inside ``Err`` and what the outer surfaces
(corpus loading, CLI) raise.

Manifesto:
    - **Typed Error Hierarchy:** Different error types for different domains
    - **Rich Context:** Errors carry metadata for logging
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────┐
        │                     PagequeryError                         │
        │             (category, context, cause)                     │
        ├───────────────────────────────────────────────────────────┤
        │  ValidationError        ConfigError        SourceError     │
        │  (VALIDATION)           (CONFIG)           (SOURCE)        │
        │       │                                                    │
        │  InvalidPatternError                                       │
        └───────────────────────────────────────────────────────────┘

Examples:
    >>> error = InvalidPatternError("unbalanced parenthesis")
    >>> error.with_context(query="foo(")
    InvalidPatternError('unbalanced parenthesis', category=VALIDATION)
    >>> error.context.query
    'foo('

Tags:
    error-handling, exception-hierarchy, error-context, pagequery
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification.

    Attributes:
        SOURCE: Corpus file missing or unreadable
        PARSE: Corpus or option parsing errors
        VALIDATION: Invalid search pattern, bad option values
        CONFIG: Missing or invalid settings
        INTERNAL: Bugs, unexpected state
    """

    SOURCE = "SOURCE"
    PARSE = "PARSE"
    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Attributes:
        query: The bare query being executed
        record_id: Record identifier involved, if any
        column: Column key involved (filters, sorting)
        source_path: Corpus file path involved
        metadata: Additional key-value pairs
    """

    query: str | None = None
    record_id: str | None = None
    column: str | None = None
    source_path: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["query", "record_id", "column", "source_path"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class PagequeryError(Exception):
    """
    Base exception for all pagequery errors.

    Subclasses set ``default_category`` to classify themselves. Every
    instance carries a message, a category, an :class:`ErrorContext` and an
    optional chained cause.

    Examples:
        >>> error = PagequeryError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["error_type"]
        'PagequeryError'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> PagequeryError:
        """
        Add context to this error (fluent API).

        Usage:
            return Err(InvalidPatternError(str(exc)).with_context(query=query))
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class ValidationError(PagequeryError):
    """Invalid input: option values, patterns, date expressions."""

    default_category = ErrorCategory.VALIDATION


class InvalidPatternError(ValidationError):
    """
    The identifier-pattern query is not a valid regular expression.

    Surfaced distinctly from "no results" so the caller can show a
    dedicated message instead of an empty list.
    """


class ConfigError(PagequeryError):
    """Missing or invalid configuration."""

    default_category = ErrorCategory.CONFIG


class SourceError(PagequeryError):
    """A corpus file could not be found, read or parsed."""

    default_category = ErrorCategory.SOURCE


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "PagequeryError",
    "ValidationError",
    "InvalidPatternError",
    "ConfigError",
    "SourceError",
]
