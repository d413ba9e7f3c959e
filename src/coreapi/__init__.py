"""CORE search API client with a deterministic query compiler and result cache."""

from .client import CoreSearchClient, Deadline, criteria_from_params
from .dates import FlexibleDate, parse_flexible_date
from .errors import (
    CacheCorrupt,
    CacheUnavailable,
    ConfigurationError,
    CoreSearchError,
    DateFormatError,
    ResponseDecodeError,
    UpstreamRequestError,
    UpstreamStatusError,
)
from .models import Author, FilterCriteria, Paper, Reference, SearchResponse
from .query import CompiledQuery, compile_query, derive_key
from .settings import Settings

__all__ = [
    "Author",
    "CacheCorrupt",
    "CacheUnavailable",
    "CompiledQuery",
    "ConfigurationError",
    "CoreSearchClient",
    "CoreSearchError",
    "DateFormatError",
    "Deadline",
    "FilterCriteria",
    "FlexibleDate",
    "Paper",
    "Reference",
    "ResponseDecodeError",
    "SearchResponse",
    "Settings",
    "UpstreamRequestError",
    "UpstreamStatusError",
    "compile_query",
    "criteria_from_params",
    "derive_key",
    "parse_flexible_date",
]
