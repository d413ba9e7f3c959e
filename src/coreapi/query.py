"""Compile FilterCriteria into a canonical CORE query string and cache key."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Tuple

from src.utils.identifiers import build_cache_key

from .dates import format_calendar_date
from .models import FilterCriteria

CLAUSE_SEPARATOR = " AND "
# CORE returns 10 works when no limit is sent.
DEFAULT_LIMIT = 10


def _is_set(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (str, tuple, list)):
        return len(value) > 0
    if isinstance(value, int):
        return value != 0
    return True


def _text(value: str) -> str:
    return value


def _number(value: int) -> str:
    return str(int(value))


def _joined(values: Sequence[str]) -> str:
    return ",".join(values)


@dataclass(frozen=True)
class ClauseSpec:
    field: str
    attribute: str
    formatter: Callable[[Any], str]

    def render(self, criteria: FilterCriteria) -> Optional[str]:
        value = getattr(criteria, self.attribute)
        if not _is_set(value):
            return None
        return f"{self.field}:{self.formatter(value)}"


# Each upstream field appears exactly once; title is emitted once even though
# older query builders repeated it after yearPublished.
CLAUSE_TABLE: Tuple[ClauseSpec, ...] = (
    ClauseSpec("abstract", "abstract", _text),
    ClauseSpec("acceptedDate", "accepted_date", format_calendar_date),
    ClauseSpec("arxivId", "arxiv_id", _text),
    ClauseSpec("citationCount", "citation_count", _number),
    ClauseSpec("contributors", "contributors", _joined),
    ClauseSpec("createdDate", "created_date", format_calendar_date),
    ClauseSpec("documentType", "document_type", _text),
    ClauseSpec("doi", "doi", _text),
    ClauseSpec("fullText", "full_text", _text),
    ClauseSpec("id", "id", _number),
    ClauseSpec("magId", "mag_id", _text),
    ClauseSpec("publisher", "publisher", _text),
    ClauseSpec("title", "title", _text),
    ClauseSpec("yearPublished", "year_published", _text),
    ClauseSpec("authors", "authors", _joined),
)


@dataclass(frozen=True)
class CompiledQuery:
    clauses: Tuple[str, ...]
    limit: int = 0

    @property
    def query(self) -> str:
        return CLAUSE_SEPARATOR.join(self.clauses)

    @property
    def effective_limit(self) -> int:
        return self.limit or DEFAULT_LIMIT

    @property
    def cache_key(self) -> str:
        return derive_key(self.clauses, self.limit)

    def to_params(self) -> dict[str, Any]:
        """Query-string parameters for the CORE search endpoint."""
        params: dict[str, Any] = {}
        if self.clauses:
            params["query"] = self.query
        if self.limit:
            params["limit"] = self.limit
        return params


def compile_query(criteria: FilterCriteria) -> CompiledQuery:
    clauses = []
    for spec in CLAUSE_TABLE:
        clause = spec.render(criteria)
        if clause is not None:
            clauses.append(clause)
    return CompiledQuery(clauses=tuple(clauses), limit=criteria.limit)


def derive_key(clauses: Sequence[str], limit: int) -> str:
    """Cache key for ``clauses``; an unset limit shares a key with an explicit default."""
    return build_cache_key(clauses, limit=limit or DEFAULT_LIMIT)
