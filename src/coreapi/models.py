from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .dates import FlexibleDate


class Author(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None


class Reference(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    title: Optional[str] = None
    authors: List[str] = Field(default_factory=list)
    date: Optional[str] = None
    raw: Optional[str] = None
    cites: List[str] = Field(default_factory=list)

    @field_validator("authors", "cites", mode="before")
    @classmethod
    def _null_list(cls, value):
        return [] if value is None else value


class Paper(BaseModel):
    """
    A single CORE work, as returned by the search endpoint.

    Dates go through the flexible date codec, so ``""``/``null`` become ``None``.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[int] = None
    title: Optional[str] = None
    abstract: Optional[str] = None
    publisher: Optional[str] = None

    authors: List[Author] = Field(default_factory=list)
    contributors: List[str] = Field(default_factory=list)
    references: List[Reference] = Field(default_factory=list)

    accepted_date: FlexibleDate = Field(default=None, alias="acceptedDate")
    created_date: FlexibleDate = Field(default=None, alias="createdDate")
    deposited_date: FlexibleDate = Field(default=None, alias="depositedDate")
    last_update: FlexibleDate = Field(default=None, alias="lastUpdate")
    published_date: FlexibleDate = Field(default=None, alias="publishedDate")
    updated_date: FlexibleDate = Field(default=None, alias="updatedDate")
    year_published: Optional[int] = Field(default=None, alias="yearPublished")

    deleted: Optional[str] = None
    disabled: bool = False

    download_url: Optional[str] = Field(default=None, alias="downloadUrl")
    full_text: Optional[str] = Field(default=None, alias="fullText")
    full_text_status: Optional[str] = Field(default=None, alias="fullTextStatus")
    license: Optional[str] = None
    source_full_text_urls: List[str] = Field(default_factory=list, alias="sourceFullTextUrls")

    @field_validator("authors", "contributors", "references", "source_full_text_urls", mode="before")
    @classmethod
    def _null_list(cls, value):
        return [] if value is None else value

    @field_validator("disabled", mode="before")
    @classmethod
    def _null_flag(cls, value):
        return False if value is None else value


class SearchResponse(BaseModel):
    """Envelope of ``GET /v3/search/works``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    total_hits: int = Field(default=0, alias="totalHits")
    limit: int = 0
    offset: int = 0
    results: List[Paper] = Field(default_factory=list)

    @field_validator("results", mode="before")
    @classmethod
    def _null_results(cls, value):
        return [] if value is None else value

    @field_validator("total_hits", "limit", "offset", mode="before")
    @classmethod
    def _null_count(cls, value):
        return 0 if value is None else value


class FilterCriteria(BaseModel):
    """
    Optional search filters for one CORE query.

    Every field is optional; ``None``, ``""``, ``0``, ``[]`` and the no-date
    sentinel all mean "not specified". Frozen so a compiled query cannot drift
    from the criteria that produced it.
    """

    model_config = ConfigDict(frozen=True)

    abstract: Optional[str] = None
    accepted_date: FlexibleDate = None
    arxiv_id: Optional[str] = None
    citation_count: int = 0
    contributors: tuple[str, ...] = ()
    created_date: FlexibleDate = None
    document_type: Optional[str] = None
    doi: Optional[str] = None
    full_text: Optional[str] = None
    id: int = 0
    mag_id: Optional[str] = None
    publisher: Optional[str] = None
    title: Optional[str] = None
    year_published: Optional[str] = None
    authors: tuple[str, ...] = ()
    limit: int = Field(default=0, ge=0)

    @field_validator("contributors", "authors", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return () if value is None else value

    @field_validator("limit", "citation_count", "id", mode="before")
    @classmethod
    def _none_to_zero(cls, value):
        return 0 if value is None else value

    @field_validator("year_published", mode="before")
    @classmethod
    def _year_to_str(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value
