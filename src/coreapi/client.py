from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from src.utils.singleflight import SingleFlight

from .dates import parse_flexible_date
from .errors import (
    CacheUnavailable,
    DateFormatError,
    ResponseDecodeError,
    UpstreamRequestError,
    UpstreamStatusError,
)
from .models import FilterCriteria, Paper, SearchResponse
from .query import CompiledQuery, compile_query
from .settings import CORE_SEARCH_URL, Settings

if TYPE_CHECKING:
    from src.storage.redis_cache import ResultCache

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Academic Papers Search"


@dataclass(frozen=True)
class Deadline:
    """A request-scoped point in (monotonic) time after which work is abandoned."""

    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(time.monotonic() + seconds)

    def remaining(self) -> float:
        return self.expires_at - time.monotonic()

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0


class CoreSearchClient:
    """
    CORE v3 search client with a Redis result cache in front of it.

    Goals:
    - one canonical query (and cache key) per set of filters
    - cache hit -> no upstream call; corrupt or unreachable cache -> upstream
    - no retries; upstream failures surface to the caller with context
    - at most one upstream fetch per cache key in flight
    """

    def __init__(
        self,
        api_key: str,
        *,
        cache: Optional[ResultCache] = None,
        session: Optional[requests.Session] = None,
        base_url: str = CORE_SEARCH_URL,
        timeout_s: float = 10,
        user_agent: str = DEFAULT_USER_AGENT,
        single_flight: bool = True,
    ) -> None:
        self.api_key = api_key
        self.cache = cache
        self.base_url = base_url
        self.timeout_s = timeout_s
        self._flights: Optional[SingleFlight[List[Paper]]] = SingleFlight() if single_flight else None

        if session is None:
            session = requests.Session()
            # Failures are terminal for the call; never retry behind the caller's back.
            adapter = HTTPAdapter(max_retries=Retry(total=0, raise_on_status=False))
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self.session = session
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
                "User-Agent": user_agent,
            }
        )

    @classmethod
    def from_settings(cls, settings: Settings, *, verify_cache: bool = True) -> "CoreSearchClient":
        from src.storage.redis_cache import ResultCache, connect_redis

        store = connect_redis(
            host=settings.redis_host,
            port=settings.redis_port,
            password=settings.redis_password,
            db=settings.redis_db,
            verify=verify_cache,
        )
        cache = ResultCache(store, ttl=timedelta(seconds=settings.cache_ttl_s))
        return cls(
            settings.core_api_key,
            cache=cache,
            base_url=settings.core_api_url,
            timeout_s=settings.core_api_timeout_s,
        )

    # --------------------------
    # Search
    # --------------------------

    def search(self, criteria: FilterCriteria, *, deadline: Optional[Deadline] = None) -> List[Paper]:
        """Return papers for ``criteria``, from cache when possible."""
        self._check_deadline(deadline)
        compiled = compile_query(criteria)
        key = compiled.cache_key

        if self.cache is not None:
            lookup = self.cache.get(key)
            if lookup.hit:
                return lookup.papers

        if self._flights is None:
            return self._fetch_and_store(compiled, key, deadline)

        wait_s = deadline.remaining() if deadline is not None else None
        try:
            papers, shared = self._flights.do(
                key,
                lambda: self._fetch_and_store(compiled, key, deadline),
                timeout=wait_s,
            )
        except TimeoutError as exc:
            raise UpstreamRequestError(f"Search deadline exceeded waiting for {key!r}") from exc
        if shared:
            logger.debug("Shared in-flight CORE fetch for %s", key)
        return list(papers)

    def fetch(self, compiled: CompiledQuery, *, deadline: Optional[Deadline] = None) -> SearchResponse:
        """Issue one upstream search request and decode its envelope. Bypasses the cache."""
        timeout = self._request_timeout(deadline)
        params = compiled.to_params()
        logger.debug("CORE search %s params=%s", self.base_url, params)
        try:
            r = self.session.get(self.base_url, params=params, timeout=timeout)
        except requests.RequestException as e:
            raise UpstreamRequestError(f"CORE search request failed: {e}") from e

        if r.status_code != 200:
            raise UpstreamStatusError(r.status_code, r.text or "")
        try:
            payload = r.json()
        except ValueError as e:
            raise ResponseDecodeError(f"CORE returned non-JSON response: {e}") from e
        return self.decode_response(payload)

    @staticmethod
    def decode_response(payload: Any) -> SearchResponse:
        if not isinstance(payload, Mapping):
            raise ResponseDecodeError(
                f"CORE response must be a JSON object, got {type(payload).__name__}",
                value=payload,
            )
        try:
            return SearchResponse.model_validate(payload)
        except ValidationError as exc:
            err = exc.errors()[0]
            field = ".".join(str(part) for part in err["loc"])
            cause = (err.get("ctx") or {}).get("error")
            if isinstance(cause, DateFormatError):
                cause.field = field
                raise cause from exc
            raise ResponseDecodeError(
                f"Malformed CORE response at {field}: {err['msg']}",
                field=field,
                value=err.get("input"),
            ) from exc

    def _fetch_and_store(
        self,
        compiled: CompiledQuery,
        key: str,
        deadline: Optional[Deadline],
    ) -> List[Paper]:
        response = self.fetch(compiled, deadline=deadline)
        papers = response.results
        logger.info("CORE returned %d of %d hits for %s", len(papers), response.total_hits, key)

        if self.cache is None:
            return papers
        if deadline is not None and deadline.expired:
            logger.debug("Deadline passed; not caching %s", key)
            return papers
        try:
            self.cache.set(key, papers)
        except CacheUnavailable as exc:
            logger.warning("Could not cache CORE results: %s", exc)
        return papers

    # --------------------------
    # Deadlines
    # --------------------------

    @staticmethod
    def _check_deadline(deadline: Optional[Deadline]) -> None:
        if deadline is not None and deadline.expired:
            raise UpstreamRequestError("Search deadline exceeded")

    def _request_timeout(self, deadline: Optional[Deadline]) -> float:
        if deadline is None:
            return self.timeout_s
        remaining = deadline.remaining()
        if remaining <= 0:
            raise UpstreamRequestError("Search deadline exceeded before CORE request")
        return min(self.timeout_s, remaining)


def _split_and_trim(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",")]


def criteria_from_params(params: Mapping[str, str]) -> FilterCriteria:
    """
    Build FilterCriteria from string query parameters (e.g. an HTTP request).

    Authors/contributors are comma-separated; a non-numeric or negative limit is ignored;
    dates go through the flexible date codec and fail with DateFormatError.
    """
    values: Dict[str, Any] = {}
    for name, attribute in (
        ("abstract", "abstract"),
        ("arxivId", "arxiv_id"),
        ("documentType", "document_type"),
        ("doi", "doi"),
        ("fullText", "full_text"),
        ("magId", "mag_id"),
        ("publisher", "publisher"),
        ("title", "title"),
        ("yearPublished", "year_published"),
    ):
        if params.get(name):
            values[attribute] = params[name]

    limit = params.get("limit")
    if limit:
        try:
            parsed = int(limit)
        except ValueError:
            parsed = -1
        if parsed >= 0:
            values["limit"] = parsed
        else:
            logger.debug("Ignoring invalid limit %r", limit)

    for name in ("authors", "contributors"):
        if params.get(name):
            values[name] = tuple(_split_and_trim(params[name]))

    for name, attribute in (("createdDate", "created_date"), ("acceptedDate", "accepted_date")):
        if params.get(name):
            values[attribute] = parse_flexible_date(params[name])

    return FilterCriteria(**values)
