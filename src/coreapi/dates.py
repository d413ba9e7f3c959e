"""Lenient timestamp decoding for CORE API payloads.

CORE mixes several timestamp shapes across (and sometimes within) records,
and uses ``""`` or ``null`` for missing dates. Everything decodes to an
aware UTC ``datetime`` or to ``None``, the "no date" sentinel.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Annotated, Optional, Union

from pydantic import BeforeValidator, PlainSerializer

from .errors import DateFormatError

NO_DATE = None

# Trial order matters: offset-aware first, bare calendar date last.
DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
)

_NULL_LITERALS = ("", "null")
_EXCESS_FRACTION = re.compile(r"(\.\d{6})\d+")


def _candidate_formats(fmt: str) -> tuple[str, ...]:
    # Timestamps may carry fractional seconds even when the shape does not name them.
    if "%S" not in fmt:
        return (fmt,)
    return (fmt, fmt.replace("%S", "%S.%f"))


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_flexible_date(raw: Union[str, bytes, None]) -> Optional[datetime]:
    """Decode ``raw`` into a UTC datetime, or ``None`` when no date is present.

    Raises DateFormatError when the value is non-empty and matches none of
    the accepted shapes.
    """

    if raw is None:
        return NO_DATE
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    text = raw
    if len(text) >= 2 and text[0] == text[-1] == '"':
        text = text[1:-1]
    if text in _NULL_LITERALS:
        return NO_DATE

    # strptime's %f stops at microseconds; RFC3339 allows up to nanoseconds.
    text = _EXCESS_FRACTION.sub(r"\1", text)
    for shape in DATE_FORMATS:
        for fmt in _candidate_formats(shape):
            try:
                parsed = datetime.strptime(text, fmt)
            except ValueError:
                continue
            return _to_utc(parsed)

    raise DateFormatError(raw)


def coerce_flexible_date(value: object) -> Optional[datetime]:
    if isinstance(value, datetime):
        return _to_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if value is None or isinstance(value, (str, bytes)):
        return parse_flexible_date(value)
    raise DateFormatError(str(value))


def format_calendar_date(value: datetime) -> str:
    return value.strftime("%Y-%m-%d")


FlexibleDate = Annotated[
    Optional[datetime],
    BeforeValidator(coerce_flexible_date),
    PlainSerializer(
        lambda value: value.isoformat() if value is not None else None,
        return_type=Optional[str],
    ),
]
