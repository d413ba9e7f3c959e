from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError

CORE_SEARCH_URL = "https://api.core.ac.uk/v3/search/works/"


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    core_api_key: str
    core_api_url: str = CORE_SEARCH_URL
    core_api_timeout_s: int = 10
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_db: int = 0
    cache_ttl_s: int = 24 * 60 * 60

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, *, dotenv: bool = True) -> "Settings":
        """
        Read settings from the environment (and ``.env`` when ``dotenv`` is set).

        Raises ConfigurationError for a missing API key or non-integer numbers.
        """
        if env is None:
            if dotenv:
                load_dotenv(find_dotenv(usecwd=True))
            env = os.environ

        api_key = (env.get("CORE_API_KEY") or "").strip()
        if not api_key:
            raise ConfigurationError("CORE_API_KEY is not set")

        return cls(
            core_api_key=api_key,
            core_api_url=env.get("CORE_API_URL") or CORE_SEARCH_URL,
            core_api_timeout_s=_int_setting(env, "CORE_API_TIMEOUT", 10),
            redis_host=env.get("REDIS_HOST") or "localhost",
            redis_port=_int_setting(env, "REDIS_PORT", 6379),
            redis_password=env.get("REDIS_PASSWORD") or None,
            redis_db=_int_setting(env, "REDIS_DB", 0),
            cache_ttl_s=_int_setting(env, "CACHE_TTL_SECONDS", 24 * 60 * 60),
        )
