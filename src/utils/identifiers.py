from __future__ import annotations

import json
from typing import Sequence

CACHE_NAMESPACE = "coreapi"


def build_cache_key(
    clauses: Sequence[str],
    *,
    limit: int,
    namespace: str = CACHE_NAMESPACE,
) -> str:
    """
    Create a stable cache key for a compiled query and its page size.

    Clauses are encoded as a JSON array so that no value can fake a clause
    boundary (``title:a+b`` vs ``title:a`` + ``b``). The limit suffix is always
    present; callers pass the effective limit, not the raw one.
    """

    body = json.dumps(list(clauses), ensure_ascii=False, separators=(",", ":"))
    return f"{namespace}:{body}&limit={limit}"
