"""CLI search runner for the CORE API with Redis result caching."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.coreapi import (
    CoreSearchClient,
    CoreSearchError,
    Deadline,
    FilterCriteria,
    Paper,
    Settings,
    compile_query,
)
from src.coreapi.dates import coerce_flexible_date


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--abstract", help="Match text in the abstract")
    parser.add_argument("--title", help="Match text in the title")
    parser.add_argument("--full-text", dest="full_text", help="Match text in the full text")
    parser.add_argument("--doi")
    parser.add_argument("--arxiv-id", dest="arxiv_id")
    parser.add_argument("--mag-id", dest="mag_id")
    parser.add_argument("--publisher")
    parser.add_argument("--document-type", dest="document_type")
    parser.add_argument("--year-published", dest="year_published")
    parser.add_argument("--citation-count", dest="citation_count", type=int, default=0)
    parser.add_argument("--id", type=int, default=0, help="CORE work id")
    parser.add_argument(
        "--author",
        "-a",
        dest="authors",
        action="append",
        default=[],
        help="Author name (repeatable)",
    )
    parser.add_argument(
        "--contributor",
        dest="contributors",
        action="append",
        default=[],
        help="Contributor name (repeatable)",
    )
    parser.add_argument(
        "--created-date",
        dest="created_date",
        type=coerce_flexible_date,
        help="Created date (YYYY-MM-DD or RFC3339)",
    )
    parser.add_argument(
        "--accepted-date",
        dest="accepted_date",
        type=coerce_flexible_date,
        help="Accepted date (YYYY-MM-DD or RFC3339)",
    )
    parser.add_argument("--limit", type=int, default=0, help="Page size (default: CORE default)")
    parser.add_argument(
        "--deadline",
        type=float,
        help="Abandon the search after this many seconds",
    )
    parser.add_argument(
        "--show-query",
        action="store_true",
        help="Print the compiled query and cache key, then exit without searching",
    )
    parser.add_argument("--json", action="store_true", help="Emit results as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def criteria_from_args(args: argparse.Namespace) -> FilterCriteria:
    return FilterCriteria(
        abstract=args.abstract,
        accepted_date=args.accepted_date,
        arxiv_id=args.arxiv_id,
        citation_count=args.citation_count,
        contributors=tuple(args.contributors),
        created_date=args.created_date,
        document_type=args.document_type,
        doi=args.doi,
        full_text=args.full_text,
        id=args.id,
        mag_id=args.mag_id,
        publisher=args.publisher,
        title=args.title,
        year_published=args.year_published,
        authors=tuple(args.authors),
        limit=args.limit,
    )


def _format_paper(paper: Paper) -> str:
    authors = ", ".join(a.name for a in paper.authors if a.name) or "unknown authors"
    published = paper.published_date.date().isoformat() if paper.published_date else "n.d."
    return f"[{paper.id}] {paper.title or '(untitled)'} ({published}) - {authors}"


def run_search(args: argparse.Namespace, *, client: CoreSearchClient | None = None) -> int:
    criteria = criteria_from_args(args)

    if args.show_query:
        compiled = compile_query(criteria)
        print(f"query: {compiled.query}")
        print(f"cache key: {compiled.cache_key}")
        return 0

    deadline = Deadline.after(args.deadline) if args.deadline else None
    try:
        if client is None:
            client = CoreSearchClient.from_settings(Settings.from_env())
        papers = client.search(criteria, deadline=deadline)
    except CoreSearchError as exc:
        print(f"Search failed: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps([p.model_dump(mode="json", by_alias=True) for p in papers], indent=2))
    else:
        for paper in papers:
            print(_format_paper(paper))
        print(f"{len(papers)} papers")
    return 0


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return run_search(args)


if __name__ == "__main__":
    raise SystemExit(main())
