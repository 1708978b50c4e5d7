"""Import universities and programs into the catalog tables.

Sources (pick one):
  --json PATH     array of flat program rows, or {"universities": [...], "programs": [...]}
  --csv PATH      flat program rows
  --excel PATH    workbook with "Universities" and "Programs" sheets
  --url URL       crawl the catalog website (defaults to SCRAPER_SOURCE_URL)

Usage:
  python scripts/import_catalog.py --json data/programs.json
  python scripts/import_catalog.py --excel data/catalog.xlsx --show-counts
  python scripts/import_catalog.py --url https://example.test/ --dump data/scraped.json
  python scripts/import_catalog.py --json data/programs.json --reset --i-understand

Notes:
- Default mode is additive and safe to re-run: programs are keyed on
  (university, name) and existing rows are skipped.
- --reset deletes every university and program first. It refuses to run
  without --i-understand.
- Exit codes: 0 ok, 1 fetch failure (crawl aborted), 2 bad input.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path


def _bootstrap_import_path() -> None:
    # Allow running as: python scripts/import_catalog.py
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


_bootstrap_import_path()

from uae_catalog.config import settings  # noqa: E402
from uae_catalog.database import Base, SessionLocal, engine  # noqa: E402
import uae_catalog.models  # noqa: F401,E402  # ensure all models are registered
from uae_catalog.services.pipeline import import_catalog, reload_catalog  # noqa: E402
from uae_catalog.services.scraper import CatalogScraper, FetchError  # noqa: E402
from uae_catalog.services.sources import SourceBatch, SourceFormatError, dump_batch, load_source  # noqa: E402
from uae_catalog.services.writer import university_program_counts  # noqa: E402


logger = logging.getLogger("import_catalog")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import UAE universities and programs into the catalog DB.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--json", type=Path, help="JSON file of program rows or a scraper dump")
    source.add_argument("--csv", type=Path, help="CSV file of program rows")
    source.add_argument("--excel", type=Path, help="Workbook with Universities/Programs sheets")
    source.add_argument(
        "--url",
        nargs="?",
        const="",
        help="Crawl the catalog website (no value: use SCRAPER_SOURCE_URL)",
    )

    parser.add_argument("--reset", action="store_true", help="Delete all universities and programs first")
    parser.add_argument("--i-understand", action="store_true", help="Required together with --reset")
    parser.add_argument(
        "--match-existing-only",
        action="store_true",
        help="Do not create universities from program rows; only match stored ones",
    )
    parser.add_argument("--dump", type=Path, help="Also write the fetched batch to this JSON file")
    parser.add_argument("--delay", type=float, default=settings.request_delay_seconds, help="Seconds between page requests")
    parser.add_argument("--timeout", type=float, default=settings.request_timeout_seconds, help="Per-page timeout")
    parser.add_argument("--show-counts", action="store_true", help="Print program counts per university at the end")
    parser.add_argument("--log-level", default=settings.log_level)
    return parser.parse_args(argv)


def _fetch(args: argparse.Namespace) -> SourceBatch:
    if args.url is not None:
        url = args.url or settings.scraper_source_url
        if not url:
            raise SourceFormatError("No URL given and SCRAPER_SOURCE_URL is not set")
        with CatalogScraper(
            url,
            delay_seconds=args.delay,
            timeout_seconds=args.timeout,
            user_agent=settings.scraper_user_agent,
        ) as scraper:
            return scraper.fetch()
    return load_source(args.json or args.csv or args.excel)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.log_level)

    if args.reset and not args.i_understand:
        print("Refusing to --reset without --i-understand (deletes every university and program).")
        return 2

    try:
        batch = _fetch(args)
    except FetchError as exc:
        logger.error("fetch.failed error=%s", exc)
        return 1
    except (FileNotFoundError, SourceFormatError) as exc:
        logger.error("source.invalid error=%s", exc)
        return 2

    if args.dump:
        dump_batch(batch, args.dump)

    # Flat program files name their universities inline; scraped batches and
    # workbooks list them explicitly.
    derive = args.url is None and not args.match_existing_only and not batch.universities

    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        if args.reset:
            report = reload_catalog(db, batch, derive_universities=derive)
        else:
            report = import_catalog(db, batch, derive_universities=derive)

        print(report.render())

        if args.show_counts:
            print("\nPrograms per university:")
            for row in university_program_counts(db):
                print(f"{row.name}: {row.program_count}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
