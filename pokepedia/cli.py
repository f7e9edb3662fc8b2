"""
pokepedia CLI.

Single entry point for the ingestion run.

Usage
-----
python -m pokepedia                                   # full run with defaults
python -m pokepedia --store-path data/dex.sqlite      # different database
python -m pokepedia --retry-delay 2 --max-attempts 3  # faster give-up
python -m pokepedia --language fr                     # French names and texts

Every flag can also be set through a ``POKEPEDIA_<SETTING>`` environment
variable (e.g. ``POKEPEDIA_MAX_ATTEMPTS=3``); flags win over the environment.

Exit status is 0 once the catalog has been walked, even when some entries
failed (they are listed in the final summary), and 1 when the run could not
start (document store or catalog listing unavailable).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pokepedia.configs.settings import IngestConfig
from pokepedia.errors import StartupError
from pokepedia.pipeline.driver import CatalogDriver, RunSummary
from pokepedia.scraper.base import RetryingFetcher
from pokepedia.scraper.pokeapi import PokeAPIClient
from pokepedia.storage.document_store import SQLiteDocumentStore
from pokepedia.utils.logger import setup_logging

LOGGER = logging.getLogger("pokepedia")


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------


def run(config: IngestConfig) -> RunSummary:
    """
    Open the store, walk the catalog, close everything.

    Raises
    ------
    StartupError
        Store connection or catalog listing failure.
    """
    fetcher = RetryingFetcher.from_config(config)
    client = PokeAPIClient(fetcher, base_url=config.api_base_url)
    try:
        with SQLiteDocumentStore(config.store_path, collection=config.collection) as store:
            driver = CatalogDriver.build(client, store, config)
            return driver.run()
    finally:
        fetcher.close()


def report(summary: RunSummary) -> None:
    LOGGER.info(f"fetched {summary.attempted}")
    for failed in summary.failed_entries:
        LOGGER.warning(f"  ✗ {failed.entry.name} ({type(failed.cause).__name__}): {failed.error}")
    LOGGER.info(f"Run summary: {json.dumps(summary.to_dict(), ensure_ascii=False)}")


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    root = argparse.ArgumentParser(
        prog="pokepedia",
        description="Ingest the PokeAPI species catalog into a document store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    root.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    root.add_argument("--api-base-url", default=None, metavar="URL")
    root.add_argument("--store-path", type=Path, default=None, metavar="FILE")
    root.add_argument("--collection", default=None)
    root.add_argument("--language", default=None, help="Language tag for names and texts")
    root.add_argument("--retry-delay", type=float, default=None, metavar="SECONDS")
    root.add_argument("--max-attempts", type=int, default=None)
    root.add_argument("--timeout", type=int, default=None, metavar="SECONDS")
    root.add_argument("--catalog-limit", type=int, default=None)
    return root


def config_from_args(args: argparse.Namespace) -> IngestConfig:
    return IngestConfig.from_env().override(
        api_base_url=args.api_base_url,
        store_path=args.store_path,
        collection=args.collection,
        language=args.language,
        retry_delay=args.retry_delay,
        max_attempts=args.max_attempts,
        timeout=args.timeout,
        catalog_limit=args.catalog_limit,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = config_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        summary = run(config)
    except StartupError as exc:
        LOGGER.error(f"Run aborted: {exc}")
        return 1

    report(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
