"""
Catalog driver: list the species once, resolve and insert them one by one.

Per-entry failures (exhausted retries, unreadable payloads, rejected writes)
are logged, recorded in the :class:`RunSummary` and never stop the run. Only
startup errors (the store cannot be opened, the catalog cannot be listed)
propagate to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pokepedia.configs.constants import Constants
from pokepedia.errors import PokepediaError
from pokepedia.models import CatalogEntry
from pokepedia.pipeline.cache import ReferenceCache
from pokepedia.pipeline.resolver import EntityResolver
from pokepedia.scraper.pokeapi import PokeAPIClient
from pokepedia.storage.document_store import DocumentStore

LOGGER = logging.getLogger(__name__)


@dataclass
class FailedEntry:
    """A catalog entry that could not be persisted, and why."""

    entry: CatalogEntry
    error: PokepediaError

    @property
    def cause(self) -> BaseException:
        """The innermost error (e.g. the FetchError inside a ResolutionError)."""
        return getattr(self.error, "cause", None) or self.error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.entry.name,
            "url": self.entry.url,
            "error": type(self.error).__name__,
            "cause": type(self.cause).__name__,
            "message": str(self.error),
        }


@dataclass
class RunSummary:
    processed_count: int = 0
    failed_entries: List[FailedEntry] = field(default_factory=list)
    cache_stats: Dict[str, Dict[str, int]] = field(default_factory=dict)

    @property
    def failed_count(self) -> int:
        return len(self.failed_entries)

    @property
    def attempted(self) -> int:
        return self.processed_count + self.failed_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attempted": self.attempted,
            "processed": self.processed_count,
            "failed": self.failed_count,
            "failed_entries": [f.to_dict() for f in self.failed_entries],
            "cache": self.cache_stats,
        }


class CatalogDriver:
    """
    Runs one ingestion pass.

    Parameters
    ----------
    client : PokeAPIClient
        Used for the single catalog listing call.
    resolver : EntityResolver
        Turns each entry into a document.
    store : DocumentStore
        Receives one blocking insert per resolved entry.
    catalog_limit : int
        ``limit`` of the listing call.
    """

    def __init__(
        self,
        client: PokeAPIClient,
        resolver: EntityResolver,
        store: DocumentStore,
        catalog_limit: int = Constants.CATALOG_LIMIT,
    ) -> None:
        self.client = client
        self.resolver = resolver
        self.store = store
        self.catalog_limit = catalog_limit

    @classmethod
    def build(
        cls,
        client: PokeAPIClient,
        store: DocumentStore,
        config: Any,
        cache: Optional[ReferenceCache] = None,
    ) -> "CatalogDriver":
        """Wire a resolver with a fresh run-scoped cache from *config*."""
        resolver = EntityResolver(
            client,
            cache if cache is not None else ReferenceCache(),
            language=config.language,
            max_evolution_depth=config.max_evolution_depth,
        )
        return cls(client, resolver, store, catalog_limit=config.catalog_limit)

    def process_entry(self, entry: CatalogEntry) -> None:
        """Resolve *entry* and insert its document; errors propagate."""
        record = self.resolver.resolve(entry)
        self.store.insert(record.to_document())

    def run(self) -> RunSummary:
        """
        Ingest the whole catalog in listing order.

        Raises
        ------
        CatalogUnavailableError
            When the catalog listing itself cannot be fetched.
        """
        entries = self.client.list_species(limit=self.catalog_limit)
        LOGGER.info(f"Catalog lists {len(entries)} species")

        summary = RunSummary()
        total = len(entries)
        for index, entry in enumerate(entries, 1):
            try:
                self.process_entry(entry)
            except PokepediaError as exc:
                LOGGER.error(f"[{index}/{total}] {entry.name} failed: {exc}")
                summary.failed_entries.append(FailedEntry(entry=entry, error=exc))
                continue
            summary.processed_count += 1
            LOGGER.info(f"[{index}/{total}] ✓ {entry.name} saved.")

        summary.cache_stats = self.resolver.cache.stats()
        LOGGER.info(
            f"Fetched {summary.attempted} species: "
            f"{summary.processed_count} saved, {summary.failed_count} failed"
        )
        return summary
