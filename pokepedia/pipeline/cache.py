"""
Per-run reference cache.

Moves, abilities, growth rates, egg groups, held items and shapes are shared
by many species. ``ReferenceCache`` keys each resolved value by the remote
resource's slug so every distinct resource is fetched at most once per run.

A cache instance is owned by one :class:`~pokepedia.pipeline.driver.CatalogDriver`
run and injected into the resolver. It is not thread-safe.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Iterable, TypeVar

from pokepedia.configs.constants import Constants

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CategoryStats:
    hits: int = 0
    misses: int = 0


class ReferenceCache:
    """Lazily populated ``category → key → value`` mapping."""

    def __init__(self, categories: Iterable[str] = Constants.REFERENCE_CATEGORIES) -> None:
        self._entries: Dict[str, Dict[Hashable, Any]] = {c: {} for c in categories}
        self._stats: Dict[str, CategoryStats] = {c: CategoryStats() for c in self._entries}

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def _mapping(self, category: str) -> Dict[Hashable, Any]:
        try:
            return self._entries[category]
        except KeyError:
            raise ValueError(
                f"unknown reference category {category!r}; expected one of {self.categories}"
            ) from None

    def resolve(self, category: str, key: Hashable, loader: Callable[[], T]) -> T:
        """
        Return the cached value for *key*, calling *loader* only on a miss.

        A loader that raises stores nothing, so a later call for the same key
        invokes the loader again.
        """
        mapping = self._mapping(category)
        if key in mapping:
            self._stats[category].hits += 1
            return mapping[key]

        value = loader()
        mapping[key] = value
        self._stats[category].misses += 1
        LOGGER.debug(f"Added new {category.replace('_', ' ')} {key}")
        return value

    def get(self, category: str, key: Hashable, default: Any = None) -> Any:
        return self._mapping(category).get(key, default)

    def contains(self, category: str, key: Hashable) -> bool:
        return key in self._mapping(category)

    def size(self, category: str) -> int:
        return len(self._mapping(category))

    def stats(self) -> Dict[str, Dict[str, int]]:
        return {
            category: {"entries": len(self._entries[category]), "hits": s.hits, "misses": s.misses}
            for category, s in self._stats.items()
        }
