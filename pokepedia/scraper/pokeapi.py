"""
PokeAPI client for the ingestion job.

Addresses the PokeAPI v2 endpoints the resolver needs and delegates every
request to :class:`~pokepedia.scraper.base.RetryingFetcher`:

  - Catalog   : ``/pokemon-species/?limit=N`` listing, fetched in one call
  - Per entity: species, default variety (``/pokemon``), evolution chain
  - Shared    : move, ability, growth rate, egg group, item, shape

Payload references arrive as ``{"name": …, "url": …}`` objects; every fetch
helper accepts either a full URL taken from such a reference or a
path relative to the API root.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pokepedia.configs.constants import Constants
from pokepedia.errors import CatalogUnavailableError, FetchError, MissingFieldError
from pokepedia.models import CatalogEntry
from pokepedia.scraper.base import RetryingFetcher

ENDPOINTS = Constants.POKEAPI_DATA


class PokeAPIClient:
    """
    Thin PokeAPI facade over a :class:`RetryingFetcher`.

    Parameters
    ----------
    fetcher : RetryingFetcher
        Performs the GETs (and their retries).
    base_url : str
        API root, e.g. ``https://pokeapi.co/api/v2``.
    """

    def __init__(self, fetcher: RetryingFetcher, base_url: str = Constants.POKEAPI_BASE_URL) -> None:
        self.fetcher = fetcher
        self.base_url = base_url.rstrip("/")
        self.logger = logging.getLogger(self.__class__.__name__)

    # ------------------------------------------------------------------
    # Requests (relative paths or full URLs)
    # ------------------------------------------------------------------

    def url_for(self, endpoint: str) -> str:
        if endpoint.startswith("http"):
            return endpoint
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def get(self, endpoint: str) -> Any:
        """
        Fetch *endpoint* from PokeAPI.

        Parameters
        ----------
        endpoint : str
            Either a relative path (``"pokemon/1"``) or a full URL.

        Raises
        ------
        FetchError
            When the fetcher's retry budget is exhausted.
        """
        return self.fetcher.fetch(self.url_for(endpoint))

    def get_ref(self, ref: Optional[dict], resource: str) -> Any:
        """Follow a ``{"name", "url"}`` reference found in another payload."""
        if not ref or not ref.get("url"):
            raise MissingFieldError(resource, "url")
        return self.get(ref["url"])

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def list_species(self, limit: int = Constants.CATALOG_LIMIT) -> list[CatalogEntry]:
        """
        Enumerate the whole species catalog with one bounded listing call.

        Raises
        ------
        CatalogUnavailableError
            When the listing cannot be fetched or has no ``results``.
        """
        endpoint = f"{ENDPOINTS['species']}/?limit={limit}"
        try:
            page = self.get(endpoint)
        except FetchError as exc:
            raise CatalogUnavailableError(f"cannot list the species catalog: {exc}") from exc

        results = page.get("results") if isinstance(page, dict) else None
        if not isinstance(results, list):
            raise CatalogUnavailableError(f"species listing at {self.url_for(endpoint)} has no results")

        total = page.get("count")
        if isinstance(total, int) and total > len(results):
            self.logger.warning(
                f"Catalog lists {total} species but limit={limit} returned {len(results)}; "
                "raise catalog_limit to ingest the rest."
            )
        try:
            return [CatalogEntry(name=r["name"], url=r["url"]) for r in results]
        except (KeyError, TypeError) as exc:
            raise CatalogUnavailableError(f"malformed species listing row: {exc}") from exc

    # ------------------------------------------------------------------
    # Raw fetch wrappers
    # ------------------------------------------------------------------

    def fetch_species(self, entry: CatalogEntry) -> dict:
        return self.get(entry.url)

    def fetch_pokemon(self, variety_ref: dict) -> dict:
        return self.get_ref(variety_ref, ENDPOINTS["pokemon"])

    def fetch_evolution_chain(self, chain_ref: dict) -> dict:
        return self.get_ref(chain_ref, ENDPOINTS["evolution_chain"])

    def fetch_move(self, move_ref: dict) -> dict:
        return self.get_ref(move_ref, ENDPOINTS["move"])

    def fetch_ability(self, ability_ref: dict) -> dict:
        return self.get_ref(ability_ref, ENDPOINTS["ability"])

    def fetch_growth_rate(self, growth_rate_ref: dict) -> dict:
        return self.get_ref(growth_rate_ref, ENDPOINTS["growth_rate"])

    def fetch_egg_group(self, egg_group_ref: dict) -> dict:
        return self.get_ref(egg_group_ref, ENDPOINTS["egg_group"])

    def fetch_item(self, item_ref: dict) -> dict:
        return self.get_ref(item_ref, ENDPOINTS["item"])

    def fetch_shape(self, shape_ref: dict) -> dict:
        return self.get_ref(shape_ref, ENDPOINTS["shape"])
