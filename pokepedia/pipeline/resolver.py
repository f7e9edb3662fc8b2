"""
Entity resolution: one catalog entry in, one :class:`SpeciesRecord` out.

For each species the resolver fetches, in order:

  1. the species payload (``/pokemon-species/{id}``)
  2. its default variety (``/pokemon/{id}``)
  3. its evolution chain (``/evolution-chain/{id}``)
  4. every move, ability, growth rate, egg group, held item and shape it
     references, through the shared :class:`ReferenceCache`

and merges the three payloads plus the cached projections into one
denormalized document. Lists keep the order of the source payloads.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from pokepedia.configs.constants import Constants
from pokepedia.errors import (
    DefaultVarietyMissingError,
    InvalidFieldError,
    MalformedGenerationRefError,
    MissingFieldError,
    MissingPrimaryTypeError,
    PokepediaError,
    ResolutionError,
)
from pokepedia.models import (
    Ability,
    AbilityDetails,
    CatalogEntry,
    HeldItem,
    Move,
    MoveDetails,
    SpeciesRecord,
    Stat,
    Typing,
)
from pokepedia.pipeline.cache import ReferenceCache
from pokepedia.pipeline.evolution import flatten_evolution_chain, ref_name
from pokepedia.pipeline.localization import localized
from pokepedia.scraper.pokeapi import PokeAPIClient

GENERATION_URL_PATTERN = re.compile(r"/(\d+)/?$")


# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------


def require(payload: dict, key: str, resource: str) -> Any:
    """Return ``payload[key]``, raising MissingFieldError when absent or null."""
    value = payload.get(key) if isinstance(payload, dict) else None
    if value is None:
        raise MissingFieldError(resource, key)
    return value


def require_id(payload: dict, resource: str) -> int:
    """Return ``payload["id"]``, which must be a plain integer."""
    value = require(payload, "id", resource)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidFieldError(resource, "id", value, "an integer")
    return value


def require_name(ref: Any, resource: str) -> str:
    name = ref_name(ref)
    if name is None:
        raise MissingFieldError(resource, "name")
    return name


def select_default_variety(species: dict) -> dict:
    """Return the ``pokemon`` reference of the variety flagged ``is_default``."""
    for variety in species.get("varieties") or []:
        if variety.get("is_default") is True:
            return require(variety, "pokemon", "pokemon-species.varieties")
    raise DefaultVarietyMissingError(species.get("name", "?"))


def derive_typing(types: list[dict], pokemon: str = "?") -> Typing:
    """
    Slot 1 is the primary type, slot 2 (when present) the secondary one.

    Slots beyond 2 are ignored.
    """
    by_slot: dict[int, str] = {}
    for entry in types or []:
        slot = entry.get("slot")
        name = ref_name(entry.get("type"))
        if slot in (1, 2) and name is not None and slot not in by_slot:
            by_slot[slot] = name
    if 1 not in by_slot:
        raise MissingPrimaryTypeError(pokemon)
    return Typing(primary=by_slot[1], secondary=by_slot.get(2))


def parse_generation(ref: Any) -> int:
    """``{"url": ".../generation/3/"}`` → ``3``."""
    url = ref.get("url") if isinstance(ref, dict) else ref
    match = GENERATION_URL_PATTERN.search(url) if isinstance(url, str) else None
    if match is None:
        raise MalformedGenerationRefError(url)
    return int(match.group(1))


def project_sprites(sprites: Optional[dict]) -> dict[str, Optional[str]]:
    sprites = sprites or {}
    return {key: sprites.get(key) for key in Constants.SPRITE_KEYS}


def learn_level(move_entry: dict) -> Optional[int]:
    details = move_entry.get("version_group_details") or []
    if not details:
        return None
    return details[0].get("level_learned_at")


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class EntityResolver:
    """
    Resolves catalog entries into :class:`SpeciesRecord` documents.

    Parameters
    ----------
    client : PokeAPIClient
        Issues the (retried) GETs.
    cache : ReferenceCache
        Shared, run-scoped cache for moves, abilities, growth rates, egg
        groups, held items and shapes.
    language : str
        Language tag used to pick names, genus and flavor texts.
    max_evolution_depth : int
        Depth bound handed to the evolution flattener.
    """

    def __init__(
        self,
        client: PokeAPIClient,
        cache: ReferenceCache,
        language: str = Constants.LANGUAGE,
        max_evolution_depth: int = Constants.MAX_EVOLUTION_DEPTH,
    ) -> None:
        self.client = client
        self.cache = cache
        self.language = language
        self.max_evolution_depth = max_evolution_depth
        self.logger = logging.getLogger(self.__class__.__name__)

    def resolve(self, entry: CatalogEntry) -> SpeciesRecord:
        """
        Fetch and assemble the document for *entry*.

        Raises
        ------
        ResolutionError
            Wrapping the first FetchError or data-shape error met.
        """
        try:
            return self._resolve(entry)
        except PokepediaError as exc:
            raise ResolutionError(entry, exc) from exc
        except (KeyError, TypeError, AttributeError) as exc:
            # payload with an unexpected structure
            raise ResolutionError(entry, exc) from exc

    def _resolve(self, entry: CatalogEntry) -> SpeciesRecord:
        species = self.client.fetch_species(entry)
        species_slug = species.get("name", entry.name)
        pokemon = self.client.fetch_pokemon(select_default_variety(species))
        evolution_raw = self.client.fetch_evolution_chain(
            require(species, "evolution_chain", "pokemon-species")
        )

        moves = [self._resolve_move(m) for m in pokemon.get("moves") or []]
        abilities = [self._resolve_ability(a) for a in pokemon.get("abilities") or []]
        growth_rate = self._resolve_growth_rate(require(species, "growth_rate", "pokemon-species"))
        egg_groups = [self._resolve_egg_group(g) for g in species.get("egg_groups") or []]
        held_items = [self._resolve_held_item(h) for h in pokemon.get("held_items") or []]
        shape_ref = species.get("shape")
        shape = self._resolve_shape(shape_ref) if shape_ref else None

        evolution_chain = flatten_evolution_chain(evolution_raw, max_depth=self.max_evolution_depth)
        self.logger.info(f"Loaded all endpoints for {species_slug}")

        return SpeciesRecord(
            name=localized(species.get("names"), self.language, "name", f"{species_slug} name"),
            id=require_id(species, "pokemon-species"),
            genus=localized(species.get("genera"), self.language, "genus", f"{species_slug} genus"),
            height=pokemon.get("height"),
            weight=pokemon.get("weight"),
            sprites=project_sprites(pokemon.get("sprites")),
            type=derive_typing(pokemon.get("types"), pokemon.get("name", species_slug)),
            abilities=abilities,
            moves=moves,
            base_experience=pokemon.get("base_experience"),
            growth_rate=growth_rate,
            egg_groups=egg_groups,
            gender_rate=species.get("gender_rate"),  # eighths that are female, -1 genderless
            egg_cycles=species.get("hatch_counter"),
            generation=parse_generation(species.get("generation")),
            stats=[
                Stat(base_stat=s["base_stat"], effort=s["effort"], name=require_name(s.get("stat"), "stat"))
                for s in pokemon.get("stats") or []
            ],
            held_items=held_items,
            # flavor_text_entries are sorted oldest version first
            pokedex_entry=localized(
                species.get("flavor_text_entries"),
                self.language,
                "flavor_text",
                f"{species_slug} pokedex entry",
            ),
            shape=shape,
            evolution_chain=evolution_chain,
        )

    # ------------------------------------------------------------------
    # Cached sub-resources
    # ------------------------------------------------------------------

    def _resolve_move(self, move_entry: dict) -> Move:
        ref = require(move_entry, "move", "pokemon.moves")
        slug = require_name(ref, "move")
        details = self.cache.resolve("move", slug, lambda: self._load_move(ref, slug))
        return Move.from_details(details, level=learn_level(move_entry))

    def _load_move(self, ref: dict, slug: str) -> MoveDetails:
        data = self.client.fetch_move(ref)
        return MoveDetails(
            name=localized(data.get("names"), self.language, "name", f"move {slug} name"),
            category=ref_name(data.get("damage_class")),
            type=ref_name(data.get("type")),
            accuracy=data.get("accuracy"),
            pp=data.get("pp"),
            power=data.get("power"),
            description=localized(
                data.get("flavor_text_entries"), self.language, "flavor_text", f"move {slug} description"
            ),
        )

    def _resolve_ability(self, ability_entry: dict) -> Ability:
        ref = require(ability_entry, "ability", "pokemon.abilities")
        slug = require_name(ref, "ability")
        details = self.cache.resolve("ability", slug, lambda: self._load_ability(ref, slug))
        return Ability.from_details(
            details,
            is_hidden=bool(ability_entry.get("is_hidden", False)),
            slot=ability_entry.get("slot"),
        )

    def _load_ability(self, ref: dict, slug: str) -> AbilityDetails:
        data = self.client.fetch_ability(ref)
        return AbilityDetails(
            name=localized(data.get("names"), self.language, "name", f"ability {slug} name"),
            description=localized(
                data.get("flavor_text_entries"), self.language, "flavor_text", f"ability {slug} description"
            ),
        )

    def _resolve_growth_rate(self, ref: dict) -> str:
        slug = require_name(ref, "growth_rate")

        def load() -> str:
            data = self.client.fetch_growth_rate(ref)
            return localized(
                data.get("descriptions"), self.language, "description", f"growth rate {slug}"
            )

        return self.cache.resolve("growth_rate", slug, load)

    def _resolve_egg_group(self, ref: dict) -> str:
        slug = require_name(ref, "egg_group")

        def load() -> str:
            data = self.client.fetch_egg_group(ref)
            return localized(data.get("names"), self.language, "name", f"egg group {slug}")

        return self.cache.resolve("egg_group", slug, load)

    def _resolve_held_item(self, held_item_entry: dict) -> HeldItem:
        ref = require(held_item_entry, "item", "pokemon.held_items")
        slug = require_name(ref, "item")

        def load() -> HeldItem:
            data = self.client.fetch_item(ref)
            return HeldItem(
                name=localized(data.get("names"), self.language, "name", f"item {slug} name"),
                # item flavor texts use "text", not "flavor_text"
                description=localized(
                    data.get("flavor_text_entries"), self.language, "text", f"item {slug} description"
                ),
            )

        return self.cache.resolve("held_item", slug, load)

    def _resolve_shape(self, ref: dict) -> str:
        slug = require_name(ref, "shape")

        def load() -> str:
            data = self.client.fetch_shape(ref)
            return localized(data.get("names"), self.language, "name", f"shape {slug}")

        return self.cache.resolve("shape", slug, load)
