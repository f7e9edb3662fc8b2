"""
Evolution chain flattening.

PokeAPI returns an evolution chain as a tree of ``chain_link`` objects whose
species, items, moves, locations … are ``{"name", "url"}`` references. The
functions here reduce that tree to :class:`~pokepedia.models.EvolutionNode`
objects of the same shape, with every reference collapsed to its name (or
``None``). They do no I/O.

A terminal form always ends up with ``evolves_to == []``, whether the payload
had an empty list, ``null`` or no key at all.
"""

from __future__ import annotations

from typing import Any, Optional

from pokepedia.configs.constants import Constants
from pokepedia.errors import EvolutionDepthError, MissingFieldError
from pokepedia.models import EvolutionChain, EvolutionDetail, EvolutionNode

# Evolution-detail fields holding a {"name", "url"} reference
REFERENCE_FIELDS = (
    "item",
    "held_item",
    "known_move",
    "known_move_type",
    "location",
    "party_species",
    "party_type",
)

# Evolution-detail fields copied verbatim
SCALAR_FIELDS = (
    "gender",
    "min_level",
    "min_happiness",
    "min_beauty",
    "min_affection",
    "needs_overworld_rain",
    "relative_physical_stats",
    "time_of_day",
    "turn_upside_down",
)


def ref_name(ref: Any) -> Optional[str]:
    """
    ``{"name": "x", ...}`` → ``"x"``; ``None`` (or a nameless ref) → ``None``.

    An already-reduced string passes through, so a flattened document can be
    flattened again.
    """
    if isinstance(ref, str):
        return ref
    if not isinstance(ref, dict):
        return None
    return ref.get("name")


def flatten_evolution_detail(raw: dict) -> EvolutionDetail:
    trigger = ref_name(raw.get("trigger"))
    if trigger is None:
        raise MissingFieldError("evolution_detail", "trigger")

    values: dict[str, Any] = {name: ref_name(raw.get(name)) for name in REFERENCE_FIELDS}
    values.update({name: raw.get(name) for name in SCALAR_FIELDS})
    return EvolutionDetail(trigger=trigger, **values)


def flatten_evolution_node(
    raw: dict,
    max_depth: int = Constants.MAX_EVOLUTION_DEPTH,
    _depth: int = 0,
) -> EvolutionNode:
    """
    Recursively map a raw ``chain_link`` onto an :class:`EvolutionNode`.

    Raises
    ------
    MissingFieldError
        A node has no species name or a detail has no trigger.
    EvolutionDepthError
        The tree is deeper than *max_depth* (cyclic data never terminates).
    """
    species = ref_name(raw.get("species"))
    if species is None:
        raise MissingFieldError("evolution_chain", "species")
    if _depth >= max_depth:
        raise EvolutionDepthError(max_depth, species)

    children = raw.get("evolves_to") or []
    return EvolutionNode(
        is_baby=bool(raw.get("is_baby", False)),
        species=species,
        evolution_details=[
            flatten_evolution_detail(d) for d in raw.get("evolution_details") or []
        ],
        evolves_to=[
            flatten_evolution_node(child, max_depth=max_depth, _depth=_depth + 1)
            for child in children
        ],
    )


def flatten_evolution_chain(
    raw: dict, max_depth: int = Constants.MAX_EVOLUTION_DEPTH
) -> EvolutionChain:
    """Flatten a whole ``/evolution-chain/{id}`` payload."""
    if "id" not in raw:
        raise MissingFieldError("evolution_chain", "id")
    if "chain" not in raw or raw["chain"] is None:
        raise MissingFieldError("evolution_chain", "chain")
    return EvolutionChain(
        id=raw["id"],
        baby_trigger_item=ref_name(raw.get("baby_trigger_item")),
        chain=flatten_evolution_node(raw["chain"], max_depth=max_depth),
    )
