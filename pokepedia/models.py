"""
Document shapes produced by the resolver.

Cached reference entries (``MoveDetails``, ``AbilityDetails``, ``HeldItem``)
are frozen: once a shared resource is resolved it is reused as-is for every
species that references it. Per-species values such as a move's learn level or
an ability's slot live on the record types built from them.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class CatalogEntry:
    """One row of the species listing."""

    name: str
    url: str


# ---------------------------------------------------------------------------
# Reference cache entries
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MoveDetails:
    name: str
    category: Optional[str]
    type: Optional[str]
    accuracy: Optional[int]
    pp: Optional[int]
    power: Optional[int]
    description: str


@dataclass(frozen=True)
class AbilityDetails:
    name: str
    description: str


@dataclass(frozen=True)
class HeldItem:
    name: str
    description: str

    def to_document(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Per-species values
# ---------------------------------------------------------------------------


@dataclass
class Move:
    level: Optional[int]
    name: str
    category: Optional[str]
    type: Optional[str]
    accuracy: Optional[int]
    pp: Optional[int]
    power: Optional[int]
    description: str

    @classmethod
    def from_details(cls, details: MoveDetails, level: Optional[int]) -> "Move":
        return cls(level=level, **asdict(details))

    def to_document(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Ability:
    name: str
    description: str
    is_hidden: bool
    slot: int

    @classmethod
    def from_details(cls, details: AbilityDetails, is_hidden: bool, slot: int) -> "Ability":
        return cls(name=details.name, description=details.description, is_hidden=is_hidden, slot=slot)

    def to_document(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Stat:
    base_stat: int
    effort: int
    name: str

    def to_document(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Typing:
    primary: str
    secondary: Optional[str] = None

    def to_document(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Evolution tree
# ---------------------------------------------------------------------------


@dataclass
class EvolutionDetail:
    """Conditions for one evolution step; reference fields hold display names."""

    trigger: str
    item: Optional[str] = None
    gender: Optional[int] = None
    held_item: Optional[str] = None
    known_move: Optional[str] = None
    known_move_type: Optional[str] = None
    location: Optional[str] = None
    min_level: Optional[int] = None
    min_happiness: Optional[int] = None
    min_beauty: Optional[int] = None
    min_affection: Optional[int] = None
    needs_overworld_rain: Optional[bool] = None
    party_species: Optional[str] = None
    party_type: Optional[str] = None
    relative_physical_stats: Optional[int] = None
    time_of_day: Optional[str] = None
    turn_upside_down: Optional[bool] = None

    def to_document(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class EvolutionNode:
    """
    One species in an evolution tree.

    ``evolves_to`` is an empty list for terminal forms; that is the only
    representation of "no further evolutions".
    """

    is_baby: bool
    species: str
    evolution_details: list[EvolutionDetail] = field(default_factory=list)
    evolves_to: list["EvolutionNode"] = field(default_factory=list)

    def to_document(self) -> dict[str, Any]:
        return {
            "is_baby": self.is_baby,
            "species": self.species,
            "evolution_details": [d.to_document() for d in self.evolution_details],
            "evolves_to": [n.to_document() for n in self.evolves_to],
        }


@dataclass
class EvolutionChain:
    id: int
    baby_trigger_item: Optional[str]
    chain: EvolutionNode

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "baby_trigger_item": self.baby_trigger_item,
            "chain": self.chain.to_document(),
        }


# ---------------------------------------------------------------------------
# Root document
# ---------------------------------------------------------------------------


@dataclass
class SpeciesRecord:
    """The denormalized document stored for one species."""

    name: str
    id: int
    genus: str
    height: Optional[int]
    weight: Optional[int]
    sprites: dict[str, Optional[str]]
    type: Typing
    abilities: list[Ability]
    moves: list[Move]
    base_experience: Optional[int]
    growth_rate: str
    egg_groups: list[str]
    gender_rate: Optional[int]
    egg_cycles: Optional[int]
    generation: int
    stats: list[Stat]
    held_items: list[HeldItem]
    pokedex_entry: str
    shape: Optional[str]
    evolution_chain: EvolutionChain

    def to_document(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "id": self.id,
            "genus": self.genus,
            "height": self.height,
            "weight": self.weight,
            "sprites": dict(self.sprites),
            "type": self.type.to_document(),
            "abilities": [a.to_document() for a in self.abilities],
            "moves": [m.to_document() for m in self.moves],
            "base_experience": self.base_experience,
            "growth_rate": self.growth_rate,
            "egg_groups": list(self.egg_groups),
            "gender_rate": self.gender_rate,
            "egg_cycles": self.egg_cycles,
            "generation": self.generation,
            "stats": [s.to_document() for s in self.stats],
            "held_items": [h.to_document() for h in self.held_items],
            "pokedex_entry": self.pokedex_entry,
            "shape": self.shape,
            "evolution_chain": self.evolution_chain.to_document(),
        }
