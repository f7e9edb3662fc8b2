"""In-process stand-ins for PokeAPI used across the test suite."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import requests

BASE = "https://pokeapi.test/api/v2"
FIXTURES = Path(__file__).resolve().parent / "fixtures"


def load_fixture_json(filename: str) -> Any:
    return json.loads((FIXTURES / filename).read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Fake transport
# ---------------------------------------------------------------------------


class FakeResponse:
    def __init__(self, url: str, payload: Any = None, status_code: int = 200) -> None:
        self.url = url
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} for url: {self.url}", response=self)

    def json(self) -> Any:
        return self._payload


class FakePokeAPI:
    """
    Minimal ``requests.Session`` replacement serving canned payloads.

    Unknown URLs answer 404. ``fail(url, times)`` makes the next *times*
    requests to *url* raise a ConnectionError (``times=None``: every request).
    """

    def __init__(self) -> None:
        self.routes: Dict[str, Any] = {}
        self.failures: Dict[str, Optional[int]] = {}
        self.calls: List[str] = []

    def add(self, url: str, payload: Any) -> None:
        self.routes[url] = payload

    def fail(self, url: str, times: Optional[int] = None) -> None:
        self.failures[url] = times

    def calls_to(self, url: str) -> int:
        return self.calls.count(url)

    def get(self, url: str, timeout: Any = None) -> FakeResponse:
        self.calls.append(url)
        if url in self.failures:
            remaining = self.failures[url]
            if remaining is None:
                raise requests.ConnectionError(f"connection refused: {url}")
            if remaining > 0:
                self.failures[url] = remaining - 1
                raise requests.ConnectionError(f"connection reset: {url}")
        if url not in self.routes:
            return FakeResponse(url, status_code=404)
        return FakeResponse(url, self.routes[url])

    def close(self) -> None:
        pass


# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------


def lang(code: str) -> dict:
    return {"name": code, "url": f"{BASE}/language/{code}/"}


def ref(endpoint: str, name: str) -> dict:
    return {"name": name, "url": f"{BASE}/{endpoint}/{name}/"}


def localized_list(text_key: str, en: str, **others: str) -> List[dict]:
    """Other languages first so tests catch a "take the first entry" bug."""
    entries = [{text_key: text, "language": lang(code)} for code, text in others.items()]
    entries.append({text_key: en, "language": lang("en")})
    return entries


MOVES: Dict[str, Tuple[str, str, str, Optional[int], int, Optional[int], str]] = {
    "razor-wind": ("Razor Wind", "special", "normal", 100, 10, 80, "A two-turn attack.\nCritical hits\nland more easily."),
    "swords-dance": ("Swords Dance", "status", "normal", None, 20, None, "A frenetic dance to\nuplift the fighting\fspirit."),
    "vine-whip": ("Vine Whip", "physical", "grass", 100, 25, 45, "The target is struck with\nslender, whiplike vines."),
    "tackle": ("Tackle", "physical", "normal", 100, 35, 40, "A physical attack in which the\nuser charges and slams."),
    "solar-beam": ("Solar Beam", "special", "grass", 100, 10, 120, "A two-turn attack. The user\ngathers light."),
}

ABILITIES: Dict[str, Tuple[str, str]] = {
    "overgrow": ("Overgrow", "Powers up Grass-type\nmoves in a pinch."),
    "chlorophyll": ("Chlorophyll", "Boosts the Pokémon’s\nSpeed in sunshine."),
}

GROWTH_RATES = {"medium-slow": "medium slow"}
EGG_GROUPS = {"monster": "Monster", "plant": "Grass"}
SHAPES = {"quadruped": "Quadruped"}
ITEMS = {"miracle-seed": ("Miracle Seed", "An item to be held by a\nPokémon. It boosts\nGrass-type moves.")}


def move_payload(slug: str) -> dict:
    name, category, type_, accuracy, pp, power, text = MOVES[slug]
    return {
        "name": slug,
        "accuracy": accuracy,
        "pp": pp,
        "power": power,
        "damage_class": ref("move-damage-class", category),
        "type": ref("type", type_),
        "names": localized_list("name", name, de=f"{name} (de)"),
        "flavor_text_entries": localized_list("flavor_text", text, fr="Texte"),
    }


def ability_payload(slug: str) -> dict:
    name, text = ABILITIES[slug]
    return {
        "name": slug,
        "names": localized_list("name", name, ja="しんりょく"),
        "flavor_text_entries": localized_list("flavor_text", text, fr="Texte"),
    }


def item_payload(slug: str) -> dict:
    name, text = ITEMS[slug]
    return {
        "name": slug,
        "names": localized_list("name", name, fr="Graine Miracle"),
        "flavor_text_entries": localized_list("text", text, de="Text"),
    }


def species_payload(
    species_id: int,
    slug: str,
    display: str,
    *,
    generation: int = 1,
    chain_id: int = 1,
    genus: str = "Seed Pokémon",
    flavor: str = "A strange seed was\nplanted on its\fback at birth.",
    egg_groups: Sequence[str] = ("monster", "plant"),
    shape: Optional[str] = "quadruped",
    varieties: Optional[List[dict]] = None,
) -> dict:
    return {
        "id": species_id,
        "name": slug,
        "names": localized_list("name", display, ja="フシギダネ"),
        "genera": localized_list("genus", genus, fr="Pokémon Graine"),
        "gender_rate": 1,
        "hatch_counter": 20,
        "generation": {"name": "generation-i", "url": f"{BASE}/generation/{generation}/"},
        "growth_rate": ref("growth-rate", "medium-slow"),
        "egg_groups": [ref("egg-group", g) for g in egg_groups],
        "shape": ref("pokemon-shape", shape) if shape else None,
        "evolution_chain": {"url": f"{BASE}/evolution-chain/{chain_id}/"},
        "varieties": varieties
        if varieties is not None
        else [{"is_default": True, "pokemon": ref("pokemon", slug)}],
        "flavor_text_entries": localized_list("flavor_text", flavor, fr="Une graine"),
    }


def pokemon_payload(
    pokemon_id: int,
    slug: str,
    *,
    moves: Iterable[Tuple[str, int]] = (("razor-wind", 0), ("vine-whip", 3)),
    abilities: Iterable[Tuple[str, bool, int]] = (("overgrow", False, 1), ("chlorophyll", True, 3)),
    types: Iterable[Tuple[int, str]] = ((1, "grass"), (2, "poison")),
    held_items: Iterable[str] = (),
) -> dict:
    return {
        "id": pokemon_id,
        "name": slug,
        "height": 7,
        "weight": 69,
        "base_experience": 64,
        "sprites": {
            "front_default": f"https://img.test/{pokemon_id}.png",
            "front_shiny": f"https://img.test/shiny/{pokemon_id}.png",
            "back_default": None,
            "other": {"official-artwork": {"front_default": "ignored"}},
        },
        "types": [{"slot": slot, "type": ref("type", name)} for slot, name in types],
        "abilities": [
            {"ability": ref("ability", name), "is_hidden": hidden, "slot": slot}
            for name, hidden, slot in abilities
        ],
        "moves": [
            {
                "move": ref("move", name),
                "version_group_details": [
                    {
                        "level_learned_at": level,
                        "move_learn_method": ref("move-learn-method", "level-up"),
                        "version_group": ref("version-group", "red-blue"),
                    }
                ],
            }
            for name, level in moves
        ],
        "held_items": [{"item": ref("item", name), "version_details": []} for name in held_items],
        "stats": [
            {"base_stat": 45, "effort": 0, "stat": ref("stat", "hp")},
            {"base_stat": 49, "effort": 0, "stat": ref("stat", "attack")},
            {"base_stat": 65, "effort": 1, "stat": ref("stat", "special-attack")},
        ],
    }


def evolution_chain_payload(chain_id: int = 1) -> dict:
    def detail(min_level: int) -> dict:
        return {
            "gender": None,
            "held_item": None,
            "item": None,
            "known_move": None,
            "known_move_type": None,
            "location": None,
            "min_affection": None,
            "min_beauty": None,
            "min_happiness": None,
            "min_level": min_level,
            "needs_overworld_rain": False,
            "party_species": None,
            "party_type": None,
            "relative_physical_stats": None,
            "time_of_day": "",
            "trade_species": None,
            "trigger": ref("evolution-trigger", "level-up"),
            "turn_upside_down": False,
        }

    return {
        "id": chain_id,
        "baby_trigger_item": None,
        "chain": {
            "is_baby": False,
            "species": ref("pokemon-species", "bulbasaur"),
            "evolution_details": [],
            "evolves_to": [
                {
                    "is_baby": False,
                    "species": ref("pokemon-species", "ivysaur"),
                    "evolution_details": [detail(16)],
                    "evolves_to": [
                        {
                            "is_baby": False,
                            "species": ref("pokemon-species", "venusaur"),
                            "evolution_details": [detail(32)],
                            "evolves_to": [],
                        }
                    ],
                }
            ],
        },
    }


def register_shared_resources(api: FakePokeAPI) -> None:
    for slug in MOVES:
        api.add(f"{BASE}/move/{slug}/", move_payload(slug))
    for slug in ABILITIES:
        api.add(f"{BASE}/ability/{slug}/", ability_payload(slug))
    for slug in ITEMS:
        api.add(f"{BASE}/item/{slug}/", item_payload(slug))
    for slug, text in GROWTH_RATES.items():
        api.add(
            f"{BASE}/growth-rate/{slug}/",
            {"name": slug, "descriptions": localized_list("description", text, fr="moyenne lente")},
        )
    for slug, text in EGG_GROUPS.items():
        api.add(f"{BASE}/egg-group/{slug}/", {"name": slug, "names": localized_list("name", text, de="Monster")})
    for slug, text in SHAPES.items():
        api.add(f"{BASE}/pokemon-shape/{slug}/", {"name": slug, "names": localized_list("name", text, fr="Quadrupède")})


STARTERS = (
    (1, "bulbasaur", "Bulbasaur", (("razor-wind", 0), ("vine-whip", 3))),
    (2, "ivysaur", "Ivysaur", (("vine-whip", 1), ("swords-dance", 0), ("razor-wind", 0))),
    (3, "venusaur", "Venusaur", (("solar-beam", 0), ("vine-whip", 1))),
)


def species_url(slug: str) -> str:
    return f"{BASE}/pokemon-species/{slug}/"


def build_catalog_api(starters=STARTERS) -> FakePokeAPI:
    """Serve a three-species catalog sharing one evolution chain."""
    api = FakePokeAPI()
    register_shared_resources(api)
    api.add(
        f"{BASE}/pokemon-species/?limit=2000",
        {
            "count": len(starters),
            "results": [{"name": slug, "url": species_url(slug)} for _, slug, _, _ in starters],
        },
    )
    for species_id, slug, display, moves in starters:
        api.add(species_url(slug), species_payload(species_id, slug, display))
        held = ("miracle-seed",) if slug == "venusaur" else ()
        api.add(f"{BASE}/pokemon/{slug}/", pokemon_payload(species_id, slug, moves=moves, held_items=held))
    api.add(f"{BASE}/evolution-chain/1/", evolution_chain_payload(1))
    return api
