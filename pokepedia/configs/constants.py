"""
Constants
"""

# Ignore pylint warnings
# pylint: disable = line-too-long


class Constants:
    """
    Default values for the ingestion run. Every one of them can be
    overridden through IngestConfig (environment variables or CLI flags).
    """

    POKEAPI_BASE_URL = "https://pokeapi.co/api/v2"
    POKEAPI_DATA = {
        "species": "pokemon-species",
        "pokemon": "pokemon",
        "evolution_chain": "evolution-chain",
        "move": "move",
        "ability": "ability",
        "growth_rate": "growth-rate",
        "egg_group": "egg-group",
        "item": "item",
        "shape": "pokemon-shape",
    }

    # One listing call covers the whole national dex (1025 species today)
    CATALOG_LIMIT = 2000

    LANGUAGE = "en"

    RETRY_DELAY_SECONDS = 10.0
    MAX_ATTEMPTS = 10
    REQUEST_TIMEOUT = 30

    STORE_PATH = "data/pokepedia.sqlite"
    COLLECTION = "pokemon"

    MAX_EVOLUTION_DEPTH = 16

    USER_AGENT = "pokepedia/1.0 (pokeapi-ingest)"

    REFERENCE_CATEGORIES = (
        "move",
        "ability",
        "growth_rate",
        "egg_group",
        "held_item",
        "shape",
    )

    SPRITE_KEYS = (
        "back_default",
        "back_female",
        "back_shiny",
        "back_shiny_female",
        "front_default",
        "front_female",
        "front_shiny",
        "front_shiny_female",
    )
