"""Pick the configured-language variant out of PokeAPI's localized lists."""

from __future__ import annotations

from typing import Any, Iterable

from pokepedia.errors import MissingLocalizationError


def clean_text(text: str) -> str:
    """Flavor texts carry hard line breaks and form feeds from the game carts."""
    return text.replace("\n", " ").replace("\f", " ").strip()


def localized(entries: Iterable[dict], language: str, text_key: str, field: str = "") -> str:
    """
    Return ``text_key`` of the first entry whose ``language.name`` is *language*.

    Raises
    ------
    MissingLocalizationError
        When no entry (or no non-null text) exists for *language*.
    """
    for entry in entries or ():
        if (entry.get("language") or {}).get("name") != language:
            continue
        value: Any = entry.get(text_key)
        if value is None:
            continue
        return clean_text(str(value))
    raise MissingLocalizationError(field or text_key, language)
