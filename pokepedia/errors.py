"""Error taxonomy for the ingestion job."""

from __future__ import annotations

from typing import Any, Optional


class PokepediaError(Exception):
    """Base class for every error raised by the package."""


# ---------------------------------------------------------------------------
# Network
# ---------------------------------------------------------------------------


class FetchError(PokepediaError):
    """Raised when a GET still fails after the whole retry budget is spent."""

    def __init__(self, url: str, attempts: int, cause: Optional[BaseException] = None) -> None:
        self.url = url
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"GET {url} failed after {attempts} attempt(s): {cause}")


# ---------------------------------------------------------------------------
# Data shape: payloads the resolver cannot interpret. Never retried.
# ---------------------------------------------------------------------------


class DataShapeError(PokepediaError):
    """A remote payload is missing something the document needs."""


class MissingFieldError(DataShapeError):
    def __init__(self, resource: str, field: str) -> None:
        self.resource = resource
        self.field = field
        super().__init__(f"{resource} payload has no '{field}'")


class InvalidFieldError(DataShapeError):
    def __init__(self, resource: str, field: str, value: Any, expected: str) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(f"{resource} '{field}' must be {expected}, got {value!r}")


class DefaultVarietyMissingError(DataShapeError):
    def __init__(self, species: str) -> None:
        self.species = species
        super().__init__(f"species '{species}' has no variety flagged is_default")


class MissingPrimaryTypeError(DataShapeError):
    def __init__(self, pokemon: str) -> None:
        self.pokemon = pokemon
        super().__init__(f"'{pokemon}' has no type in slot 1")


class MissingLocalizationError(DataShapeError):
    def __init__(self, field: str, language: str) -> None:
        self.field = field
        self.language = language
        super().__init__(f"no '{language}' entry for {field}")


class MalformedGenerationRefError(DataShapeError):
    def __init__(self, url: Any) -> None:
        self.url = url
        super().__init__(f"cannot read a generation number from {url!r}")


class EvolutionDepthError(DataShapeError):
    def __init__(self, max_depth: int, species: Optional[str] = None) -> None:
        self.max_depth = max_depth
        self.species = species
        super().__init__(
            f"evolution chain deeper than {max_depth} levels at '{species}' (cyclic data?)"
        )


# ---------------------------------------------------------------------------
# Per-entry resolution / persistence
# ---------------------------------------------------------------------------


class ResolutionError(PokepediaError):
    """
    Wraps the first unrecoverable error met while resolving one catalog entry.

    The original error is available both as ``cause`` and as ``__cause__``.
    """

    def __init__(self, entry: Any, cause: BaseException) -> None:
        self.entry = entry
        self.cause = cause
        name = getattr(entry, "name", entry)
        super().__init__(f"could not resolve '{name}': {cause}")


class DuplicateKeyError(PokepediaError):
    """Insert rejected because ``key`` = ``value`` already exists in the store."""

    def __init__(self, key: str, value: Any) -> None:
        self.key = key
        self.value = value
        super().__init__(f"a document with {key}={value!r} already exists")


class PersistenceError(PokepediaError):
    """The store rejected a document for a reason other than a duplicate key."""

    def __init__(self, document_id: Any, cause: BaseException) -> None:
        self.document_id = document_id
        self.cause = cause
        super().__init__(f"cannot store document id={document_id!r}: {cause}")


# ---------------------------------------------------------------------------
# Startup: the run cannot begin
# ---------------------------------------------------------------------------


class StartupError(PokepediaError):
    """Raised before the first entry is processed; aborts the run."""


class StoreConnectionError(StartupError):
    pass


class CatalogUnavailableError(StartupError):
    pass
