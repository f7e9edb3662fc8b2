"""
Run configuration.

``IngestConfig`` is built from the defaults in :class:`Constants`, optionally
overridden by ``POKEPEDIA_*`` environment variables (see
:py:meth:`IngestConfig.from_env`) and then by CLI flags.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from pokepedia.configs.constants import Constants

ENV_PREFIX = "POKEPEDIA_"


@dataclass
class IngestConfig:
    """
    Settings shared by the fetcher, resolver, driver and store.

    Parameters
    ----------
    api_base_url : str
        PokeAPI root, without trailing slash.
    store_path : Path
        SQLite database file holding the documents (``":memory:"`` works too).
    collection : str
        Table the documents are inserted into.
    language : str
        Language tag used to pick localized names and texts.
    retry_delay : float
        Seconds to wait between two attempts of the same GET.
    max_attempts : int
        Total attempts per GET, the first one included.
    timeout : int
        Per-request timeout in seconds.
    catalog_limit : int
        ``limit`` query parameter of the single catalog listing call.
    max_evolution_depth : int
        Deepest evolution tree accepted before the chain is rejected.
    """

    api_base_url: str = Constants.POKEAPI_BASE_URL
    store_path: Path = field(default_factory=lambda: Path(Constants.STORE_PATH))
    collection: str = Constants.COLLECTION
    language: str = Constants.LANGUAGE
    retry_delay: float = Constants.RETRY_DELAY_SECONDS
    max_attempts: int = Constants.MAX_ATTEMPTS
    timeout: int = Constants.REQUEST_TIMEOUT
    catalog_limit: int = Constants.CATALOG_LIMIT
    max_evolution_depth: int = Constants.MAX_EVOLUTION_DEPTH
    user_agent: str = Constants.USER_AGENT

    def __post_init__(self) -> None:
        # Accept plain strings so callers can write IngestConfig(store_path="…")
        self.store_path = Path(self.store_path)
        self.api_base_url = self.api_base_url.rstrip("/")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay must be >= 0, got {self.retry_delay}")
        if self.catalog_limit < 1:
            raise ValueError(f"catalog_limit must be >= 1, got {self.catalog_limit}")
        if self.max_evolution_depth < 1:
            raise ValueError(
                f"max_evolution_depth must be >= 1, got {self.max_evolution_depth}"
            )
        if not self.language:
            raise ValueError("language must not be empty")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "IngestConfig":
        """
        Build a config from ``POKEPEDIA_<FIELD>`` variables.

        ``POKEPEDIA_MAX_ATTEMPTS=3`` sets ``max_attempts``; unset variables keep
        their defaults. Values are converted to the field's type.
        """
        environ = os.environ if environ is None else environ
        overrides: dict[str, Any] = {}
        defaults = cls()
        for f in fields(cls):
            raw = environ.get(f"{ENV_PREFIX}{f.name.upper()}")
            if raw is None or raw == "":
                continue
            current = getattr(defaults, f.name)
            overrides[f.name] = _coerce(raw, current)
        return cls(**overrides)

    def override(self, **changes: Any) -> "IngestConfig":
        """Return a copy with every non-``None`` value in *changes* applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _coerce(raw: str, current: Any) -> Any:
    if isinstance(current, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(current, int):
        return int(raw)
    if isinstance(current, float):
        return float(raw)
    if isinstance(current, Path):
        return Path(raw)
    return raw
