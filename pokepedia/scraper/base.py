"""
HTTP layer for the ingestion job.

:class:`RetryingFetcher` wraps one GET with a fixed retry budget:

  - A requests.Session with a descriptive User-Agent and a per-request timeout
  - Every failure (connection error, timeout, any non-2xx status, a body that
    is not JSON) is retried after a fixed delay, no jitter, no back-off growth
  - Once ``max_attempts`` attempts have failed, :class:`FetchError` is raised
    with the last underlying error chained as its ``__cause__``

Why sync and not async?
  The job walks the catalog strictly in order and the reference caches are
  plain dicts, so there is nothing to gain from overlapping requests.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

import requests
from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from pokepedia.configs.constants import Constants
from pokepedia.errors import FetchError

# requests.JSONDecodeError is both a RequestException and a ValueError;
# ValueError also covers older requests releases.
RETRYABLE_ERRORS = (requests.RequestException, ValueError)


class RetryingFetcher:
    """
    GET a URL and return its parsed JSON body, retrying on any failure.

    Parameters
    ----------
    session : requests.Session, optional
        Transport to use.  A fresh session is built when omitted; tests pass
        a fake object exposing ``get(url, timeout=...)``.
    retry_delay : float
        Seconds slept between two attempts.
    max_attempts : int
        Total attempts, the first one included.
    timeout : int
        Per-request timeout in seconds.
    sleep : callable
        Called with ``retry_delay`` between attempts (``time.sleep`` by default).
    """

    def __init__(
        self,
        session: Optional[Any] = None,
        retry_delay: float = Constants.RETRY_DELAY_SECONDS,
        max_attempts: int = Constants.MAX_ATTEMPTS,
        timeout: int = Constants.REQUEST_TIMEOUT,
        user_agent: str = Constants.USER_AGENT,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.retry_delay = retry_delay
        self.max_attempts = max_attempts
        self.timeout = timeout
        self._sleep = sleep
        self._session = session if session is not None else self._build_session(user_agent)
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_config(cls, config: Any, session: Optional[Any] = None, **kwargs: Any) -> "RetryingFetcher":
        return cls(
            session=session,
            retry_delay=config.retry_delay,
            max_attempts=config.max_attempts,
            timeout=config.timeout,
            user_agent=config.user_agent,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Session setup
    # ------------------------------------------------------------------

    @staticmethod
    def _build_session(user_agent: str) -> requests.Session:
        """Build a requests.Session with a descriptive User-Agent."""
        session = requests.Session()
        session.headers["User-Agent"] = user_agent
        return session

    def close(self) -> None:
        close = getattr(self._session, "close", None)
        if close is not None:
            close()

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _get_json(self, url: str) -> Any:
        resp = self._session.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        url = retry_state.args[0] if retry_state.args else "?"
        self.logger.warning(
            f"GET {url} failed (attempt {retry_state.attempt_number}/{self.max_attempts}): "
            f"{exc}; retrying in {self.retry_delay}s"
        )

    def fetch(self, url: str) -> Any:
        """
        Fetch *url* and return the parsed JSON payload.

        Raises
        ------
        FetchError
            After ``max_attempts`` failed attempts.
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        try:
            return retrying(self._get_json, url)
        except RETRYABLE_ERRORS as exc:
            self.logger.error(f"Giving up on {url} after {self.max_attempts} attempt(s): {exc}")
            raise FetchError(url, self.max_attempts, exc) from exc
