"""HTTP reachability probe for token logos.

Issues a ``HEAD`` request per URI and follows redirects. Only a final ``200``
counts as reachable; transport errors and timeouts are reported as probe errors
rather than raised.
"""
from __future__ import annotations

import logging
import threading

import requests

from tokenlist_checker.domain.models import ProbeResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
USER_AGENT = "tokenlist-checker/0.1"


class HttpLogoProbe:
    """Logo probe backed by a ``requests`` session per worker thread.

    Usage:
        probe = HttpLogoProbe(timeout=5.0)
        result = probe.check("https://example.com/logo.png")
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, session: requests.Session | None = None) -> None:
        self.timeout = timeout
        self._shared_session = session
        self._local = threading.local()
        self._owned_sessions: list[requests.Session] = []
        self._lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        # requests.Session is not guaranteed thread-safe, so each worker gets its own.
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = USER_AGENT
            self._local.session = session
            with self._lock:
                self._owned_sessions.append(session)
        return session

    def close(self) -> None:
        """Close the per-thread sessions this probe created; a caller-supplied session is left open."""
        with self._lock:
            sessions, self._owned_sessions = self._owned_sessions, []
            self._local = threading.local()
        for session in sessions:
            session.close()

    def __enter__(self) -> "HttpLogoProbe":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def check(self, uri: str) -> ProbeResult:
        try:
            response = self.session.head(uri, timeout=self.timeout, allow_redirects=True)
        except requests.Timeout:
            logger.warning("Logo probe timed out after %.1fs: %s", self.timeout, uri)
            return ProbeResult(uri=uri, reachable=False, error=f"timed out after {self.timeout:g}s")
        except requests.RequestException as exc:
            logger.warning("Logo probe failed for %s: %s", uri, exc)
            return ProbeResult(uri=uri, reachable=False, error=type(exc).__name__)

        status = response.status_code
        if status != 200:
            logger.debug("Logo probe for %s returned HTTP %d", uri, status)
        return ProbeResult(uri=uri, reachable=status == 200, status_code=status)
