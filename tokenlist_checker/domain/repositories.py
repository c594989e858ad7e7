"""Repository and capability interfaces anchoring the domain layer."""
from __future__ import annotations

from typing import Any, Mapping, Protocol

from .models import ProbeResult


class CandidateTokenListRepository(Protocol):
    """Provides the token list under review as decoded JSON."""

    def load(self) -> Mapping[str, Any]:
        ...


class PreviousTokenListRepository(Protocol):
    """Provides the last accepted token list, or ``None`` when there is none."""

    def load(self) -> Mapping[str, Any] | None:
        ...


class LogoProbe(Protocol):
    """Checks whether a logo resource exists without downloading it."""

    def check(self, uri: str) -> ProbeResult:
        ...
