"""Application-level DTOs for token list validation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from tokenlist_checker.domain.results import ValidationOutcome


@dataclass(slots=True, frozen=True)
class ValidationResponse:
    outcome: ValidationOutcome
    candidate: Mapping[str, Any]
    previous: Mapping[str, Any] | None
