"""Domain-level results for token list validation."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Sequence

from .models import Violation, ViolationKind

SUCCESS_MESSAGE = "Token list validation passed successfully!"


@dataclass(frozen=True)
class ValidationOutcome:
    checked_at: datetime
    total_tokens: int
    has_previous: bool
    logos_checked: bool
    violations: Sequence[Violation] = field(default_factory=tuple)

    @property
    def passed(self) -> bool:
        return not self.violations

    def has_issues(self) -> bool:
        return bool(self.violations)

    def first_violation(self) -> Violation | None:
        return self.violations[0] if self.violations else None

    def kinds(self) -> tuple[ViolationKind, ...]:
        return tuple(violation.kind for violation in self.violations)

    def iter_messages(self) -> Iterable[str]:
        for violation in self.violations:
            yield violation.message
