"""Application services orchestrating the token list validation workflow."""
from __future__ import annotations

from dataclasses import dataclass

from tokenlist_checker.application.dto import ValidationResponse
from tokenlist_checker.domain.repositories import (
    CandidateTokenListRepository,
    PreviousTokenListRepository,
)
from tokenlist_checker.domain.services import TokenListValidator


@dataclass(slots=True)
class TokenListValidationContext:
    candidate_repository: CandidateTokenListRepository
    previous_repository: PreviousTokenListRepository | None
    validator: TokenListValidator


class ValidateTokenListUseCase:
    def __init__(self, context: TokenListValidationContext) -> None:
        self._context = context

    def execute(self, fail_fast: bool = True) -> ValidationResponse:
        candidate = self._context.candidate_repository.load()
        previous_repository = self._context.previous_repository
        previous = previous_repository.load() if previous_repository is not None else None
        outcome = self._context.validator.validate(candidate, previous, fail_fast=fail_fast)
        return ValidationResponse(outcome=outcome, candidate=candidate, previous=previous)
