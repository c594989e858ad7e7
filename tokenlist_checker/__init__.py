"""Governance checks for community-maintained token lists."""
from tokenlist_checker.application.use_cases import TokenListValidationContext, ValidateTokenListUseCase
from tokenlist_checker.config import DEFAULT_POLICY, Policy
from tokenlist_checker.domain.services import TokenListValidator
from tokenlist_checker.infrastructure.probing.http_probe import HttpLogoProbe
from tokenlist_checker.infrastructure.repositories.json_repositories import (
    GitHistoryTokenListRepository,
    JsonFileTokenListRepository,
    StaticTokenListRepository,
)

__all__ = [
    "ValidateTokenListUseCase",
    "TokenListValidationContext",
    "TokenListValidator",
    "Policy",
    "DEFAULT_POLICY",
    "HttpLogoProbe",
    "JsonFileTokenListRepository",
    "GitHistoryTokenListRepository",
    "StaticTokenListRepository",
]
