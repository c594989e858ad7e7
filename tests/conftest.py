"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import copy
import threading
from datetime import datetime, timezone
from typing import Any

import pytest

from tokenlist_checker.config import DEFAULT_POLICY
from tokenlist_checker.domain.models import ProbeResult
from tokenlist_checker.domain.services import TokenListValidator
from tokenlist_checker.infrastructure.schema.schema_store import load_schema

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
LIST_LOGO = DEFAULT_POLICY.required_list_logo_uri


def make_token(
    symbol: str = "FOO",
    *,
    name: str | None = None,
    chain_id: int = 89898,
    address: str = "0x" + "a" * 40,
    decimals: int = 18,
    logo_uri: str | None = None,
) -> dict[str, Any]:
    return {
        "name": name if name is not None else f"{symbol.title()} Token",
        "chainId": chain_id,
        "symbol": symbol,
        "decimals": decimals,
        "address": address,
        "logoURI": logo_uri if logo_uri is not None else f"https://assets.example.org/{symbol.lower()}.png",
    }


def make_list(
    tokens: list[dict[str, Any]] | None = None,
    *,
    version: tuple[int, int, int] = (1, 0, 0),
    timestamp: str = "2024-05-01T00:00:00.000Z",
    name: str = DEFAULT_POLICY.required_list_name,
    keywords: list[str] | None = None,
    logo_uri: str = LIST_LOGO,
) -> dict[str, Any]:
    major, minor, patch = version
    return {
        "name": name,
        "version": {"major": major, "minor": minor, "patch": patch},
        "keywords": keywords if keywords is not None else sorted(DEFAULT_POLICY.required_keywords),
        "logoURI": logo_uri,
        "timestamp": timestamp,
        "tokens": copy.deepcopy(tokens) if tokens is not None else [make_token()],
    }


class FakeProbe:
    """Logo probe answering from a table; unknown URIs are reachable."""

    def __init__(self, results: dict[str, ProbeResult] | None = None) -> None:
        self.results = results or {}
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def check(self, uri: str) -> ProbeResult:
        with self._lock:
            self.calls.append(uri)
        return self.results.get(uri, ProbeResult(uri=uri, reachable=True, status_code=200))


@pytest.fixture(scope="session")
def schema() -> dict[str, Any]:
    return load_schema()


@pytest.fixture
def validator(schema: dict[str, Any]) -> TokenListValidator:
    """Deterministic validator: fixed clock, no network."""
    return TokenListValidator(schema=schema, clock=lambda: NOW)
