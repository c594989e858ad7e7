"""Domain models for token list validation.

These dataclasses capture the canonical shape of a token list document and the
violations reported against it. Documents are read once per run and never
mutated.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

_FRACTION = re.compile(r"\.(\d+)")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, reading ``Z`` and naive values as UTC.

    Fractional seconds of any length are accepted; digits past microseconds are dropped.
    """
    if not isinstance(value, str):
        raise TypeError(f"timestamp must be a string, not {type(value).__name__}")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda match: "." + match.group(1)[:6].ljust(6, "0"), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _field(raw: Mapping[str, Any], key: str, expected: type) -> Any:
    """Fetch ``raw[key]``, raising ``TypeError`` when it is not of ``expected`` type."""
    if not isinstance(raw, Mapping):
        raise TypeError(f"expected an object holding {key!r}, not {type(raw).__name__}")
    value = raw[key]
    # bool is an int subclass but never a valid integer field.
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise TypeError(f"{key!r} must be {expected.__name__}, not {type(value).__name__}")
    return value


def _keywords(values: list[Any]) -> list[str]:
    for value in values:
        if not isinstance(value, str):
            raise TypeError(f"keywords must be strings, not {type(value).__name__}")
    return values


@dataclass(frozen=True)
class TokenIdentity:
    """Primary key of a token across list versions."""

    chain_id: int
    address: str

    @classmethod
    def of(cls, chain_id: int, address: str) -> "TokenIdentity":
        return cls(chain_id=chain_id, address=address.lower())

    def key(self) -> tuple[int, str]:
        return (self.chain_id, self.address)


@dataclass(frozen=True)
class TokenRecord:
    name: str
    chain_id: int
    symbol: str
    decimals: int
    address: str
    logo_uri: str

    @property
    def identity(self) -> TokenIdentity:
        return TokenIdentity.of(self.chain_id, self.address)

    def immutable_fields(self) -> tuple[str, str, int, str]:
        """Fields that may never change once the token has been accepted."""
        return (self.name, self.symbol, self.decimals, self.logo_uri)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "TokenRecord":
        return cls(
            name=_field(raw, "name", str),
            chain_id=_field(raw, "chainId", int),
            symbol=_field(raw, "symbol", str),
            decimals=_field(raw, "decimals", int),
            address=_field(raw, "address", str),
            logo_uri=_field(raw, "logoURI", str),
        )


@dataclass(frozen=True, order=True)
class ListVersion:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ListVersion":
        return cls(
            major=_field(raw, "major", int),
            minor=_field(raw, "minor", int),
            patch=_field(raw, "patch", int),
        )


@dataclass(frozen=True)
class TokenListDocument:
    name: str
    version: ListVersion
    keywords: frozenset[str]
    logo_uri: str
    timestamp: datetime
    tokens: tuple[TokenRecord, ...]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "TokenListDocument":
        """Build a document from decoded JSON.

        Raises ``KeyError``, ``TypeError`` or ``ValueError`` when the mapping does
        not carry the expected shape.
        """
        return cls(
            name=_field(raw, "name", str),
            version=ListVersion.from_mapping(_field(raw, "version", Mapping)),
            keywords=frozenset(_keywords(_field(raw, "keywords", list))),
            logo_uri=_field(raw, "logoURI", str),
            timestamp=parse_timestamp(_field(raw, "timestamp", str)),
            tokens=tuple(TokenRecord.from_mapping(token) for token in _field(raw, "tokens", list)),
        )


class ViolationKind(str, Enum):
    SCHEMA = "SchemaViolation"
    IMMUTABLE_FIELD = "ImmutableFieldViolation"
    TIMESTAMP = "TimestampViolation"
    VERSION = "VersionViolation"
    DUPLICATE = "DuplicateViolation"
    IMMUTABLE_RECORD = "ImmutableRecordViolation"
    CHAIN_ID = "ChainIdViolation"
    UNREACHABLE_LOGO = "UnreachableLogoViolation"


@dataclass(frozen=True)
class Violation:
    """Represents a governance rule broken by the candidate document."""

    kind: ViolationKind
    message: str
    context: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single logo reachability probe."""

    uri: str
    reachable: bool
    status_code: int | None = None
    error: str | None = None
