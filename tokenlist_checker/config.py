"""Central configuration for the token list checker package."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

REQUIRED_LIST_NAME = "Apertum Token List"
REQUIRED_KEYWORDS = {"apertum", "tokens", "trusted"}
REQUIRED_LIST_LOGO_URI = "https://assets.apertum.io/assets/apertum-logo.svg"
ALLOWED_CHAIN_IDS = (89898, 2786)

PACKAGE_DIR = Path(__file__).resolve().parent


@dataclass(slots=True, frozen=True)
class Policy:
    """Governance constants a token list must honour."""

    required_list_name: str
    required_keywords: frozenset[str]
    required_list_logo_uri: str
    # Ordered so messages list chains the way the policy declares them.
    allowed_chain_ids: tuple[int, ...]


@dataclass(slots=True, frozen=True)
class Settings:
    probe_timeout: float
    probe_workers: int
    token_list_path: Path
    schema_path: Path


DEFAULT_POLICY = Policy(
    required_list_name=REQUIRED_LIST_NAME,
    required_keywords=frozenset(REQUIRED_KEYWORDS),
    required_list_logo_uri=REQUIRED_LIST_LOGO_URI,
    allowed_chain_ids=tuple(ALLOWED_CHAIN_IDS),
)

SETTINGS = Settings(
    probe_timeout=5.0,
    probe_workers=8,
    token_list_path=Path("tokenlist") / "apertum-tokenlist.json",
    schema_path=PACKAGE_DIR / "infrastructure" / "schema" / "tokenlist.schema.json",
)
