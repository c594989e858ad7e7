"""Storage helpers for governance policy overrides."""
from __future__ import annotations

from pathlib import Path
from typing import Any

from tokenlist_checker.config import DEFAULT_POLICY, Policy
from tokenlist_checker.domain.errors import TokenListLoadError
from tokenlist_checker.infrastructure.parsing.utils import read_json_file


def _normalize_keywords(raw: Any) -> frozenset[str]:
    if not isinstance(raw, list):
        raise TypeError("keywords must be a list of strings")
    return frozenset(str(keyword).strip() for keyword in raw if str(keyword).strip())


def _normalize_chain_ids(raw: Any) -> tuple[int, ...]:
    if not isinstance(raw, list):
        raise TypeError("chainIds must be a list of integers")
    chain_ids: list[int] = []
    for value in raw:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"chain ID {value!r} is not an integer")
        if value not in chain_ids:
            chain_ids.append(value)
    return tuple(chain_ids)


def policy_from_mapping(raw: dict[str, Any], base: Policy = DEFAULT_POLICY) -> Policy:
    """Overlay the keys present in ``raw`` onto ``base``."""
    return Policy(
        required_list_name=str(raw.get("name", base.required_list_name)),
        required_keywords=_normalize_keywords(raw["keywords"]) if "keywords" in raw else base.required_keywords,
        required_list_logo_uri=str(raw.get("logoURI", base.required_list_logo_uri)),
        allowed_chain_ids=_normalize_chain_ids(raw["chainIds"]) if "chainIds" in raw else base.allowed_chain_ids,
    )


def load_policy(path: Path | None = None) -> Policy:
    if path is None:
        return DEFAULT_POLICY
    data = read_json_file(path)
    if not isinstance(data, dict):
        raise TokenListLoadError(str(path), "policy must be a JSON object")
    try:
        return policy_from_mapping(data)
    except TypeError as exc:
        raise TokenListLoadError(str(path), str(exc)) from exc
