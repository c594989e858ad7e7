"""Loads the JSON Schema describing a token list document."""
from __future__ import annotations

from pathlib import Path
from typing import Any

from tokenlist_checker.config import SETTINGS
from tokenlist_checker.domain.errors import TokenListLoadError
from tokenlist_checker.infrastructure.parsing.utils import read_json_file


def load_schema(path: Path | None = None) -> dict[str, Any]:
    schema_path = path or SETTINGS.schema_path
    schema = read_json_file(schema_path)
    if not isinstance(schema, dict):
        raise TokenListLoadError(str(schema_path), "schema must be a JSON object")
    return schema
