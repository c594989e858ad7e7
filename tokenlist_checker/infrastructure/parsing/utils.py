"""Shared helpers for reading JSON documents."""
from __future__ import annotations

import json
from io import BytesIO
from pathlib import Path
from typing import Any

from tokenlist_checker.domain.errors import TokenListLoadError


def ensure_bytes(source: BytesIO | Path | bytes) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, Path):
        return source.read_bytes()
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def decode_json(data: bytes | str, source: str) -> Any:
    """Decode JSON text, raising ``TokenListLoadError`` naming ``source`` on failure."""
    try:
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise TokenListLoadError(source, f"invalid JSON ({exc})") from exc


def read_json_file(path: Path) -> Any:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise TokenListLoadError(str(path), exc.strerror or str(exc)) from exc
    return decode_json(data, str(path))
