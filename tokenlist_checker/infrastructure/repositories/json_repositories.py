"""JSON-backed repositories for token list documents."""
from __future__ import annotations

import json
import logging
import os
import subprocess
from io import BytesIO
from pathlib import Path
from typing import Any, Callable, Mapping

from tokenlist_checker.domain.repositories import (
    CandidateTokenListRepository,
    PreviousTokenListRepository,
)
from tokenlist_checker.infrastructure.parsing.utils import decode_json, ensure_bytes, read_json_file

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]


class JsonFileTokenListRepository(CandidateTokenListRepository):
    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    def load(self) -> Mapping[str, Any]:
        return read_json_file(self._path)


class StaticTokenListRepository(CandidateTokenListRepository, PreviousTokenListRepository):
    """Serves a document already held in memory, e.g. an upload."""

    def __init__(self, source: BytesIO | Path | bytes | None, label: str = "<upload>") -> None:
        self._source = ensure_bytes(source) if source is not None else None
        self._label = label

    def load(self) -> Mapping[str, Any] | None:
        if self._source is None:
            return None
        return decode_json(self._source, self._label)


def resolve_base_ref(environ: Mapping[str, str]) -> str:
    """Pick the ref holding the last accepted list for the current CI event."""
    if environ.get("GITHUB_EVENT_NAME") == "pull_request":
        return f"origin/{environ.get('GITHUB_BASE_REF') or 'main'}"
    return "HEAD^"


class GitHistoryTokenListRepository(PreviousTokenListRepository):
    """Reads the previous token list from git history; any failure means there is none."""

    def __init__(
        self,
        path: Path | str,
        ref: str | None = None,
        environ: Mapping[str, str] | None = None,
        runner: Runner = subprocess.run,
        cwd: Path | None = None,
    ) -> None:
        target = Path(path) if cwd is None else Path(cwd) / path
        # git resolves "<ref>:./<name>" against the working directory, so run it beside the file.
        self._directory = target.parent
        self._name = target.name
        self._ref = ref or resolve_base_ref(os.environ if environ is None else environ)
        self._runner = runner

    @property
    def ref(self) -> str:
        return self._ref

    def load(self) -> Mapping[str, Any] | None:
        object_name = f"{self._ref}:./{self._name}"
        try:
            completed = self._runner(
                ["git", "show", object_name],
                capture_output=True,
                text=True,
                check=False,
                cwd=self._directory,
            )
        except OSError as exc:
            logger.info("git unavailable, assuming no previous token list: %s", exc)
            return None
        if completed.returncode != 0:
            logger.warning("No previous token list at %s: %s", object_name, (completed.stderr or "").strip())
            return None
        try:
            data = json.loads(completed.stdout)
        except json.JSONDecodeError as exc:
            logger.warning("Previous token list at %s is not valid JSON: %s", object_name, exc)
            return None
        if not isinstance(data, dict):
            logger.warning("Previous token list at %s is not a JSON object", object_name)
            return None
        return data
