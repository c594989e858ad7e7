"""Errors raised for faults that are not validation failures."""
from __future__ import annotations


class TokenListLoadError(ValueError):
    """A document, schema or policy file could not be read or decoded."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Could not load {source}: {reason}")
        self.source = source
        self.reason = reason
