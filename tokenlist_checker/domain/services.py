"""Domain services implementing the token list governance rules."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Iterator, Mapping, Sequence

from jsonschema import Draft7Validator, FormatChecker

from tokenlist_checker.config import DEFAULT_POLICY, Policy

from .models import (
    ProbeResult,
    TokenIdentity,
    TokenListDocument,
    TokenRecord,
    Violation,
    ViolationKind,
)
from .repositories import LogoProbe
from .results import ValidationOutcome

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _token_context(token: TokenRecord, **extra: Any) -> dict[str, Any]:
    context: dict[str, Any] = {
        "chain_id": token.chain_id,
        "address": token.address,
        "symbol": token.symbol,
    }
    context.update(extra)
    return context


class LogoReachabilityChecker:
    """Probes every token logo concurrently with a bounded worker pool."""

    def __init__(self, probe: LogoProbe, max_workers: int = 8) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._probe = probe
        self._max_workers = max_workers

    def check(self, tokens: Sequence[TokenRecord], fail_fast: bool = True) -> list[Violation]:
        """Return violations in token order, or only the first failure seen when failing fast."""
        if not tokens:
            return []

        slots: list[Violation | None] = [None] * len(tokens)
        executor = ThreadPoolExecutor(
            max_workers=min(self._max_workers, len(tokens)),
            thread_name_prefix="logo-probe",
        )
        futures = {executor.submit(self._probe_token, token): index for index, token in enumerate(tokens)}
        abandoned = False
        try:
            for future in as_completed(futures):
                violation = future.result()
                if violation is None:
                    continue
                if fail_fast:
                    abandoned = True
                    return [violation]
                slots[futures[future]] = violation
        finally:
            # Probes already in flight finish on their own within the probe timeout.
            executor.shutdown(wait=not abandoned, cancel_futures=True)
        return [violation for violation in slots if violation is not None]

    def _probe_token(self, token: TokenRecord) -> Violation | None:
        try:
            result = self._probe.check(token.logo_uri)
        except Exception as exc:  # noqa: BLE001 - any probe fault is an unreachable logo
            logger.warning("Logo probe raised for %s: %s", token.logo_uri, exc)
            result = ProbeResult(uri=token.logo_uri, reachable=False, error=str(exc) or type(exc).__name__)

        if result.reachable:
            return None
        if result.error is not None:
            message = f"Failed to validate logo URI for token {token.symbol}: {token.logo_uri} ({result.error})"
        else:
            message = f"Invalid logo URI for token {token.symbol}: {token.logo_uri} (HTTP {result.status_code})"
        return Violation(
            kind=ViolationKind.UNREACHABLE_LOGO,
            message=message,
            context=_token_context(token, status_code=result.status_code, error=result.error),
        )


class TokenListValidator:
    """Checks a candidate token list against its schema, a governance policy and the previous version.

    Steps run in a fixed order: schema, list-level fields, timestamp, version,
    uniqueness, record immutability, chain IDs and finally logo reachability.
    Only the last step touches the network, and only when a probe is supplied.
    """

    def __init__(
        self,
        schema: Mapping[str, Any],
        policy: Policy = DEFAULT_POLICY,
        probe: LogoProbe | None = None,
        clock: Clock | None = None,
        probe_workers: int = 8,
    ) -> None:
        Draft7Validator.check_schema(schema)
        self._schema_validator = Draft7Validator(schema, format_checker=FormatChecker())
        self._policy = policy
        self._clock = clock or _utc_now
        self._logo_checker = LogoReachabilityChecker(probe, probe_workers) if probe is not None else None

    @property
    def policy(self) -> Policy:
        return self._policy

    def validate(
        self,
        candidate: Mapping[str, Any],
        previous: Mapping[str, Any] | TokenListDocument | None = None,
        *,
        fail_fast: bool = True,
    ) -> ValidationOutcome:
        now = self._clock()
        violations: list[Violation] = []

        def outcome(total_tokens: int, has_previous: bool, logos_checked: bool) -> ValidationOutcome:
            for violation in violations:
                logger.info("%s: %s", violation.kind.value, violation.message)
            result = ValidationOutcome(
                checked_at=now,
                total_tokens=total_tokens,
                has_previous=has_previous,
                logos_checked=logos_checked,
                violations=tuple(violations),
            )
            logger.info(
                "Token list validation %s with %d violation(s)",
                "passed" if result.passed else "failed",
                len(violations),
            )
            return result

        previous_document = self._parse_previous(previous)
        has_previous = previous_document is not None

        logger.debug("Checking schema conformance")
        schema_violations = list(self.check_schema(candidate))
        if schema_violations:
            # Later steps cannot interpret a malformed document.
            violations.extend(schema_violations[:1] if fail_fast else schema_violations)
            return outcome(0, has_previous, False)

        document = TokenListDocument.from_mapping(candidate)

        steps: list[tuple[str, Callable[[], Iterable[Violation]]]] = [
            ("list fields", lambda: self.check_list_fields(document)),
            ("timestamp", lambda: self.check_timestamp(document, previous_document, now)),
            ("version", lambda: self.check_version(document, previous_document)),
            ("uniqueness", lambda: self.check_uniqueness(document)),
            ("record immutability", lambda: self.check_immutable_records(document, previous_document)),
            ("chain IDs", lambda: self.check_chain_ids(document)),
        ]
        for name, step in steps:
            logger.debug("Checking %s", name)
            for violation in step():
                violations.append(violation)
                if fail_fast:
                    return outcome(len(document.tokens), has_previous, False)

        if self._logo_checker is None:
            logger.debug("No logo probe configured; skipping reachability")
            return outcome(len(document.tokens), has_previous, False)

        logger.debug("Probing %d logo URIs", len(document.tokens))
        violations.extend(self._logo_checker.check(document.tokens, fail_fast=fail_fast))
        return outcome(len(document.tokens), has_previous, True)

    def check_schema(self, raw: Any) -> Iterator[Violation]:
        errors = sorted(
            self._schema_validator.iter_errors(raw),
            key=lambda error: tuple(str(part) for part in error.absolute_path),
        )
        for error in errors:
            yield Violation(
                kind=ViolationKind.SCHEMA,
                message=f"Schema validation failed at {error.json_path}: {error.message}",
                context={"path": error.json_path, "validator": error.validator},
            )
        if errors:
            return
        try:
            TokenListDocument.from_mapping(raw)
        except (KeyError, TypeError, ValueError) as exc:
            yield Violation(
                kind=ViolationKind.SCHEMA,
                message=f"Schema validation failed: {exc}",
                context={"path": "$"},
            )

    def check_list_fields(self, document: TokenListDocument) -> Iterator[Violation]:
        policy = self._policy
        if document.name != policy.required_list_name:
            yield Violation(
                kind=ViolationKind.IMMUTABLE_FIELD,
                message="List name cannot be changed",
                context={"field": "name", "expected": policy.required_list_name, "actual": document.name},
            )
        missing = policy.required_keywords - document.keywords
        if missing:
            yield Violation(
                kind=ViolationKind.IMMUTABLE_FIELD,
                message=f"Keywords cannot be changed (missing: {', '.join(sorted(missing))})",
                context={"field": "keywords", "missing": sorted(missing)},
            )
        if document.logo_uri != policy.required_list_logo_uri:
            yield Violation(
                kind=ViolationKind.IMMUTABLE_FIELD,
                message="List logoURI cannot be changed",
                context={"field": "logoURI", "expected": policy.required_list_logo_uri, "actual": document.logo_uri},
            )

    def check_timestamp(
        self,
        document: TokenListDocument,
        previous: TokenListDocument | None,
        now: datetime,
    ) -> Iterator[Violation]:
        if document.timestamp > now:
            yield Violation(
                kind=ViolationKind.TIMESTAMP,
                message="Timestamp cannot be in the future",
                context={"timestamp": document.timestamp.isoformat(), "now": now.isoformat()},
            )
        if previous is not None and document.timestamp < previous.timestamp:
            yield Violation(
                kind=ViolationKind.TIMESTAMP,
                message="Timestamp cannot be older than previous version",
                context={"timestamp": document.timestamp.isoformat(), "previous": previous.timestamp.isoformat()},
            )

    def check_version(self, document: TokenListDocument, previous: TokenListDocument | None) -> Iterator[Violation]:
        if previous is None:
            return
        if document.version <= previous.version:
            yield Violation(
                kind=ViolationKind.VERSION,
                message=f"Version must be incremented (previous {previous.version}, got {document.version})",
                context={"version": str(document.version), "previous": str(previous.version)},
            )

    def check_uniqueness(self, document: TokenListDocument) -> Iterator[Violation]:
        seen_addresses: dict[tuple[int, str], TokenRecord] = {}
        for token in document.tokens:
            key = token.identity.key()
            first = seen_addresses.setdefault(key, token)
            if first is not token:
                yield Violation(
                    kind=ViolationKind.DUPLICATE,
                    message=(
                        f"Duplicate token address found: {token.address} on chain {token.chain_id} "
                        f"(used by {token.symbol} and {first.symbol})"
                    ),
                    context=_token_context(token, field="address", conflicts_with=first.symbol),
                )

        seen_names: dict[tuple[int, str], TokenRecord] = {}
        for token in document.tokens:
            first = seen_names.setdefault((token.chain_id, token.name.lower()), token)
            if first is not token:
                yield Violation(
                    kind=ViolationKind.DUPLICATE,
                    message=(
                        f'Duplicate token name found for chain {token.chain_id}: "{token.name}" '
                        f"(used by {token.symbol} and {first.symbol})"
                    ),
                    context=_token_context(token, field="name", conflicts_with=first.symbol),
                )

        seen_symbols: dict[tuple[int, str], TokenRecord] = {}
        for token in document.tokens:
            first = seen_symbols.setdefault((token.chain_id, token.symbol.lower()), token)
            if first is not token:
                yield Violation(
                    kind=ViolationKind.DUPLICATE,
                    message=(
                        f'Duplicate token symbol found for chain {token.chain_id}: "{token.symbol}" '
                        f"(used by {token.name} and {first.name})"
                    ),
                    context=_token_context(token, field="symbol", conflicts_with=first.name),
                )

        # logoURI is compared verbatim, not case-folded.
        seen_logos: dict[tuple[int, str], TokenRecord] = {}
        for token in document.tokens:
            first = seen_logos.setdefault((token.chain_id, token.logo_uri), token)
            if first is not token:
                yield Violation(
                    kind=ViolationKind.DUPLICATE,
                    message=(
                        f"Duplicate logoURI found for chain {token.chain_id}: {token.logo_uri} "
                        f"(used by {token.symbol} and {first.symbol})"
                    ),
                    context=_token_context(token, field="logoURI", conflicts_with=first.symbol),
                )

    def check_immutable_records(
        self,
        document: TokenListDocument,
        previous: TokenListDocument | None,
    ) -> Iterator[Violation]:
        if previous is None:
            return
        previous_tokens: dict[TokenIdentity, TokenRecord] = {token.identity: token for token in previous.tokens}
        # Tokens dropped from the candidate are not flagged; only changes to kept tokens are.
        for token in document.tokens:
            previous_token = previous_tokens.get(token.identity)
            if previous_token is None:
                continue
            if token.immutable_fields() != previous_token.immutable_fields():
                changed = [
                    name
                    for name, before, after in zip(
                        ("name", "symbol", "decimals", "logoURI"),
                        previous_token.immutable_fields(),
                        token.immutable_fields(),
                    )
                    if before != after
                ]
                yield Violation(
                    kind=ViolationKind.IMMUTABLE_RECORD,
                    message=f"Existing token {token.symbol} ({token.address}) has been modified",
                    context=_token_context(token, changed=changed),
                )

    def check_chain_ids(self, document: TokenListDocument) -> Iterator[Violation]:
        allowed = self._policy.allowed_chain_ids
        for token in document.tokens:
            if token.chain_id not in allowed:
                yield Violation(
                    kind=ViolationKind.CHAIN_ID,
                    message=(
                        f"Invalid chain ID {token.chain_id} for token {token.symbol}. "
                        f"Only {', '.join(str(chain_id) for chain_id in allowed)} are allowed."
                    ),
                    context=_token_context(token),
                )

    @staticmethod
    def _parse_previous(previous: Mapping[str, Any] | TokenListDocument | None) -> TokenListDocument | None:
        if previous is None or isinstance(previous, TokenListDocument):
            return previous
        try:
            return TokenListDocument.from_mapping(previous)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Previous token list could not be parsed; treating it as absent: %s", exc)
            return None
