"""Command-line entrypoint for token list validation."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from jsonschema.exceptions import SchemaError

from tokenlist_checker.application.use_cases import TokenListValidationContext, ValidateTokenListUseCase
from tokenlist_checker.config import SETTINGS
from tokenlist_checker.domain.errors import TokenListLoadError
from tokenlist_checker.domain.repositories import PreviousTokenListRepository
from tokenlist_checker.domain.services import TokenListValidator
from tokenlist_checker.infrastructure.probing.http_probe import HttpLogoProbe
from tokenlist_checker.infrastructure.repositories.json_repositories import (
    GitHistoryTokenListRepository,
    JsonFileTokenListRepository,
    StaticTokenListRepository,
)
from tokenlist_checker.infrastructure.schema.schema_store import load_schema
from tokenlist_checker.infrastructure.storage.policy_store import load_policy
from tokenlist_checker.presentation.violation_report import render_csv, render_html, render_text

EXIT_OK = 0
EXIT_VIOLATIONS = 1
EXIT_LOAD_ERROR = 2


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate a token list against its previous version and policy")
    parser.add_argument(
        "candidate",
        type=Path,
        nargs="?",
        default=SETTINGS.token_list_path,
        help=f"Path to the token list under review (default: {SETTINGS.token_list_path})",
    )
    history = parser.add_mutually_exclusive_group()
    history.add_argument("--previous", type=Path, help="Path to the previous accepted token list")
    history.add_argument("--git-ref", type=str, help="Read the previous token list from this git ref")
    history.add_argument("--no-history", action="store_true", help="Treat the candidate as a first submission")
    parser.add_argument("--policy", type=Path, help="JSON file overriding the governance policy")
    parser.add_argument("--schema", type=Path, help="JSON Schema for the token list document")
    parser.add_argument("--skip-logo-check", action="store_true", help="Do not probe logo URIs over the network")
    parser.add_argument("--all", dest="collect_all", action="store_true", help="Report every violation, not just the first")
    parser.add_argument("--timeout", type=float, default=SETTINGS.probe_timeout, help="Per-probe timeout in seconds")
    parser.add_argument("--workers", type=int, default=SETTINGS.probe_workers, help="Concurrent logo probes")
    parser.add_argument("--format", choices=("text", "csv", "html"), default="text", help="Report format")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...)")
    return parser.parse_args(argv)


def build_previous_repository(args: argparse.Namespace) -> PreviousTokenListRepository | None:
    if args.no_history:
        return None
    if args.previous is not None:
        return StaticTokenListRepository(args.previous, label=str(args.previous))
    return GitHistoryTokenListRepository(args.candidate, ref=args.git_ref)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    probe = None if args.skip_logo_check else HttpLogoProbe(timeout=args.timeout)
    try:
        validator = TokenListValidator(
            schema=load_schema(args.schema),
            policy=load_policy(args.policy),
            probe=probe,
            probe_workers=args.workers,
        )
        context = TokenListValidationContext(
            candidate_repository=JsonFileTokenListRepository(args.candidate),
            previous_repository=build_previous_repository(args),
            validator=validator,
        )
        response = ValidateTokenListUseCase(context).execute(fail_fast=not args.collect_all)
    except (TokenListLoadError, SchemaError, ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_LOAD_ERROR
    finally:
        if probe is not None:
            probe.close()

    outcome = response.outcome
    if args.format == "csv":
        sys.stdout.write(render_csv(outcome.violations).decode("utf-8"))
    elif args.format == "html":
        print(render_html(outcome))
    elif outcome.passed:
        print(render_text(outcome))
    else:
        print(render_text(outcome), file=sys.stderr)

    return EXIT_OK if outcome.passed else EXIT_VIOLATIONS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
