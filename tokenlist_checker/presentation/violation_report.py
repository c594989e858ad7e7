"""Report generators for token list violations."""
from __future__ import annotations

import csv
import html
import io
from typing import Sequence

from tokenlist_checker.domain.models import Violation
from tokenlist_checker.domain.results import SUCCESS_MESSAGE, ValidationOutcome

REPORT_COLUMNS = ["kind", "message", "chain_id", "address", "symbol", "path"]


def violations_to_rows(violations: Sequence[Violation]) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for item in violations:
        context = item.context
        rows.append(
            {
                "kind": item.kind.value,
                "message": item.message,
                "chain_id": str(context.get("chain_id", "")),
                "address": str(context.get("address", "")),
                "symbol": str(context.get("symbol", "")),
                "path": str(context.get("path", "")),
            }
        )
    return rows


def render_csv(violations: Sequence[Violation]) -> bytes:
    rows = violations_to_rows(violations)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=REPORT_COLUMNS)
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def render_html(outcome: ValidationOutcome) -> str:
    rows = violations_to_rows(outcome.violations)
    if not rows:
        return f"<p>{SUCCESS_MESSAGE}</p>"
    header = "".join(f"<th>{col}</th>" for col in REPORT_COLUMNS)
    body_parts = []
    for row in rows:
        body_parts.append("<tr>" + "".join(f"<td>{html.escape(value)}</td>" for value in row.values()) + "</tr>")
    body_html = "".join(body_parts)
    return f"<table><thead><tr>{header}</tr></thead><tbody>{body_html}</tbody></table>"


def render_text(outcome: ValidationOutcome) -> str:
    if outcome.passed:
        return SUCCESS_MESSAGE
    lines = [f"Token list validation failed with {len(outcome.violations)} violation(s):"]
    lines.extend(f"- [{violation.kind.value}] {violation.message}" for violation in outcome.violations)
    return "\n".join(lines)
