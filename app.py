"""Streamlit front-end for the token list validator."""
from __future__ import annotations

from typing import Any, Mapping

import pandas as pd
import streamlit as st

from tokenlist_checker import (
    StaticTokenListRepository,
    TokenListValidationContext,
    TokenListValidator,
    ValidateTokenListUseCase,
    HttpLogoProbe,
)
from tokenlist_checker.application.dto import ValidationResponse
from tokenlist_checker.config import SETTINGS
from tokenlist_checker.domain.errors import TokenListLoadError
from tokenlist_checker.domain.results import ValidationOutcome
from tokenlist_checker.infrastructure.schema.schema_store import load_schema
from tokenlist_checker.infrastructure.storage import policy_store
from tokenlist_checker.presentation.violation_report import (
    REPORT_COLUMNS,
    render_csv,
    render_html,
    render_text,
    violations_to_rows,
)


st.set_page_config(page_title="Token List Validator", layout="wide")
st.title("Token List Validation Tool")


def policy_dataframe() -> pd.DataFrame:
    policy = policy_store.load_policy()
    return pd.DataFrame(
        [
            {"setting": "List name", "value": policy.required_list_name},
            {"setting": "Required keywords", "value": ", ".join(sorted(policy.required_keywords))},
            {"setting": "List logoURI", "value": policy.required_list_logo_uri},
            {"setting": "Allowed chain IDs", "value": ", ".join(str(c) for c in policy.allowed_chain_ids)},
        ]
    )


def tokens_to_dataframe(document: Mapping[str, Any] | None) -> pd.DataFrame:
    tokens = document.get("tokens", []) if isinstance(document, Mapping) else []
    return pd.DataFrame(
        [token for token in tokens if isinstance(token, Mapping)],
        columns=["chainId", "address", "name", "symbol", "decimals", "logoURI"],
    )


def run_validation(
    candidate_bytes: bytes,
    previous_bytes: bytes | None,
    probe_logos: bool,
    collect_all: bool,
) -> ValidationResponse:
    probe = HttpLogoProbe(timeout=SETTINGS.probe_timeout) if probe_logos else None
    validator = TokenListValidator(
        schema=load_schema(),
        policy=policy_store.load_policy(),
        probe=probe,
        probe_workers=SETTINGS.probe_workers,
    )
    context = TokenListValidationContext(
        candidate_repository=StaticTokenListRepository(candidate_bytes, label="candidate upload"),
        previous_repository=StaticTokenListRepository(previous_bytes, label="previous upload"),
        validator=validator,
    )
    try:
        return ValidateTokenListUseCase(context).execute(fail_fast=not collect_all)
    finally:
        if probe is not None:
            probe.close()


if "view" not in st.session_state:
    st.session_state["view"] = "validate"
if "result" not in st.session_state:
    st.session_state["result"] = None


if st.session_state["view"] == "validate":
    col1, col2 = st.columns(2)
    with col1:
        candidate_file = st.file_uploader("Upload candidate token list", type=["json"])
    with col2:
        previous_file = st.file_uploader("Upload previous token list (optional)", type=["json"])

    with st.expander("Governance policy", expanded=False):
        st.dataframe(policy_dataframe(), hide_index=True, use_container_width=True)

    probe_logos = st.checkbox("Check logo reachability (network)", value=True)
    collect_all = st.checkbox("Report every violation", value=True)

    run_btn = st.button("Run Validation", disabled=candidate_file is None)
    if run_btn and candidate_file is not None:
        candidate_bytes = candidate_file.read()
        previous_bytes = previous_file.read() if previous_file is not None else None
        try:
            with st.spinner("Validating..."):
                response = run_validation(candidate_bytes, previous_bytes, probe_logos, collect_all)
        except TokenListLoadError as exc:
            st.error(str(exc))
        else:
            st.session_state["result"] = {
                "response": response,
                "report_csv": render_csv(response.outcome.violations),
                "report_html": render_html(response.outcome),
            }
            st.session_state["view"] = "results"
            st.rerun()
else:
    back_clicked = st.button("← Back", key="back_to_validate")
    if back_clicked:
        st.session_state["view"] = "validate"
        st.session_state["result"] = None
        st.rerun()

    result = st.session_state.get("result")
    if not result:
        st.info("No results available. Upload a token list and run validation first.")
    else:
        response: ValidationResponse = result["response"]
        outcome: ValidationOutcome = response.outcome

        st.subheader("Summary")
        if outcome.passed:
            st.success(render_text(outcome))
        else:
            st.error(f"{len(outcome.violations)} violation(s) found")
        st.metric("Tokens", outcome.total_tokens)
        st.metric("Previous version supplied", "yes" if outcome.has_previous else "no")
        st.metric("Logos checked", "yes" if outcome.logos_checked else "no")

        tabs = st.tabs(["Violations", "Candidate", "Previous"])
        with tabs[0]:
            st.dataframe(pd.DataFrame(violations_to_rows(outcome.violations), columns=REPORT_COLUMNS))
            st.download_button(
                "Download report CSV",
                data=result["report_csv"],
                file_name="tokenlist_report.csv",
                mime="text/csv",
            )
            st.download_button(
                "Download report HTML",
                data=result["report_html"].encode("utf-8"),
                file_name="tokenlist_report.html",
                mime="text/html",
            )
        with tabs[1]:
            st.dataframe(tokens_to_dataframe(response.candidate))
        with tabs[2]:
            st.dataframe(tokens_to_dataframe(response.previous))
