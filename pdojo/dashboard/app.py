"""Pattern Dojo — Streamlit UI for practicing coding patterns."""

import sys
from pathlib import Path

# Add project root to path so 'pdojo' package is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

import time

import streamlit as st

from pdojo.config import get_config
from pdojo.errors import EmptySolution, InvalidTransition
from pdojo.runner import WorkflowRunner, start_loop_thread
from pdojo.state import Attempt, Outcome, Phase, WorkflowState
from pdojo.utils.formatter import render_report
from pdojo.workflow import EDITABLE_PHASES, create_workflow

POLL_SECONDS = 0.5

st.set_page_config(page_title="Pattern Dojo", layout="wide")
st.title("Pattern Dojo")
st.markdown(
    "Pick up a coding-pattern challenge, write a solution, and have it judged. "
    "The judge may be a local heuristic or an LLM; either way it can be slow or "
    "fail, and you can keep editing while it works."
)

st.divider()


@st.cache_resource
def _shared_loop():
    """One event loop thread per server process, shared by every session."""
    loop, _ = start_loop_thread("pdojo-dashboard")
    return loop


def _get_runner() -> WorkflowRunner:
    """One workflow per browser session, created on first use.

    Runners borrow the shared loop, so an abandoned session leaves no thread
    behind; its workflow is garbage collected with the session state.
    """
    if "pdojo_runner" not in st.session_state:
        st.session_state["pdojo_runner"] = WorkflowRunner(
            create_workflow(get_config()), loop=_shared_loop()
        )
        st.session_state["bound_challenge_id"] = None
        st.session_state["draft_input"] = ""
    return st.session_state["pdojo_runner"]


# ---------------------------------------------------------------------------
# Callbacks: the only places the UI mutates the workflow
# ---------------------------------------------------------------------------


def _on_new_challenge() -> None:
    _get_runner().request_challenge()


def _on_draft_change() -> None:
    try:
        _get_runner().edit(st.session_state["draft_input"])
    except InvalidTransition as exc:
        st.session_state["flash_error"] = str(exc)


def _on_submit() -> None:
    try:
        _get_runner().submit()
    except EmptySolution:
        st.session_state["flash_error"] = "Write a solution before submitting."
    except InvalidTransition as exc:
        st.session_state["flash_error"] = str(exc)


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def _render_verdict(state: WorkflowState) -> None:
    verdict = state["verdict"]
    if verdict is None:
        return
    if verdict.outcome is Outcome.ACCEPTED:
        st.success("Accepted")
    elif verdict.outcome is Outcome.REJECTED:
        st.error("Rejected")
    else:
        st.warning(f"Could not evaluate: {verdict.reason} Submit again to retry.")
    if verdict.feedback:
        st.markdown(verdict.feedback)


def _render_history_table(history: list[Attempt]) -> str:
    """Build a markdown table of judged attempts."""
    if not history:
        return "*No submissions judged yet.*"

    lines = [
        "| # | Challenge | Outcome | Feedback |",
        "|---|-----------|---------|----------|",
    ]
    for i, attempt in enumerate(history, 1):
        verdict = attempt.verdict
        note = (verdict.reason or verdict.feedback or "").replace("|", "\\|")
        lines.append(
            f"| {i} | `{attempt.token.challenge_id}` | {verdict.outcome.value} | {note} |"
        )
    return "\n".join(lines)


def _render_challenge(state: WorkflowState) -> None:
    challenge = state["challenge"]
    st.subheader(challenge.title)
    details = [d for d in (challenge.language, challenge.difficulty) if d]
    if details:
        st.caption(" · ".join(details))
    st.markdown(challenge.prompt)


# ---------------------------------------------------------------------------
# Page logic, driven by the workflow phase
# ---------------------------------------------------------------------------

runner = _get_runner()
state = runner.snapshot()
phase = state["phase"]

# A new challenge always starts from an empty editor
challenge_id = state["challenge"].challenge_id if state["challenge"] else None
if challenge_id != st.session_state.get("bound_challenge_id"):
    st.session_state["bound_challenge_id"] = challenge_id
    st.session_state["draft_input"] = state["draft"]

st.button(
    "New challenge",
    type="primary" if phase in (Phase.IDLE, Phase.RESOLVED) else "secondary",
    on_click=_on_new_challenge,
)

if state["error"]:
    st.error(state["error"])
if st.session_state.get("flash_error"):
    st.error(st.session_state.pop("flash_error"))

if phase is Phase.IDLE and not state["error"]:
    st.info("Press **New challenge** to start.")

if phase is Phase.LOADING:
    with st.spinner("Fetching a challenge..."):
        runner.wait(POLL_SECONDS)
    st.rerun()

if state["challenge"] is not None:
    _render_challenge(state)

    st.text_area(
        "Your solution:",
        key="draft_input",
        height=320,
        placeholder="Write your solution here...",
        on_change=_on_draft_change,
        disabled=phase not in EDITABLE_PHASES,
    )

    st.button(
        "Submit",
        on_click=_on_submit,
        disabled=phase is Phase.SUBMITTING,
    )

    if phase is Phase.SUBMITTING:
        st.info("Judging your solution... you can keep editing.")
    _render_verdict(state)

st.divider()

with st.expander("Attempt history", expanded=False):
    st.markdown(_render_history_table(state["history"]))

if state["history"]:
    st.download_button(
        label="Download report.md",
        data=render_report(state),
        file_name="report.md",
        mime="text/markdown",
    )

# Poll until the outstanding evaluation settles
if phase is Phase.SUBMITTING:
    time.sleep(POLL_SECONDS)
    st.rerun()
