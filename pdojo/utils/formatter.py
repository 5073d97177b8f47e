"""Report Formatter — renders a practice session as a Markdown report."""

import re
from pathlib import Path

from pdojo.config import PACKAGE_DIR, get_config
from pdojo.state import Attempt, Outcome, WorkflowState

_OUTCOME_LABELS = {
    Outcome.ACCEPTED: "Accepted",
    Outcome.REJECTED: "Rejected",
    Outcome.EVALUATION_FAILED: "Evaluation failed",
}

_BACKTICK_RUN = re.compile(r"`+")


def _fenced(text: str) -> list[str]:
    """Wrap text in a code fence longer than any backtick run inside it."""
    longest = max((len(run) for run in _BACKTICK_RUN.findall(text)), default=0)
    fence = "`" * max(3, longest + 1)
    return [fence, text, fence]


def _render_attempt(number: int, attempt: Attempt) -> list[str]:
    verdict = attempt.verdict
    lines = [f"### Attempt {number} — {_OUTCOME_LABELS[verdict.outcome]}", ""]
    lines.append(f"- **Challenge:** `{attempt.token.challenge_id}`")
    lines.append(f"- **Submitted:** {attempt.token.submitted_at}")
    lines.append(f"- **Resolved:** {attempt.resolved_at}")
    if verdict.reason:
        lines.append(f"- **Reason:** {verdict.reason}")
    if verdict.feedback:
        lines.append(f"- **Feedback:** {verdict.feedback}")
    lines.append("")
    lines.extend(_fenced(attempt.token.text))
    lines.append("")
    return lines


def render_report(state: WorkflowState) -> str:
    """Convert a workflow snapshot into a Markdown practice report."""
    lines = ["# Pattern Dojo — Practice Report", ""]

    challenge = state.get("challenge")
    if challenge:
        lines.append(f"## Current Challenge: {challenge.title}")
        lines.append("")
        details = [d for d in (challenge.language, challenge.difficulty) if d]
        if details:
            lines.append(f"*{' · '.join(details)}*")
            lines.append("")
        lines.append(challenge.prompt)
        lines.append("")

        draft = state.get("draft", "")
        if draft.strip():
            lines.append("**Current draft:**")
            lines.append("")
            lines.extend(_fenced(draft))
            lines.append("")

    history = state.get("history", [])
    if history:
        accepted = sum(1 for a in history if a.verdict.outcome is Outcome.ACCEPTED)
        failed = sum(1 for a in history if a.verdict.is_failure)
        lines.append("## Attempts")
        lines.append("")
        lines.append(
            f"{len(history)} judged submission(s): {accepted} accepted, "
            f"{len(history) - accepted - failed} rejected, {failed} evaluation failure(s)."
        )
        lines.append("")
        for i, attempt in enumerate(history, 1):
            lines.extend(_render_attempt(i, attempt))
    else:
        lines.append("*No submissions were judged this session.*")
        lines.append("")

    return "\n".join(lines)


def write_report(state: WorkflowState) -> Path:
    """Write the session report as Markdown to the configured output path.

    Returns the Path to the written file.
    """
    config = get_config()
    base_path = PACKAGE_DIR / config["output_path"]
    output_dir = base_path.parent
    output_dir.mkdir(parents=True, exist_ok=True)

    stem = base_path.stem

    # Find a non-conflicting filename
    output_path = output_dir / f"{stem}.md"
    counter = 1
    while output_path.exists():
        counter += 1
        output_path = output_dir / f"{stem} ({counter}).md"

    output_path.write_text(render_report(state), encoding="utf-8")
    return output_path
