"""Entry point: terminal practice loop on top of the challenge workflow."""

import sys

from pdojo.config import get_config
from pdojo.errors import EmptySolution, InvalidTransition
from pdojo.runner import WorkflowRunner
from pdojo.state import Outcome, Phase, WorkflowState
from pdojo.utils.formatter import write_report
from pdojo.workflow import create_workflow

USAGE = "Usage: pdojo [--source static|llm] [--evaluator heuristic|llm]"

HELP = """\
Commands:
  new     fetch a new challenge
  edit    replace your draft (finish with a line containing only '.')
  show    print the challenge, draft and last verdict
  submit  send the draft for judging
  report  write a Markdown report of this session
  quit    exit
"""


def _read_draft() -> str:
    """Read a multi-line draft from stdin, terminated by a lone '.'."""
    print("Enter your solution (end with a line containing only '.'):")
    lines = []
    while True:
        try:
            line = input()
        except EOFError:
            break
        if line == ".":
            break
        lines.append(line)
    return "\n".join(lines)


def _render_state(state: WorkflowState) -> str:
    lines = [f"[pdojo] Phase: {state['phase'].value}"]
    challenge = state["challenge"]
    if challenge:
        lines.append(f"\n== {challenge.title} ({challenge.difficulty or 'unrated'}) ==")
        lines.append(challenge.prompt)
        lines.append("\n-- Draft --")
        lines.append(state["draft"] or "(empty)")

    verdict = state["verdict"]
    if verdict:
        if verdict.outcome is Outcome.ACCEPTED:
            lines.append("\nAccepted!")
        elif verdict.outcome is Outcome.REJECTED:
            lines.append("\nRejected.")
        else:
            lines.append(f"\nCould not evaluate: {verdict.reason} (type 'submit' to retry)")
        if verdict.feedback:
            lines.append(verdict.feedback)

    if state["error"]:
        lines.append(f"\nError: {state['error']}")
    return "\n".join(lines)


def run(source: str | None = None, evaluator: str | None = None) -> None:
    """Run an interactive practice session.

    Args:
        source: Override for the pattern source ("static" or "llm"). None uses config.
        evaluator: Override for the evaluator ("heuristic" or "llm"). None uses config.
    """
    config = dict(get_config())
    if source:
        config["pattern_source"] = source
    if evaluator:
        config["evaluator"] = evaluator
    wait_timeout = config.get("evaluation_timeout_seconds", 60) + 5

    try:
        workflow = create_workflow(config)
    except ValueError as exc:
        print(f"[pdojo] {exc}", file=sys.stderr)
        print(f"[pdojo] {USAGE}", file=sys.stderr)
        raise SystemExit(2) from exc

    with WorkflowRunner(workflow) as runner:
        print(HELP)
        runner.request_challenge()
        runner.wait(wait_timeout)
        print(_render_state(runner.snapshot()))

        while True:
            try:
                command = input("\npdojo> ").strip().lower()
            except EOFError:
                break

            try:
                if command in ("quit", "exit", "q"):
                    break
                elif command == "new":
                    runner.request_challenge()
                    print("[pdojo] Fetching a challenge...")
                    runner.wait(wait_timeout)
                    print(_render_state(runner.snapshot()))
                elif command == "edit":
                    runner.edit(_read_draft())
                elif command == "show":
                    print(_render_state(runner.snapshot()))
                elif command == "submit":
                    runner.submit()
                    print("[pdojo] Judging...")
                    if not runner.wait(wait_timeout):
                        print("[pdojo] Still waiting on the evaluator; check back with 'show'.")
                    print(_render_state(runner.snapshot()))
                elif command == "report":
                    output_path = write_report(runner.snapshot())
                    print(f"[pdojo] Report written to: {output_path}")
                elif command in ("help", "?", ""):
                    print(HELP)
                else:
                    print(f"Unknown command '{command}'.\n{HELP}")
            except EmptySolution:
                print("[pdojo] Your draft is empty. Use 'edit' first.")
            except InvalidTransition as exc:
                state = runner.snapshot()
                if state["phase"] is Phase.IDLE:
                    print("[pdojo] No active challenge. Use 'new' to fetch one.")
                else:
                    print(f"[pdojo] {exc}")


def main() -> None:
    """CLI entry point — accepts --source and --evaluator overrides."""
    source = None
    evaluator = None
    args = sys.argv[1:]

    if "--source" in args:
        i = args.index("--source")
        source = args[i + 1] if i + 1 < len(args) else None
    if "--evaluator" in args:
        i = args.index("--evaluator")
        evaluator = args[i + 1] if i + 1 < len(args) else None

    run(source=source, evaluator=evaluator)


if __name__ == "__main__":
    main()
