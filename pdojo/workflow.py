"""Challenge Workflow — the state machine that drives one practice session.

Phases: idle → loading → active → submitting → resolved
resolved → active when the user edits; any phase → loading on request_challenge().

All transitions run on a single asyncio event loop, so they never interleave.
request_challenge() and submit() schedule the collaborator call as a task and
return immediately; the caller may keep editing while it is outstanding.

Late responses are filtered by sequence number (challenge fetches) and by
submission token (evaluations): anything that does not belong to the most
recent request is dropped without touching the state.
"""

import asyncio
import sys
from pathlib import Path
from typing import Callable

from pdojo.buffer import SolutionBuffer
from pdojo.errors import InvalidTransition, SourceUnavailable
from pdojo.evaluators.gateway import EvaluatorGateway
from pdojo.sources.base import PatternSource
from pdojo.state import Attempt, Challenge, Phase, SubmissionToken, Verdict, WorkflowState
from pdojo.utils.validator import validate_solution

VALID_TRANSITIONS: dict[Phase, list[Phase]] = {
    Phase.IDLE: [Phase.LOADING],
    Phase.LOADING: [Phase.LOADING, Phase.ACTIVE, Phase.IDLE],
    Phase.ACTIVE: [Phase.LOADING, Phase.SUBMITTING],
    Phase.SUBMITTING: [Phase.LOADING, Phase.RESOLVED, Phase.ACTIVE],
    Phase.RESOLVED: [Phase.LOADING, Phase.ACTIVE, Phase.SUBMITTING],
}

EDITABLE_PHASES = {Phase.ACTIVE, Phase.SUBMITTING, Phase.RESOLVED}

Listener = Callable[[WorkflowState], None]


def can_transition(current: Phase, target: Phase) -> bool:
    """Check if a phase transition is valid."""
    return target in VALID_TRANSITIONS.get(current, [])


def validate_transition(current: Phase, target: Phase) -> None:
    """Validate a phase transition, raising InvalidTransition if invalid."""
    if not can_transition(current, target):
        allowed = [p.value for p in VALID_TRANSITIONS.get(current, [])]
        raise InvalidTransition(
            f"Cannot move from '{current.value}' to '{target.value}'. "
            f"Allowed from '{current.value}': {allowed}"
        )


class ChallengeWorkflow:
    """Owns the WorkflowState for one user session.

    Presentation layers read through the properties or snapshot() and mutate
    only through request_challenge(), edit() and submit().
    """

    def __init__(self, source: PatternSource, gateway: EvaluatorGateway):
        self._source = source
        self._gateway = gateway
        self._buffer = SolutionBuffer()

        self._phase = Phase.IDLE
        self._challenge: Challenge | None = None
        self._verdict: Verdict | None = None
        self._error: str | None = None
        self._history: list[Attempt] = []

        self._request_seq = 0
        self._submit_seq = 0
        self._expected_token: SubmissionToken | None = None

        self._tasks: set[asyncio.Task] = set()
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def challenge(self) -> Challenge | None:
        return self._challenge

    @property
    def draft(self) -> str:
        return self._buffer.get_text()

    @property
    def verdict(self) -> Verdict | None:
        return self._verdict

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def history(self) -> list[Attempt]:
        return list(self._history)

    @property
    def tasks(self) -> set[asyncio.Task]:
        """Fetch and evaluation tasks that have not finished yet."""
        return set(self._tasks)

    @property
    def pending(self) -> bool:
        """True while a fetch or evaluation task is still running."""
        return any(not t.done() for t in self._tasks)

    def snapshot(self) -> WorkflowState:
        return {
            "phase": self._phase,
            "challenge": self._challenge,
            "draft": self._buffer.get_text(),
            "verdict": self._verdict,
            "error": self._error,
            "history": list(self._history),
        }

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with a snapshot after every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def request_challenge(self) -> asyncio.Task:
        """Abandon the current challenge and fetch a new one.

        Legal from any phase. Any evaluation still in flight is logically
        cancelled: its result will not match the expected token.
        Must be called from inside the running event loop.
        """
        self._request_seq += 1
        seq = self._request_seq

        self._expected_token = None
        self._challenge = None
        self._verdict = None
        self._error = None
        self._buffer.reset()
        self._move_to(Phase.LOADING)

        return self._spawn(self._load(seq))

    def edit(self, text: str) -> None:
        """Replace the draft text.

        From resolved this clears the displayed verdict. From submitting a
        changed text supersedes the in-flight snapshot and returns to active,
        so the new draft can be submitted without waiting.
        """
        if self._phase not in EDITABLE_PHASES:
            raise InvalidTransition(f"Cannot edit while '{self._phase.value}'.")

        self._buffer.set_text(text)
        self._error = None
        if self._phase is Phase.RESOLVED:
            # The verdict stays in history; only the display is cleared
            self._verdict = None
            self._move_to(Phase.ACTIVE)
        elif self._phase is Phase.SUBMITTING and text != self._expected_token.text:
            # The in-flight call keeps running but now judges a superseded snapshot
            self._expected_token = None
            self._move_to(Phase.ACTIVE)
        else:
            self._notify()

    def submit(self) -> asyncio.Task:
        """Send the current draft to the evaluator.

        Legal in active, and in resolved to retry the same draft (e.g. after
        an evaluation failure). Raises EmptySolution for a blank draft without
        contacting the evaluator, InvalidTransition in any other phase.
        """
        validate_transition(self._phase, Phase.SUBMITTING)
        # A draft bound to a superseded challenge is never submitted
        if self._challenge is None or self._buffer.challenge_id != self._challenge.challenge_id:
            raise InvalidTransition("Draft is not bound to the active challenge.")

        try:
            text = validate_solution(self._buffer.get_text())
        except ValueError as exc:
            self._error = str(exc)
            self._notify()
            raise

        self._submit_seq += 1
        token = SubmissionToken(
            challenge_id=self._challenge.challenge_id, text=text, seq=self._submit_seq
        )
        self._expected_token = token
        self._verdict = None
        self._error = None
        self._move_to(Phase.SUBMITTING)

        return self._spawn(self._evaluate(self._challenge, token))

    async def settle(self) -> None:
        """Wait until every outstanding fetch and evaluation has finished."""
        # Cancelling settle must not cancel the tasks it waits on
        while self._tasks:
            await asyncio.wait(list(self._tasks))

    # ------------------------------------------------------------------
    # Collaborator calls and response application
    # ------------------------------------------------------------------

    async def _load(self, seq: int) -> Challenge | None:
        try:
            challenge = await self._source.fetch_challenge()
        except SourceUnavailable as exc:
            self._apply_source_failure(seq, str(exc) or "Pattern source unavailable.")
            return None
        except Exception as exc:
            # Anything else escaping the collaborator is still an unavailable source
            print(f"[pdojo] Pattern source raised {exc!r}", file=sys.stderr)
            self._apply_source_failure(seq, f"Pattern source unavailable: {exc}")
            return None

        if seq != self._request_seq:
            return None

        self._challenge = challenge
        self._buffer.reset(challenge.challenge_id)
        self._move_to(Phase.ACTIVE)
        return challenge

    def _apply_source_failure(self, seq: int, message: str) -> None:
        if seq != self._request_seq:
            return
        print(f"[pdojo] {message}", file=sys.stderr)
        self._error = message
        self._move_to(Phase.IDLE)

    async def _evaluate(self, challenge: Challenge, token: SubmissionToken) -> Verdict:
        try:
            verdict = await self._gateway.evaluate(challenge, token.text)
        except Exception as exc:
            # The gateway converts failures itself; this covers gateways that do not
            print(f"[pdojo] Evaluator gateway raised {exc!r}", file=sys.stderr)
            verdict = Verdict.failed(f"Evaluator gateway error: {exc}")

        self._apply_verdict(token, verdict)
        return verdict

    def _apply_verdict(self, token: SubmissionToken, verdict: Verdict) -> bool:
        """Apply a verdict if it answers the most recent submission. Returns True if applied."""
        if token != self._expected_token or self._phase is not Phase.SUBMITTING:
            return False

        self._expected_token = None
        self._verdict = verdict
        self._history.append(Attempt(token=token, verdict=verdict))
        self._move_to(Phase.RESOLVED)
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _move_to(self, target: Phase) -> None:
        validate_transition(self._phase, target)
        self._phase = target
        self._notify()

    def _notify(self) -> None:
        state = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as exc:
                # A broken listener must not leave a transition half-applied
                print(f"[pdojo] Listener raised {exc!r}", file=sys.stderr)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task


def create_workflow(config: dict | None = None) -> ChallengeWorkflow:
    """Build a workflow with the pattern source and evaluator named in config."""
    if config is None:
        from pdojo.config import get_config

        config = get_config()

    source_kind = config.get("pattern_source", "static")
    if source_kind == "static":
        from pdojo.sources.static import StaticPatternSource

        catalog = Path(__file__).resolve().parent / config.get("catalog_path", "challenges.yaml")
        source = StaticPatternSource.from_yaml(catalog)
    elif source_kind == "llm":
        from pdojo.sources.llm import LLMPatternSource

        source = LLMPatternSource(
            model_name=config.get("generator_model"),
            timeout=config.get("source_timeout_seconds", 30),
        )
    else:
        raise ValueError(f"Unknown pattern_source '{source_kind}'. Must be 'static' or 'llm'.")

    evaluator_kind = config.get("evaluator", "heuristic")
    if evaluator_kind == "heuristic":
        from pdojo.evaluators.heuristic import HeuristicEvaluator

        evaluator = HeuristicEvaluator(
            delay=config.get("heuristic_delay_seconds", 1.0),
            failure_rate=config.get("heuristic_failure_rate", 0.0),
            min_lines=config.get("heuristic_min_lines", 3),
        )
    elif evaluator_kind == "llm":
        from pdojo.evaluators.llm import LLMEvaluator

        evaluator = LLMEvaluator(model_name=config.get("judge_model"))
    else:
        raise ValueError(f"Unknown evaluator '{evaluator_kind}'. Must be 'heuristic' or 'llm'.")

    gateway = EvaluatorGateway(evaluator, timeout=config.get("evaluation_timeout_seconds", 60))
    return ChallengeWorkflow(source, gateway)
