"""Workflow state — the data passed between the workflow and everything that reads it."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, TypedDict


class Phase(str, Enum):
    IDLE = "idle"  # No active challenge.
    LOADING = "loading"  # Challenge request in flight.
    ACTIVE = "active"  # Challenge present, user editing, no pending verdict.
    SUBMITTING = "submitting"  # Evaluation in flight for one submission token.
    RESOLVED = "resolved"  # Verdict present, editing still allowed.


class Outcome(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EVALUATION_FAILED = "evaluation_failed"


@dataclass(frozen=True)
class Challenge:
    """A single pattern-solving prompt. Immutable once fetched."""

    challenge_id: str  # Opaque, unique per fetch.
    title: str
    prompt: str
    language: str | None = None
    difficulty: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def keywords(self) -> list[str]:
        return list(self.metadata.get("keywords", []))


@dataclass(frozen=True)
class SubmissionToken:
    """Snapshot of exactly which challenge + text a submission was made for.

    Two tokens are equal only when both the challenge id and the text match;
    the sequence number and timestamp are bookkeeping for the history log.
    """

    challenge_id: str
    text: str
    seq: int = field(default=0, compare=False)
    submitted_at: str = field(default_factory=lambda: datetime.now().isoformat(), compare=False)


@dataclass(frozen=True)
class Verdict:
    """Outcome of evaluating one submission token."""

    outcome: Outcome
    reason: str | None = None  # Set for evaluation_failed.
    feedback: str = ""  # Judge's explanation, if any.

    @classmethod
    def accepted(cls, feedback: str = "") -> "Verdict":
        return cls(Outcome.ACCEPTED, feedback=feedback)

    @classmethod
    def rejected(cls, feedback: str = "") -> "Verdict":
        return cls(Outcome.REJECTED, feedback=feedback)

    @classmethod
    def failed(cls, reason: str) -> "Verdict":
        return cls(Outcome.EVALUATION_FAILED, reason=reason)

    @property
    def is_failure(self) -> bool:
        return self.outcome is Outcome.EVALUATION_FAILED


@dataclass(frozen=True)
class Attempt:
    """One applied verdict in the session history."""

    token: SubmissionToken
    verdict: Verdict
    resolved_at: str = field(default_factory=lambda: datetime.now().isoformat())


class WorkflowState(TypedDict):
    phase: Phase
    challenge: Challenge | None  # None in idle and loading.
    draft: str  # Solution buffer contents for the active challenge.
    verdict: Verdict | None  # Only set in resolved.
    error: str | None  # Last surfaced error (source unavailable, empty solution).
    history: list[Attempt]  # Every verdict applied this session, oldest first.
