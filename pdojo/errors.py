"""Error kinds raised across the challenge workflow."""


class WorkflowError(Exception):
    """Base class for recoverable workflow errors."""


class SourceUnavailable(WorkflowError):
    """The pattern source could not supply a challenge. Retry request_challenge()."""


class EmptySolution(WorkflowError, ValueError):
    """The draft is empty or whitespace-only; nothing was sent to the evaluator."""


class InvalidTransition(WorkflowError):
    """Raised when an operation is not allowed in the current phase."""


class EvaluationError(WorkflowError):
    """The evaluator failed to produce a judgement (distinct from a rejection)."""
