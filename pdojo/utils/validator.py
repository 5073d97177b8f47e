"""Input validation — checks that a solution draft is worth sending to the evaluator."""

from pdojo.errors import EmptySolution


def validate_solution(text: str) -> str:
    """Validate that the draft is a non-empty string.

    Returns the draft unchanged on success (the evaluator judges the exact text).
    Raises EmptySolution if the draft is empty or whitespace-only.
    """
    if not isinstance(text, str) or not text.strip():
        raise EmptySolution("Solution must be a non-empty string.")
    return text
