"""Evaluator interface."""

from abc import ABC, abstractmethod

from pdojo.state import Challenge, Verdict


class Evaluator(ABC):
    """Judges a solution for a challenge. Opaque to the workflow."""

    @abstractmethod
    async def judge(self, challenge: Challenge, solution: str) -> Verdict:
        """
        Judge one solution.

        Args:
            challenge: The challenge the solution was written for
            solution: The exact draft text that was submitted

        Returns:
            Verdict.accepted() or Verdict.rejected(); may carry feedback

        Raises:
            EvaluationError: the judge could not reach a decision
        """
        pass
