"""Local heuristic judge — a stand-in for an AI reviewer that needs no network.

Simulates a slow and occasionally unreliable backend: it sleeps before
answering and fails with a configurable probability.
"""

import asyncio
import random

from pdojo.errors import EvaluationError
from pdojo.evaluators.base import Evaluator
from pdojo.state import Challenge, Verdict


def _missing_keywords(challenge: Challenge, solution: str) -> list[str]:
    lowered = solution.lower()
    return [k for k in challenge.keywords if k.lower() not in lowered]


def _code_lines(solution: str) -> int:
    return sum(1 for line in solution.splitlines() if line.strip())


class HeuristicEvaluator(Evaluator):
    def __init__(
        self,
        delay: float = 1.0,
        failure_rate: float = 0.0,
        min_lines: int = 3,
        rng: random.Random | None = None,
    ):
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError("failure_rate must be between 0 and 1.")
        self.delay = delay
        self.failure_rate = failure_rate
        self.min_lines = min_lines
        self._rng = rng or random.Random()

    async def judge(self, challenge: Challenge, solution: str) -> Verdict:
        await asyncio.sleep(self.delay)

        if self.failure_rate and self._rng.random() < self.failure_rate:
            raise EvaluationError("Simulated judge outage, please retry.")

        problems = []
        missing = _missing_keywords(challenge, solution)
        if missing:
            problems.append(f"expected to see: {', '.join(missing)}")
        lines = _code_lines(solution)
        if lines < self.min_lines:
            problems.append(f"only {lines} non-blank line(s), need at least {self.min_lines}")

        if problems:
            message = "; ".join(problems)
            return Verdict.rejected(feedback=message[0].upper() + message[1:] + ".")
        return Verdict.accepted(feedback=f"Looks like a working {challenge.title} implementation.")
