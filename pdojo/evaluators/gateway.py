"""Evaluator Gateway — the boundary between the workflow and whatever judges solutions.

A judged rejection and a failure to judge are different outcomes: the gateway
returns the former as Verdict.rejected() and turns the latter (timeouts,
network errors, unusable judge output) into Verdict.failed(reason). It never
raises for those, so the workflow always receives a Verdict.
"""

import asyncio
import sys

import httpx

from pdojo.errors import EvaluationError
from pdojo.evaluators.base import Evaluator
from pdojo.state import Challenge, Verdict


class EvaluatorGateway:
    def __init__(self, evaluator: Evaluator, timeout: float | None = 60):
        self.evaluator = evaluator
        self.timeout = timeout

    async def evaluate(self, challenge: Challenge, solution_text: str) -> Verdict:
        """Judge (challenge, solution_text). Safe to call concurrently for the same pair."""
        try:
            verdict = await asyncio.wait_for(
                self.evaluator.judge(challenge, solution_text), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            reason = f"Evaluation timed out after {self.timeout}s."
        except EvaluationError as exc:
            reason = str(exc) or "Evaluator failed."
        except httpx.HTTPError as exc:
            reason = f"Evaluator unreachable: {exc}"
        else:
            if not isinstance(verdict, Verdict):
                reason = f"Evaluator returned {type(verdict).__name__}, not a Verdict."
            else:
                return verdict

        print(f"[pdojo] Evaluation failed for {challenge.challenge_id}: {reason}", file=sys.stderr)
        return Verdict.failed(reason)
