"""Shared fixtures for the pdojo test suite."""

import asyncio
from unittest.mock import patch

import pytest

from pdojo.sources.base import PatternSource
from pdojo.state import Challenge


class ScriptedSource(PatternSource):
    """Pattern source that returns (or raises) pre-scripted outcomes in order.

    With manual=True every fetch blocks until the test awaits release(i).
    """

    def __init__(self, *outcomes, manual: bool = False):
        self._outcomes = list(outcomes)
        self.manual = manual
        self.calls = 0
        self._gates: list[asyncio.Event] = []

    async def fetch_challenge(self) -> Challenge:
        index = self.calls
        self.calls += 1
        outcome = self._outcomes[index]
        if self.manual:
            gate = asyncio.Event()
            self._gates.append(gate)
            await gate.wait()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def release(self, index: int) -> None:
        while len(self._gates) <= index:
            await asyncio.sleep(0)
        self._gates[index].set()


class ControlledGateway:
    """Evaluator gateway whose responses are released by the test, in any order."""

    def __init__(self):
        self.calls: list[tuple[Challenge, str]] = []
        self._futures: list[asyncio.Future] = []

    async def evaluate(self, challenge: Challenge, solution_text: str):
        future = asyncio.get_running_loop().create_future()
        self.calls.append((challenge, solution_text))
        self._futures.append(future)
        return await future

    async def _wait_for_call(self, index: int) -> asyncio.Future:
        while len(self._futures) <= index:
            await asyncio.sleep(0)
        return self._futures[index]

    async def respond(self, index: int, verdict) -> None:
        (await self._wait_for_call(index)).set_result(verdict)

    async def fail(self, index: int, exc: BaseException) -> None:
        (await self._wait_for_call(index)).set_exception(exc)


def make_challenge(challenge_id: str = "C1", **overrides) -> Challenge:
    fields = {
        "challenge_id": challenge_id,
        "title": "Observer",
        "prompt": "Write a Subject with subscribe and notify.",
        "language": "python",
        "difficulty": "beginner",
        "metadata": {"slug": "observer", "keywords": ["Subject", "subscribe", "notify"]},
    }
    fields.update(overrides)
    return Challenge(**fields)


@pytest.fixture
def challenge():
    return make_challenge()


@pytest.fixture
def catalog_entries():
    """Two valid catalog entries, shaped like pdojo/challenges.yaml."""
    return [
        {
            "slug": "singleton",
            "title": "Singleton",
            "difficulty": "beginner",
            "language": "python",
            "prompt": "Implement a Config class with one instance.\n",
            "keywords": ["Config", "instance"],
        },
        {
            "slug": "strategy",
            "title": "Strategy",
            "prompt": "Make the discount policy pluggable.",
            "keywords": ["Checkout"],
        },
    ]


@pytest.fixture
def observer_solution():
    return (
        "class Subject:\n"
        "    def __init__(self):\n"
        "        self._observers = []\n"
        "    def subscribe(self, callback):\n"
        "        self._observers.append(callback)\n"
        "    def notify(self, value):\n"
        "        for cb in self._observers:\n"
        "            cb(value)\n"
    )


@pytest.fixture
def mock_config(tmp_path):
    """Patch the config singleton with test-friendly values."""
    test_config = {
        "pattern_source": "static",
        "catalog_path": "./challenges.yaml",
        "generator_model": "gemini-test",
        "source_timeout_seconds": 5,
        "evaluator": "heuristic",
        "judge_model": "claude-test",
        "evaluation_timeout_seconds": 5,
        "llm_max_retries": 3,
        "heuristic_delay_seconds": 0,
        "heuristic_failure_rate": 0.0,
        "heuristic_min_lines": 3,
        "output_path": str(tmp_path / "reports" / "report.md"),
    }
    with patch("pdojo.config._config", test_config):
        yield test_config
