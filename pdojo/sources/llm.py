"""LLM pattern source — asks a Gemini model to write a fresh pattern challenge.

Required output schema:
{
  "title": "string",
  "prompt": "string",
  "language": "string",
  "difficulty": "beginner | intermediate | advanced",
  "keywords": ["string"]
}
"""

import asyncio
import json
import re
import sys

import httpx
from langchain_google_genai import ChatGoogleGenerativeAI

from pdojo.config import get_config
from pdojo.errors import SourceUnavailable
from pdojo.sources.base import PatternSource
from pdojo.sources.static import build_challenge
from pdojo.state import Challenge
from pdojo.utils.parsing import ainvoke_with_retry, parse_json_object

VALID_DIFFICULTIES = {"beginner", "intermediate", "advanced"}
REQUIRED_FIELDS = {"title", "prompt"}

SYSTEM_PROMPT = """\
You are the challenge writer for a coding-pattern practice tool.

Write ONE short exercise that asks the user to implement a well-known design or \
coding pattern (e.g. Observer, Strategy, Iterator, Decorator, Builder). The user \
answers in a plain text editor, so the task must be solvable in under 40 lines.

You MUST respond with valid JSON matching this exact schema:
{
  "title": "pattern name, 1-4 words",
  "prompt": "the task statement shown to the user, 2-5 sentences",
  "language": "programming language the solution should be written in",
  "difficulty": "beginner" or "intermediate" or "advanced",
  "keywords": ["identifiers the solution must define or use, 1-4 entries"]
}

Rules:
- Name the classes or functions the user must write, so keywords are checkable.
- Do not include the solution or hints about it.
- Respond ONLY with the JSON object. No markdown fences, no commentary.
"""

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def _slugify(title: str) -> str:
    return _SLUG_RE.sub("-", title.lower()).strip("-") or "challenge"


def _validate_response(data: dict) -> None:
    """Validate and normalize the generated challenge."""
    missing = REQUIRED_FIELDS - set(data.keys())
    if missing:
        raise ValueError(f"Generated challenge missing required fields: {missing}")
    for key in REQUIRED_FIELDS:
        if not isinstance(data[key], str) or not data[key].strip():
            raise ValueError(f"Generated challenge has empty '{key}'.")

    difficulty = data.get("difficulty")
    if difficulty is not None and difficulty not in VALID_DIFFICULTIES:
        # Unknown difficulty is cosmetic; drop it rather than failing the fetch
        data["difficulty"] = None

    keywords = data.get("keywords", [])
    if not isinstance(keywords, list):
        raise ValueError("Generated challenge 'keywords' must be a list.")
    data["keywords"] = [k for k in keywords if isinstance(k, str) and k.strip()]


class LLMPatternSource(PatternSource):
    def __init__(self, model_name: str | None = None, timeout: float | None = None):
        config = get_config()
        self.model_name = model_name or config["generator_model"]
        self.timeout = timeout if timeout is not None else config.get("source_timeout_seconds", 30)

    async def _generate(self) -> dict:
        llm = ChatGoogleGenerativeAI(model=self.model_name, temperature=0.9)
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": "Write a new challenge."},
        ]
        response = await ainvoke_with_retry(llm, messages)
        data = parse_json_object(response.content)
        _validate_response(data)
        return data

    async def fetch_challenge(self) -> Challenge:
        try:
            data = await asyncio.wait_for(self._generate(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise SourceUnavailable(
                f"Challenge generation timed out after {self.timeout}s."
            ) from exc
        except (httpx.HTTPError, json.JSONDecodeError, ValueError) as exc:
            print(f"[pdojo] Challenge generation failed: {exc!r}", file=sys.stderr)
            raise SourceUnavailable(f"Challenge generation failed: {exc}") from exc

        return build_challenge({**data, "slug": _slugify(data["title"])})
