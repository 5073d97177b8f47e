"""Tests for LLMPatternSource with a mocked Gemini client."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from pdojo.errors import SourceUnavailable
from pdojo.sources.llm import LLMPatternSource, _slugify, _validate_response


def _mock_llm_response(content: str):
    response = MagicMock()
    response.content = content
    return response


def _generated():
    return {
        "title": "Builder Pattern",
        "prompt": "Write a PizzaBuilder with add_topping() and build().",
        "language": "python",
        "difficulty": "intermediate",
        "keywords": ["PizzaBuilder", "build"],
    }


class TestValidateResponse:
    def test_valid_passes(self):
        data = _generated()
        _validate_response(data)
        assert data["keywords"] == ["PizzaBuilder", "build"]

    def test_missing_prompt_raises(self):
        with pytest.raises(ValueError, match="missing required fields"):
            _validate_response({"title": "X"})

    def test_blank_title_raises(self):
        with pytest.raises(ValueError, match="empty 'title'"):
            _validate_response({"title": " ", "prompt": "p"})

    def test_unknown_difficulty_dropped(self):
        data = {**_generated(), "difficulty": "nightmare"}
        _validate_response(data)
        assert data["difficulty"] is None

    def test_keywords_must_be_list(self):
        with pytest.raises(ValueError, match="keywords"):
            _validate_response({**_generated(), "keywords": "build"})

    def test_blank_keywords_filtered(self):
        data = {**_generated(), "keywords": ["build", "", 3]}
        _validate_response(data)
        assert data["keywords"] == ["build"]


class TestSlugify:
    def test_slugify(self):
        assert _slugify("Builder Pattern!") == "builder-pattern"

    def test_slugify_empty(self):
        assert _slugify("???") == "challenge"


class TestLLMPatternSource:
    @patch("pdojo.sources.llm.ChatGoogleGenerativeAI")
    def test_returns_challenge(self, MockLLM, mock_config):
        mock_instance = MagicMock()
        mock_instance.ainvoke = AsyncMock(return_value=_mock_llm_response(json.dumps(_generated())))
        MockLLM.return_value = mock_instance

        challenge = asyncio.run(LLMPatternSource().fetch_challenge())

        assert challenge.title == "Builder Pattern"
        assert challenge.challenge_id.startswith("builder-pattern-")
        assert challenge.keywords == ["PizzaBuilder", "build"]
        MockLLM.assert_called_once_with(model="gemini-test", temperature=0.9)

    @patch("pdojo.sources.llm.ChatGoogleGenerativeAI")
    def test_fenced_output_accepted(self, MockLLM, mock_config):
        mock_instance = MagicMock()
        fenced = f"```json\n{json.dumps(_generated())}\n```"
        mock_instance.ainvoke = AsyncMock(return_value=_mock_llm_response(fenced))
        MockLLM.return_value = mock_instance

        challenge = asyncio.run(LLMPatternSource().fetch_challenge())
        assert challenge.language == "python"

    @patch("pdojo.sources.llm.ChatGoogleGenerativeAI")
    def test_bad_json_is_unavailable(self, MockLLM, mock_config):
        mock_instance = MagicMock()
        mock_instance.ainvoke = AsyncMock(return_value=_mock_llm_response("Sure! Here's one:"))
        MockLLM.return_value = mock_instance

        with pytest.raises(SourceUnavailable, match="generation failed"):
            asyncio.run(LLMPatternSource().fetch_challenge())

    @patch("pdojo.sources.llm.ChatGoogleGenerativeAI")
    def test_auth_error_is_unavailable(self, MockLLM, mock_config):
        response_401 = httpx.Response(401, request=httpx.Request("POST", "https://api.example.com"))
        mock_instance = MagicMock()
        mock_instance.ainvoke = AsyncMock(
            side_effect=httpx.HTTPStatusError(
                "unauthorized", request=response_401.request, response=response_401
            )
        )
        MockLLM.return_value = mock_instance

        with pytest.raises(SourceUnavailable):
            asyncio.run(LLMPatternSource().fetch_challenge())

    @patch("pdojo.sources.llm.ChatGoogleGenerativeAI")
    def test_timeout_is_unavailable(self, MockLLM, mock_config):
        async def _slow(messages):
            await asyncio.sleep(1)

        mock_instance = MagicMock()
        mock_instance.ainvoke = _slow
        MockLLM.return_value = mock_instance

        with pytest.raises(SourceUnavailable, match="timed out"):
            asyncio.run(LLMPatternSource(timeout=0.01).fetch_challenge())
