"""Tests for the workflow data model."""

import dataclasses

import pytest

from conftest import make_challenge
from pdojo.state import Outcome, SubmissionToken, Verdict


class TestSubmissionToken:
    def test_equal_for_same_challenge_and_text(self):
        assert SubmissionToken("C1", "x", seq=1) == SubmissionToken("C1", "x", seq=2)

    def test_different_text_not_equal(self):
        assert SubmissionToken("C1", "x") != SubmissionToken("C1", "x ")

    def test_different_challenge_not_equal(self):
        assert SubmissionToken("C1", "x") != SubmissionToken("C2", "x")

    def test_is_immutable(self):
        token = SubmissionToken("C1", "x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            token.text = "y"


class TestVerdict:
    def test_constructors(self):
        assert Verdict.accepted().outcome is Outcome.ACCEPTED
        assert Verdict.rejected().outcome is Outcome.REJECTED
        failed = Verdict.failed("timeout")
        assert failed.outcome is Outcome.EVALUATION_FAILED
        assert failed.reason == "timeout"

    def test_only_failure_is_failure(self):
        assert Verdict.failed("x").is_failure
        assert not Verdict.rejected().is_failure
        assert not Verdict.accepted().is_failure

    def test_outcome_values(self):
        assert {o.value for o in Outcome} == {"accepted", "rejected", "evaluation_failed"}


class TestChallenge:
    def test_keywords_from_metadata(self):
        assert make_challenge().keywords == ["Subject", "subscribe", "notify"]

    def test_keywords_default_empty(self):
        assert make_challenge(metadata={}).keywords == []

    def test_is_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            make_challenge().prompt = "changed"
