"""Tests for the narrative collaborator boundary."""
from datetime import date

import pytest

from fundrisk.config import settings
from fundrisk.engine.loan_risk import assess_loan
from fundrisk.models.loan import LoanRecord
from fundrisk.services.narrative_service import (
    NarrativeResponse,
    build_loan_risk_prompt,
    generate_narrative,
    narrate,
    set_narrative_client,
)


class _EchoClient:
    def __init__(self):
        self.prompts = []

    def generate(self, prompt, options):
        self.prompts.append((prompt, options))
        return NarrativeResponse(text=f"narrative ({len(prompt)} chars)", success=True)


class _FailingClient:
    def generate(self, prompt, options):
        raise RuntimeError("upstream timeout")


@pytest.fixture
def narrative_enabled(monkeypatch):
    monkeypatch.setattr(settings, "NARRATIVE_ENABLED", True)


def test_disabled_by_default():
    set_narrative_client(_EchoClient())
    assert narrate("prompt") == (None, False)


def test_client_used_when_enabled(narrative_enabled):
    client = _EchoClient()
    set_narrative_client(client)
    text, available = narrate("hello")
    assert available
    assert text.startswith("narrative")
    _, options = client.prompts[0]
    assert options.max_tokens == settings.NARRATIVE_MAX_TOKENS


def test_failure_degrades_to_numbers_only(narrative_enabled):
    set_narrative_client(_FailingClient())
    response = generate_narrative("hello")
    assert not response.success
    assert "upstream timeout" in response.error
    assert narrate("hello") == (None, False)


def test_prompt_contains_computed_numbers():
    assessment = assess_loan(
        LoanRecord(loan_id="L9", principal=200_000, outstanding_balance=200_000),
        as_of=date(2026, 1, 1),
    )
    prompt = build_loan_risk_prompt(assessment)
    assert "L9" in prompt
    assert "$200,000" in prompt
    assert "2.0%" in prompt
