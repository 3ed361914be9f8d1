"""
Tests for the narrative report agent.

The Gemini model is replaced by a stub; nothing leaves the process.
"""

import asyncio

import pytest

from offering_ledger.activity import ActivityLogger
from offering_ledger.agents import (
    EMPTY_RESPONSE_MESSAGE,
    ERROR_MESSAGE,
    MISSING_KEY_MESSAGE,
    NarrativeAgent,
    build_prompt,
)
from offering_ledger.aggregation import summarize
from offering_ledger.config import GeminiSettings
from offering_ledger.models import DetailLine, LedgerDocument


class RecordingLogger:
    """Collects log calls instead of printing them."""

    def __init__(self):
        self.calls = []

    def _record(self, level, event, **fields):
        self.calls.append((level, fields))

    def debug(self, event, **fields):
        self._record("debug", event, **fields)

    def info(self, event, **fields):
        self._record("info", event, **fields)

    def warning(self, event, **fields):
        self._record("warning", event, **fields)

    def error(self, event, **fields):
        self._record("error", event, **fields)

    def event_types(self):
        return [fields["event_type"] for _, fields in self.calls]


class StubResponse:
    def __init__(self, text):
        self.text = text


class StubModel:
    """Stands in for genai.GenerativeModel."""

    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.prompts = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return StubResponse(self.text)


@pytest.fixture
def summary():
    document = LedgerDocument.empty()
    document.counting = {"Monday": {"Evening": {50000: 3}}}
    document.attendance = {"Monday": {"Evening": 61}}
    document.expense_details["Operations"] = [DetailLine(name="Flowers", amount=30000)]
    document.expenses["Operations"] = 30000
    return summarize(document)


@pytest.fixture
def recorder():
    return RecordingLogger()


def make_agent(recorder, model=None, api_key=None):
    return NarrativeAgent(
        settings=GeminiSettings.model_construct(api_key=api_key),
        model=model,
        activity=ActivityLogger(recorder),
    )


class TestPrompt:
    """Tests for prompt construction."""

    def test_prompt_carries_engine_figures(self, summary):
        prompt = build_prompt(summary)
        assert "150,000 KRW" in prompt
        assert "120,000 KRW" in prompt
        assert "61 people" in prompt
        assert "Operations (30,000 KRW)" in prompt
        assert "Praise Team" not in prompt

    def test_prompt_without_spending(self):
        prompt = build_prompt(summarize(LedgerDocument.empty()))
        assert "Main expense items: none" in prompt


class TestNarrativeAgent:
    """Tests for the fallback behaviour."""

    def test_missing_key(self, summary, recorder):
        agent = make_agent(recorder)
        assert agent.is_available is False
        assert asyncio.run(agent.generate_report(summary)) == MISSING_KEY_MESSAGE
        assert recorder.event_types() == ["external_service_error"]

    def test_success(self, summary, recorder):
        model = StubModel(text="  Thank you for your faithful giving.  ")
        agent = make_agent(recorder, model=model)

        text = asyncio.run(agent.generate_report(summary))

        assert text == "Thank you for your faithful giving."
        assert len(model.prompts) == 1
        assert recorder.event_types() == ["narrative_generated"]

    def test_empty_response(self, summary, recorder):
        agent = make_agent(recorder, model=StubModel(text="   "))
        assert asyncio.run(agent.generate_report(summary)) == EMPTY_RESPONSE_MESSAGE

    def test_model_error(self, summary, recorder):
        agent = make_agent(recorder, model=StubModel(error=RuntimeError("quota exceeded")))

        assert asyncio.run(agent.generate_report(summary)) == ERROR_MESSAGE
        level, fields = recorder.calls[-1]
        assert level == "error"
        assert fields["error_message"] == "quota exceeded"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
