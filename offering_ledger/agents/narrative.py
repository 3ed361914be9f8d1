"""
Narrative Report Agent

Turns the ledger totals into a short, warm "ministry finance summary"
using Gemini.

CRITICAL BOUNDARIES:
- The agent only sees a LedgerSummary, never the document
- It CANNOT change the ledger; its output is display text
- Every figure in the prompt comes from the aggregation engine. The
  model is asked to write prose around them, never to calculate.

The agent never raises. A missing key, a failed call or an empty
response each produce a fixed fallback message.
"""

from typing import Any, Optional

import google.generativeai as genai

from offering_ledger.activity import ActivityLogger
from offering_ledger.config import GeminiSettings, get_settings
from offering_ledger.models.report import LedgerSummary


MISSING_KEY_MESSAGE = "An API key is required to generate the narrative report."
EMPTY_RESPONSE_MESSAGE = "The report could not be generated."
ERROR_MESSAGE = "An error occurred while fetching the narrative analysis."


def format_krw(amount: int) -> str:
    return f"{amount:,} KRW"


def build_prompt(summary: LedgerSummary) -> str:
    """The prompt sent to the model. Only non-zero categories are listed."""
    spending = ", ".join(
        f"{line.category} ({format_krw(line.amount)})"
        for line in summary.expense_breakdown
        if line.amount > 0
    ) or "none"

    return f"""The following are this week's church offering and expense figures.
Based on this data, write a courteous and encouraging 'ministry finance summary report'.

[Data summary]
- Total offering: {format_krw(summary.total_offering)}
- Total expenses: {format_krw(summary.total_expenses)}
- Balance: {format_krw(summary.net_book_balance)}
- Total attendance: {summary.total_attendance} people
- Main expense items: {spending}

The report must include:
1. A word of thanks and a short biblical encouragement
2. A summary of the financial position
3. A brief comment on efficient use of funds
4. A closing line in the spirit of a prayer

IMPORTANT: Use ONLY the figures above. Do not calculate new totals."""


class NarrativeAgent:
    """
    Generates the narrative summary on the report page.

    Args:
        settings: Gemini settings; loaded from the environment if omitted
        model: Pre-built model object exposing generate_content_async.
               Tests pass a stub here.
        activity: Logger for external-service failures
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
        activity: Optional[ActivityLogger] = None,
    ):
        self._settings = settings or get_settings().gemini
        self._model = model
        self._activity = activity or ActivityLogger()

    @property
    def is_available(self) -> bool:
        return self._model is not None or self._settings.is_configured

    def _configure_genai(self) -> Any:
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        return genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    async def generate_report(self, summary: LedgerSummary) -> str:
        """Return the narrative text, or a fallback message."""
        if not self.is_available:
            self._activity.log_external_service_error(
                service="gemini",
                error_message="API key not configured",
            )
            return MISSING_KEY_MESSAGE

        prompt = build_prompt(summary)

        try:
            if self._model is None:
                self._model = self._configure_genai()
            response = await self._model.generate_content_async(prompt)
            text = (getattr(response, "text", None) or "").strip()
        except Exception as e:
            self._activity.log_external_service_error(
                service="gemini",
                error_message=str(e),
            )
            return ERROR_MESSAGE

        if not text:
            return EMPTY_RESPONSE_MESSAGE

        self._activity.log_narrative_generated(self._settings.model_name, len(text))
        return text
