"""OpenAI-backed insights model."""

from __future__ import annotations

import json
import logging
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from .base import Insights, InsightsModel, coerce_insights
from ..core.errors import ConfigurationError, UpstreamError
from ..core.metrics import UPSTREAM_FAILURES
from ..core.utils import truncate_payload

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "\n".join([
    "You are KREIT Score, an AI real-estate underwriter. ",
    "Return JSON with: ",
    '- "kreit_score": integer 0-100.',
    '- "simple_summary": 3-4 short sentences, plain language.',
    '- "pro_summary": 3-4 short sentences, professional tone using the same facts.',
    '- "premium_data": object containing sections such as score_breakdown, rental_potential, '
    "appreciation_forecast, neighborhood_indicators, each with concise insights.",
])


class OpenAIInsightsModel(InsightsModel):
    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.5,
        max_chars: int = 12000,
        timeout: float = 15,
        client: AsyncOpenAI | None = None,
    ):
        self.model = model
        self.temperature = temperature
        self.max_chars = max_chars
        self.client = client or AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    async def generate(self, property_data: Any) -> Insights:
        """Ask the chat completion API for a JSON verdict on the property.

        Parameters
        ----------
        property_data: Any
            Raw provider payload; serialized and truncated to ``max_chars``.

        Returns
        -------
        Insights
            Parsed fields with the per-field fallbacks applied.

        Raises
        ------
        UpstreamError
            The API call failed or the output is not a JSON object.
        """
        truncated = truncate_payload(property_data, self.max_chars)

        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": f"Property data:\n{truncated}"},
                ],
            )
        except OpenAIError as exc:
            UPSTREAM_FAILURES.labels(upstream="insights").inc()
            raise UpstreamError(detail=f"OpenAI completion failed: {exc!r}") from exc

        content = "{}"
        if completion.choices and completion.choices[0].message.content:
            content = completion.choices[0].message.content

        try:
            parsed = json.loads(content)
        except ValueError as exc:
            UPSTREAM_FAILURES.labels(upstream="insights").inc()
            raise UpstreamError(detail="Unable to parse OpenAI response.") from exc
        if not isinstance(parsed, dict):
            UPSTREAM_FAILURES.labels(upstream="insights").inc()
            raise UpstreamError(detail=f"OpenAI response is not a JSON object: {type(parsed).__name__}")

        return coerce_insights(parsed)


class UnconfiguredInsightsModel(InsightsModel):
    def __init__(self, missing: list[str]):
        self.missing = missing

    async def generate(self, property_data: Any) -> Insights:
        raise ConfigurationError(detail=f"Missing required environment variable(s): {', '.join(self.missing)}")
