from __future__ import annotations

import logging
from typing import Optional

from services.common.errors import ReasoningError
from services.common.jsonscan import extract_json_object
from services.common.observability import Observability
from services.common.reasoning import ReasoningClient, complete_with_timeout
from services.criteria.models import FilterSpec
from services.criteria.prompts import FILTER_EXTRACTION_PROMPT, RESIDUAL_REQUIREMENT_PROMPT

logger = logging.getLogger(__name__)


class CriteriaExtractor:
    def __init__(
        self,
        reasoning: ReasoningClient,
        *,
        timeout_s: float = 30.0,
        observability: Optional[Observability] = None,
    ) -> None:
        self._reasoning = reasoning
        self._timeout_s = timeout_s
        self._observability = observability or Observability()

    @property
    def observability(self) -> Observability:
        return self._observability

    async def extract_filters(self, query: str) -> FilterSpec:
        prompt = FILTER_EXTRACTION_PROMPT.format(query=query)
        try:
            response = await complete_with_timeout(self._reasoning, prompt, timeout_s=self._timeout_s)
        except ReasoningError as exc:
            logger.warning("Filter extraction failed (%s); continuing without filters", exc.code)
            self._observability.record("filter_extraction", status="call_failed", error=exc.code)
            return FilterSpec()
        payload = extract_json_object(response)
        if payload is None:
            logger.warning("Filter extraction returned no JSON object")
            self._observability.record("filter_extraction", status="no_json")
            return FilterSpec()
        spec = FilterSpec.from_payload(payload)
        self._observability.record("filter_extraction", status="ok", applied=spec.applied())
        return spec

    async def has_residual_requirement(self, query: str) -> bool:
        prompt = RESIDUAL_REQUIREMENT_PROMPT.format(query=query)
        try:
            response = await complete_with_timeout(self._reasoning, prompt, timeout_s=self._timeout_s)
        except ReasoningError as exc:
            logger.warning("Residual requirement check failed (%s); assuming none", exc.code)
            self._observability.record("residual_check", status="call_failed", error=exc.code)
            return False
        residual = "yes" in (response or "").strip().lower()
        self._observability.record("residual_check", status="ok", residual=residual)
        return residual
