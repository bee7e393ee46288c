from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from openai import APIError, APITimeoutError, AsyncOpenAI

from services.common.errors import ReasoningError

logger = logging.getLogger(__name__)


class ReasoningClient(Protocol):
    async def complete(self, prompt: str) -> str: ...


@dataclass(frozen=True)
class ReasoningSettings:
    model: str = "gpt-4o-mini"
    temperature: float = 0.0
    timeout_s: float = 30.0
    max_retries: int = 1


class OpenAIReasoningClient:
    """Chat-completion backed reasoning capability.

    One instance is built by the assistant factory and handed to each component;
    nothing here is a process-wide singleton.
    """

    def __init__(
        self,
        *,
        settings: Optional[ReasoningSettings] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self._settings = settings or ReasoningSettings()
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=self._settings.timeout_s,
            max_retries=self._settings.max_retries,
        )

    @property
    def settings(self) -> ReasoningSettings:
        return self._settings

    async def complete(self, prompt: str) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self._settings.model,
                temperature=self._settings.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except APITimeoutError as exc:
            raise ReasoningError("Reasoning call timed out", code="REASONING_TIMEOUT") from exc
        except APIError as exc:
            raise ReasoningError("Reasoning call failed", details={"error": str(exc)}) from exc
        choices = response.choices or []
        if not choices or choices[0].message.content is None:
            raise ReasoningError("Reasoning call returned no content", code="EMPTY_RESPONSE")
        return choices[0].message.content.strip()


async def complete_with_timeout(client: ReasoningClient, prompt: str, *, timeout_s: float) -> str:
    """Run one reasoning call under its own deadline."""
    try:
        response = await asyncio.wait_for(client.complete(prompt), timeout=timeout_s)
    except ReasoningError:
        raise
    except asyncio.TimeoutError as exc:
        logger.warning("Reasoning call exceeded %.1fs deadline", timeout_s)
        raise ReasoningError("Reasoning call timed out", code="REASONING_TIMEOUT") from exc
    except Exception as exc:
        raise ReasoningError("Reasoning call failed", code="UNEXPECTED", details={"error": repr(exc)}) from exc
    if not isinstance(response, str):
        raise ReasoningError("Reasoning call returned non-text content", code="EMPTY_RESPONSE")
    return response
