from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

import pytest

from services.common.enums import HousingType
from services.listings.models import Coordinates, Listing

FILTER_PROMPT = "Extract deterministic filters"
RESIDUAL_PROMPT = "Does this query contain natural language requirements"
SEMANTIC_PROMPT = "You are analyzing housing listings"
ANALYSIS_PROMPT = "Analyze this user query"
COMMUTE_PROMPT = "analyze a commute"
LOCATION_PROMPT = "Get the walk score"

Reply = Union[str, BaseException, Callable[[str], Any]]


class ScriptedReasoningClient:
    """Answers by the first rule whose marker appears in the prompt.

    A reply may be text, an exception to raise, or a callable taking the prompt.
    """

    def __init__(self, rules: Sequence[Tuple[str, Reply]] = (), *, default: Reply = "", delay_s: float = 0.0):
        self.rules: List[Tuple[str, Reply]] = list(rules)
        self.default = default
        self.delay_s = delay_s
        self.prompts: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def calls(self, marker: str) -> List[str]:
        return [prompt for prompt in self.prompts if marker in prompt]

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay_s:
                await asyncio.sleep(self.delay_s)
            reply = self._reply_for(prompt)
            if isinstance(reply, BaseException):
                raise reply
            if callable(reply):
                reply = reply(prompt)
                if isinstance(reply, BaseException):
                    raise reply
            return reply
        finally:
            self.in_flight -= 1

    def _reply_for(self, prompt: str) -> Reply:
        for marker, reply in self.rules:
            if marker in prompt:
                return reply
        return self.default


def make_listing(listing_id: str = "l-1", **overrides: Any) -> Listing:
    values = {
        "listing_id": listing_id,
        "title": f"Listing {listing_id}",
        "price": 1500,
        "bedrooms": 1,
        "bathrooms": 1,
        "housing_type": HousingType.apartment,
        "private_room": True,
        "private_bath": True,
        "smoking": False,
        "description": "Sunny room near transit",
        "location": "Oakland",
        "url": f"https://example.test/{listing_id}",
        "coordinates": None,
        "source": "craigslist",
    }
    values.update(overrides)
    return Listing(**values)


OAKLAND = Coordinates(latitude=37.8044, longitude=-122.2712)
BERKELEY = Coordinates(latitude=37.8715, longitude=-122.2730)


@pytest.fixture
def scripted():
    def _build(rules: Sequence[Tuple[str, Reply]] = (), *, default: Reply = "", delay_s: float = 0.0):
        return ScriptedReasoningClient(rules, default=default, delay_s=delay_s)

    return _build


@pytest.fixture
def listing_factory():
    return make_listing


def run(coro) -> Any:
    return asyncio.run(coro)


def priced_listings(prices: Sequence[float], **overrides: Any) -> List[Listing]:
    return [make_listing(f"l-{index}", price=price, **overrides) for index, price in enumerate(prices)]


def first_title(prompt: str) -> Optional[str]:
    for line in prompt.splitlines():
        stripped = line.strip()
        if stripped.startswith("1. "):
            return stripped[3:]
    return None
