from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from services.common.errors import AssistantError, ListingSourceError
from services.common.observability import Observability
from services.common.reasoning import OpenAIReasoningClient, ReasoningClient, ReasoningSettings
from services.commute.location import ReasoningLocationScorer
from services.commute.providers import HttpTransport, OsrmRouter
from services.commute.service import (
    CommuteScorer,
    CommuteService,
    ReasoningCommuteScorer,
    RoutingCommuteScorer,
)
from services.criteria.extractor import CriteriaExtractor
from services.filtering.service import FilterEngine
from services.listings.repository import ListingRepository
from services.matching.semantic import DEFAULT_GROUP_COUNT, SemanticScorer
from services.matching.service import HousingSearchService
from services.orchestrator.planner import QueryPlanner
from services.orchestrator.service import QueryOrchestrator

logger = logging.getLogger(__name__)

DEFAULT_LISTING_SOURCES = (
    ("craigslist", "CraigslistData/clean-listings.json"),
    ("facebook", "FacebookData/clean-listings.json"),
)


@dataclass(frozen=True)
class AssistantConfig:
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    reasoning_model: str = "gpt-4o-mini"
    reasoning_timeout_s: float = 30.0
    semantic_group_count: int = DEFAULT_GROUP_COUNT
    listing_sources: Tuple[Tuple[str, str], ...] = DEFAULT_LISTING_SOURCES
    osrm_url: Optional[str] = None
    location_scoring_enabled: bool = False
    log_level: str = "INFO"


def parse_listing_sources(raw: str) -> Tuple[Tuple[str, str], ...]:
    """``name=path`` pairs separated by commas; a bare path takes its file stem as the name."""
    sources: List[Tuple[str, str]] = []
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        if "=" in item:
            name, path = item.split("=", 1)
        else:
            name, path = os.path.splitext(os.path.basename(item))[0], item
        sources.append((name.strip(), path.strip()))
    return tuple(sources)


def load_assistant_config() -> AssistantConfig:
    raw_sources = os.getenv("LISTING_SOURCES")
    return AssistantConfig(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
        reasoning_model=os.getenv("REASONING_MODEL", AssistantConfig.reasoning_model),
        reasoning_timeout_s=float(os.getenv("REASONING_TIMEOUT_S", str(AssistantConfig.reasoning_timeout_s))),
        semantic_group_count=int(os.getenv("SEMANTIC_GROUP_COUNT", str(DEFAULT_GROUP_COUNT))),
        listing_sources=parse_listing_sources(raw_sources) if raw_sources else DEFAULT_LISTING_SOURCES,
        osrm_url=os.getenv("OSRM_URL") or None,
        location_scoring_enabled=os.getenv("LOCATION_SCORING_ENABLED", "false").lower() == "true",
        log_level=os.getenv("LOG_LEVEL", AssistantConfig.log_level).upper(),
    )


@dataclass
class SearchAssistant:
    repository: ListingRepository
    housing_search: HousingSearchService
    commute_service: CommuteService
    orchestrator: QueryOrchestrator
    location_scorer: Optional[ReasoningLocationScorer] = None
    observability: Observability = field(default_factory=Observability)


def load_listing_sources(repository: ListingRepository, sources: Tuple[Tuple[str, str], ...]) -> int:
    loaded = 0
    for name, path in sources:
        try:
            loaded += repository.load_json(path, source=name)
        except ListingSourceError as exc:
            logger.warning("Skipping listing source %s (%s): %s", name, exc.code, path)
    return loaded


def build_search_assistant(
    *,
    config: Optional[AssistantConfig] = None,
    reasoning: Optional[ReasoningClient] = None,
    repository: Optional[ListingRepository] = None,
    router: Optional[OsrmRouter] = None,
) -> SearchAssistant:
    cfg = config or load_assistant_config()
    if reasoning is None:
        if not cfg.openai_api_key:
            raise AssistantError("OPENAI_API_KEY is required", code="MISSING_API_KEY")
        reasoning = OpenAIReasoningClient(
            settings=ReasoningSettings(model=cfg.reasoning_model, timeout_s=cfg.reasoning_timeout_s),
            api_key=cfg.openai_api_key,
            base_url=cfg.openai_base_url,
        )
    if repository is None:
        repository = ListingRepository()
        load_listing_sources(repository, cfg.listing_sources)

    observability = Observability()
    timeout_s = cfg.reasoning_timeout_s
    extractor = CriteriaExtractor(reasoning, timeout_s=timeout_s, observability=observability)
    housing_search = HousingSearchService(
        repository=repository,
        extractor=extractor,
        filter_engine=FilterEngine(observability=observability),
        semantic_scorer=SemanticScorer(
            reasoning, group_count=cfg.semantic_group_count, timeout_s=timeout_s, observability=observability
        ),
        observability=observability,
    )

    scorers: List[CommuteScorer] = []
    if router is None and cfg.osrm_url:
        router = OsrmRouter(base_url=cfg.osrm_url, transport=HttpTransport())
    if router is not None:
        scorers.append(RoutingCommuteScorer(router=router))
    scorers.append(ReasoningCommuteScorer(reasoning, timeout_s=timeout_s))
    commute_service = CommuteService(scorers=scorers, observability=observability)

    location_scorer = None
    if cfg.location_scoring_enabled:
        location_scorer = ReasoningLocationScorer(reasoning, timeout_s=timeout_s, observability=observability)

    orchestrator = QueryOrchestrator(
        planner=QueryPlanner(reasoning, timeout_s=timeout_s, observability=observability),
        housing_search=housing_search,
        commute_service=commute_service,
        location_scorer=location_scorer,
        observability=observability,
    )
    logger.info("Search assistant ready with %d listings from %s", len(repository), repository.sources())
    return SearchAssistant(
        repository=repository,
        housing_search=housing_search,
        commute_service=commute_service,
        orchestrator=orchestrator,
        location_scorer=location_scorer,
        observability=observability,
    )
