from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from services.assistant.config import SearchAssistant, build_search_assistant
from services.common.api import SCHEMA_VERSION, error_response, ok_response
from services.common.errors import AssistantError
from services.commute.models import CommuteAnalysis, LocationScore
from services.commute.rating import rate_commute, recommend
from services.listings.models import Coordinates, Listing, MarketSummary
from services.matching.models import MatchResult, SearchMetadata
from services.orchestrator.models import ComposedResult, OrchestrationPlan
from services.search_api.api_models import (
    CommuteRatingRequestModel,
    CoordinatesModel,
    QueryRequestModel,
    SearchRequestModel,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Rental Search Assistant", docs_url=None, redoc_url=None)

_assistant: Optional[SearchAssistant] = None


def get_assistant() -> SearchAssistant:
    global _assistant
    if _assistant is None:
        _assistant = build_search_assistant()
    return _assistant


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content=error_response("VALIDATION_ERROR", "Invalid request", {"errors": _safe_errors(exc)}),
    )


@app.exception_handler(AssistantError)
async def assistant_exception_handler(request: Request, exc: AssistantError):
    logger.error("Assistant unavailable: %s (%s)", exc, exc.code)
    return JSONResponse(status_code=503, content=error_response(exc.code, str(exc), exc.details))


def _version_error() -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=error_response("VALIDATION_ERROR", f"schema_version must be {SCHEMA_VERSION}"),
    )


@app.post("/search")
async def search(request: SearchRequestModel, assistant: SearchAssistant = Depends(get_assistant)):
    if request.schema_version != SCHEMA_VERSION:
        return _version_error()
    result = await assistant.housing_search.search(
        request.query, request.filters, request.max_results, source=request.source
    )
    return ok_response(
        {"results": [_match(match) for match in result.matches]},
        meta=_search_metadata(result.metadata),
    )


@app.post("/query")
async def query(request: QueryRequestModel, assistant: SearchAssistant = Depends(get_assistant)):
    if request.schema_version != SCHEMA_VERSION:
        return _version_error()
    result = await assistant.orchestrator.execute(
        request.query,
        filters=request.filters,
        destination=request.destination,
        destination_coordinates=_coordinates_in(request.destination_coordinates),
        origin=request.origin,
        origin_coordinates=_coordinates_in(request.origin_coordinates),
        travel_mode=request.travel_mode,
        max_results=request.max_results,
        source=request.source,
    )
    analysis = result.analysis
    return ok_response(
        {
            "intent": analysis.intent.value,
            "confidence": analysis.confidence,
            "explanation": analysis.explanation,
            "destination": analysis.destination,
            "plan": _plan(result.plan),
            "warnings": list(result.warnings),
            "results": [_composed(item) for item in result.results],
            "summary": _summary(result.summary) if result.summary else None,
            "commute": _commute(result.commute) if result.commute else None,
        },
        meta=_search_metadata(result.search) if result.search else None,
    )


@app.get("/summary")
def summary(source: Optional[str] = None, assistant: SearchAssistant = Depends(get_assistant)):
    return ok_response(_summary(assistant.housing_search.summary(source)))


@app.post("/commute/rating")
def commute_rating(request: CommuteRatingRequestModel):
    if request.schema_version != SCHEMA_VERSION:
        return _version_error()
    rating = rate_commute(request.distance_m, request.duration_s)
    return ok_response(
        {
            "rating": rating,
            "recommendation": recommend(request.distance_m, request.duration_s, rating),
        }
    )


def _safe_errors(exc: RequestValidationError) -> list:
    return [{"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")} for err in exc.errors()]


def _coordinates_in(model: Optional[CoordinatesModel]) -> Optional[Coordinates]:
    if model is None:
        return None
    return Coordinates(latitude=model.latitude, longitude=model.longitude)


def _listing(listing: Listing) -> Dict[str, Any]:
    return {
        "listing_id": listing.listing_id,
        "title": listing.title,
        "price": listing.price,
        "bedrooms": listing.bedrooms,
        "bathrooms": listing.bathrooms,
        "housing_type": listing.housing_type.value,
        "private_room": listing.private_room,
        "private_bath": listing.private_bath,
        "smoking": listing.smoking,
        "location": listing.location,
        "url": listing.url,
        "source": listing.source,
        "coordinates": (
            {"latitude": listing.coordinates.latitude, "longitude": listing.coordinates.longitude}
            if listing.coordinates
            else None
        ),
    }


def _match(match: MatchResult) -> Dict[str, Any]:
    return {
        "listing": _listing(match.listing),
        "match_percentage": match.match_percentage,
        "rationale": match.rationale,
    }


def _commute(analysis: CommuteAnalysis) -> Dict[str, Any]:
    return {
        "distance": {"text": analysis.distance.text, "value": analysis.distance.value},
        "duration": {"text": analysis.duration.text, "value": analysis.duration.value},
        "duration_in_traffic": {
            "text": analysis.duration_in_traffic.text,
            "value": analysis.duration_in_traffic.value,
        },
        "rating": analysis.rating,
        "recommendation": analysis.recommendation,
        "source": analysis.source.value,
        "travel_mode": analysis.travel_mode.value,
    }


def _location(score: LocationScore) -> Dict[str, Any]:
    return {
        "walk_score": score.walk_score,
        "bike_score": score.bike_score,
        "transit_score": score.transit_score,
        "overall": score.overall,
        "safety_sentiment": score.safety_sentiment,
        "is_fallback": score.is_fallback,
    }


def _composed(item: ComposedResult) -> Dict[str, Any]:
    payload = _match(item.match)
    payload.update(
        {
            "scores": dict(item.scores),
            "combined_score": item.combined_score,
            "commute": _commute(item.commute) if item.commute else None,
            "location": _location(item.location) if item.location else None,
        }
    )
    return payload


def _plan(plan: OrchestrationPlan) -> Dict[str, Any]:
    return {
        "steps": [
            {"capability": step.capability.value, "action": step.action, "payload": dict(step.payload)}
            for step in plan.steps
        ],
        "reasoning": plan.reasoning,
        "execution_order": plan.execution_order.value,
    }


def _search_metadata(metadata: SearchMetadata) -> Dict[str, Any]:
    return {
        "total_listings": metadata.total_listings,
        "filtered_listings": metadata.filtered_listings,
        "matched_listings": metadata.matched_listings,
        "filters_applied": dict(metadata.filters_applied),
        "path": metadata.path.value,
        "reason": metadata.reason,
        "groups": [
            {
                "group_index": group.group_index,
                "size": group.size,
                "status": group.status,
                "matched": group.matched,
                "error": group.error,
            }
            for group in metadata.groups
        ],
    }


def _summary(summary: MarketSummary) -> Dict[str, Any]:
    return {
        "source": summary.source,
        "total_listings": summary.total_listings,
        "source_counts": dict(summary.source_counts),
        "price_stats": {
            "min": summary.price_min,
            "max": summary.price_max,
            "average": summary.price_average,
        },
        "housing_types": dict(summary.housing_types),
        "top_locations": dict(summary.top_locations),
        "private_room_available": summary.private_room_count,
        "private_bath_available": summary.private_bath_count,
        "private_room_pct": summary.private_room_pct,
        "private_bath_pct": summary.private_bath_pct,
    }
