from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from services.common.enums import TravelMode


class CoordinatesModel(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class SearchRequestModel(BaseModel):
    schema_version: str
    query: str = Field(min_length=1)
    filters: Optional[Dict[str, Any]] = None
    max_results: int = Field(default=5, ge=1, le=50)
    source: Optional[str] = None


class QueryRequestModel(BaseModel):
    schema_version: str
    query: str = Field(min_length=1)
    filters: Optional[Dict[str, Any]] = None
    destination: Optional[str] = None
    destination_coordinates: Optional[CoordinatesModel] = None
    origin: Optional[str] = None
    origin_coordinates: Optional[CoordinatesModel] = None
    travel_mode: Optional[TravelMode] = None
    max_results: int = Field(default=5, ge=1, le=50)
    source: Optional[str] = None


class CommuteRatingRequestModel(BaseModel):
    schema_version: str
    distance_m: float = Field(ge=0)
    duration_s: float = Field(ge=0)
