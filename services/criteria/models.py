from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from services.common.enums import HousingType


class FilterSpec(BaseModel):
    """Sparse deterministic constraints; ``None`` means unconstrained."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True, allow_inf_nan=False)

    min_price: Optional[float] = Field(default=None, alias="minPrice", ge=0)
    max_price: Optional[float] = Field(default=None, alias="maxPrice", ge=0)
    min_bedrooms: Optional[float] = Field(default=None, alias="minBedrooms", ge=0)
    max_bedrooms: Optional[float] = Field(default=None, alias="maxBedrooms", ge=0)
    min_bathrooms: Optional[float] = Field(default=None, alias="minBathrooms", ge=0)
    max_bathrooms: Optional[float] = Field(default=None, alias="maxBathrooms", ge=0)
    housing_type: Optional[HousingType] = Field(default=None, alias="housingType")
    private_room: Optional[bool] = Field(default=None, alias="privateRoom")
    private_bath: Optional[bool] = Field(default=None, alias="privateBath")
    smoking: Optional[bool] = None

    @field_validator("housing_type", mode="before")
    @classmethod
    def _normalize_housing_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            # requesting "unknown" is no constraint at all
            if not value or value == HousingType.unknown.value:
                return None
        return value

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "FilterSpec":
        """Validate leniently: fields that fail validation are dropped, the rest kept."""
        data = dict(payload)
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            for err in exc.errors():
                loc = err.get("loc") or ()
                if loc:
                    for key in _field_keys(str(loc[0])):
                        data.pop(key, None)
        try:
            return cls.model_validate(data)
        except ValidationError:
            return cls()

    def applied(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def is_empty(self) -> bool:
        return not self.applied()


def _field_keys(key: str) -> tuple[str, ...]:
    for name, info in FilterSpec.model_fields.items():
        if key in (name, info.alias):
            return (name, info.alias) if info.alias else (name,)
    return (key,)
