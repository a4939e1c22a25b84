"""
Pydantic schemas for persisted entities and their insert payloads.

Attributes are snake_case and match the table columns; JSON uses camelCase
aliases (``isAnonymous``, ``householdId``...).
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _number_to_text(value: Any) -> Any:
    # Map clients send coordinates as numbers; columns are text.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


CoordinateText = Annotated[str, BeforeValidator(_number_to_text)]


class Schema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InsertUser(Schema):
    username: str = Field(..., min_length=1, max_length=128)
    password: str = Field(..., min_length=1)


class User(InsertUser):
    id: str


class InsertIncident(Schema):
    type: str = Field(..., min_length=1, max_length=64)
    description: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    latitude: Optional[CoordinateText] = None
    longitude: Optional[CoordinateText] = None
    is_anonymous: bool = False


class Incident(InsertIncident):
    id: int
    reported_at: datetime


class InsertGoBagItem(Schema):
    category: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    checked: bool = False


class GoBagItem(InsertGoBagItem):
    id: int


class InsertEvacuationCenter(Schema):
    name: str = Field(..., min_length=1)
    distance: str
    capacity: str
    status: str = "Open"
    latitude: Optional[CoordinateText] = None
    longitude: Optional[CoordinateText] = None


class EvacuationCenter(InsertEvacuationCenter):
    id: int


class InsertHousehold(Schema):
    name: str = Field(..., min_length=1)
    address: Optional[str] = None


class Household(InsertHousehold):
    id: int


class InsertMember(Schema):
    household_id: int
    name: str = Field(..., min_length=1)
    contact: Optional[str] = None
    last_known_location: Optional[str] = None
    status: str = "unknown"


class Member(InsertMember):
    id: int


class InsertCheckIn(Schema):
    member_id: int
    location: Optional[str] = None
    is_safe: bool = True


class CheckIn(InsertCheckIn):
    id: int
    timestamp: datetime


class InsertHazardZone(Schema):
    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    # Ordered "lat,lng" vertices.
    coordinates: list[str] = Field(default_factory=list)
    severity: str = "medium"


class HazardZone(InsertHazardZone):
    id: int


class InsertPoi(Schema):
    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    latitude: CoordinateText
    longitude: CoordinateText
    address: Optional[str] = None
    available: bool = True


class Poi(InsertPoi):
    id: int


class GoBagItemUpdate(Schema):
    checked: bool


class EvacuationCenterUpdate(Schema):
    status: str = Field(..., min_length=1)


class MemberStatusUpdate(Schema):
    status: str = Field(..., min_length=1)
    location: Optional[str] = None


class HealthResponse(Schema):
    status: Literal["ok"]
    backend: str
