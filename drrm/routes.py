"""
HTTP routes for the preparedness API.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from drrm.dependencies import get_storage
from drrm.schemas import (
    CheckIn,
    EvacuationCenter,
    EvacuationCenterUpdate,
    GoBagItem,
    GoBagItemUpdate,
    HazardZone,
    HealthResponse,
    Household,
    Incident,
    InsertCheckIn,
    InsertHousehold,
    InsertIncident,
    InsertMember,
    Member,
    MemberStatusUpdate,
    Poi,
)
from drrm.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health(storage: Storage = Depends(get_storage)):
    return HealthResponse(status="ok", backend=storage.kind.value)


@router.get("/incidents", response_model=list[Incident])
def list_incidents(storage: Storage = Depends(get_storage)):
    return storage.get_incidents()


@router.post("/incidents", response_model=Incident, status_code=201)
def report_incident(
    payload: InsertIncident, storage: Storage = Depends(get_storage)
):
    incident = storage.create_incident(payload)
    logger.info("Incident %s reported (%s)", incident.id, incident.type)
    return incident


@router.get("/go-bag-items", response_model=list[GoBagItem])
def list_go_bag_items(storage: Storage = Depends(get_storage)):
    return storage.get_go_bag_items()


@router.patch("/go-bag-items/{item_id}", response_model=GoBagItem)
def update_go_bag_item(
    item_id: int, payload: GoBagItemUpdate, storage: Storage = Depends(get_storage)
):
    item = storage.update_go_bag_item(item_id, payload.checked)
    if item is None:
        raise HTTPException(status_code=404, detail="Go-bag item not found")
    return item


@router.get("/evacuation-centers", response_model=list[EvacuationCenter])
def list_evacuation_centers(storage: Storage = Depends(get_storage)):
    return storage.get_evacuation_centers()


@router.patch("/evacuation-centers/{center_id}", response_model=EvacuationCenter)
def update_evacuation_center(
    center_id: int,
    payload: EvacuationCenterUpdate,
    storage: Storage = Depends(get_storage),
):
    center = storage.update_evacuation_center(center_id, payload.status)
    if center is None:
        raise HTTPException(status_code=404, detail="Evacuation center not found")
    return center


@router.get("/households", response_model=list[Household])
def list_households(storage: Storage = Depends(get_storage)):
    return storage.get_households()


@router.post("/households", response_model=Household, status_code=201)
def create_household(
    payload: InsertHousehold, storage: Storage = Depends(get_storage)
):
    return storage.create_household(payload)


@router.get("/households/{household_id}/members", response_model=list[Member])
def list_members(household_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_members(household_id)


@router.post("/members", response_model=Member, status_code=201)
def create_member(payload: InsertMember, storage: Storage = Depends(get_storage)):
    return storage.create_member(payload)


@router.patch("/members/{member_id}/status", response_model=Member)
def update_member_status(
    member_id: int,
    payload: MemberStatusUpdate,
    storage: Storage = Depends(get_storage),
):
    member = storage.update_member_status(
        member_id, payload.status, payload.location
    )
    if member is None:
        raise HTTPException(status_code=404, detail="Member not found")
    return member


@router.get("/members/{member_id}/check-ins", response_model=list[CheckIn])
def list_check_ins(member_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_check_ins(member_id)


@router.post("/check-ins", response_model=CheckIn, status_code=201)
def create_check_in(payload: InsertCheckIn, storage: Storage = Depends(get_storage)):
    return storage.create_check_in(payload)


@router.get("/hazard-zones", response_model=list[HazardZone])
def list_hazard_zones(storage: Storage = Depends(get_storage)):
    return storage.get_hazard_zones()


@router.get("/pois", response_model=list[Poi])
def list_pois(
    type: Optional[str] = Query(default=None),
    storage: Storage = Depends(get_storage),
):
    return storage.get_pois(type)
