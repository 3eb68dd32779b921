"""
Event API routes - caller identity required, event access gated by authority
"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.event import AuthorityGrant, EventCreate, EventResponse
from app.services.authorization_service import EventAuthorizationService
from app.utils.security import get_current_member_id
from app.utils.responses import (
    AUTHORITY_GRANT_FAILED_MESSAGE,
    AUTHORITY_GRANTED_MESSAGE,
    UNAUTHORIZED_MESSAGE,
    not_found_error,
    outcome_text,
)

router = APIRouter()

@router.get("/progressing", response_model=List[EventResponse])
async def get_events_progressing(
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id)
):
    """Events the caller manages that have not started yet"""
    return EventAuthorizationService.list_progressing(member_id, db)

@router.get("/done", response_model=List[EventResponse])
async def get_events_done(
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id)
):
    """Events the caller manages whose time has passed"""
    return EventAuthorizationService.list_done(member_id, db)

@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id)
):
    """Get a single event the caller manages"""
    outcome = EventAuthorizationService.get_event(member_id, event_id, db)
    if not outcome.authorized:
        return outcome_text(UNAUTHORIZED_MESSAGE)
    if not outcome.found:
        raise not_found_error("Event")
    return outcome.event

@router.post("", response_model=EventResponse)
async def create_event(
    event_data: EventCreate,
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id)
):
    """Create an event; the caller becomes its first manager"""
    return EventAuthorizationService.create_event(member_id, event_data, db)

@router.post("/auth/{event_id}")
async def add_authority(
    event_id: str,
    grant: AuthorityGrant,
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id)
):
    """Grant authority over an event to another member"""
    outcome = EventAuthorizationService.grant_authority(member_id, event_id, grant.uid, db)
    if not outcome.authorized:
        return outcome_text(AUTHORITY_GRANT_FAILED_MESSAGE)
    return outcome_text(AUTHORITY_GRANTED_MESSAGE)

@router.put("/{event_id}")
async def update_event(
    event_id: str,
    event_data: EventCreate,
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id)
):
    """Replace an event's details"""
    outcome = EventAuthorizationService.update_event(member_id, event_id, event_data, db)
    if not outcome.authorized:
        return outcome_text(UNAUTHORIZED_MESSAGE)
    if not outcome.found:
        raise not_found_error("Event")
    return outcome_text(event_id)

@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id)
):
    """Delete an event along with its authority list"""
    outcome = EventAuthorizationService.delete_event(member_id, event_id, db)
    if not outcome.authorized:
        return outcome_text(UNAUTHORIZED_MESSAGE)
    return outcome_text(event_id)

@router.delete("/auth/{event_id}")
async def delete_authority(
    event_id: str,
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id)
):
    """Give up the caller's own authority; the event goes when nobody is left"""
    EventAuthorizationService.revoke_own_authority(member_id, event_id, db)
    return outcome_text(event_id)
