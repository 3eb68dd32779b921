"""
Event authorization service

Every single-event read and every mutation is gated by membership in the
event's authority set. An event exists only while that set is non-empty:
creating an event authorizes its creator in the same unit of work, and
revoking the last authority deletes the event with it.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Set

from sqlalchemy.orm import Session

from app.models import Event
from app.schemas.event import EventCreate, EventResponse
from app.services.repositories import EventRepo, ManageRepo, use_firestore
from app.utils.datetime_utils import format_event_datetime, now_local

logger = logging.getLogger(__name__)


@dataclass
class AuthorityOutcome:
    """Result of a gated event operation.

    Lack of authority is an ordinary outcome, not an error.
    """
    event_id: str
    authorized: bool
    found: bool = True
    event: Optional[EventResponse] = None
    revoked: bool = False
    event_deleted: bool = False


def _mutable_fields(data: EventCreate) -> dict:
    # host keeps the JSON-serialized form of whatever the client sent
    return {
        "type": data.type,
        "date_time": data.date_time,
        "location": data.location,
        "host": json.dumps(data.host, ensure_ascii=False),
    }


class EventAuthorizationService:
    """Authority-scoped event lifecycle"""

    @staticmethod
    def authority_set(event_id: str, db: Session) -> Set[str]:
        if use_firestore():
            return ManageRepo.member_ids_fs(event_id)
        return ManageRepo.member_ids_sql(db, event_id)

    @staticmethod
    def is_authorized(event_id: str, member_id: str, db: Session) -> bool:
        """True iff member_id currently holds authority over event_id"""
        return member_id in EventAuthorizationService.authority_set(event_id, db)

    @staticmethod
    def _load(event_id: str, db: Session) -> Optional[EventResponse]:
        if use_firestore():
            doc = EventRepo.get_by_id_fs(event_id)
            return EventResponse.model_validate(doc) if doc else None
        event = EventRepo.get_by_id_sql(db, event_id)
        return EventResponse.model_validate(event) if event else None

    @staticmethod
    def get_event(member_id: str, event_id: str, db: Session) -> AuthorityOutcome:
        if not EventAuthorizationService.is_authorized(event_id, member_id, db):
            logger.info(f"Member {member_id} denied read of event {event_id}")
            return AuthorityOutcome(event_id=event_id, authorized=False)

        event = EventAuthorizationService._load(event_id, db)
        return AuthorityOutcome(event_id=event_id, authorized=True, found=event is not None, event=event)

    @staticmethod
    def create_event(member_id: str, data: EventCreate, db: Session) -> EventResponse:
        """Persist a new event together with its creator's authority"""
        event_id = str(uuid.uuid4())
        fields = _mutable_fields(data)

        if use_firestore():
            doc = EventRepo.create_with_manager_fs({
                "event_id": event_id,
                **fields,
                "date_time": format_event_datetime(fields["date_time"]),
                "created_at": datetime.utcnow().isoformat(),
            }, member_id)
            created = EventResponse.model_validate(doc)
        else:
            event = EventRepo.create_with_manager_sql(db, Event(event_id=event_id, **fields), member_id)
            created = EventResponse.model_validate(event)

        logger.info(f"Member {member_id} created event {event_id}")
        return created

    @staticmethod
    def grant_authority(acting_member: str, event_id: str, target_member: str, db: Session) -> AuthorityOutcome:
        if not EventAuthorizationService.is_authorized(event_id, acting_member, db):
            logger.info(f"Member {acting_member} denied granting authority on event {event_id}")
            return AuthorityOutcome(event_id=event_id, authorized=False)

        if use_firestore():
            inserted = ManageRepo.add_fs(target_member, event_id)
        else:
            inserted = ManageRepo.add_sql(db, target_member, event_id)

        if inserted:
            logger.info(f"Member {acting_member} granted authority on event {event_id} to {target_member}")
        return AuthorityOutcome(event_id=event_id, authorized=True)

    @staticmethod
    def update_event(acting_member: str, event_id: str, data: EventCreate, db: Session) -> AuthorityOutcome:
        """Replace all mutable fields of an event"""
        if not EventAuthorizationService.is_authorized(event_id, acting_member, db):
            logger.info(f"Member {acting_member} denied update of event {event_id}")
            return AuthorityOutcome(event_id=event_id, authorized=False)

        fields = _mutable_fields(data)
        if use_firestore():
            if not EventRepo.get_by_id_fs(event_id):
                return AuthorityOutcome(event_id=event_id, authorized=True, found=False)
            fields["date_time"] = format_event_datetime(fields["date_time"])
            updated = EventResponse.model_validate(EventRepo.replace_fs(event_id, fields))
        else:
            event = EventRepo.get_by_id_sql(db, event_id)
            if not event:
                return AuthorityOutcome(event_id=event_id, authorized=True, found=False)
            updated = EventResponse.model_validate(EventRepo.replace_sql(db, event, fields))

        logger.info(f"Member {acting_member} updated event {event_id}")
        return AuthorityOutcome(event_id=event_id, authorized=True, event=updated)

    @staticmethod
    def delete_event(acting_member: str, event_id: str, db: Session) -> AuthorityOutcome:
        """Delete an event and every authority record pointing at it"""
        if not EventAuthorizationService.is_authorized(event_id, acting_member, db):
            logger.info(f"Member {acting_member} denied deletion of event {event_id}")
            return AuthorityOutcome(event_id=event_id, authorized=False)

        if use_firestore():
            EventRepo.delete_with_managers_fs(event_id)
        else:
            event = EventRepo.get_by_id_sql(db, event_id)
            if not event:
                return AuthorityOutcome(event_id=event_id, authorized=True, found=False)
            EventRepo.delete_with_managers_sql(db, event)

        logger.info(f"Member {acting_member} deleted event {event_id}")
        return AuthorityOutcome(event_id=event_id, authorized=True, event_deleted=True)

    @staticmethod
    def revoke_own_authority(member_id: str, event_id: str, db: Session) -> AuthorityOutcome:
        """Drop the caller's own authority; the last one out deletes the event"""
        if use_firestore():
            revoked, event_deleted = ManageRepo.revoke_and_cascade_fs(member_id, event_id)
        else:
            revoked, event_deleted = ManageRepo.revoke_and_cascade_sql(db, member_id, event_id)

        if revoked:
            logger.info(f"Member {member_id} revoked own authority on event {event_id}")
        if event_deleted:
            logger.info(f"Event {event_id} deleted after its last manager left")
        # Revoking your own authority has no gate
        return AuthorityOutcome(event_id=event_id, authorized=True, revoked=revoked, event_deleted=event_deleted)

    @staticmethod
    def _list(member_id: str, db: Session, now: Optional[datetime], done: bool) -> List[EventResponse]:
        moment = now_local(now)
        if use_firestore():
            return [EventResponse.model_validate(e) for e in EventRepo.list_managed_fs(member_id, moment, done)]
        return [EventResponse.model_validate(e) for e in EventRepo.list_managed_sql(db, member_id, moment, done)]

    @staticmethod
    def list_progressing(member_id: str, db: Session, now: Optional[datetime] = None) -> List[EventResponse]:
        """Managed events scheduled at or after now, soonest first"""
        return EventAuthorizationService._list(member_id, db, now, done=False)

    @staticmethod
    def list_done(member_id: str, db: Session, now: Optional[datetime] = None) -> List[EventResponse]:
        """Managed events scheduled before now, most recent first"""
        return EventAuthorizationService._list(member_id, db, now, done=True)
