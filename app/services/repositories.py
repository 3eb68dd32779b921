"""
Repository layer abstracting storage (SQLAlchemy vs Firebase Firestore).

Multi-record writes that must land together (event + creator authority,
revoke + cascade delete, event + its authorities) run in a single
unit_of_work on SQL. On Firestore they use a write batch, or a
transaction when the write depends on a read.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Set, Tuple

from firebase_admin import firestore
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import unit_of_work
from app.models import Event, LoginSession, Manage, Member
from app.services.firebase_client import get_firestore_client
from app.utils.datetime_utils import format_event_datetime


def use_firestore() -> bool:
    return settings.USE_FIREBASE is True


def _manage_doc_id(member_id: str, event_id: str) -> str:
    return f"{member_id}__{event_id}"


def _split_by_time(events: List[Dict[str, Any]], now: datetime, done: bool) -> List[Dict[str, Any]]:
    # date_time is stored as fixed-width text, so string order is time order
    now_text = format_event_datetime(now)
    if done:
        selected = [e for e in events if e["date_time"] < now_text]
        return sorted(selected, key=lambda e: e["date_time"], reverse=True)
    selected = [e for e in events if e["date_time"] >= now_text]
    return sorted(selected, key=lambda e: e["date_time"])


# -------- Event repository --------

class EventRepo:
    @staticmethod
    def get_by_id_sql(db: Session, event_id: str) -> Optional[Event]:
        return db.query(Event).filter(Event.event_id == event_id).first()

    @staticmethod
    def list_managed_sql(db: Session, member_id: str, now: datetime, done: bool) -> List[Event]:
        query = db.query(Event).join(Manage, Manage.event_id == Event.event_id).filter(Manage.member_id == member_id)
        if done:
            return query.filter(Event.date_time < now).order_by(Event.date_time.desc()).all()
        return query.filter(Event.date_time >= now).order_by(Event.date_time.asc()).all()

    @staticmethod
    def create_with_manager_sql(db: Session, event: Event, member_id: str) -> Event:
        with unit_of_work(db):
            db.add(event)
            db.add(Manage(member_id=member_id, event_id=event.event_id))
        db.refresh(event)
        return event

    @staticmethod
    def replace_sql(db: Session, event: Event, fields: Dict[str, Any]) -> Event:
        with unit_of_work(db):
            for key, value in fields.items():
                setattr(event, key, value)
        db.refresh(event)
        return event

    @staticmethod
    def delete_with_managers_sql(db: Session, event: Event) -> None:
        # Manage rows go with the event through the relationship cascade
        with unit_of_work(db):
            db.delete(event)

    # Firestore shape: collection "events/{event_id}", date_time kept as formatted text
    @staticmethod
    def get_by_id_fs(event_id: str) -> Optional[Dict[str, Any]]:
        fs = get_firestore_client()
        if not fs:
            return None
        doc = fs.collection("events").document(event_id).get()
        return doc.to_dict() if doc.exists else None

    @staticmethod
    def list_managed_fs(member_id: str, now: datetime, done: bool) -> List[Dict[str, Any]]:
        fs = get_firestore_client()
        manages = fs.collection("manages").where("member_id", "==", member_id).get()
        events: List[Dict[str, Any]] = []
        for m in manages:
            doc = fs.collection("events").document(m.to_dict()["event_id"]).get()
            if doc.exists:
                events.append(doc.to_dict())
        return _split_by_time(events, now, done)

    @staticmethod
    def create_with_manager_fs(data: Dict[str, Any], member_id: str) -> Dict[str, Any]:
        fs = get_firestore_client()
        event_id = data["event_id"]
        batch = fs.batch()
        batch.set(fs.collection("events").document(event_id), data)
        batch.set(fs.collection("manages").document(_manage_doc_id(member_id, event_id)), {
            "member_id": member_id,
            "event_id": event_id,
            "granted_at": datetime.utcnow().isoformat(),
        })
        batch.commit()
        return data

    @staticmethod
    def replace_fs(event_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        fs = get_firestore_client()
        ref = fs.collection("events").document(event_id)
        ref.set(fields, merge=True)
        return ref.get().to_dict()

    @staticmethod
    def delete_with_managers_fs(event_id: str) -> None:
        fs = get_firestore_client()
        batch = fs.batch()
        for m in fs.collection("manages").where("event_id", "==", event_id).get():
            batch.delete(m.reference)
        batch.delete(fs.collection("events").document(event_id))
        batch.commit()


# -------- Manage (authority) repository --------

class ManageRepo:
    @staticmethod
    def member_ids_sql(db: Session, event_id: str) -> Set[str]:
        rows = db.query(Manage.member_id).filter(Manage.event_id == event_id).all()
        return {row.member_id for row in rows}

    @staticmethod
    def exists_sql(db: Session, member_id: str, event_id: str) -> bool:
        return db.query(Manage).filter(Manage.member_id == member_id, Manage.event_id == event_id).first() is not None

    @staticmethod
    def add_sql(db: Session, member_id: str, event_id: str) -> bool:
        """Insert an authority record; False if the pair already exists"""
        if ManageRepo.exists_sql(db, member_id, event_id):
            return False
        try:
            with unit_of_work(db):
                db.add(Manage(member_id=member_id, event_id=event_id))
        except IntegrityError:
            # A concurrent grant inserted the same pair first
            return False
        return True

    @staticmethod
    def revoke_and_cascade_sql(db: Session, member_id: str, event_id: str) -> Tuple[bool, bool]:
        """Delete one authority record and the event if it was the last one.

        Returns (revoked, event_deleted).
        """
        with unit_of_work(db):
            event = db.query(Event).filter(Event.event_id == event_id).with_for_update().first()
            record = db.query(Manage).filter(Manage.member_id == member_id, Manage.event_id == event_id).first()
            if record is None:
                return False, False

            db.delete(record)
            db.flush()

            remaining = db.query(Manage).filter(Manage.event_id == event_id).count()
            event_deleted = False
            if remaining == 0 and event is not None:
                db.delete(event)
                event_deleted = True
        return True, event_deleted

    # Firestore docs under collection "manages/{member_id}__{event_id}"
    @staticmethod
    def member_ids_fs(event_id: str) -> Set[str]:
        fs = get_firestore_client()
        if not fs:
            return set()
        docs = fs.collection("manages").where("event_id", "==", event_id).get()
        return {d.to_dict()["member_id"] for d in docs}

    @staticmethod
    def add_fs(member_id: str, event_id: str) -> bool:
        fs = get_firestore_client()
        ref = fs.collection("manages").document(_manage_doc_id(member_id, event_id))

        @firestore.transactional
        def insert(transaction) -> bool:
            if ref.get(transaction=transaction).exists:
                return False
            transaction.set(ref, {
                "member_id": member_id,
                "event_id": event_id,
                "granted_at": datetime.utcnow().isoformat(),
            })
            return True

        return insert(fs.transaction())

    @staticmethod
    def revoke_and_cascade_fs(member_id: str, event_id: str) -> Tuple[bool, bool]:
        fs = get_firestore_client()
        ref = fs.collection("manages").document(_manage_doc_id(member_id, event_id))
        managers = fs.collection("manages").where("event_id", "==", event_id)

        # Existence check, remaining-manager read and both deletes run in one transaction
        @firestore.transactional
        def revoke(transaction) -> Tuple[bool, bool]:
            if not ref.get(transaction=transaction).exists:
                return False, False
            others = [d for d in managers.get(transaction=transaction) if d.id != ref.id]
            transaction.delete(ref)
            if others:
                return True, False
            transaction.delete(fs.collection("events").document(event_id))
            return True, True

        return revoke(fs.transaction())


# -------- Member repository --------

class MemberRepo:
    @staticmethod
    def get_sql(db: Session, member_id: str) -> Optional[Member]:
        return db.query(Member).filter(Member.member_id == member_id).first()

    @staticmethod
    def list_sql(db: Session) -> List[Member]:
        return db.query(Member).order_by(Member.name).all()

    @staticmethod
    def upsert_sql(db: Session, member_id: str, name: str, email: Optional[str]) -> Member:
        member = MemberRepo.get_sql(db, member_id)
        with unit_of_work(db):
            if member is None:
                member = Member(member_id=member_id, name=name, email=email)
                db.add(member)
            else:
                member.name = name
                if email is not None:
                    member.email = email
        db.refresh(member)
        return member

    @staticmethod
    def update_sql(db: Session, member: Member, fields: Dict[str, Any]) -> Member:
        with unit_of_work(db):
            for key, value in fields.items():
                setattr(member, key, value)
            member.updated_at = datetime.utcnow()
        db.refresh(member)
        return member

    @staticmethod
    def delete_sql(db: Session, member: Member) -> None:
        # Login sessions go with the member; authority records are left alone
        with unit_of_work(db):
            db.delete(member)

    # Firestore docs under collection "members/{member_id}"
    @staticmethod
    def get_fs(member_id: str) -> Optional[Dict[str, Any]]:
        fs = get_firestore_client()
        if not fs:
            return None
        doc = fs.collection("members").document(member_id).get()
        return doc.to_dict() if doc.exists else None

    @staticmethod
    def list_fs() -> List[Dict[str, Any]]:
        fs = get_firestore_client()
        members = [d.to_dict() for d in fs.collection("members").get()]
        return sorted(members, key=lambda m: m.get("name") or "")

    @staticmethod
    def upsert_fs(member_id: str, name: str, email: Optional[str]) -> Dict[str, Any]:
        fs = get_firestore_client()
        ref = fs.collection("members").document(member_id)
        now = datetime.utcnow().isoformat()
        data: Dict[str, Any] = {"member_id": member_id, "name": name, "updated_at": now}
        if email is not None:
            data["email"] = email
        if not ref.get().exists:
            data.setdefault("email", None)
            data["created_at"] = now
        ref.set(data, merge=True)
        return ref.get().to_dict()

    @staticmethod
    def update_fs(member_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        fs = get_firestore_client()
        ref = fs.collection("members").document(member_id)
        ref.set({**fields, "updated_at": datetime.utcnow().isoformat()}, merge=True)
        return ref.get().to_dict()

    @staticmethod
    def delete_fs(member_id: str) -> None:
        fs = get_firestore_client()
        batch = fs.batch()
        for s in fs.collection("sessions").where("member_id", "==", member_id).get():
            batch.delete(s.reference)
        batch.delete(fs.collection("members").document(member_id))
        batch.commit()


# -------- Login session repository --------

class SessionRepo:
    @staticmethod
    def create_sql(db: Session, token: str, member_id: str) -> LoginSession:
        login_session = LoginSession(token=token, member_id=member_id)
        with unit_of_work(db):
            db.add(login_session)
        return login_session

    @staticmethod
    def member_id_for_token_sql(db: Session, token: str) -> Optional[str]:
        login_session = db.query(LoginSession).filter(LoginSession.token == token).first()
        return login_session.member_id if login_session else None

    @staticmethod
    def delete_sql(db: Session, token: str) -> None:
        with unit_of_work(db):
            db.query(LoginSession).filter(LoginSession.token == token).delete()

    # Firestore docs under collection "sessions/{token}"
    @staticmethod
    def create_fs(token: str, member_id: str) -> None:
        fs = get_firestore_client()
        fs.collection("sessions").document(token).set({
            "member_id": member_id,
            "created_at": datetime.utcnow().isoformat(),
        })

    @staticmethod
    def member_id_for_token_fs(token: str) -> Optional[str]:
        fs = get_firestore_client()
        if not fs:
            return None
        doc = fs.collection("sessions").document(token).get()
        return doc.to_dict().get("member_id") if doc.exists else None

    @staticmethod
    def delete_fs(token: str) -> None:
        fs = get_firestore_client()
        fs.collection("sessions").document(token).delete()
