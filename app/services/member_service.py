"""
Member profile and login service
"""

import logging
import secrets
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.config import settings
from app.schemas.member import MemberResponse, MemberUpdate
from app.services.identity_provider import IdentityProvider
from app.services.repositories import MemberRepo, SessionRepo, use_firestore

logger = logging.getLogger(__name__)


class MemberService:
    """Service for member accounts and login sessions"""

    @staticmethod
    def login_with_code(code: str, provider: IdentityProvider, db: Session) -> Tuple[str, MemberResponse]:
        """Complete an OAuth login and open a session for the member.

        The provider's profile overwrites the stored name, and the stored
        email when the provider shares one.
        """
        tokens = provider.exchange_code(code)
        profile = provider.fetch_profile(tokens.access_token)

        token = secrets.token_urlsafe(settings.SESSION_TOKEN_BYTES)
        if use_firestore():
            member = MemberResponse.model_validate(MemberRepo.upsert_fs(profile.member_id, profile.name, profile.email))
            SessionRepo.create_fs(token, profile.member_id)
        else:
            member = MemberResponse.model_validate(MemberRepo.upsert_sql(db, profile.member_id, profile.name, profile.email))
            SessionRepo.create_sql(db, token, profile.member_id)

        logger.info(f"Member {member.member_id} logged in")
        return token, member

    @staticmethod
    def logout(token: str, db: Session) -> None:
        if use_firestore():
            SessionRepo.delete_fs(token)
        else:
            SessionRepo.delete_sql(db, token)

    @staticmethod
    def member_id_for_token(token: str, db: Session) -> Optional[str]:
        if use_firestore():
            return SessionRepo.member_id_for_token_fs(token)
        return SessionRepo.member_id_for_token_sql(db, token)

    @staticmethod
    def get_member(member_id: str, db: Session) -> Optional[MemberResponse]:
        if use_firestore():
            doc = MemberRepo.get_fs(member_id)
            return MemberResponse.model_validate(doc) if doc else None
        member = MemberRepo.get_sql(db, member_id)
        return MemberResponse.model_validate(member) if member else None

    @staticmethod
    def list_members(db: Session) -> List[MemberResponse]:
        if use_firestore():
            return [MemberResponse.model_validate(m) for m in MemberRepo.list_fs()]
        return [MemberResponse.model_validate(m) for m in MemberRepo.list_sql(db)]

    @staticmethod
    def update_member(member_id: str, update: MemberUpdate, db: Session) -> Optional[MemberResponse]:
        fields = update.model_dump(exclude_unset=True, exclude_none=True)

        if use_firestore():
            if not MemberRepo.get_fs(member_id):
                return None
            return MemberResponse.model_validate(MemberRepo.update_fs(member_id, fields))

        member = MemberRepo.get_sql(db, member_id)
        if not member:
            return None
        return MemberResponse.model_validate(MemberRepo.update_sql(db, member, fields))

    @staticmethod
    def delete_member(member_id: str, db: Session) -> bool:
        """Delete a member and their sessions; event authority is untouched"""
        if use_firestore():
            if not MemberRepo.get_fs(member_id):
                return False
            MemberRepo.delete_fs(member_id)
        else:
            member = MemberRepo.get_sql(db, member_id)
            if not member:
                return False
            MemberRepo.delete_sql(db, member)

        logger.info(f"Member {member_id} deleted")
        return True
