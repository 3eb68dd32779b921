"""
Member API routes - OAuth login callback and profile management
"""

import logging
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.member import LoginResponse, MemberUpdate
from app.services.identity_provider import IdentityProvider, IdentityProviderError, get_identity_provider
from app.services.member_service import MemberService
from app.utils.security import get_client_ip, get_current_member_id, get_session_token, rate_limit_check
from app.utils.responses import error_response, not_found_error, rate_limit_error, success_response

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/kakao")
async def kakao_login(
    request: Request,
    code: str = Query(...),
    db: Session = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider)
):
    """OAuth redirect target: exchange the code and open a session"""
    client_ip = get_client_ip(request)
    if not rate_limit_check(client_ip):
        raise rate_limit_error()

    try:
        token, member = MemberService.login_with_code(code, provider, db)
    except IdentityProviderError as e:
        logger.warning(f"Kakao login failed: {e}")
        return error_response(
            message="Login with identity provider failed",
            error_code="identity_provider_error",
            status_code=502
        )

    return success_response(
        message="Login successful",
        data=LoginResponse(token=token, member=member).model_dump()
    )

@router.post("/logout")
async def logout(
    token: str = Depends(get_session_token),
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id)
):
    """Close the caller's current session"""
    MemberService.logout(token, db)
    return success_response(message="Logged out", data={"member_id": member_id})

@router.get("")
async def list_members(
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id)
):
    """List all members"""
    members = MemberService.list_members(db)
    return success_response(
        message="Members retrieved successfully",
        data=[m.model_dump() for m in members]
    )

@router.get("/me")
async def get_me(
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id)
):
    """Get the caller's own profile"""
    member = MemberService.get_member(member_id, db)
    if not member:
        raise not_found_error("Member")
    return success_response(message="Member retrieved", data=member.model_dump())

@router.put("/me")
async def update_me(
    member_update: MemberUpdate,
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id)
):
    """Update the caller's name or email"""
    member = MemberService.update_member(member_id, member_update, db)
    if not member:
        raise not_found_error("Member")
    return success_response(message="Member updated successfully", data=member.model_dump())

@router.delete("/me")
async def delete_me(
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id)
):
    """Delete the caller's account and all of their sessions"""
    if not MemberService.delete_member(member_id, db):
        raise not_found_error("Member")
    return success_response(message="Member deleted successfully", data={"deleted_member_id": member_id})

@router.get("/{target_id}")
async def get_member(
    target_id: str,
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id)
):
    """Get a member by id"""
    member = MemberService.get_member(target_id, db)
    if not member:
        raise not_found_error("Member")
    return success_response(message="Member retrieved", data=member.model_dump())
