"""
Security utilities and authentication
"""

from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import time
from collections import defaultdict

from app.core.config import settings
from app.core.db import get_db
from app.services.member_service import MemberService

# Simple in-memory rate limiter
rate_limiter = defaultdict(list)

security = HTTPBearer()

def get_session_token(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    return credentials.credentials

def get_current_member_id(
    token: str = Depends(get_session_token),
    db: Session = Depends(get_db)
) -> str:
    """Resolve the bearer session token to the caller's member id"""
    member_id = MemberService.member_id_for_token(token, db)
    if not member_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session token"
        )
    return member_id

def rate_limit_check(client_ip: str, limit: int = None) -> bool:
    """Simple rate limiting by IP address"""
    if limit is None:
        limit = settings.RATE_LIMIT_PER_MINUTE

    current_time = time.time()
    minute_ago = current_time - 60

    # Clean old requests
    rate_limiter[client_ip] = [
        req_time for req_time in rate_limiter[client_ip]
        if req_time > minute_ago
    ]

    if len(rate_limiter[client_ip]) >= limit:
        return False

    rate_limiter[client_ip].append(current_time)
    return True

def get_client_ip(request) -> str:
    """Extract client IP from request"""
    # Reverse proxy setups
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return request.client.host
