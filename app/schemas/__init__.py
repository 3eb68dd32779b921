"""
Pydantic schemas package
"""

from .common import *
from .event import *
from .member import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "EventCreate",
    "EventResponse",
    "AuthorityGrant",
    "MemberUpdate",
    "MemberResponse",
    "LoginResponse",
]
