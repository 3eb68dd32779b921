"""
Member-related Pydantic schemas
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr

class MemberUpdate(BaseModel):
    """Schema for updating the caller's own profile"""
    name: Optional[str] = None
    email: Optional[EmailStr] = None

class MemberResponse(BaseModel):
    """Member response schema"""
    model_config = ConfigDict(from_attributes=True)

    member_id: str
    name: str
    email: Optional[str] = None

class LoginResponse(BaseModel):
    """Issued session token and the logged-in member"""
    token: str
    member: MemberResponse
