"""
Database models package
"""

from .event import Event
from .manage import Manage
from .member import Member
from .login_session import LoginSession

__all__ = ["Event", "Manage", "Member", "LoginSession"]
