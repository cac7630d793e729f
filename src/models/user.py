"""User models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class User(BaseModel):
    """A registered user. Never carries the password hash."""

    id: UUID
    name: str
    email: str
    created_at: datetime


class UserSummary(BaseModel):
    """Compact user representation returned by auth endpoints."""

    id: UUID
    name: str
    email: str
