from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field

from app.models.user import UserRole


class AuthSession(SQLModel):
    """An authenticated session keyed by an opaque token."""
    token: str = Field(primary_key=True)
    user_id: int
    username: str
    role: UserRole
    expires: datetime  # timezone-aware UTC
    created_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires
