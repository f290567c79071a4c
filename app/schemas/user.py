from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from app.models.user import UserRole


# Shared properties
class UserBase(BaseModel):
    username: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    full_name: Optional[str] = None
    role: Optional[UserRole] = None


# Properties to receive via API on creation
class UserCreate(UserBase):
    username: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    role: UserRole = UserRole.COLLABORATOR


# Properties to receive via API on update
class UserUpdate(UserBase):
    password: Optional[str] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None


# Properties to return to client
class UserRead(UserBase):
    id: int
    username: str
    email: str
    role: UserRole
    is_active: bool = True
    last_login: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    class Config:
        from_attributes = True
