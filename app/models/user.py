"""
User Model Module

This module defines the User model and UserRole enumeration for authentication
and authorization throughout the application.
"""
from enum import Enum
from typing import ClassVar, Optional
from sqlmodel import SQLModel, Field


class UserRole(str, Enum):
    """
    Enumeration of user roles defining permission levels in the system.

    - ADMIN: full access, including user management and category mutation
    - COLLABORATOR: internal staff with read-only access to clients, contracts
      and payments and full access to projects and time entries (default role)
    - CLIENT: external customer limited to time reports

    The role -> permission table lives in ``app.core.permissions``.
    """
    ADMIN = "admin"
    COLLABORATOR = "collaborator"
    CLIENT = "client"


class User(SQLModel):
    """
    User model representing accounts that can log in to the back office.

    Attributes:
        id: Sequential identifier
        username: Login name (required, unique)
        email: Email address (required, unique)
        password: bcrypt hash, never returned by the API
        full_name: Display name
        role: One UserRole value
        is_active: Inactive users cannot log in
        last_login: ISO timestamp of the most recent successful login
    """
    __collection__: ClassVar[str] = "users"

    id: Optional[int] = Field(default=None, primary_key=True)

    # Authentication fields
    username: str
    email: str
    password: Optional[str] = None  # Hashed password (bcrypt)

    # Profile information
    full_name: Optional[str] = None

    # Authorization
    role: UserRole = UserRole.COLLABORATOR
    is_active: bool = True

    last_login: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_privileged(self) -> bool:
        """Helper to check if user has the admin role."""
        return self.role == UserRole.ADMIN
