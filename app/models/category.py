"""
Category Model Module

Hour categories used to classify time entries.
"""
from typing import ClassVar, Optional
from sqlmodel import SQLModel, Field


class Category(SQLModel):
    """
    Hour category.

    Names are unique case-insensitively. Category 1 ("General") is the default
    for uncategorized entries and can never be deleted.
    """
    __collection__: ClassVar[str] = "categories"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    description: Optional[str] = None
    color: str = "#3B82F6"  # Hex color for dashboard display
    is_active: bool = True

    created_at: Optional[str] = None
    updated_at: Optional[str] = None
