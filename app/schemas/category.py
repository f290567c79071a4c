from typing import Optional
from pydantic import BaseModel, Field

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    is_active: bool = True


class CategoryUpdate(BaseModel):
    """
    Either ``toggle_active`` (flip the active flag and ignore everything else)
    or a set of fields merged over the stored category.
    """
    toggle_active: bool = False
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    is_active: Optional[bool] = None
