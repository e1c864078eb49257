# schemas/content.py - design elements and home page sections
from pydantic import BaseModel, Field
from typing import Literal, Optional

from schemas.common import Name


class DesignElementCreate(BaseModel):
    name: Name
    art_type: Name


class DesignElementUpdate(BaseModel):
    name: Optional[Name] = None
    art_type: Optional[Name] = None
    is_active: Optional[bool] = None


class HomeSectionCreate(BaseModel):
    type: Literal["category", "art"]
    name: Name
    display_order: int = Field(..., ge=0)


class HomeSectionUpdate(BaseModel):
    type: Optional[Literal["category", "art"]] = None
    name: Optional[Name] = None
    display_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
