# schemas/catalog.py - categories, materials, art styles
from pydantic import BaseModel
from typing import Optional

from schemas.common import Name


class CategoryCreate(BaseModel):
    name: Name


class CategoryUpdate(BaseModel):
    name: Optional[Name] = None


class MaterialCreate(CategoryCreate):
    pass


class MaterialUpdate(CategoryUpdate):
    pass


class ArtCreate(BaseModel):
    name: Name
    description: Name
    image_url: Optional[Name] = None


class ArtUpdate(BaseModel):
    name: Optional[Name] = None
    description: Optional[Name] = None
    image_url: Optional[Name] = None
