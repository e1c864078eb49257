from pydantic import BaseModel
from typing import Optional

from schemas.common import Name


class ProjectCreate(BaseModel):
    name: Name
    description: Name
    fabric_category: Name
    material_id: Optional[str] = None
    material_name: Optional[str] = None
    selected_product_id: Optional[str] = None
    design_data: Optional[str] = None


class ProjectUpdate(BaseModel):
    name: Optional[Name] = None
    description: Optional[Name] = None
    fabric_category: Optional[Name] = None
    material_id: Optional[str] = None
    material_name: Optional[str] = None
    selected_product_id: Optional[str] = None
    design_data: Optional[str] = None
