from pydantic import BaseModel, Field
from typing import Optional, List

from schemas.common import Name


class BaseProduct(BaseModel):
    name: Optional[Name] = None
    description: Optional[Name] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[Name] = None
    material: Optional[Name] = None
    art: Optional[Name] = None
    tags: Optional[List[str]] = None
    stock: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    show_in_diy: Optional[bool] = None


# images arrive as multipart files and are checked by the router
class ProductCreate(BaseProduct):
    name: Name
    description: Name
    price: float = Field(..., ge=0)
    category: Name
    material: Name
    art: Name
    tags: List[str] = Field(default_factory=list)
    stock: int = Field(0, ge=0)
    is_active: bool = True
    show_in_diy: bool = False


class ProductUpdate(BaseProduct):
    pass
