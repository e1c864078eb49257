# schemas/cart.py
from pydantic import BaseModel, StrictInt
from typing import Optional

from schemas.common import Name


class CartItemAdd(BaseModel):
    product_id: Name
    quantity: Optional[StrictInt] = None
    size: Optional[str] = None
    color: Optional[str] = None


class CartItemUpdate(BaseModel):
    quantity: Optional[StrictInt] = None


class FavoriteAdd(BaseModel):
    product_id: Name
