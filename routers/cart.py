from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from core.dependencies import get_current_user, get_db
from schemas.cart import CartItemAdd, CartItemUpdate
from services import cart as cart_service

router = APIRouter(prefix="/cart", tags=["Cart"])


# GET /cart - current cart, products resolved
@router.get("")
async def get_cart(current_user: dict = Depends(get_current_user), db: AsyncIOMotorDatabase = Depends(get_db)):
    items = await cart_service.list_cart(db, current_user)
    return {"success": True, "data": items}


# POST /cart - add a product (merges with an existing line of the same size/color)
@router.post("")
async def add_to_cart(item: CartItemAdd, current_user: dict = Depends(get_current_user),
                      db: AsyncIOMotorDatabase = Depends(get_db)):
    await cart_service.add_to_cart(db, current_user["_id"], item.product_id, item.quantity, item.size, item.color)
    return {"success": True, "message": "Product added to cart"}


# PUT /cart/{item_id} - set quantity of one line
@router.put("/{item_id}")
async def update_cart_item(item_id: str, data: CartItemUpdate, current_user: dict = Depends(get_current_user),
                           db: AsyncIOMotorDatabase = Depends(get_db)):
    item = await cart_service.update_cart_item(db, current_user["_id"], item_id, data.quantity)
    return {"success": True, "message": "Cart updated successfully", "data": item}


# DELETE /cart/{item_id} - remove one line
@router.delete("/{item_id}")
async def remove_from_cart(item_id: str, current_user: dict = Depends(get_current_user),
                           db: AsyncIOMotorDatabase = Depends(get_db)):
    await cart_service.remove_from_cart(db, current_user["_id"], item_id)
    return {"success": True, "message": "Product removed from cart"}


# DELETE /cart - empty the cart
@router.delete("")
async def clear_cart(current_user: dict = Depends(get_current_user), db: AsyncIOMotorDatabase = Depends(get_db)):
    await cart_service.clear_cart(db, current_user["_id"])
    return {"success": True, "message": "Cart cleared successfully"}
