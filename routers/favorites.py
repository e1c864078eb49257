from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from core.dependencies import get_current_user, get_db
from schemas.cart import FavoriteAdd
from services import favorites as favorite_service

router = APIRouter(prefix="/favorites", tags=["Favorites"])


@router.get("")
async def get_favorites(current_user: dict = Depends(get_current_user), db: AsyncIOMotorDatabase = Depends(get_db)):
    products = await favorite_service.list_favorites(db, current_user)
    return {"success": True, "data": products}


@router.post("")
async def add_to_favorites(data: FavoriteAdd, current_user: dict = Depends(get_current_user),
                           db: AsyncIOMotorDatabase = Depends(get_db)):
    await favorite_service.add_to_favorites(db, current_user["_id"], data.product_id)
    return {"success": True, "message": "Product added to favorites"}


# Removing a product that is not a favorite succeeds as well
@router.delete("/{product_id}")
async def remove_from_favorites(product_id: str, current_user: dict = Depends(get_current_user),
                                db: AsyncIOMotorDatabase = Depends(get_db)):
    await favorite_service.remove_from_favorites(db, current_user["_id"], product_id)
    return {"success": True, "message": "Product removed from favorites"}
