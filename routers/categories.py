from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from typing import Literal

from core.dependencies import get_db, require_admin
from core.errors import DependentRecordsError
from core.logger import get_logger
from db import new_id, to_out, utcnow
from schemas.catalog import CategoryCreate, CategoryUpdate
from services.catalog import count_dependent_products

router = APIRouter(prefix="/categories", tags=["Categories"])
logger = get_logger("categories")


async def _ensure_unique_name(db: AsyncIOMotorDatabase, name: str, exclude_id: str = None) -> None:
    query: dict = {"name": name}
    if exclude_id:
        query["_id"] = {"$ne": exclude_id}
    if await db.categories.find_one(query, {"_id": 1}):
        raise HTTPException(status_code=400, detail="Category already exists")


@router.get("")
async def get_categories(
    sort_by: Literal["name", "created_at"] = "name",
    sort_dir: Literal["asc", "desc"] = "asc",
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    docs = await db.categories.find().sort(sort_by, 1 if sort_dir == "asc" else -1).to_list(length=None)
    return {"success": True, "count": len(docs), "data": [to_out(d) for d in docs]}


@router.get("/{category_id}")
async def get_category(category_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    category = await db.categories.find_one({"_id": category_id})
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return {"success": True, "data": to_out(category)}


@router.post("", status_code=201)
async def create_category(data: CategoryCreate, admin: dict = Depends(require_admin),
                          db: AsyncIOMotorDatabase = Depends(get_db)):
    await _ensure_unique_name(db, data.name)
    now = utcnow()
    doc = {"_id": new_id(), "name": data.name, "created_at": now, "updated_at": now}
    try:
        await db.categories.insert_one(doc)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Category already exists")
    logger.info("Category %s created by %s", doc["_id"], admin["_id"])
    return {"success": True, "message": "Category created successfully", "data": to_out(doc)}


@router.api_route("/{category_id}", methods=["PUT", "PATCH"])
async def update_category(category_id: str, data: CategoryUpdate, admin: dict = Depends(require_admin),
                          db: AsyncIOMotorDatabase = Depends(get_db)):
    existing = await db.categories.find_one({"_id": category_id})
    if not existing:
        raise HTTPException(status_code=404, detail="Category not found")

    update_data = data.model_dump(exclude_none=True)
    if "name" in update_data:
        await _ensure_unique_name(db, update_data["name"], exclude_id=category_id)
    update_data["updated_at"] = utcnow()
    await db.categories.update_one({"_id": category_id}, {"$set": update_data})
    return {"success": True, "message": "Category updated successfully", "data": to_out({**existing, **update_data})}


@router.delete("/{category_id}")
async def delete_category(category_id: str, admin: dict = Depends(require_admin),
                          db: AsyncIOMotorDatabase = Depends(get_db)):
    category = await db.categories.find_one({"_id": category_id}, {"_id": 1})
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    dependents = await count_dependent_products(db, "category", category_id)
    if dependents > 0:
        raise DependentRecordsError(
            "Cannot delete category as it is being used by existing products", products_count=dependents
        )

    await db.categories.delete_one({"_id": category_id})
    logger.info("Category %s deleted by %s", category_id, admin["_id"])
    return {"success": True, "message": "Category deleted successfully"}
