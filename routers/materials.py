from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from typing import Literal

from core.dependencies import get_db, require_admin
from core.logger import get_logger
from db import new_id, to_out, utcnow
from schemas.catalog import MaterialCreate, MaterialUpdate

router = APIRouter(prefix="/materials", tags=["Materials"])
logger = get_logger("materials")


async def _ensure_unique_name(db: AsyncIOMotorDatabase, name: str, exclude_id: str = None) -> None:
    query: dict = {"name": name}
    if exclude_id:
        query["_id"] = {"$ne": exclude_id}
    if await db.materials.find_one(query, {"_id": 1}):
        raise HTTPException(status_code=400, detail="Material already exists")


@router.get("")
async def get_materials(
    sort_by: Literal["name", "created_at"] = "name",
    sort_dir: Literal["asc", "desc"] = "asc",
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    docs = await db.materials.find().sort(sort_by, 1 if sort_dir == "asc" else -1).to_list(length=None)
    return {"success": True, "count": len(docs), "data": [to_out(d) for d in docs]}


@router.get("/{material_id}")
async def get_material(material_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    material = await db.materials.find_one({"_id": material_id})
    if not material:
        raise HTTPException(status_code=404, detail="Material not found")
    return {"success": True, "data": to_out(material)}


@router.post("", status_code=201)
async def create_material(data: MaterialCreate, admin: dict = Depends(require_admin),
                          db: AsyncIOMotorDatabase = Depends(get_db)):
    await _ensure_unique_name(db, data.name)
    now = utcnow()
    doc = {"_id": new_id(), "name": data.name, "created_at": now, "updated_at": now}
    try:
        await db.materials.insert_one(doc)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Material already exists")
    logger.info("Material %s created by %s", doc["_id"], admin["_id"])
    return {"success": True, "message": "Material created successfully", "data": to_out(doc)}


@router.api_route("/{material_id}", methods=["PUT", "PATCH"])
async def update_material(material_id: str, data: MaterialUpdate, admin: dict = Depends(require_admin),
                          db: AsyncIOMotorDatabase = Depends(get_db)):
    existing = await db.materials.find_one({"_id": material_id})
    if not existing:
        raise HTTPException(status_code=404, detail="Material not found")

    update_data = data.model_dump(exclude_none=True)
    if "name" in update_data:
        await _ensure_unique_name(db, update_data["name"], exclude_id=material_id)
    update_data["updated_at"] = utcnow()
    await db.materials.update_one({"_id": material_id}, {"$set": update_data})
    return {"success": True, "message": "Material updated successfully", "data": to_out({**existing, **update_data})}


@router.delete("/{material_id}")
async def delete_material(material_id: str, admin: dict = Depends(require_admin),
                          db: AsyncIOMotorDatabase = Depends(get_db)):
    result = await db.materials.delete_one({"_id": material_id})
    if not result.deleted_count:
        raise HTTPException(status_code=404, detail="Material not found")
    logger.info("Material %s deleted by %s", material_id, admin["_id"])
    return {"success": True, "message": "Material deleted successfully"}
