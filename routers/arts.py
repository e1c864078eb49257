from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from typing import Literal, Optional

from core.dependencies import get_db, require_admin
from core.errors import DependentRecordsError
from core.logger import get_logger
from core.storage import get_storage
from db import new_id, to_out, utcnow
from schemas.catalog import ArtCreate, ArtUpdate
from schemas.common import parse_form
from services.catalog import count_dependent_products

router = APIRouter(prefix="/arts", tags=["Arts"])
logger = get_logger("arts")


async def _ensure_unique_name(db: AsyncIOMotorDatabase, name: str, exclude_id: str = None) -> None:
    query: dict = {"name": name}
    if exclude_id:
        query["_id"] = {"$ne": exclude_id}
    if await db.arts.find_one(query, {"_id": 1}):
        raise HTTPException(status_code=400, detail="Art already exists")


def _has_file(image: Optional[UploadFile]) -> bool:
    return image is not None and bool(image.filename)


@router.get("")
async def get_arts(
    sort_by: Literal["name", "created_at"] = "name",
    sort_dir: Literal["asc", "desc"] = "asc",
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    docs = await db.arts.find().sort(sort_by, 1 if sort_dir == "asc" else -1).to_list(length=None)
    return {"success": True, "count": len(docs), "data": [to_out(d) for d in docs]}


@router.get("/{art_id}")
async def get_art(art_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    art = await db.arts.find_one({"_id": art_id})
    if not art:
        raise HTTPException(status_code=404, detail="Art not found")
    return {"success": True, "data": to_out(art)}


# Image comes either as an uploaded file or as an image_url field
@router.post("", status_code=201)
async def create_art(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    image_url: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    admin: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
    storage=Depends(get_storage),
):
    data = parse_form(ArtCreate, name=name, description=description, image_url=image_url)
    if not _has_file(image) and not data.image_url:
        raise HTTPException(status_code=400, detail="Either image file or URL must be provided")
    await _ensure_unique_name(db, data.name)

    doc = {"_id": new_id(), **data.model_dump()}
    if _has_file(image):
        doc["image_url"] = await storage.save(image, "arts")
    now = utcnow()
    doc.update(created_at=now, updated_at=now)
    try:
        await db.arts.insert_one(doc)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Art already exists")
    logger.info("Art %s created by %s", doc["_id"], admin["_id"])
    return {"success": True, "message": "Art created successfully", "data": to_out(doc)}


@router.api_route("/{art_id}", methods=["PUT", "PATCH"])
async def update_art(
    art_id: str,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    image_url: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    admin: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
    storage=Depends(get_storage),
):
    data = parse_form(ArtUpdate, name=name, description=description, image_url=image_url)
    existing = await db.arts.find_one({"_id": art_id})
    if not existing:
        raise HTTPException(status_code=404, detail="Art not found")

    update_data = data.model_dump(exclude_none=True)
    if "name" in update_data:
        await _ensure_unique_name(db, update_data["name"], exclude_id=art_id)
    if _has_file(image):
        update_data["image_url"] = await storage.save(image, "arts")
    update_data["updated_at"] = utcnow()

    await db.arts.update_one({"_id": art_id}, {"$set": update_data})
    if _has_file(image) and existing.get("image_url"):
        await storage.delete(existing["image_url"])
    return {"success": True, "message": "Art updated successfully", "data": to_out({**existing, **update_data})}


@router.delete("/{art_id}")
async def delete_art(art_id: str, admin: dict = Depends(require_admin),
                     db: AsyncIOMotorDatabase = Depends(get_db), storage=Depends(get_storage)):
    art = await db.arts.find_one({"_id": art_id})
    if not art:
        raise HTTPException(status_code=404, detail="Art not found")

    dependents = await count_dependent_products(db, "art", art_id)
    if dependents > 0:
        raise DependentRecordsError(
            "Cannot delete art as it is being used by existing products", products_count=dependents
        )

    await db.arts.delete_one({"_id": art_id})
    await storage.delete(art.get("image_url"))
    logger.info("Art %s deleted by %s", art_id, admin["_id"])
    return {"success": True, "message": "Art deleted successfully"}
