from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from core.dependencies import get_db, require_admin
from core.logger import get_logger
from core.storage import get_storage
from db import new_id, to_out, utcnow
from schemas.common import parse_form
from schemas.content import DesignElementCreate, DesignElementUpdate

router = APIRouter(prefix="/design-elements", tags=["Design elements"])
logger = get_logger("design_elements")


@router.get("")
async def get_design_elements(active_only: bool = False, db: AsyncIOMotorDatabase = Depends(get_db)):
    query = {"is_active": True} if active_only else {}
    docs = await db.design_elements.find(query).sort("created_at", -1).to_list(length=None)
    return {"success": True, "count": len(docs), "data": [to_out(d) for d in docs]}


@router.post("", status_code=201)
async def create_design_element(
    name: Optional[str] = Form(None),
    art_type: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    admin: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
    storage=Depends(get_storage),
):
    data = parse_form(DesignElementCreate, name=name, art_type=art_type)
    if image is None or not image.filename:
        raise HTTPException(status_code=400, detail="Single image file is required")

    now = utcnow()
    doc = {
        "_id": new_id(),
        **data.model_dump(),
        "image": await storage.save(image, "design-elements"),
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }
    await db.design_elements.insert_one(doc)
    logger.info("Design element %s created by %s", doc["_id"], admin["_id"])
    return {"success": True, "data": to_out(doc)}


@router.api_route("/{element_id}", methods=["PUT", "PATCH"])
async def update_design_element(
    element_id: str,
    name: Optional[str] = Form(None),
    art_type: Optional[str] = Form(None),
    is_active: Optional[bool] = Form(None),
    image: Optional[UploadFile] = File(None),
    admin: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
    storage=Depends(get_storage),
):
    data = parse_form(DesignElementUpdate, name=name, art_type=art_type, is_active=is_active)
    element = await db.design_elements.find_one({"_id": element_id})
    if not element:
        raise HTTPException(status_code=404, detail="Design element not found")

    update_data = data.model_dump(exclude_none=True)
    if image is not None and image.filename:
        update_data["image"] = await storage.save(image, "design-elements")
    update_data["updated_at"] = utcnow()

    await db.design_elements.update_one({"_id": element_id}, {"$set": update_data})
    if "image" in update_data and element.get("image"):
        await storage.delete(element["image"])
    return {"success": True, "data": to_out({**element, **update_data})}


@router.patch("/{element_id}/toggle")
async def toggle_design_element(element_id: str, admin: dict = Depends(require_admin),
                                db: AsyncIOMotorDatabase = Depends(get_db)):
    element = await db.design_elements.find_one({"_id": element_id})
    if not element:
        raise HTTPException(status_code=404, detail="Design element not found")

    is_active = not element.get("is_active", True)
    await db.design_elements.update_one(
        {"_id": element_id}, {"$set": {"is_active": is_active, "updated_at": utcnow()}}
    )
    return {"success": True, "data": to_out({**element, "is_active": is_active})}


@router.delete("/{element_id}")
async def delete_design_element(element_id: str, admin: dict = Depends(require_admin),
                                db: AsyncIOMotorDatabase = Depends(get_db), storage=Depends(get_storage)):
    element = await db.design_elements.find_one({"_id": element_id})
    if not element:
        raise HTTPException(status_code=404, detail="Design element not found")

    await db.design_elements.delete_one({"_id": element_id})
    await storage.delete(element.get("image"))
    return {"success": True, "message": "Design element deleted successfully"}
