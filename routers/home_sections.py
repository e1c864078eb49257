from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from core.dependencies import get_db, require_admin
from core.storage import get_storage
from db import new_id, to_out, utcnow
from schemas.common import parse_form
from schemas.content import HomeSectionCreate, HomeSectionUpdate

router = APIRouter(prefix="/home-sections", tags=["Home sections"])


@router.get("")
async def get_home_sections(active_only: bool = False, db: AsyncIOMotorDatabase = Depends(get_db)):
    query = {"is_active": True} if active_only else {}
    docs = await db.home_sections.find(query).sort([("display_order", 1), ("_id", 1)]).to_list(length=None)
    return {"success": True, "data": [to_out(d) for d in docs]}


@router.post("", status_code=201)
async def create_home_section(
    type: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    display_order: Optional[int] = Form(None),
    image: Optional[UploadFile] = File(None),
    admin: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
    storage=Depends(get_storage),
):
    data = parse_form(HomeSectionCreate, type=type, name=name, display_order=display_order)
    if image is None or not image.filename:
        raise HTTPException(status_code=400, detail="Image is required")

    now = utcnow()
    doc = {
        "_id": new_id(),
        **data.model_dump(),
        "image": await storage.save(image, "home-sections"),
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }
    await db.home_sections.insert_one(doc)
    return {"success": True, "data": to_out(doc)}


@router.api_route("/{section_id}", methods=["PUT", "PATCH"])
async def update_home_section(
    section_id: str,
    type: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    display_order: Optional[int] = Form(None),
    is_active: Optional[bool] = Form(None),
    image: Optional[UploadFile] = File(None),
    admin: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
    storage=Depends(get_storage),
):
    data = parse_form(HomeSectionUpdate, type=type, name=name, display_order=display_order, is_active=is_active)
    section = await db.home_sections.find_one({"_id": section_id})
    if not section:
        raise HTTPException(status_code=404, detail="Home section not found")

    update_data = data.model_dump(exclude_none=True)
    if image is not None and image.filename:
        update_data["image"] = await storage.save(image, "home-sections")
    update_data["updated_at"] = utcnow()

    await db.home_sections.update_one({"_id": section_id}, {"$set": update_data})
    return {"success": True, "data": to_out({**section, **update_data})}


@router.delete("/{section_id}")
async def delete_home_section(section_id: str, admin: dict = Depends(require_admin),
                              db: AsyncIOMotorDatabase = Depends(get_db), storage=Depends(get_storage)):
    section = await db.home_sections.find_one({"_id": section_id})
    if not section:
        raise HTTPException(status_code=404, detail="Home section not found")

    await db.home_sections.delete_one({"_id": section_id})
    await storage.delete(section.get("image"))
    return {"success": True, "message": "Home section deleted successfully"}
