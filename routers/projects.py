# /routers/projects.py - "design your own product" projects
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from core.dependencies import get_current_user, get_db
from core.logger import get_logger
from core.storage import get_storage
from db import new_id, to_out, utcnow
from schemas.common import parse_form
from schemas.project import ProjectCreate, ProjectUpdate
from services.catalog import products_by_id

router = APIRouter(prefix="/projects", tags=["Projects"])
logger = get_logger("projects")


def _is_admin(user: dict) -> bool:
    return user.get("role") == "admin"


async def _owned_project(db: AsyncIOMotorDatabase, project_id: str, current_user: dict, action: str) -> dict:
    project = await db.projects.find_one({"_id": project_id})
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    if project.get("user") and project["user"] != current_user["_id"] and not _is_admin(current_user):
        raise HTTPException(status_code=403, detail=f"User not authorized to {action} this project")
    return project


async def _with_product(db: AsyncIOMotorDatabase, project: dict) -> dict:
    out = to_out(project)
    selected = project.get("selected_product_id")
    if selected:
        out["selected_product"] = (await products_by_id(db, [selected])).get(selected)
    return out


# GET /projects/ - own projects, newest first (all projects for admins)
@router.get("")
async def list_projects(current_user: dict = Depends(get_current_user), db: AsyncIOMotorDatabase = Depends(get_db)):
    query = {} if _is_admin(current_user) else {"user": current_user["_id"]}
    docs = await db.projects.find(query).sort("created_at", -1).to_list(length=None)
    return {"success": True, "count": len(docs), "data": [to_out(d) for d in docs]}


@router.get("/{project_id}")
async def get_project(project_id: str, current_user: dict = Depends(get_current_user),
                      db: AsyncIOMotorDatabase = Depends(get_db)):
    project = await _owned_project(db, project_id, current_user, "access")
    return {"success": True, "data": await _with_product(db, project)}


@router.post("", status_code=201)
async def create_project(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    fabric_category: Optional[str] = Form(None),
    material_id: Optional[str] = Form(None),
    material_name: Optional[str] = Form(None),
    selected_product_id: Optional[str] = Form(None),
    design_data: Optional[str] = Form(None),
    fabric_image: Optional[UploadFile] = File(None),
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
    storage=Depends(get_storage),
):
    data = parse_form(
        ProjectCreate, name=name, description=description, fabric_category=fabric_category,
        material_id=material_id, material_name=material_name,
        selected_product_id=selected_product_id or None, design_data=design_data,
    )
    now = utcnow()
    doc = {
        "_id": new_id(),
        **data.model_dump(),
        "fabric_image": None,
        "user": current_user["_id"],
        "created_at": now,
        "updated_at": now,
    }
    if fabric_image is not None and fabric_image.filename:
        doc["fabric_image"] = await storage.save(fabric_image, "projects")

    await db.projects.insert_one(doc)
    logger.info("Project %s created by %s", doc["_id"], current_user["_id"])
    return {"success": True, "data": await _with_product(db, doc)}


@router.api_route("/{project_id}", methods=["PUT", "PATCH"])
async def update_project(
    project_id: str,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    fabric_category: Optional[str] = Form(None),
    material_id: Optional[str] = Form(None),
    material_name: Optional[str] = Form(None),
    selected_product_id: Optional[str] = Form(None),
    design_data: Optional[str] = Form(None),
    fabric_image: Optional[UploadFile] = File(None),
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
    storage=Depends(get_storage),
):
    data = parse_form(
        ProjectUpdate, name=name, description=description, fabric_category=fabric_category,
        material_id=material_id or None, material_name=material_name or None,
        selected_product_id=selected_product_id or None, design_data=design_data or None,
    )
    project = await _owned_project(db, project_id, current_user, "update")

    # Fields left out keep their stored value (design_data included)
    update_data = data.model_dump(exclude_none=True)
    old_image = None
    if fabric_image is not None and fabric_image.filename:
        update_data["fabric_image"] = await storage.save(fabric_image, "projects")
        old_image = project.get("fabric_image")
    update_data["updated_at"] = utcnow()

    await db.projects.update_one({"_id": project_id}, {"$set": update_data})
    if old_image:
        await storage.delete(old_image)
    return {"success": True, "data": await _with_product(db, {**project, **update_data})}


@router.delete("/{project_id}")
async def delete_project(project_id: str, current_user: dict = Depends(get_current_user),
                         db: AsyncIOMotorDatabase = Depends(get_db), storage=Depends(get_storage)):
    project = await _owned_project(db, project_id, current_user, "delete")
    await db.projects.delete_one({"_id": project_id})
    if project.get("fabric_image"):
        await storage.delete(project["fabric_image"])
    logger.info("Project %s deleted by %s", project_id, current_user["_id"])
    return {"success": True, "data": {}}
