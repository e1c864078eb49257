from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional, Literal, List

from core.dependencies import get_db, require_admin
from core.errors import AppError
from core.logger import get_logger
from core.storage import get_storage
from db import new_id, utcnow
from schemas.common import json_list, parse_form
from schemas.product import ProductCreate, ProductUpdate
from services.catalog import missing_references, resolve_products

router = APIRouter(prefix="/products", tags=["Products"])
logger = get_logger("products")


def _sort(sort_by: str, sort_dir: Literal["asc", "desc"]):
    dir_num = 1 if sort_dir == "asc" else -1
    return [(sort_by, dir_num), ("_id", dir_num)]


async def _store_images(storage, files: Optional[List[UploadFile]]) -> List[str]:
    urls = []
    try:
        for f in files or []:
            if f.filename:
                urls.append(await storage.save(f, "products"))
    except AppError:
        # drop what this request already stored
        for url in urls:
            await storage.delete(url)
        raise
    return urls


async def _check_references(db: AsyncIOMotorDatabase, product: dict) -> None:
    missing = await missing_references(db, product)
    if missing:
        raise HTTPException(status_code=400, detail=f"Invalid {', '.join(missing)}")


async def _resolved(db: AsyncIOMotorDatabase, doc: dict) -> dict:
    return (await resolve_products(db, [doc]))[0]


@router.get("")
async def get_products(
    category: Optional[str] = None,
    material: Optional[str] = None,
    art: Optional[str] = None,
    is_active: Optional[bool] = None,
    show_in_diy: Optional[bool] = None,
    sort_by: Literal["created_at", "name", "price"] = "created_at",
    sort_dir: Literal["asc", "desc"] = "desc",
    limit: int = Query(0, ge=0, le=500, description="0 = no limit"),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    match: dict = {}
    if category:
        match["category"] = category
    if material:
        match["material"] = material
    if art:
        match["art"] = art
    if is_active is not None:
        match["is_active"] = is_active
    if show_in_diy is not None:
        match["show_in_diy"] = show_in_diy

    cursor = db.products.find(match).sort(_sort(sort_by, sort_dir))
    if limit:
        cursor = cursor.limit(limit)
    docs = await cursor.to_list(length=None)
    products = await resolve_products(db, docs)
    return {"success": True, "count": len(products), "data": products}


@router.get("/{product_id}")
async def get_product(product_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    if not (doc := await db.products.find_one({"_id": product_id})):
        raise HTTPException(status_code=404, detail="Product not found")
    return {"success": True, "data": await _resolved(db, doc)}


@router.post("", status_code=201)
async def create_product(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    category: Optional[str] = Form(None),
    material: Optional[str] = Form(None),
    art: Optional[str] = Form(None),
    tags: Optional[str] = Form(None, description="JSON array"),
    stock: Optional[int] = Form(None),
    is_active: Optional[bool] = Form(None),
    show_in_diy: Optional[bool] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    admin: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
    storage=Depends(get_storage),
):
    product = parse_form(
        ProductCreate, name=name, description=description, price=price, category=category,
        material=material, art=art, tags=json_list(tags, "tags"), stock=stock,
        is_active=is_active, show_in_diy=show_in_diy,
    )
    if not any(f.filename for f in images or []):
        raise HTTPException(status_code=400, detail="At least one image is required")
    await _check_references(db, product.model_dump())

    now = utcnow()
    doc = {
        "_id": new_id(),
        **product.model_dump(),
        "images": await _store_images(storage, images),
        "created_at": now,
        "updated_at": now,
    }
    await db.products.insert_one(doc)
    logger.info("Product %s created by %s", doc["_id"], admin["_id"])
    return {"success": True, "data": await _resolved(db, doc)}


@router.api_route("/{product_id}", methods=["PUT", "PATCH"])
async def update_product(
    product_id: str,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    category: Optional[str] = Form(None),
    material: Optional[str] = Form(None),
    art: Optional[str] = Form(None),
    tags: Optional[str] = Form(None, description="JSON array"),
    stock: Optional[int] = Form(None),
    is_active: Optional[bool] = Form(None),
    show_in_diy: Optional[bool] = Form(None),
    existing_images: Optional[str] = Form(None, description="JSON array of image URLs to keep"),
    images: Optional[List[UploadFile]] = File(None),
    admin: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
    storage=Depends(get_storage),
):
    update = parse_form(
        ProductUpdate, name=name, description=description, price=price, category=category,
        material=material, art=art, tags=json_list(tags, "tags"), stock=stock,
        is_active=is_active, show_in_diy=show_in_diy,
    )
    existing = await db.products.find_one({"_id": product_id})
    if not existing:
        raise HTTPException(status_code=404, detail="Product not found")

    update_data = update.model_dump(exclude_none=True)
    # Re-validate the merged document
    merged = {k: existing.get(k) for k in ProductCreate.model_fields if existing.get(k) is not None}
    merged.update(update_data)
    parse_form(ProductCreate, **merged)
    await _check_references(db, {k: v for k, v in update_data.items() if k in ("category", "material", "art")})

    kept = json_list(existing_images, "existing_images")
    new_urls = await _store_images(storage, images)
    if new_urls or kept is not None:
        update_data["images"] = new_urls + (kept or [])
        if not update_data["images"]:
            raise HTTPException(status_code=400, detail="At least one image is required")

    update_data["updated_at"] = utcnow()
    await db.products.update_one({"_id": product_id}, {"$set": update_data})
    logger.info("Product %s updated by %s", product_id, admin["_id"])
    return {"success": True, "data": await _resolved(db, {**existing, **update_data})}


@router.delete("/{product_id}")
async def delete_product(product_id: str, admin: dict = Depends(require_admin),
                         db: AsyncIOMotorDatabase = Depends(get_db)):
    result = await db.products.delete_one({"_id": product_id})
    if not result.deleted_count:
        raise HTTPException(status_code=404, detail="Product not found")
    logger.info("Product %s deleted by %s", product_id, admin["_id"])
    return {"success": True, "message": "Product deleted successfully"}
