# services/catalog.py - reference resolution between catalog collections
from typing import Dict, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from db import to_out

# product field -> referenced collection
REFERENCES = (("category", "categories"), ("material", "materials"), ("art", "arts"))


async def _names(db: AsyncIOMotorDatabase, collection: str, ids: Iterable[str]) -> Dict[str, dict]:
    ids = list({i for i in ids if i})
    if not ids:
        return {}
    docs = await db[collection].find({"_id": {"$in": ids}}, {"name": 1}).to_list(length=None)
    return {d["_id"]: {"id": d["_id"], "name": d.get("name")} for d in docs}


async def resolve_products(db: AsyncIOMotorDatabase, products: List[dict]) -> List[dict]:
    """Serialize products with category/material/art replaced by {id, name} (None when dangling)."""
    lookups = {}
    for field, collection in REFERENCES:
        lookups[field] = await _names(db, collection, (p.get(field) for p in products))

    out = []
    for p in products:
        item = to_out(p)
        for field, _ in REFERENCES:
            item[field] = lookups[field].get(p.get(field))
        out.append(item)
    return out


async def products_by_id(db: AsyncIOMotorDatabase, product_ids: Iterable[str]) -> Dict[str, dict]:
    ids = list({i for i in product_ids if i})
    if not ids:
        return {}
    docs = await db.products.find({"_id": {"$in": ids}}).to_list(length=None)
    return {p["id"]: p for p in await resolve_products(db, docs)}


async def product_exists(db: AsyncIOMotorDatabase, product_id: Optional[str]) -> bool:
    if not product_id:
        return False
    return await db.products.find_one({"_id": product_id}, {"_id": 1}) is not None


async def missing_references(db: AsyncIOMotorDatabase, product: dict) -> List[str]:
    """Names of reference fields in `product` that point at no document."""
    missing = []
    for field, collection in REFERENCES:
        ref = product.get(field)
        if ref is not None and await db[collection].find_one({"_id": ref}, {"_id": 1}) is None:
            missing.append(field)
    return missing


async def count_dependent_products(db: AsyncIOMotorDatabase, field: str, ref_id: str) -> int:
    return await db.products.count_documents({field: ref_id})
