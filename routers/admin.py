from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from core.dependencies import get_db, require_admin
from routers.auth.me import user_out

router = APIRouter(prefix="/admin", tags=["Admin"])

# ===================== Dashboard =====================

# (key in the response, collection, filter)
_COUNTS = [
    ("users", "users", {}),
    ("admins", "users", {"role": "admin"}),
    ("products", "products", {}),
    ("active_products", "products", {"is_active": True}),
    ("categories", "categories", {}),
    ("materials", "materials", {}),
    ("arts", "arts", {}),
    ("projects", "projects", {}),
    ("design_elements", "design_elements", {}),
    ("home_sections", "home_sections", {}),
]


@router.get("/dashboard")
async def dashboard(
    recent: int = Query(5, ge=1, le=50),
    admin: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    counts = {}
    for key, collection, query in _COUNTS:
        counts[key] = await db[collection].count_documents(query)

    logins = await (
        db.users.find({"last_login": {"$ne": None}}, {"password": 0, "cart": 0, "favorites": 0})
        .sort("last_login", -1)
        .limit(recent)
        .to_list(length=recent)
    )
    return {"success": True, "data": {"counts": counts, "recent_logins": [user_out(u) for u in logins]}}
