from fastapi import APIRouter, Depends, HTTPException, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from typing import Optional

from core.dependencies import get_db, require_admin
from core.logger import get_logger
from db import utcnow
from routers.auth.me import user_out
from schemas.user import AdminUserUpdate, Role

router = APIRouter(prefix="/users", tags=["Users"])
logger = get_logger("users")

# Cart, favorites and the hash never leave the database through this router
_PROJECTION = {"password": 0, "cart": 0, "favorites": 0}


# GET /users - all accounts, newest first
@router.get("")
async def list_users(
    role: Optional[Role] = Query(None),
    admin: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    query = {"role": role} if role else {}
    docs = await db.users.find(query, _PROJECTION).sort("created_at", -1).to_list(length=None)
    return {"success": True, "count": len(docs), "data": [user_out(d) for d in docs]}


@router.get("/{user_id}")
async def get_user(user_id: str, admin: dict = Depends(require_admin), db: AsyncIOMotorDatabase = Depends(get_db)):
    user = await db.users.find_one({"_id": user_id}, _PROJECTION)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {"success": True, "data": user_out(user)}


@router.api_route("/{user_id}", methods=["PUT", "PATCH"])
async def update_user(
    user_id: str,
    data: AdminUserUpdate,
    admin: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    user = await db.users.find_one({"_id": user_id}, _PROJECTION)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    update_data = data.model_dump(exclude_none=True)
    if "email" in update_data:
        update_data["email"] = update_data["email"].lower()
        taken = await db.users.find_one({"email": update_data["email"], "_id": {"$ne": user_id}}, {"_id": 1})
        if taken:
            raise HTTPException(status_code=400, detail="Email already in use")
    update_data["updated_at"] = utcnow()

    try:
        await db.users.update_one({"_id": user_id}, {"$set": update_data})
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Email already in use")
    logger.info("User %s updated by %s: %s", user_id, admin["_id"], sorted(update_data))
    return {"success": True, "data": user_out({**user, **update_data})}


# Cart and favorites live on the account document and go with it
@router.delete("/{user_id}")
async def delete_user(user_id: str, admin: dict = Depends(require_admin), db: AsyncIOMotorDatabase = Depends(get_db)):
    if user_id == admin["_id"]:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    result = await db.users.delete_one({"_id": user_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="User not found")
    logger.info("User %s deleted by %s", user_id, admin["_id"])
    return {"success": True, "message": "User deleted successfully"}
