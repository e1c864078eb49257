from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from core.dependencies import get_db
from core.logger import get_logger
from core.security import verify_password, create_access_token
from db import utcnow
from schemas.auth import LoginRequest

router = APIRouter()
logger = get_logger("auth")


def session_payload(token: str, user: dict) -> dict:
    return {
        "token": token,
        "user": {
            "id": str(user["_id"]),
            "name": user.get("name"),
            "email": user.get("email"),
            "role": user.get("role", "user"),
        },
    }


async def authenticate(db: AsyncIOMotorDatabase, credentials: LoginRequest, admin_only: bool = False) -> dict:
    user = await db.users.find_one({"email": credentials.email.lower()})
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if admin_only and user.get("role") != "admin":
        logger.warning("Admin login refused for non-admin account %s", user["_id"])
        raise HTTPException(status_code=403, detail="Access denied. Admin only.")
    if not verify_password(credentials.password, user.get("password")):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    await db.users.update_one({"_id": user["_id"]}, {"$set": {"last_login": utcnow()}})
    return user


@router.post("/login")
async def login(credentials: LoginRequest, db: AsyncIOMotorDatabase = Depends(get_db)):
    user = await authenticate(db, credentials)
    token = create_access_token(data={"sub": user["_id"]})
    return {"success": True, "data": session_payload(token, user)}


@router.post("/admin/login")
async def admin_login(credentials: LoginRequest, db: AsyncIOMotorDatabase = Depends(get_db)):
    user = await authenticate(db, credentials, admin_only=True)
    token = create_access_token(data={"sub": user["_id"]})
    logger.info("Admin login %s", user["_id"])
    return {"success": True, "data": session_payload(token, user)}
