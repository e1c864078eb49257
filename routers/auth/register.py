from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from core.dependencies import get_db
from core.logger import get_logger
from core.security import get_password_hash, create_access_token
from db import new_id, utcnow
from routers.auth.login import session_payload
from schemas.user import UserCreate

router = APIRouter()
logger = get_logger("auth")


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(user: UserCreate, db: AsyncIOMotorDatabase = Depends(get_db)):
    email = user.email.lower()
    existing = await db.users.find_one({"email": email}, {"_id": 1})
    if existing:
        raise HTTPException(status_code=400, detail="User already exists")

    now = utcnow()
    new_user = {
        "_id": new_id(),
        "name": user.name,
        "email": email,
        "password": get_password_hash(user.password),
        "role": "user",
        "cart": [],
        "favorites": [],
        "version": 0,
        "created_at": now,
        "updated_at": now,
    }
    try:
        await db.users.insert_one(new_user)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="User already exists")
    logger.info("Registered account %s", new_user["_id"])

    token = create_access_token(data={"sub": new_user["_id"]})
    return {"success": True, "data": session_payload(token, new_user)}
