# scripts/create_admin.py - create the admin account from ADMIN_* settings if it does not exist yet
import asyncio
import sys
from typing import Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import EmailStr, TypeAdapter, ValidationError
from pymongo.errors import PyMongoError

from core.config import ADMIN_EMAIL, ADMIN_NAME, ADMIN_PASSWORD, DB_NAME, MONGO_URL
from core.errors import BadRequestError
from core.logger import get_logger
from core.security import get_password_hash
from db import Database, new_id, utcnow

logger = get_logger("scripts.create_admin")

_email = TypeAdapter(EmailStr)


async def create_admin(db: AsyncIOMotorDatabase, name: str, email: str, password: str) -> Tuple[dict, bool]:
    """Return (account, created). An existing account with that email is left untouched."""
    try:
        email = _email.validate_python(email).lower()
    except ValidationError:
        raise BadRequestError(f"Invalid admin email: {email!r}")
    existing = await db.users.find_one({"email": email})
    if existing:
        return existing, False

    now = utcnow()
    doc = {
        "_id": new_id(),
        "name": name,
        "email": email,
        "password": get_password_hash(password),
        "role": "admin",
        "cart": [],
        "favorites": [],
        "version": 0,
        "created_at": now,
        "updated_at": now,
    }
    await db.users.insert_one(doc)
    return doc, True


async def main() -> int:
    database = Database(MONGO_URL, DB_NAME)
    try:
        db = await database.connect()
    except PyMongoError:
        return 1
    try:
        account, created = await create_admin(db, ADMIN_NAME, ADMIN_EMAIL, ADMIN_PASSWORD)
    except BadRequestError as e:
        logger.error("%s; set ADMIN_EMAIL to a deliverable address", e.message)
        return 1
    finally:
        database.close()

    if created:
        logger.info("Admin user created: %s", account["email"])
    elif account.get("role") != "admin":
        logger.warning("%s exists but is not an admin; promote it from /api/users", account["email"])
    else:
        logger.info("Admin user already exists: %s", account["email"])
    return 0


if __name__ == "__main__":
    # Usage: python -m scripts.create_admin
    sys.exit(asyncio.run(main()))
