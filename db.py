# db.py - MongoDB handle, created by the app lifespan and closed at shutdown
import uuid
from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from core.logger import get_logger

logger = get_logger("db")

# (collection, keys, unique)
INDEXES = [
    ("users", [("email", ASCENDING)], True),
    ("categories", [("name", ASCENDING)], True),
    ("materials", [("name", ASCENDING)], True),
    ("arts", [("name", ASCENDING)], True),
    ("products", [("category", ASCENDING)], False),
    ("products", [("art", ASCENDING)], False),
    ("products", [("created_at", DESCENDING)], False),
    ("projects", [("user", ASCENDING), ("created_at", DESCENDING)], False),
    ("home_sections", [("display_order", ASCENDING)], False),
]


class Database:
    def __init__(self, url: str, name: str):
        self.url = url
        self.name = name
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None

    async def connect(self) -> AsyncIOMotorDatabase:
        self.client = AsyncIOMotorClient(self.url, serverSelectionTimeoutMS=5000, tz_aware=True)
        self.db = self.client[self.name]
        try:
            await self.client.admin.command("ping")
            await self.ensure_indexes()
        except PyMongoError as e:
            logger.error("MongoDB connection error: %s", e)
            self.close()
            raise
        logger.info("MongoDB connected (%s)", self.name)
        return self.db

    async def ensure_indexes(self) -> None:
        for collection, keys, unique in INDEXES:
            await self.db[collection].create_index(keys, unique=unique)

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
            logger.info("MongoDB disconnected")
        self.client = None
        self.db = None


HIDDEN_FIELDS = {"_id", "password", "version"}


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_out(doc: dict) -> dict:
    return {"id": str(doc["_id"]), **{k: v for k, v in doc.items() if k not in HIDDEN_FIELDS}}
