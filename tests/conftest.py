"""Pytest configuration for the shop API tests.

The app runs against an in-memory mongomock database; the lifespan (which
needs a real MongoDB) is never entered because the TestClient is not used as
a context manager.
"""

import asyncio
import os
import tempfile

# Must be set before core.config is imported anywhere
os.environ["ENV"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="fabricshop-uploads-")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from core.dependencies import get_db
from core.security import create_access_token, get_password_hash
from db import Database, new_id, utcnow
from main import app
from services.thumbnail import get_renderer

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def run(coro):
    """Drive a mongomock-motor coroutine from synchronous test code."""
    return asyncio.run(coro)


class FakeRenderer:
    def __init__(self):
        self.calls = []

    async def capture(self, design, fabric_image=None):
        self.calls.append((design, fabric_image))
        return "data:image/png;base64,ZmFrZQ=="


@pytest.fixture
def db():
    database = Database("mongodb://unused", "fabricshop_test")
    database.db = AsyncMongoMockClient()["fabricshop_test"]
    run(database.ensure_indexes())
    return database.db


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def client(db, renderer):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_renderer] = lambda: renderer
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_account(db, email, role="user", password="secret123", **extra):
    now = utcnow()
    doc = {
        "_id": new_id(),
        "name": email.split("@")[0].title(),
        "email": email,
        "password": get_password_hash(password),
        "role": role,
        "cart": [],
        "favorites": [],
        "version": 0,
        "created_at": now,
        "updated_at": now,
        **extra,
    }
    run(db.users.insert_one(doc))
    return doc


def auth_header(account):
    return {"Authorization": f"Bearer {create_access_token(data={'sub': account['_id']})}"}


@pytest.fixture
def user(db):
    return make_account(db, "jane@fabricshop.io")


@pytest.fixture
def admin(db):
    return make_account(db, "admin@fabricshop.io", role="admin")


@pytest.fixture
def user_headers(user):
    return auth_header(user)


@pytest.fixture
def admin_headers(admin):
    return auth_header(admin)


@pytest.fixture
def catalog(db):
    """One category, material and art plus two active products referencing them."""
    now = utcnow()
    category = {"_id": new_id(), "name": "Cotton prints", "created_at": now, "updated_at": now}
    material = {"_id": new_id(), "name": "Linen", "created_at": now, "updated_at": now}
    art = {"_id": new_id(), "name": "Batik", "description": "Wax-resist dyeing",
           "image_url": "/uploads/arts/batik.png", "created_at": now, "updated_at": now}
    run(db.categories.insert_one(category))
    run(db.materials.insert_one(material))
    run(db.arts.insert_one(art))

    products = []
    for name, price in (("Indigo scarf", 25.0), ("Batik table runner", 40.0)):
        doc = {
            "_id": new_id(),
            "name": name,
            "description": f"{name}, hand made",
            "price": price,
            "category": category["_id"],
            "material": material["_id"],
            "art": art["_id"],
            "tags": [],
            "images": [f"/uploads/products/{name.lower().replace(' ', '-')}.png"],
            "stock": 10,
            "is_active": True,
            "show_in_diy": False,
            "created_at": now,
            "updated_at": now,
        }
        run(db.products.insert_one(doc))
        products.append(doc)

    return {"category": category, "material": material, "art": art, "products": products}


def png_file(name="swatch.png"):
    return (name, PNG, "image/png")
