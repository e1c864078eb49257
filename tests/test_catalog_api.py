import json
import os

from conftest import png_file, run
from core.config import UPLOAD_DIR


def _on_disk(url):
    return os.path.isfile(os.path.join(UPLOAD_DIR, url[len("/uploads/"):]))


def _stored(folder):
    path = os.path.join(UPLOAD_DIR, folder)
    return set(os.listdir(path)) if os.path.isdir(path) else set()


# ===================== Categories =====================

def test_list_categories_sorted_by_name(client, admin_headers):
    for name in ("Silk", "Batik cloth", "Wool"):
        assert client.post("/api/categories", json={"name": name}, headers=admin_headers).status_code == 201

    r = client.get("/api/categories")
    assert r.status_code == 200
    assert r.json()["count"] == 3
    assert [c["name"] for c in r.json()["data"]] == ["Batik cloth", "Silk", "Wool"]

    r = client.get("/api/categories", params={"sort_dir": "desc"})
    assert [c["name"] for c in r.json()["data"]] == ["Wool", "Silk", "Batik cloth"]


def test_create_category_validation_and_duplicates(client, db, admin_headers):
    r = client.post("/api/categories", json={"name": "  Silk  "}, headers=admin_headers)
    assert r.status_code == 201
    assert r.json()["data"]["name"] == "Silk"

    r = client.post("/api/categories", json={"name": "Silk"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Category already exists"

    r = client.post("/api/categories", json={"name": "   "}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Validation error"
    assert run(db.categories.count_documents({})) == 1


def test_non_admin_cannot_create_category(client, db, user_headers):
    r = client.post("/api/categories", json={"name": "Silk"}, headers=user_headers)
    assert r.status_code == 403
    assert r.json()["success"] is False
    assert run(db.categories.count_documents({})) == 0


def test_anonymous_cannot_create_category(client, db):
    r = client.post("/api/categories", json={"name": "Silk"})
    assert r.status_code == 401
    assert run(db.categories.count_documents({})) == 0


def test_get_update_missing_category(client, admin_headers):
    assert client.get("/api/categories/missing").status_code == 404
    r = client.put("/api/categories/missing", json={"name": "X"}, headers=admin_headers)
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Category not found"}


def test_update_category(client, admin_headers, catalog):
    cid = catalog["category"]["_id"]
    r = client.patch(f"/api/categories/{cid}", json={"name": "Block prints"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["data"]["name"] == "Block prints"
    assert client.get(f"/api/categories/{cid}").json()["data"]["name"] == "Block prints"


def test_delete_referenced_category_is_refused(client, db, admin_headers, catalog):
    cid = catalog["category"]["_id"]

    r = client.delete(f"/api/categories/{cid}", headers=admin_headers)

    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["products_count"] == 2
    assert run(db.categories.count_documents({"_id": cid})) == 1


def test_delete_unreferenced_category(client, db, admin_headers):
    cid = client.post("/api/categories", json={"name": "Unused"}, headers=admin_headers).json()["data"]["id"]

    r = client.delete(f"/api/categories/{cid}", headers=admin_headers)

    assert r.status_code == 200
    assert r.json()["success"] is True
    assert run(db.categories.count_documents({})) == 0
    assert client.delete(f"/api/categories/{cid}", headers=admin_headers).status_code == 404


# ===================== Materials =====================

def test_material_crud(client, admin_headers):
    r = client.post("/api/materials", json={"name": "Hemp"}, headers=admin_headers)
    assert r.status_code == 201
    mid = r.json()["data"]["id"]

    assert client.post("/api/materials", json={"name": "Hemp"}, headers=admin_headers).status_code == 400
    r = client.put(f"/api/materials/{mid}", json={"name": "Raw hemp"}, headers=admin_headers)
    assert r.json()["data"]["name"] == "Raw hemp"

    assert client.delete(f"/api/materials/{mid}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/materials/{mid}").status_code == 404


# ===================== Arts =====================

def test_create_art_needs_an_image(client, admin_headers):
    r = client.post("/api/arts", data={"name": "Ikat", "description": "Resist dyed yarn"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Either image file or URL must be provided"


def test_create_art_with_url_and_with_file(client, admin_headers):
    r = client.post(
        "/api/arts",
        data={"name": "Ikat", "description": "Resist dyed yarn", "image_url": "https://cdn.example/ikat.png"},
        headers=admin_headers,
    )
    assert r.status_code == 201
    assert r.json()["data"]["image_url"] == "https://cdn.example/ikat.png"

    r = client.post(
        "/api/arts",
        data={"name": "Shibori", "description": "Fold and bind"},
        files={"image": png_file()},
        headers=admin_headers,
    )
    assert r.status_code == 201
    url = r.json()["data"]["image_url"]
    assert url.startswith("/uploads/arts/")
    assert os.path.isfile(os.path.join(UPLOAD_DIR, url[len("/uploads/"):]))


def test_update_art_replaces_stored_image(client, admin_headers):
    r = client.post("/api/arts", data={"name": "Shibori", "description": "Fold and bind"},
                    files={"image": png_file("old.png")}, headers=admin_headers)
    art = r.json()["data"]

    r = client.put(f"/api/arts/{art['id']}", files={"image": png_file("new.png")}, headers=admin_headers)

    assert r.status_code == 200
    new_url = r.json()["data"]["image_url"]
    assert new_url != art["image_url"]
    assert _on_disk(new_url)
    assert not _on_disk(art["image_url"])


def test_delete_referenced_art_is_refused(client, admin_headers, catalog):
    r = client.delete(f"/api/arts/{catalog['art']['_id']}", headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["products_count"] == 2


# ===================== Products =====================

def test_list_products_resolves_references(client, catalog):
    r = client.get("/api/products", params={"sort_by": "price", "sort_dir": "asc"})

    assert r.status_code == 200
    data = r.json()["data"]
    assert r.json()["count"] == 2
    assert [p["name"] for p in data] == ["Indigo scarf", "Batik table runner"]
    assert data[0]["category"] == {"id": catalog["category"]["_id"], "name": "Cotton prints"}
    assert data[0]["material"]["name"] == "Linen"
    assert "_id" not in data[0]


def test_list_products_filters(client, db, catalog):
    pid = catalog["products"][1]["_id"]
    run(db.products.update_one({"_id": pid}, {"$set": {"is_active": False, "show_in_diy": True}}))

    active = client.get("/api/products", params={"is_active": "true"}).json()["data"]
    assert [p["name"] for p in active] == ["Indigo scarf"]

    diy = client.get("/api/products", params={"show_in_diy": "true"}).json()["data"]
    assert [p["id"] for p in diy] == [pid]

    assert client.get("/api/products", params={"category": "other"}).json()["count"] == 0


def test_get_product(client, catalog):
    pid = catalog["products"][0]["_id"]
    r = client.get(f"/api/products/{pid}")
    assert r.status_code == 200
    assert r.json()["data"]["art"]["name"] == "Batik"

    r = client.get("/api/products/missing")
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Product not found"}


def _product_form(catalog, **overrides):
    form = {
        "name": "Linen tote",
        "description": "Printed tote bag",
        "price": "18.5",
        "category": catalog["category"]["_id"],
        "material": catalog["material"]["_id"],
        "art": catalog["art"]["_id"],
        "tags": json.dumps(["bag", "linen"]),
    }
    form.update(overrides)
    return form


def test_create_product(client, admin_headers, catalog):
    r = client.post(
        "/api/products",
        data=_product_form(catalog),
        files=[("images", png_file("a.png")), ("images", png_file("b.png"))],
        headers=admin_headers,
    )

    assert r.status_code == 201
    product = r.json()["data"]
    assert product["price"] == 18.5
    assert product["tags"] == ["bag", "linen"]
    assert product["stock"] == 0
    assert product["is_active"] is True
    assert product["show_in_diy"] is False
    assert len(product["images"]) == 2
    assert product["category"]["name"] == "Cotton prints"


def test_create_product_requires_images_and_valid_refs(client, db, admin_headers, catalog):
    r = client.post("/api/products", data=_product_form(catalog), headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "At least one image is required"

    r = client.post(
        "/api/products",
        data=_product_form(catalog, category="missing"),
        files=[("images", png_file())],
        headers=admin_headers,
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid category"

    r = client.post(
        "/api/products",
        data=_product_form(catalog, price="-1"),
        files=[("images", png_file())],
        headers=admin_headers,
    )
    assert r.status_code == 400
    assert run(db.products.count_documents({})) == 2


def test_create_product_rejects_bad_upload(client, admin_headers, catalog):
    r = client.post(
        "/api/products",
        data=_product_form(catalog),
        files=[("images", ("notes.txt", b"hello", "text/plain"))],
        headers=admin_headers,
    )
    assert r.status_code == 400
    assert r.json()["error"] == "INVALID_FILE_TYPE"


def test_failed_upload_removes_images_already_stored(client, db, admin_headers, catalog):
    before = _stored("products")

    r = client.post(
        "/api/products",
        data=_product_form(catalog),
        files=[("images", png_file("a.png")), ("images", ("notes.txt", b"hello", "text/plain"))],
        headers=admin_headers,
    )

    assert r.status_code == 400
    assert r.json()["error"] == "INVALID_FILE_TYPE"
    assert _stored("products") == before
    assert run(db.products.count_documents({})) == 2


def test_update_product_partial(client, admin_headers, catalog):
    product = catalog["products"][0]
    r = client.patch(f"/api/products/{product['_id']}", data={"price": "30"}, headers=admin_headers)

    assert r.status_code == 200
    data = r.json()["data"]
    assert data["price"] == 30
    assert data["name"] == product["name"]
    assert data["images"] == product["images"]


def test_update_product_images(client, admin_headers, catalog):
    product = catalog["products"][0]
    r = client.put(
        f"/api/products/{product['_id']}",
        data={"existing_images": json.dumps(product["images"])},
        files=[("images", png_file())],
        headers=admin_headers,
    )
    assert r.status_code == 200
    images = r.json()["data"]["images"]
    assert len(images) == 2
    assert images[0].startswith("/uploads/products/")
    assert images[1] == product["images"][0]

    r = client.put(f"/api/products/{product['_id']}", data={"existing_images": "[]"}, headers=admin_headers)
    assert r.status_code == 400


def test_update_and_delete_missing_product(client, admin_headers):
    assert client.patch("/api/products/missing", data={"price": "1"}, headers=admin_headers).status_code == 404
    assert client.delete("/api/products/missing", headers=admin_headers).status_code == 404


def test_delete_product(client, db, admin_headers, catalog):
    pid = catalog["products"][0]["_id"]
    assert client.delete(f"/api/products/{pid}", headers=admin_headers).status_code == 200
    assert run(db.products.count_documents({"_id": pid})) == 0


def test_non_admin_cannot_write_products(client, db, user_headers, catalog):
    pid = catalog["products"][0]["_id"]
    assert client.delete(f"/api/products/{pid}", headers=user_headers).status_code == 403
    assert client.patch(f"/api/products/{pid}", data={"price": "1"}, headers=user_headers).status_code == 403
    assert run(db.products.find_one({"_id": pid}))["price"] == 25.0
