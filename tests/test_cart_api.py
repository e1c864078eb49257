from conftest import run


def _cart(db, account):
    return run(db.users.find_one({"_id": account["_id"]}))["cart"]


def test_add_same_variant_merges(client, db, user, user_headers, catalog):
    pid = catalog["products"][0]["_id"]
    body = {"product_id": pid, "quantity": 2, "size": "M", "color": "indigo"}

    r1 = client.post("/api/cart", json=body, headers=user_headers)
    r2 = client.post("/api/cart", json={**body, "quantity": 3}, headers=user_headers)

    assert r1.status_code == 200 and r2.status_code == 200
    assert r2.json() == {"success": True, "message": "Product added to cart"}
    cart = _cart(db, user)
    assert len(cart) == 1
    assert cart[0]["quantity"] == 5


def test_get_cart_resolves_products_in_order(client, user_headers, catalog):
    first, second = catalog["products"]
    client.post("/api/cart", json={"product_id": second["_id"], "quantity": 1}, headers=user_headers)
    client.post("/api/cart", json={"product_id": first["_id"], "quantity": 4, "size": "L"}, headers=user_headers)

    r = client.get("/api/cart", headers=user_headers)

    assert r.status_code == 200
    items = r.json()["data"]
    assert [i["product"]["id"] for i in items] == [second["_id"], first["_id"]]
    assert items[1]["quantity"] == 4
    assert items[1]["size"] == "L"
    assert items[0]["product"]["category"]["name"] == "Cotton prints"


def test_add_rejects_bad_quantity(client, db, user, user_headers, catalog):
    pid = catalog["products"][0]["_id"]
    for quantity in (0, -1, None):
        r = client.post("/api/cart", json={"product_id": pid, "quantity": quantity}, headers=user_headers)
        assert r.status_code == 400
        assert r.json()["success"] is False
    assert _cart(db, user) == []


def test_boolean_and_string_quantities_are_rejected(client, db, user, user_headers, catalog):
    pid = catalog["products"][0]["_id"]
    for quantity in (True, "2", 1.5):
        r = client.post("/api/cart", json={"product_id": pid, "quantity": quantity}, headers=user_headers)
        assert r.status_code == 400
        assert r.json()["message"] == "Validation error"
    assert _cart(db, user) == []

    client.post("/api/cart", json={"product_id": pid, "quantity": 2}, headers=user_headers)
    item_id = _cart(db, user)[0]["id"]
    r = client.put(f"/api/cart/{item_id}", json={"quantity": True}, headers=user_headers)
    assert r.status_code == 400
    assert _cart(db, user)[0]["quantity"] == 2


def test_add_unknown_product(client, db, user, user_headers, catalog):
    r = client.post("/api/cart", json={"product_id": "nope", "quantity": 1}, headers=user_headers)
    assert r.status_code == 404
    assert r.json()["message"] == "Product not found"
    assert _cart(db, user) == []


def test_update_item_quantity(client, db, user, user_headers, catalog):
    pid = catalog["products"][0]["_id"]
    client.post("/api/cart", json={"product_id": pid, "quantity": 1}, headers=user_headers)
    item_id = _cart(db, user)[0]["id"]

    r = client.put(f"/api/cart/{item_id}", json={"quantity": 6}, headers=user_headers)

    assert r.status_code == 200
    assert r.json()["data"]["quantity"] == 6
    assert r.json()["data"]["id"] == item_id
    assert _cart(db, user)[0]["quantity"] == 6

    r = client.put(f"/api/cart/{item_id}", json={"quantity": 0}, headers=user_headers)
    assert r.status_code == 400
    assert _cart(db, user)[0]["quantity"] == 6


def test_remove_unknown_item_leaves_cart_unchanged(client, db, user, user_headers, catalog):
    pid = catalog["products"][0]["_id"]
    client.post("/api/cart", json={"product_id": pid, "quantity": 2}, headers=user_headers)
    before = _cart(db, user)

    r = client.delete("/api/cart/does-not-exist", headers=user_headers)

    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Cart item not found"}
    assert _cart(db, user) == before


def test_remove_and_clear(client, db, user, user_headers, catalog):
    for p in catalog["products"]:
        client.post("/api/cart", json={"product_id": p["_id"], "quantity": 1}, headers=user_headers)
    first_id = _cart(db, user)[0]["id"]

    r = client.delete(f"/api/cart/{first_id}", headers=user_headers)
    assert r.status_code == 200
    assert [i["product"] for i in _cart(db, user)] == [catalog["products"][1]["_id"]]

    r = client.delete("/api/cart", headers=user_headers)
    assert r.status_code == 200
    assert r.json()["message"] == "Cart cleared successfully"
    assert _cart(db, user) == []


def test_deleted_product_shows_as_null(client, db, user_headers, catalog):
    pid = catalog["products"][0]["_id"]
    client.post("/api/cart", json={"product_id": pid, "quantity": 1}, headers=user_headers)
    run(db.products.delete_one({"_id": pid}))

    items = client.get("/api/cart", headers=user_headers).json()["data"]
    assert len(items) == 1
    assert items[0]["product"] is None


def test_cart_requires_authentication(client, catalog):
    pid = catalog["products"][0]["_id"]
    assert client.get("/api/cart").status_code == 401
    r = client.post("/api/cart", json={"product_id": pid, "quantity": 1})
    assert r.status_code == 401
    assert r.json()["success"] is False
    assert client.delete("/api/cart").status_code == 401
