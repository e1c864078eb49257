"""
Cart mutations on the account aggregate.

A cart line is {id, product, quantity, size, color}. Lines are unique per
(product, size, color); size and color compare by exact value and None is a
key of its own, so ("M", None) and ("M", "") are different lines.
"""
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from core.errors import BadRequestError, NotFoundError
from core.logger import get_logger
from db import new_id
from services.accounts import mutate_account
from services.catalog import product_exists, products_by_id

logger = get_logger("cart")


def validate_quantity(quantity: Optional[int]) -> int:
    if quantity is None or isinstance(quantity, bool) or quantity < 1:
        raise BadRequestError("Quantity must be greater than 0")
    return quantity


def find_cart_item_index(items: list, product_id: str, size: Optional[str], color: Optional[str]) -> int:
    """Find index of cart item by product, size and color"""
    for i, item in enumerate(items):
        if (item.get("product") == product_id and
                item.get("size") == size and
                item.get("color") == color):
            return i
    return -1


def _index_of(items: list, item_id: str) -> int:
    for i, item in enumerate(items):
        if item.get("id") == item_id:
            return i
    return -1


def add_item(items: list, product_id: str, quantity: int, size: Optional[str] = None,
             color: Optional[str] = None) -> dict:
    quantity = validate_quantity(quantity)
    existing_index = find_cart_item_index(items, product_id, size, color)
    if existing_index >= 0:
        items[existing_index]["quantity"] = items[existing_index].get("quantity", 0) + quantity
        return items[existing_index]

    new_item = {
        "id": new_id(),
        "product": product_id,
        "quantity": quantity,
        "size": size,
        "color": color,
    }
    items.append(new_item)
    return new_item


def update_item_quantity(items: list, item_id: str, quantity: int) -> dict:
    quantity = validate_quantity(quantity)
    index = _index_of(items, item_id)
    if index == -1:
        raise NotFoundError("Cart item not found")
    items[index]["quantity"] = quantity
    return items[index]


def remove_item(items: list, item_id: str) -> List[dict]:
    if _index_of(items, item_id) == -1:
        raise NotFoundError("Cart item not found")
    return [item for item in items if item.get("id") != item_id]


# ===================== Aggregate operations =====================

async def add_to_cart(db: AsyncIOMotorDatabase, account_id: str, product_id: str, quantity: Optional[int],
                      size: Optional[str] = None, color: Optional[str] = None) -> None:
    validate_quantity(quantity)
    if not await product_exists(db, product_id):
        raise NotFoundError("Product not found")

    def mutate(account: dict) -> dict:
        return add_item(account["cart"], product_id, quantity, size, color)

    item = await mutate_account(db, account_id, mutate)
    logger.info("Cart %s: product %s x%d (line %s now %d)", account_id, product_id, quantity,
                item["id"], item["quantity"])


async def update_cart_item(db: AsyncIOMotorDatabase, account_id: str, item_id: str,
                           quantity: Optional[int]) -> dict:
    validate_quantity(quantity)

    def mutate(account: dict) -> dict:
        return dict(update_item_quantity(account["cart"], item_id, quantity))

    return await mutate_account(db, account_id, mutate)


async def remove_from_cart(db: AsyncIOMotorDatabase, account_id: str, item_id: str) -> None:
    def mutate(account: dict) -> None:
        account["cart"] = remove_item(account["cart"], item_id)

    await mutate_account(db, account_id, mutate)
    logger.info("Cart %s: removed line %s", account_id, item_id)


async def clear_cart(db: AsyncIOMotorDatabase, account_id: str) -> None:
    def mutate(account: dict) -> None:
        account["cart"] = []

    await mutate_account(db, account_id, mutate)


async def list_cart(db: AsyncIOMotorDatabase, account: dict) -> List[dict]:
    """Cart lines in insertion order with `product` resolved (None once deleted from the catalog)."""
    items = account.get("cart") or []
    products = await products_by_id(db, (item.get("product") for item in items))
    return [{**item, "product": products.get(item.get("product"))} for item in items]
