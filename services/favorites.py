# services/favorites.py - favorite product references on the account aggregate
from typing import List

from motor.motor_asyncio import AsyncIOMotorDatabase

from core.errors import NotFoundError
from core.logger import get_logger
from services.accounts import mutate_account
from services.catalog import product_exists, products_by_id

logger = get_logger("favorites")


def add_favorite(favorites: list, product_id: str) -> bool:
    if product_id in favorites:
        return False
    favorites.append(product_id)
    return True


def remove_favorite(favorites: list, product_id: str) -> list:
    return [pid for pid in favorites if pid != product_id]


async def add_to_favorites(db: AsyncIOMotorDatabase, account_id: str, product_id: str) -> None:
    if not await product_exists(db, product_id):
        raise NotFoundError("Product not found")

    added = await mutate_account(db, account_id, lambda account: add_favorite(account["favorites"], product_id))
    if added:
        logger.info("Favorites %s: added %s", account_id, product_id)


async def remove_from_favorites(db: AsyncIOMotorDatabase, account_id: str, product_id: str) -> None:
    def mutate(account: dict) -> None:
        account["favorites"] = remove_favorite(account["favorites"], product_id)

    await mutate_account(db, account_id, mutate)


async def list_favorites(db: AsyncIOMotorDatabase, account: dict) -> List[dict]:
    favorites = account.get("favorites") or []
    products = await products_by_id(db, favorites)
    return [products[pid] for pid in favorites if pid in products]
