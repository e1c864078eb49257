"""
Read-modify-write of the account aggregate.

The account document embeds the cart and the favorites. Every mutation loads
the whole document, applies a change in memory and writes the whole document
back, guarded by a `version` counter so two concurrent writers cannot silently
overwrite each other: the loser reloads and replays its change.
"""
import copy
from typing import Callable, TypeVar

from motor.motor_asyncio import AsyncIOMotorDatabase

from core.config import CART_WRITE_ATTEMPTS
from core.errors import ConcurrentUpdateError, NotFoundError
from core.logger import get_logger
from db import utcnow

logger = get_logger("accounts")

T = TypeVar("T")


def _embedded(account: dict):
    return account["cart"], account["favorites"]


async def mutate_account(
    db: AsyncIOMotorDatabase,
    account_id: str,
    mutate: Callable[[dict], T],
    attempts: int = CART_WRITE_ATTEMPTS,
) -> T:
    """
    Apply `mutate` to a fresh copy of the account and persist it.

    `mutate` may raise (e.g. NotFoundError for an unknown cart item); nothing
    is written in that case. When the embedded collections come out unchanged
    the write is skipped.
    """
    for attempt in range(1, attempts + 1):
        account = await db.users.find_one({"_id": account_id})
        if account is None:
            raise NotFoundError("User not found")
        account.setdefault("cart", [])
        account.setdefault("favorites", [])

        before = copy.deepcopy(_embedded(account))
        result = mutate(account)
        if _embedded(account) == before:
            return result

        if "version" in account:
            guard = {"_id": account_id, "version": account["version"]}
        else:
            guard = {"_id": account_id, "version": {"$exists": False}}
        account["version"] = account.get("version", 0) + 1
        account["updated_at"] = utcnow()

        res = await db.users.replace_one(guard, account)
        if res.matched_count:
            return result
        logger.warning("Concurrent update on account %s (attempt %d/%d)", account_id, attempt, attempts)

    raise ConcurrentUpdateError("The account was modified concurrently, please retry")
