from typing import Iterable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from motor.motor_asyncio import AsyncIOMotorDatabase

from core.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_db(request: Request) -> AsyncIOMotorDatabase:
    return request.app.state.db.db


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _account_id_from(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise _unauthorized("Please log in to access this resource")
    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError:
        raise _unauthorized("Invalid token or token expired")
    account_id = payload.get("sub")
    if not account_id:
        raise _unauthorized("Invalid token or token expired")
    return account_id


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> dict:
    account_id = _account_id_from(credentials)
    user = await db.users.find_one({"_id": account_id}, {"password": 0})
    if user is None:
        raise _unauthorized("The user belonging to this token no longer exists")
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> Optional[dict]:
    if credentials is None:
        return None
    try:
        account_id = _account_id_from(credentials)
    except HTTPException:
        return None
    return await db.users.find_one({"_id": account_id}, {"password": 0})


def is_authorized(role: Optional[str], allowed_roles: Iterable[str]) -> bool:
    """Authorization policy: the account role must be one of the allowed roles."""
    return role is not None and role in set(allowed_roles)


def require_roles(*roles: str):
    async def checker(current_user: dict = Depends(get_current_user)) -> dict:
        if not is_authorized(current_user.get("role"), roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action",
            )
        return current_user
    return checker


require_admin = require_roles("admin")
