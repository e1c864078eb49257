from fastapi import APIRouter, Depends

from core.dependencies import get_current_user
from schemas.user import UserOut

router = APIRouter()


def user_out(user: dict) -> dict:
    return UserOut(
        id=str(user["_id"]),
        name=user.get("name", ""),
        email=user["email"],
        role=user.get("role", "user"),
        last_login=user.get("last_login"),
        created_at=user.get("created_at"),
    ).model_dump()


# GET /auth/me - current account
@router.get("/me")
async def get_profile(current_user: dict = Depends(get_current_user)):
    return {"success": True, "data": user_out(current_user)}
