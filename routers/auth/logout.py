from fastapi import APIRouter, Depends

from core.dependencies import get_current_user

router = APIRouter()


# Tokens are stateless; the client drops its copy.
@router.post("/logout")
async def logout(current_user: dict = Depends(get_current_user)):
    return {"success": True, "message": "Successfully logged out"}
