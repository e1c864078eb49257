from fastapi import APIRouter, Depends

from core.dependencies import get_current_user
from core.logger import get_logger
from schemas.thumbnail import ThumbnailRequest
from services.thumbnail import ThumbnailRenderer, get_renderer

router = APIRouter(prefix="/thumbnails", tags=["Thumbnails"])
logger = get_logger("thumbnails")


# POST /thumbnails/capture - rasterize a design onto its fabric background
@router.post("/capture")
async def capture_design_thumbnail(
    payload: ThumbnailRequest,
    current_user: dict = Depends(get_current_user),
    renderer: ThumbnailRenderer = Depends(get_renderer),
):
    thumbnail = await renderer.capture(payload.design_data, payload.fabric_image)
    logger.info("Thumbnail captured for %s (%d shapes)", current_user["_id"], len(payload.design_data.body))
    return {
        "success": True,
        "message": "Thumbnail captured successfully",
        "data": {"thumbnail": thumbnail},
    }
