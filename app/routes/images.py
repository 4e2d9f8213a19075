# ========================================
# app/routes/images.py - SERVE STORED IMAGES FROM GRIDFS
# ========================================

import io

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from app.utils.images import ImageStore, get_image_store

router = APIRouter(prefix="/api/images", tags=["Images"])


# No auth: these URLs are embedded in profiles and posts
@router.get("/{image_id}")
async def get_image(image_id: str, image_store: ImageStore = Depends(get_image_store)):
    contents, content_type = await image_store.open(image_id)
    return StreamingResponse(
        io.BytesIO(contents),
        media_type=content_type,
        headers={"Cache-Control": "public, max-age=86400"}
    )
