"""
Cloudinary deletion proxy.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from dootopia_api.dependencies import get_image_host
from dootopia_api.images import ImageHost
from dootopia_api.schemas import ImageDeleteRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["images"])


@router.delete("/cloudinary/delete")
def delete_image(
    payload: Optional[ImageDeleteRequest] = Body(None),
    images: ImageHost = Depends(get_image_host),
):
    public_id = payload.publicId if payload else None
    if not public_id:
        return JSONResponse(status_code=400, content={"error": "Missing publicId"})

    logger.info("Attempting to delete image with publicId: %s", public_id)
    try:
        result = images.destroy(public_id)
    except Exception as exc:
        logger.exception("Error deleting image %s", public_id)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to delete image", "details": str(exc)},
        )
    logger.info("Image deletion result: %s", result)

    outcome = result.get("result")
    if outcome == "ok":
        return {"message": "Image deleted successfully", "result": result}
    if outcome == "not found":
        # Already gone counts as success for the client.
        return {"message": "Image not found (may be already deleted)", "result": result}
    return JSONResponse(
        status_code=500, content={"error": "Failed to delete image", "result": result}
    )
