"""
automation_hub.api.routers.images

Serves stored automation images by blob name.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from starlette.status import HTTP_404_NOT_FOUND

from automation_hub.api.deps import images_from_app
from automation_hub.images.pipeline import ImagePipeline

router = APIRouter(prefix="/v1/images", tags=["images"])


@router.get("/{image_name}")
async def get_image(
    image_name: str,
    images: ImagePipeline = Depends(images_from_app),
) -> FileResponse:
    # The name comes from the URL; names outside the blob root never exist.
    if not images.blobs.exists(image_name):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Image not found")
    return FileResponse(images.blobs.path_for(image_name))
