"""
automation_hub.api.routers.automations

CRUD and reordering endpoints for automations.

Responsibilities:
- Parse multipart forms (fields + optional `image_file`) into service input.
- Delegate to `AutomationService`; domain errors are mapped in `api.app`.
"""

from __future__ import annotations

import os
import uuid

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile
from pydantic import BaseModel, ConfigDict
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT, HTTP_404_NOT_FOUND

from automation_hub.api.deps import automation_service
from automation_hub.images.pipeline import ImageUpload
from automation_hub.services.automation_service import AutomationInput, AutomationService

router = APIRouter(prefix="/v1/automations", tags=["automations"])


class AutomationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    url_path: str
    position: int
    image: str


class SwapResponse(BaseModel):
    status: str = "swapped"


def _to_upload(image_file: UploadFile | None) -> ImageUpload | None:
    # Browsers submit an empty part with no filename when no file was picked.
    if image_file is None or not image_file.filename:
        return None
    size = image_file.size
    if size is None:
        image_file.file.seek(0, os.SEEK_END)
        size = image_file.file.tell()
        image_file.file.seek(0)
    return ImageUpload(filename=image_file.filename, size=size, file=image_file.file)


@router.post("", response_model=AutomationResponse, status_code=HTTP_201_CREATED)
async def create_automation(
    name: str = Form(default=""),
    image_file: UploadFile | None = File(default=None),
    svc: AutomationService = Depends(automation_service),
) -> AutomationResponse:
    created = await svc.create(AutomationInput(name=name, image_upload=_to_upload(image_file)))
    return AutomationResponse.model_validate(created)


@router.get("", response_model=list[AutomationResponse])
async def list_automations(
    svc: AutomationService = Depends(automation_service),
) -> list[AutomationResponse]:
    return [AutomationResponse.model_validate(a) for a in await svc.find_all()]


@router.get("/{automation_id}", response_model=AutomationResponse)
async def get_automation(
    automation_id: uuid.UUID,
    svc: AutomationService = Depends(automation_service),
) -> AutomationResponse:
    automation = await svc.find_by_id(automation_id)
    if automation is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Automation not found")
    return AutomationResponse.model_validate(automation)


@router.put("/{automation_id}", response_model=AutomationResponse)
async def update_automation(
    automation_id: uuid.UUID,
    name: str = Form(default=""),
    position: int | None = Form(default=None),
    remove_image: bool = Form(default=False),
    image_file: UploadFile | None = File(default=None),
    svc: AutomationService = Depends(automation_service),
) -> AutomationResponse:
    updated = await svc.update(
        AutomationInput(
            id=automation_id,
            name=name,
            position=position,
            image_upload=_to_upload(image_file),
            remove_image=remove_image,
        )
    )
    return AutomationResponse.model_validate(updated)


@router.delete("/{automation_id}", status_code=HTTP_204_NO_CONTENT)
async def delete_automation(
    automation_id: uuid.UUID,
    svc: AutomationService = Depends(automation_service),
) -> Response:
    await svc.delete(automation_id)
    return Response(status_code=HTTP_204_NO_CONTENT)


@router.put("/{id1}/swap/{id2}", response_model=SwapResponse)
async def swap_automations(
    id1: uuid.UUID,
    id2: uuid.UUID,
    svc: AutomationService = Depends(automation_service),
) -> SwapResponse:
    await svc.swap_order(id1, id2)
    return SwapResponse()


# --- Module Notes -----------------------------------------------------------
# `position` is accepted on update only so clients can round-trip a record; the service
# ignores it. Reordering goes through the swap endpoint.
