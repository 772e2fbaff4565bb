"""
automation_hub.services.automation_service

Automation lifecycle service (persistence + notification owner).

Responsibilities:
- Create/update/delete automations, keeping url paths and positions unique.
- Run uploads through the image pipeline and clean up replaced blobs.
- Publish a change event after every committed mutation.

Persist-then-notify is not transactional: when publishing fails the mutation stays
committed and the call still fails with `PublishError`.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass

from automation_hub.db.models import Automation, validate_fields
from automation_hub.db.repositories.automations import AutomationStore
from automation_hub.errors import (
    BlobStorageError,
    NotFoundError,
    PublishError,
    ValidationError,
)
from automation_hub.events.models import AutomationEvent, EventType
from automation_hub.events.publisher import EventPublisher
from automation_hub.images.pipeline import ImagePipeline, ImageUpload
from automation_hub.observability.logging import get_logger
from automation_hub.services.ordering import swap_positions
from automation_hub.services.url_path import resolve_unique_url_path

log = get_logger(__name__)


@dataclass(slots=True)
class AutomationInput:
    """
    Caller-supplied fields for create/update. `id` and `position` are never taken
    at face value: create discards both, update only uses `id` for the lookup.
    """

    name: str
    id: uuid.UUID | None = None
    position: int | None = None
    image_upload: ImageUpload | None = None
    remove_image: bool = False


class AutomationService:
    def __init__(
        self,
        *,
        store: AutomationStore,
        publisher: EventPublisher,
        images: ImagePipeline,
    ) -> None:
        self._store = store
        self._publisher = publisher
        self._images = images

    async def find_all(self) -> list[Automation]:
        return await self._store.list_all()

    async def find_by_id(self, automation_id: uuid.UUID) -> Automation | None:
        return await self._store.get(automation_id)

    async def create(self, data: AutomationInput) -> Automation:
        image = ""
        if data.image_upload is not None:
            image = await asyncio.to_thread(self._images.store, data.image_upload)

        try:
            position = await self._store.max_position() + 1
            url_path = await resolve_unique_url_path(self._store, name=data.name, owner_id=None)
            automation = Automation(
                name=data.name, url_path=url_path, position=position, image=image
            )
            automation.validate()
            created = await self._store.create(automation)
        except Exception:
            await self._discard_blob(image)
            raise

        log.info(
            "automation_created",
            automation_id=str(created.id),
            url_path=created.url_path,
            position=created.position,
        )
        await self._publish(AutomationEvent.of(EventType.create, created))
        return created

    async def update(self, data: AutomationInput) -> Automation:
        if data.id is None:
            raise ValidationError("id is required")
        current = await self._store.get(data.id)
        if current is None:
            raise NotFoundError(data.id)

        if data.position is not None and data.position != current.position:
            log.info(
                "automation_position_ignored",
                automation_id=str(current.id),
                requested=data.position,
            )

        new_blob = ""
        replaced_blob = ""
        if data.image_upload is not None:
            new_blob = await asyncio.to_thread(self._images.store, data.image_upload)
            image, replaced_blob = new_blob, current.image
        elif data.remove_image:
            image, replaced_blob = "", current.image
        else:
            image = current.image

        try:
            if data.name != current.name:
                url_path = await resolve_unique_url_path(
                    self._store, name=data.name, owner_id=current.id
                )
            else:
                url_path = current.url_path

            validate_fields(
                name=data.name, url_path=url_path, position=current.position, image=image
            )
            current.name = data.name
            current.url_path = url_path
            current.image = image
            updated = await self._store.update(current)
        except Exception:
            await self._discard_blob(new_blob)
            raise

        log.info("automation_updated", automation_id=str(updated.id), url_path=updated.url_path)
        try:
            await self._publish(AutomationEvent.of(EventType.update, updated))
        finally:
            # The record no longer references it, whether or not subscribers heard about it.
            await self._discard_blob(replaced_blob)
        return updated

    async def delete(self, automation_id: uuid.UUID) -> None:
        automation = await self._store.get(automation_id)
        if automation is None:
            raise NotFoundError(automation_id)

        event = AutomationEvent.of(EventType.delete, automation)
        await self._store.delete(automation)
        # The image blob is kept; deleting a record never touches the blob store.
        log.info("automation_deleted", automation_id=str(automation_id))
        await self._publish(event)

    async def swap_order(self, id1: uuid.UUID, id2: uuid.UUID) -> None:
        await swap_positions(self._store, id1, id2)

    async def _publish(self, event: AutomationEvent) -> None:
        try:
            await self._publisher.publish(event)
        except PublishError as e:
            log.error(
                "automation_event_publish_failed",
                event_type=event.type.value,
                automation_id=str(event.automation.id),
                error=str(e),
            )
            raise

    async def _discard_blob(self, name: str) -> None:
        if not name:
            return
        try:
            await asyncio.to_thread(self._images.delete, name)
        except BlobStorageError as e:
            log.warning("orphaned_image_cleanup_failed", image=name, error=str(e))


# --- Module Notes -----------------------------------------------------------
# Blobs are written before the row and removed again if the row cannot be saved, so a
# record never points at a missing file. Replaced blobs are deleted only after commit.
