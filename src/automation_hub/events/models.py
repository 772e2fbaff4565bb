"""
automation_hub.events.models

Wire model for automation change notifications.
"""

from __future__ import annotations

import enum
import uuid

from pydantic import BaseModel

from automation_hub.db.models import Automation


class EventType(enum.StrEnum):
    # Values are consumed by downstream subscribers; treat as stable API contract.
    create = "CREATE"
    update = "UPDATE"
    delete = "DELETE"


class AutomationSnapshot(BaseModel):
    id: uuid.UUID
    name: str
    url_path: str
    position: int
    image: str


class AutomationEvent(BaseModel):
    type: EventType
    automation: AutomationSnapshot

    @classmethod
    def of(cls, type: EventType, automation: Automation) -> AutomationEvent:
        # Snapshot eagerly: a deleted row must still be describable after commit.
        return cls(
            type=type,
            automation=AutomationSnapshot(
                id=automation.id,
                name=automation.name,
                url_path=automation.url_path,
                position=automation.position,
                image=automation.image,
            ),
        )

    def key(self) -> bytes:
        return str(self.automation.id).encode()
