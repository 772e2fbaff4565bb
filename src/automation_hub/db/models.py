"""
automation_hub.db.models

Persistence schema for automations.

Responsibilities:
- Define the `Automation` ORM model with the uniqueness guarantees the
  service relies on (`url_path`, `position`).
- Provide structural validation run before every write.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import String, UniqueConstraint, Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column

from automation_hub.db.base import Base
from automation_hub.errors import ValidationError

NAME_MAX_LENGTH = 256
URL_PATH_MAX_LENGTH = 300
IMAGE_MAX_LENGTH = 128


def _utcnow() -> datetime:
    return datetime.utcnow()


def validate_fields(
    *, name: str | None, url_path: str | None, position: int | None, image: str | None
) -> None:
    """
    Structural checks shared by create and update; raised before any write.
    """

    if not name or not name.strip():
        raise ValidationError("name is required")
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(f"name must be at most {NAME_MAX_LENGTH} characters")
    if not url_path:
        raise ValidationError("url_path could not be derived from name")
    if len(url_path) > URL_PATH_MAX_LENGTH:
        raise ValidationError(f"url_path must be at most {URL_PATH_MAX_LENGTH} characters")
    if position is None or position < 1:
        raise ValidationError("position must be a positive integer")
    if image is None or len(image) > IMAGE_MAX_LENGTH:
        raise ValidationError("image must be a blob name of at most 128 characters")


class Automation(Base):
    __tablename__ = "automations"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    url_path: Mapped[str] = mapped_column(String(URL_PATH_MAX_LENGTH), nullable=False)
    position: Mapped[int] = mapped_column(nullable=False)
    # Empty string, or the generated filename of a blob under the image root.
    image: Mapped[str] = mapped_column(String(IMAGE_MAX_LENGTH), nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        UniqueConstraint("url_path", name="uq_automations_url_path"),
        UniqueConstraint("position", name="uq_automations_position"),
    )

    def validate(self) -> None:
        validate_fields(
            name=self.name, url_path=self.url_path, position=self.position, image=self.image
        )


# --- Module Notes -----------------------------------------------------------
# The UNIQUE constraint on url_path backs up the best-effort slug resolver, which
# runs outside the write transaction and can race under concurrent creates.
