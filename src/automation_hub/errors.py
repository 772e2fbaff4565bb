"""
automation_hub.errors

Domain exception hierarchy.

Responsibilities:
- Separate caller-facing validation and not-found failures from
  infrastructure failures so the transport layer can map them to status codes.
"""

from __future__ import annotations

import uuid


class AutomationHubError(Exception):
    """Base class for all service-level failures."""


class ValidationError(AutomationHubError):
    """Bad or missing input; never retried."""


class ImageTooLargeError(ValidationError):
    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"image is too large ({size} bytes); max size is {limit} bytes")
        self.size = size
        self.limit = limit


class InvalidImageExtensionError(ValidationError):
    def __init__(self, extension: str, allowed: tuple[str, ...]) -> None:
        super().__init__(
            f"invalid image extension {extension!r}; allowed extensions are: {list(allowed)}"
        )
        self.extension = extension
        self.allowed = allowed


class NotAnImageError(ValidationError):
    def __init__(self, content_type: str) -> None:
        super().__init__(f"file is not an image (detected {content_type})")
        self.content_type = content_type


class ImageTypeMismatchError(ValidationError):
    def __init__(self, extension: str, content_type: str) -> None:
        super().__init__(
            f"mismatch between file extension {extension!r} and MIME type {content_type!r}"
        )
        self.extension = extension
        self.content_type = content_type


class NotFoundError(AutomationHubError):
    def __init__(self, automation_id: uuid.UUID) -> None:
        super().__init__(f"automation {automation_id} not found")
        self.automation_id = automation_id


class InfrastructureError(AutomationHubError):
    """Store, blob or messaging failure; surfaced as a failure of the whole call."""


class ConfigurationError(AutomationHubError):
    """Settings that cannot run in the selected environment; raised at startup."""


class BlobStorageError(InfrastructureError):
    pass


class PublishError(InfrastructureError):
    pass


# --- Module Notes -----------------------------------------------------------
# SQLAlchemy errors are not wrapped; the API layer treats any non-domain exception
# as an infrastructure failure (HTTP 500).
