"""
automation_hub.services.url_path

Derivation of unique, url-safe paths from automation names.
"""

from __future__ import annotations

import re
import unicodedata
import uuid

from automation_hub.db.repositories.automations import AutomationStore

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def generate_url_path(name: str) -> str:
    """
    "Daily Backup!" -> "daily-backup". Accents are folded to ASCII; anything else
    that is not a letter or digit collapses into a single dash.
    """

    folded = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM.sub("-", folded.lower()).strip("-")


async def resolve_unique_url_path(
    store: AutomationStore, *, name: str, owner_id: uuid.UUID | None
) -> str:
    """
    Return the first of `base`, `base-1`, `base-2`, ... that is free or already
    belongs to `owner_id`.

    Best effort only: the lookup is not in the write transaction, so concurrent
    saves can still collide and are rejected by the UNIQUE(url_path) constraint.
    """

    base = generate_url_path(name)
    candidate = base
    counter = 0
    while True:
        existing = await store.get_by_url_path(candidate)
        if existing is None or existing.id == owner_id:
            return candidate
        counter += 1
        candidate = f"{base}-{counter}"
