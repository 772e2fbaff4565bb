"""
automation_hub.services.ordering

Atomic swap of two automations' display positions.
"""

from __future__ import annotations

import uuid

from automation_hub.db.repositories.automations import AutomationStore
from automation_hub.errors import NotFoundError
from automation_hub.observability.logging import get_logger

log = get_logger(__name__)


async def swap_positions(store: AutomationStore, id1: uuid.UUID, id2: uuid.UUID) -> None:
    """
    Exchange the positions of `id1` and `id2` in one transaction.

    UNIQUE(position) holds after every statement: the first record is parked on
    max+1 before the second takes its old slot. Any failure rolls back all writes.
    Swapping the same pair twice restores the original order.
    """

    async def steps(tx: AutomationStore) -> None:
        first = await tx.get(id1, for_update=True)
        if first is None:
            raise NotFoundError(id1)
        second = await tx.get(id2, for_update=True)
        if second is None:
            raise NotFoundError(id2)
        if first.id == second.id:
            return

        pos1, pos2 = first.position, second.position
        # Read inside the transaction so a concurrent create cannot take max+1 first.
        temp_position = await tx.max_position() + 1

        first.position = temp_position
        await tx.save(first)

        second.position = pos1
        await tx.save(second)

        first.position = pos2
        await tx.save(first)

    await store.run_in_transaction(steps)
    log.info("automation_positions_swapped", id1=str(id1), id2=str(id2))
