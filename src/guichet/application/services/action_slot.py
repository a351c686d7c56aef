"""
Busy/idle gates for user actions.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from guichet.domain.entities.action import ActionKind
from guichet.domain.exceptions import ActionInProgressError

logger = logging.getLogger(__name__)


class ActionSlot:
    """
    Single busy flag for one kind of action.

    A second entry while busy is rejected, not queued. The check and the
    flag update happen with no await in between, so the gate holds on a
    single event loop without a lock.
    """

    def __init__(self, action: ActionKind):
        self.action = action
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[None]:
        """
        Occupy the slot for the duration of the block.

        Raises:
            ActionInProgressError: If the slot is already occupied
        """
        if self._busy:
            logger.warning(f"Rejected {self.action.value}: already in progress")
            raise ActionInProgressError(self.action.value)

        self._busy = True
        try:
            yield
        finally:
            self._busy = False


class ActionSlots:
    """One independent ActionSlot per ActionKind."""

    def __init__(self):
        self._slots = {kind: ActionSlot(kind) for kind in ActionKind}

    def __getitem__(self, action: ActionKind) -> ActionSlot:
        return self._slots[action]

    def busy(self) -> list[ActionKind]:
        """Actions currently in progress."""
        return [kind for kind, slot in self._slots.items() if slot.busy]
