"""Pending-action store for manual approval.

Extracted actions are parked here instead of running immediately, so nothing
touches the filesystem without an explicit ``/execute``.

States: pending -> executed (cleared) | discarded (replaced or cleared)
"""

from __future__ import annotations

import asyncio
from typing import List, Optional

from codeagent.domain.models import Action, ExecutionReport


class PendingActions:
    """Holds the most recently extracted action list."""

    def __init__(self):
        self._actions: List[Action] = []
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._actions)

    def __bool__(self) -> bool:
        return bool(self._actions)

    def replace(self, actions: List[Action]) -> None:
        """Park a new list, discarding whatever was pending."""
        self._actions = list(actions)

    def peek(self) -> List[Action]:
        return list(self._actions)

    def take(self) -> List[Action]:
        """Return the pending list and clear the store."""
        actions, self._actions = self._actions, []
        return actions

    def clear(self) -> None:
        self._actions = []

    async def run(
        self,
        work_dir: str,
        *,
        command_timeout: Optional[float] = None,
    ) -> Optional[ExecutionReport]:
        """Execute and clear the pending list. Returns None when empty.

        The list is cleared once execution has been attempted, even if some
        actions failed; a cancelled run leaves it pending.
        """
        from codeagent.executor import execute_actions

        async with self._lock:
            if not self._actions:
                return None
            actions = list(self._actions)
            report = await execute_actions(
                actions, work_dir, command_timeout=command_timeout
            )
            if self._actions == actions:
                self._actions = []
            return report
