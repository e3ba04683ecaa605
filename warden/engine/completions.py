"""
Completion tracking for asynchronous collaborator operations.

Collaborator calls such as equip or stop-attack finish on a later event
turn. They are scheduled as tasks on the running loop with a continuation
attached, so command handling and ticks never wait on them.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

# Receives the exception the operation raised, or None on completion
Continuation = Callable[[BaseException | None], None]


class CompletionTracker:
    """Schedules awaitables and runs continuations when they settle."""

    def __init__(self) -> None:
        self._pending: set[asyncio.Future[object]] = set()

    @property
    def pending(self) -> int:
        """Number of operations still in flight."""
        return len(self._pending)

    def schedule(
        self,
        operation: Awaitable[object],
        on_done: Continuation | None = None,
        label: str = "operation",
    ) -> asyncio.Future[object]:
        """
        Run an operation in the background.

        Args:
            operation: Awaitable returned by a collaborator
            on_done: Called with the raised exception (or None) once settled;
                skipped if the operation is cancelled
            label: Name used in log messages

        Returns:
            The scheduled task
        """
        task = asyncio.ensure_future(operation)
        self._pending.add(task)

        def _settled(fut: asyncio.Future[object]) -> None:
            self._pending.discard(fut)
            if fut.cancelled():
                logger.debug("%s cancelled", label)
                return

            error = fut.exception()

            if error is not None and on_done is None:
                logger.warning("%s failed: %s", label, error)

            if on_done is not None:
                try:
                    on_done(error)
                except Exception:
                    logger.exception("Continuation for %s crashed", label)

        task.add_done_callback(_settled)
        return task

    async def drain(self) -> None:
        """Wait until every scheduled operation (and any it spawns) settles."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
            # Let done callbacks scheduled by the gather run
            await asyncio.sleep(0)

    def cancel_all(self) -> None:
        """Cancel everything in flight; their continuations never run."""
        for task in list(self._pending):
            task.cancel()
