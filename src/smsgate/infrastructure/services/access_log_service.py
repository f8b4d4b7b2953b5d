"""Background access logging for authenticated requests.

Each successful authentication schedules one insert on its own session. The
insert never blocks the request and its failures never reach the caller.
"""

import asyncio
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from smsgate.core.logging import get_logger
from smsgate.infrastructure.persistence.models import AccessLogModel
from smsgate.infrastructure.persistence.repositories import AccessLogRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class AccessLogEntry:
    """What gets recorded for one authenticated request."""

    user_id: str
    method: str
    path: str
    api_key_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


class AccessLogRecorder:
    """Fire-and-forget writer for access log rows.

    Pending tasks are held in a set so they are not garbage-collected before
    completion and can be awaited with :meth:`drain` on shutdown.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], enabled: bool = True) -> None:
        self.session_factory = session_factory
        self.enabled = enabled
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def record(self, entry: AccessLogEntry) -> asyncio.Task | None:
        """Schedule an access log insert and return immediately.

        Args:
            entry: The request to record.

        Returns:
            The scheduled task, or None when access logging is disabled.
        """
        if not self.enabled:
            return None
        task = asyncio.create_task(self._write(entry))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _write(self, entry: AccessLogEntry) -> None:
        try:
            async with self.session_factory() as session:
                await AccessLogRepository(session).create(
                    AccessLogModel(
                        user_id=entry.user_id,
                        api_key_id=entry.api_key_id,
                        method=entry.method,
                        path=entry.path[:2048],
                        ip_address=entry.ip_address,
                        user_agent=(entry.user_agent or None) and entry.user_agent[:512],
                    )
                )
                await session.commit()
        except Exception as e:
            logger.warning(
                "Failed to record access log",
                user_id=entry.user_id,
                path=entry.path,
                error=str(e),
            )

    async def drain(self) -> None:
        """Wait for every pending insert to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
