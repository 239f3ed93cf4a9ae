"""
Debounced, coalescing persistence of seating arrangements

Every mutation schedules a save of the latest table snapshot. Saves for the
same event never overlap: a burst of mutations collapses into the newest
snapshot, and a mutation made while a write is in flight is written right
after it. Writes run in a worker thread. Each write carries the version it was based on, so a document
changed by someone else is reported as a conflict instead of overwritten.
"""

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional

from app.core.config import settings
from app.core.exceptions import ArrangementConflictError
from app.schemas.seating import Table
from app.services.repositories import ArrangementRepo

logger = logging.getLogger(__name__)


class SaveStatus(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"
    CONFLICT = "conflict"


StatusCallback = Callable[[str, SaveStatus], None]


class SaveCoordinator:
    """Per-tenant save queue, one worker per event at most"""

    def __init__(
        self,
        tenant_id: str,
        repository: ArrangementRepo,
        debounce_seconds: float = None,
        on_status: Optional[StatusCallback] = None,
    ):
        self.tenant_id = tenant_id
        self.repository = repository
        self.debounce_seconds = settings.SAVE_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        self.on_status = on_status

        self._pending: Dict[str, List[Table]] = {}
        self._workers: Dict[str, asyncio.Task] = {}
        self._wake: Dict[str, asyncio.Event] = {}
        self._versions: Dict[str, int] = {}
        self._created: Dict[str, datetime] = {}
        self._status: Dict[str, SaveStatus] = {}
        self._reset_handles: Dict[str, asyncio.TimerHandle] = {}
        self.last_error: Dict[str, Exception] = {}

    def track(self, event_name: str, version: int, created_at: Optional[datetime] = None) -> None:
        """Remember the version an arrangement was loaded at"""
        self._versions[event_name] = version
        if created_at is not None:
            self._created[event_name] = created_at

    def version(self, event_name: str) -> int:
        return self._versions.get(event_name, 0)

    def status(self, event_name: str) -> SaveStatus:
        return self._status.get(event_name, SaveStatus.IDLE)

    def has_pending(self, event_name: str) -> bool:
        return event_name in self._pending or event_name in self._workers

    def schedule(self, event_name: str, tables: List[Table]) -> None:
        """Queue the latest tables for saving; replaces any unsaved snapshot"""
        self._pending[event_name] = tables
        if event_name not in self._workers:
            self._wake[event_name] = asyncio.Event()
            self._workers[event_name] = asyncio.create_task(self._drain(event_name))

    async def flush(self, event_name: Optional[str] = None) -> None:
        """Write pending snapshots now and wait until they are stored"""
        names = [event_name] if event_name else list(self._workers)
        for name in names:
            worker = self._workers.get(name)
            if worker is None:
                continue
            self._wake[name].set()
            await worker

    async def close(self) -> None:
        await self.flush()
        for handle in self._reset_handles.values():
            handle.cancel()
        self._reset_handles.clear()

    async def _drain(self, event_name: str) -> None:
        try:
            try:
                await asyncio.wait_for(self._wake[event_name].wait(), timeout=self.debounce_seconds)
            except asyncio.TimeoutError:
                pass
            while event_name in self._pending:
                tables = self._pending.pop(event_name)
                await self._write(event_name, tables)
        finally:
            self._workers.pop(event_name, None)
            self._wake.pop(event_name, None)

    async def _write(self, event_name: str, tables: List[Table]) -> None:
        self._set_status(event_name, SaveStatus.SAVING)
        try:
            saved = await asyncio.to_thread(
                self.repository.save,
                self.tenant_id,
                event_name,
                tables,
                created_at=self._created.get(event_name),
                expected_version=self._versions.get(event_name, 0),
            )
        except ArrangementConflictError as e:
            logger.warning(f"Not saving seating for {event_name}: {e}")
            self.last_error[event_name] = e
            # Later snapshots are based on the same stale version
            self._pending.pop(event_name, None)
            self._set_status(event_name, SaveStatus.CONFLICT)
            return
        except Exception as e:
            logger.error(f"Error saving seating arrangement for {event_name}: {e}")
            self.last_error[event_name] = e
            self._set_status(event_name, SaveStatus.ERROR, reset_after=settings.ERROR_STATUS_RESET_SECONDS)
            return

        self._versions[event_name] = saved.version
        self._created[event_name] = saved.created_at
        self.last_error.pop(event_name, None)
        self._set_status(event_name, SaveStatus.SAVED, reset_after=settings.SAVED_STATUS_RESET_SECONDS)

    def _set_status(self, event_name: str, status: SaveStatus, reset_after: Optional[float] = None) -> None:
        handle = self._reset_handles.pop(event_name, None)
        if handle is not None:
            handle.cancel()

        self._status[event_name] = status
        if self.on_status is not None:
            self.on_status(event_name, status)

        if reset_after is not None:
            loop = asyncio.get_running_loop()
            self._reset_handles[event_name] = loop.call_later(
                reset_after, self._set_status, event_name, SaveStatus.IDLE
            )
