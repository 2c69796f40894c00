"""Retention sweeper -- deletes artifacts older than the retention window.

Runs as an APScheduler cron job on the application's event loop, by default
at the top of every hour.  Each run is independent: it lists every kind
directory, stats each entry and removes anything past the retention age.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from artifact_server.storage.store import ArtifactKind, ArtifactStore
from artifact_server.utils.logging import get_logger

logger = get_logger(__name__)

_JOB_ID = "artifact-retention-sweep"


class RetentionSweeper:
    """Periodically reclaims storage from expired artifacts.

    Parameters
    ----------
    store:
        The artifact store to sweep.
    retention:
        Maximum age of an artifact before it is deleted.
    schedule:
        Crontab expression for the recurring run.
    """

    def __init__(
        self,
        store: ArtifactStore,
        retention: timedelta = timedelta(hours=1),
        schedule: str = "0 * * * *",
    ) -> None:
        self.store = store
        self.retention = retention
        self.schedule = schedule
        self._scheduler: AsyncIOScheduler | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        """Schedule the recurring sweep.  Must be called inside a running loop."""
        if self.running:
            return

        scheduler = AsyncIOScheduler(timezone=timezone.utc)
        scheduler.add_job(
            self.sweep,
            trigger=CronTrigger.from_crontab(self.schedule, timezone=timezone.utc),
            id=_JOB_ID,
            replace_existing=True,
            max_instances=3,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info(
            "sweeper_started",
            schedule=self.schedule,
            retention_seconds=int(self.retention.total_seconds()),
        )

    def shutdown(self) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("sweeper_stopped")

    # ------------------------------------------------------------------
    # Sweeping
    # ------------------------------------------------------------------

    async def sweep(self, now: datetime | None = None) -> dict[ArtifactKind, int]:
        """Run one pass over every kind and return deletions per kind."""
        now = now or datetime.now(timezone.utc)
        deleted: dict[ArtifactKind, int] = {}

        for kind in ArtifactKind:
            try:
                deleted[kind] = await self._sweep_kind(kind, now)
            except Exception as exc:
                logger.error("sweep_kind_failed", kind=kind.value, error=str(exc))
                deleted[kind] = 0

        total = sum(deleted.values())
        logger.info("sweep_completed", deleted=total)
        return deleted

    async def _sweep_kind(self, kind: ArtifactKind, now: datetime) -> int:
        try:
            entries = list(self.store.list(kind))
        except FileNotFoundError:
            return 0

        expired = [e for e in entries if now - e.modified_at > self.retention]
        if not expired:
            return 0

        results = await asyncio.gather(
            *(self.store.delete(kind, e.file_name) for e in expired),
            return_exceptions=True,
        )

        count = 0
        for entry, result in zip(expired, results):
            if isinstance(result, BaseException):
                logger.error(
                    "artifact_sweep_failed",
                    kind=kind.value,
                    file_name=entry.file_name,
                    error=str(result),
                )
            elif result:
                count += 1
                logger.info("artifact_swept", kind=kind.value, file_name=entry.file_name)
        return count
