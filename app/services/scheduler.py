"""
In-process periodic tasks
An explicitly owned asyncio task per job, started and stopped by the
FastAPI lifespan so a shutdown never leaves a timer running
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ..config import EVENT_DISPATCH_INTERVAL_SECONDS, PDC_AUTO_ISSUE_INTERVAL_SECONDS
from ..database import SessionLocal
from ..domain.pdc.service import PDCService
from .event_dispatcher import deliver_pending_events

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Run an async job immediately and then every interval_seconds.

    A failing run is logged and the loop keeps going.
    """

    def __init__(self, name: str, job: Callable[[], Awaitable], interval_seconds: float):
        self.name = name
        self.job = job
        self.interval_seconds = interval_seconds
        self.runs = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=self.name)
        logger.info(f"🚀 Started periodic task {self.name} (every {self.interval_seconds}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info(f"🛑 Stopped periodic task {self.name}")

    async def _loop(self) -> None:
        while True:
            try:
                await self.job()
            except Exception as e:
                logger.error(f"❌ Error in periodic task {self.name}: {e}")
            self.runs += 1
            await asyncio.sleep(self.interval_seconds)


# ============================================
# Jobs
# ============================================


async def run_pdc_auto_issue() -> int:
    """Issue due post-dated checks using a fresh session"""
    db = SessionLocal()
    try:
        return PDCService(db).auto_issue_due_checks()
    finally:
        db.close()


async def run_event_delivery() -> dict:
    """Deliver pending outbox events using a fresh session"""
    db = SessionLocal()
    try:
        return await deliver_pending_events(db)
    finally:
        db.close()


def default_tasks() -> list[PeriodicTask]:
    """The PDC sweep and outbox delivery with their configured intervals"""
    return [
        PeriodicTask("pdc-auto-issue", run_pdc_auto_issue, PDC_AUTO_ISSUE_INTERVAL_SECONDS),
        PeriodicTask("event-delivery", run_event_delivery, EVENT_DISPATCH_INTERVAL_SECONDS),
    ]


async def run_background_tasks() -> None:
    """Run the default tasks until cancelled (standalone worker process)"""
    tasks = default_tasks()
    for task in tasks:
        task.start()
    try:
        await asyncio.Event().wait()
    finally:
        for task in tasks:
            await task.stop()
