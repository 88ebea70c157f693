"""
Periodic refresh for the dashboard.

Each job (schedule, history, weather) runs on its own interval. A cycle
is started as an independent task, so a slow cycle never delays the next
trigger; when cycles overlap, a result that finishes after a newer cycle
has already published is dropped.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Set

logger = logging.getLogger(__name__)


@dataclass
class RefreshJob:
    """One independently scheduled refresh."""
    name: str
    interval: float
    run: Callable[[], Awaitable[Any]]
    publish: Callable[[Any], None]
    enabled: Callable[[], bool] = lambda: True
    cycles_started: int = 0
    last_published_cycle: int = 0

    async def trigger(self) -> bool:
        """
        Run one cycle and publish its result unless it was superseded.

        Returns:
            True if the result was published
        """
        self.cycles_started += 1
        cycle = self.cycles_started

        result = await self.run()

        if cycle < self.last_published_cycle:
            logger.debug(f"Discarding stale {self.name} result from cycle {cycle}")
            return False
        self.last_published_cycle = cycle
        self.publish(result)
        return True


@dataclass
class RefreshScheduler:
    """Drives a set of RefreshJobs until stopped."""
    jobs: List[RefreshJob]
    _in_flight: Set[asyncio.Task] = field(default_factory=set)
    _stop: Optional[asyncio.Event] = None

    def _start_cycle(self, job: RefreshJob) -> None:
        task = asyncio.create_task(self._guarded(job))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _guarded(self, job: RefreshJob) -> None:
        try:
            await job.trigger()
        except Exception:
            logger.exception(f"{job.name} refresh failed")

    async def _loop(self, job: RefreshJob) -> None:
        # Initial load runs even for jobs that are currently disabled
        self._start_cycle(job)
        while not self._stop.is_set():
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=job.interval)
            except asyncio.TimeoutError:
                pass
            if self._stop.is_set():
                break
            if job.enabled():
                self._start_cycle(job)

    async def run(self) -> None:
        """Run every job's loop until stop() is called."""
        self._stop = asyncio.Event()
        await asyncio.gather(*(self._loop(job) for job in self.jobs))
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    def stop(self) -> None:
        if self._stop is not None:
            self._stop.set()
