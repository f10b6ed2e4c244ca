"""
Fixed-period scheduler for vote synchronization cycles.

Runs a cycle immediately and then once per interval, strictly one at a time.
Ticks that pass while a cycle is still running are dropped, never queued.
The wait between cycles goes through an injectable ``sleep`` so the loop can
be exercised without real delays.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional

from votebot.data_models.votes import CycleReport
from votebot.services.health import HealthMonitor
from votebot.utils.logger import setup_logger

logger = setup_logger(__name__)


class SyncScheduler:
    """Serial cycle loop for one tracked entity."""
    
    def __init__(
        self,
        cycle: Callable[[], Awaitable[CycleReport]],
        interval_seconds: float,
        health: Optional[HealthMonitor] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._cycle = cycle
        self.interval_seconds = interval_seconds
        self.health = health
        self._sleep = sleep
        self._clock = clock
        self._lock = asyncio.Lock()
        self._stopped = False
    
    async def run_once(self) -> Optional[CycleReport]:
        """
        Run a single cycle, waiting for any cycle already in flight.
        
        Returns:
            The cycle report, or None if the cycle raised unexpectedly
        """
        async with self._lock:
            try:
                report = await self._cycle()
            except Exception as e:
                logger.error(f"Unexpected error in vote sync cycle: {e}", exc_info=True)
                if self.health:
                    self.health.record_error(str(e))
                return None
            
            level = logger.warning if report.outcome.is_failure else logger.info
            level(f"Vote sync cycle finished: {report.outcome.value}")
            if self.health:
                self.health.record_cycle(report)
            return report
    
    async def run_forever(self) -> None:
        """Run cycles on the fixed period until ``stop`` is called or the task is cancelled."""
        self._stopped = False
        if self.health:
            self.health.scheduler_running = True
        logger.info(f"Starting vote monitoring every {self.interval_seconds:.0f}s")
        
        try:
            next_tick = self._clock()
            while not self._stopped:
                await self.run_once()
                if self._stopped:
                    break
                
                next_tick += self.interval_seconds
                now = self._clock()
                if now >= next_tick:
                    missed = int((now - next_tick) // self.interval_seconds) + 1
                    logger.warning(f"Vote sync cycle overran; skipping {missed} tick(s)")
                    next_tick += missed * self.interval_seconds
                
                await self._sleep(next_tick - now)
        finally:
            if self.health:
                self.health.scheduler_running = False
            logger.info("Vote monitoring stopped")
    
    def stop(self) -> None:
        """Let the loop exit after the current cycle or wait."""
        self._stopped = True
