"""
Liveness reporting for the vote tracker.

``HealthMonitor`` collects what the scheduler observes; ``HealthServer``
exposes it over HTTP for the hosting platform. Nothing in the sync cycle
reads from here.
"""

import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from aiohttp import web

from votebot.data_models.votes import CycleOutcome, CycleReport
from votebot.utils.logger import setup_logger

logger = setup_logger(__name__)

# Outcomes that prove the store was reachable and consistent with the transport
_HEALTHY_OUTCOMES = (
    CycleOutcome.PUBLISHED,
    CycleOutcome.REPOSTED,
    CycleOutcome.EDITED,
    CycleOutcome.SKIPPED,
)


class HealthMonitor:
    """In-memory view of scheduler and persistence health."""
    
    def __init__(self):
        self._started = time.monotonic()
        self.scheduler_running = False
        self.persistence_degraded = False
        self.last_report: Optional[CycleReport] = None
        self.last_cycle_at: Optional[datetime] = None
        self.last_error: Optional[str] = None
    
    @property
    def uptime_seconds(self) -> float:
        return time.monotonic() - self._started
    
    def record_cycle(self, report: CycleReport) -> None:
        self.last_report = report
        self.last_cycle_at = datetime.now(timezone.utc)
        
        if report.outcome is CycleOutcome.PERSISTENCE_FAILED:
            if not self.persistence_degraded:
                logger.error("Persistence degraded: sync state could not be loaded or saved")
            self.persistence_degraded = True
        elif report.outcome in _HEALTHY_OUTCOMES:
            if self.persistence_degraded:
                logger.info("Persistence recovered")
            self.persistence_degraded = False
            self.last_error = None
        else:
            self.last_error = report.detail or report.outcome.value
    
    def record_error(self, error: str) -> None:
        self.last_cycle_at = datetime.now(timezone.utc)
        self.last_error = error
    
    def last_cycle(self) -> Optional[Dict[str, Any]]:
        if self.last_report is None:
            return None
        return {
            'outcome': self.last_report.outcome.value,
            'decision': self.last_report.decision.value if self.last_report.decision else None,
            'fingerprint': self.last_report.fingerprint,
            'message_id': str(self.last_report.message_id) if self.last_report.message_id else None,
            'at': self.last_cycle_at.isoformat() if self.last_cycle_at else None,
        }


class HealthServer:
    """Small aiohttp app serving ``/`` and ``/health``."""
    
    def __init__(
        self,
        monitor: HealthMonitor,
        is_bot_ready: Callable[[], bool],
        ping_database: Callable[[], Awaitable[bool]],
        host: str = '0.0.0.0',
        port: int = 3000
    ):
        self.monitor = monitor
        self.is_bot_ready = is_bot_ready
        self.ping_database = ping_database
        self.host = host
        self.port = port
        self._runner: Optional[web.AppRunner] = None
    
    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get('/', self.handle_root)
        app.router.add_get('/health', self.handle_health)
        return app
    
    async def handle_root(self, request: web.Request) -> web.Response:
        return web.json_response({
            'status': 'Bot is running',
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'uptime': round(self.monitor.uptime_seconds, 3),
        })
    
    async def handle_health(self, request: web.Request) -> web.Response:
        bot_connected = self.is_bot_ready()
        database_connected = await self.ping_database()
        healthy = (
            bot_connected
            and database_connected
            and self.monitor.scheduler_running
            and not self.monitor.persistence_degraded
        )
        return web.json_response(
            {
                'status': 'healthy' if healthy else 'degraded',
                'bot': 'connected' if bot_connected else 'disconnected',
                'database': 'connected' if database_connected else 'disconnected',
                'scheduler': 'running' if self.monitor.scheduler_running else 'stopped',
                'persistence_degraded': self.monitor.persistence_degraded,
                'last_error': self.monitor.last_error,
                'last_cycle': self.monitor.last_cycle(),
            },
            status=200 if healthy else 503,
        )
    
    async def start(self) -> None:
        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(f"Health server running on {self.host}:{self.port}")
    
    async def stop(self) -> None:
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Health server stopped")
