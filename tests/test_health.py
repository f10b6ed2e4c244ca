"""Tests for health reporting."""

import asyncio

from aiohttp import test_utils

from votebot.data_models.votes import CycleOutcome, CycleReport, SyncDecision
from votebot.services.health import HealthMonitor, HealthServer


def _report(outcome, **kwargs):
    return CycleReport(tracked_entity_id="srv-1", outcome=outcome, **kwargs)


class TestHealthMonitor:
    def test_persistence_failure_degrades_until_next_success(self):
        monitor = HealthMonitor()

        monitor.record_cycle(_report(CycleOutcome.PERSISTENCE_FAILED, detail="disk I/O error"))
        assert monitor.persistence_degraded

        monitor.record_cycle(_report(CycleOutcome.FETCH_FAILED, detail="network: timeout"))
        assert monitor.persistence_degraded
        assert monitor.last_error == "network: timeout"

        monitor.record_cycle(_report(CycleOutcome.EDITED))
        assert not monitor.persistence_degraded
        assert monitor.last_error is None

    def test_last_cycle_summary(self):
        monitor = HealthMonitor()
        assert monitor.last_cycle() is None

        monitor.record_cycle(_report(
            CycleOutcome.PUBLISHED,
            decision=SyncDecision.NO_PRIOR_STATE,
            fingerprint="abcd",
            message_id=99,
        ))

        summary = monitor.last_cycle()
        assert summary["outcome"] == "published"
        assert summary["decision"] == "no_prior_state"
        assert summary["message_id"] == "99"


def _get(server, path):
    async def scenario():
        async with test_utils.TestClient(test_utils.TestServer(server.create_app())) as client:
            resp = await client.get(path)
            return resp.status, await resp.json()
    return asyncio.run(scenario())


def _server(monitor, bot_ready=True, db_ok=True):
    async def ping():
        return db_ok
    return HealthServer(monitor, is_bot_ready=lambda: bot_ready, ping_database=ping)


def test_root_endpoint():
    status, body = _get(_server(HealthMonitor()), "/")

    assert status == 200
    assert body["status"] == "Bot is running"
    assert body["uptime"] >= 0


def test_health_endpoint_healthy():
    monitor = HealthMonitor()
    monitor.scheduler_running = True
    monitor.record_cycle(_report(CycleOutcome.SKIPPED))

    status, body = _get(_server(monitor), "/health")

    assert status == 200
    assert body["status"] == "healthy"
    assert body["bot"] == "connected"
    assert body["database"] == "connected"
    assert body["last_cycle"]["outcome"] == "skipped"


def test_health_endpoint_degraded_by_persistence():
    monitor = HealthMonitor()
    monitor.scheduler_running = True
    monitor.record_cycle(_report(CycleOutcome.PERSISTENCE_FAILED))

    status, body = _get(_server(monitor), "/health")

    assert status == 503
    assert body["status"] == "degraded"
    assert body["persistence_degraded"] is True


def test_health_endpoint_reports_disconnects():
    monitor = HealthMonitor()
    monitor.scheduler_running = True

    status, body = _get(_server(monitor, bot_ready=False, db_ok=False), "/health")

    assert status == 503
    assert body["bot"] == "disconnected"
    assert body["database"] == "disconnected"
