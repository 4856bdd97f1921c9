"""
WellNest Backend — Health, Middleware and Keep-Alive Tests
===========================================================

What:  Tests for the health endpoint, request correlation headers, access-log
       levels and the background database keep-alive.
"""

import asyncio
import logging
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from app.middleware.logging import level_for_status
from app.services.keepalive import DatabaseKeepAlive


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        with patch("app.routes.health.ping_database", new=AsyncMock()):
            response = await test_client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["database"] == "connected"
        assert body["uptime"] >= 0
        assert body["version"]

    @pytest.mark.asyncio
    async def test_database_down(self, test_client):
        failing = AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("refused")))
        with patch("app.routes.health.ping_database", new=failing):
            response = await test_client.get("/api/health")

        assert response.status_code == 503
        assert response.json()["status"] == "ERROR"
        assert response.json()["database"] == "disconnected"


class TestRequestCorrelation:

    @pytest.mark.asyncio
    async def test_generated_request_id(self, test_client):
        response = await test_client.get("/api/nope")
        rid = response.headers["X-Request-ID"]
        assert len(rid) == 8
        assert response.json()["request_id"] == rid

    @pytest.mark.asyncio
    async def test_client_request_id_is_echoed(self, test_client):
        response = await test_client.get("/api/nope", headers={"X-Request-ID": "ui-click-42"})
        assert response.headers["X-Request-ID"] == "ui-click-42"
        assert response.json()["request_id"] == "ui-click-42"

    @pytest.mark.asyncio
    async def test_overlong_request_id_replaced(self, test_client):
        response = await test_client.get("/api/nope", headers={"X-Request-ID": "x" * 200})
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_response_time_header(self, test_client):
        response = await test_client.get("/api/nope")
        assert response.headers["X-Response-Time"].endswith("ms")

    @pytest.mark.asyncio
    async def test_health_is_not_access_logged(self, test_client):
        with patch("app.routes.health.ping_database", new=AsyncMock()):
            response = await test_client.get("/api/health")
        assert "X-Response-Time" not in response.headers
        assert response.headers["X-Request-ID"]

    @pytest.mark.parametrize(
        "status, level",
        [(200, logging.INFO), (304, logging.INFO), (404, logging.WARNING), (503, logging.ERROR)],
    )
    def test_log_level_for_status(self, status, level):
        assert level_for_status(status) == level


class TestKeepAlive:

    @pytest.mark.asyncio
    async def test_disabled_with_zero_interval(self):
        keepalive = DatabaseKeepAlive(AsyncMock(), interval_seconds=0)
        assert keepalive.start() is False
        assert not keepalive.running

    @pytest.mark.asyncio
    async def test_failed_ping_is_counted_not_raised(self):
        ping = AsyncMock(side_effect=[OperationalError("SELECT 1", {}, Exception("down")), None])
        keepalive = DatabaseKeepAlive(ping, interval_seconds=60)

        assert await keepalive.ping_once() is False
        assert await keepalive.ping_once() is True
        assert (keepalive.failures, keepalive.successes) == (1, 1)

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        keepalive = DatabaseKeepAlive(AsyncMock(), interval_seconds=3600)

        assert keepalive.start() is True
        assert keepalive.running
        await keepalive.stop()
        assert not keepalive.running

    @pytest.mark.asyncio
    async def test_loop_keeps_going_after_failure(self):
        ping = AsyncMock(side_effect=[RuntimeError("boom")] + [None] * 50)
        keepalive = DatabaseKeepAlive(ping, interval_seconds=1)

        real_sleep = asyncio.sleep

        async def no_wait(_seconds):
            await real_sleep(0)

        with patch("app.services.keepalive.asyncio.sleep", new=no_wait):
            keepalive.start()
            for _ in range(20):
                if ping.await_count >= 3:
                    break
                await real_sleep(0)
            await keepalive.stop()

        assert ping.await_count >= 3
        assert keepalive.failures == 1
