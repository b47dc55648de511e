"""
Unit Tests for PointsSinkClient

Status classification and transport error wrapping against an httpx
MockTransport.
"""

import httpx
import pytest

from cart.core.exceptions import (
    DownstreamClientError,
    DownstreamServerError,
    DownstreamTransportError,
)
from cart.orders.models import PointsPayload
from cart.orders.points_sink import PointsSinkClient

PAYLOAD = PointsPayload(username="alice", amount=2)


@pytest.fixture
async def make_client(sink_url):
    clients = []

    def _make(sink):
        client = sink.client()
        clients.append(client)
        return PointsSinkClient(client, sink_url)

    yield _make

    for client in clients:
        await client.aclose()


@pytest.mark.unit
class TestPointsSinkClient:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [200, 201, 202, 299])
    async def test_2xx_returns_body(self, make_client, scripted_sink, status):
        sink = scripted_sink(status)

        body = await make_client(sink).post_points(PAYLOAD)

        assert body == f"sink says {status}"
        assert sink.bodies() == [{"username": "alice", "amount": 2}]
        assert str(sink.requests[0].url) == "http://points.test/points"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [500, 502, 503, 599])
    async def test_5xx_raises_server_error(self, make_client, scripted_sink, status):
        with pytest.raises(DownstreamServerError) as exc_info:
            await make_client(scripted_sink(status)).post_points(PAYLOAD)

        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [301, 400, 404, 409, 429])
    async def test_other_statuses_raise_client_error(self, make_client, scripted_sink, status):
        with pytest.raises(DownstreamClientError) as exc_info:
            await make_client(scripted_sink(status)).post_points(PAYLOAD)

        assert exc_info.value.details["status_code"] == status

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [httpx.ConnectError, httpx.ReadTimeout, httpx.ConnectTimeout])
    async def test_transport_failures_are_wrapped(self, make_client, scripted_sink, error):
        with pytest.raises(DownstreamTransportError) as exc_info:
            await make_client(scripted_sink(error)).post_points(PAYLOAD)

        assert exc_info.value.details["original_error"] == error.__name__
        assert isinstance(exc_info.value.__cause__, error)
