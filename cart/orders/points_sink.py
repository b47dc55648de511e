"""
Points Sink Client

Posts loyalty-point notifications to the downstream sink over httpx and
classifies every failure into the downstream exception family:

    status in [200, 300)   -> response body returned (content ignored upstream)
    status in [500, 600)   -> DownstreamServerError
    any other status       -> DownstreamClientError
    httpx.TransportError   -> DownstreamTransportError (connect errors, timeouts)

The AsyncClient (and its connection pool) is owned by the application
lifespan and shared by all calls.
"""

import time

import httpx

from cart.core.config.constants import POINTS_SINK_NAME
from cart.core.exceptions import (
    DownstreamClientError,
    DownstreamServerError,
    DownstreamTransportError,
)
from cart.core.logging.logger import get_logger
from cart.infrastructure.monitoring.metrics_collector import get_metrics_collector
from cart.orders.models import PointsPayload

logger = get_logger(__name__)


class PointsSinkClient:
    def __init__(self, client: httpx.AsyncClient, url: str):
        self._client = client
        self.url = url
        self._metrics = get_metrics_collector()

    async def post_points(self, payload: PointsPayload) -> str:
        """
        POST the payload as JSON and return the response body.

        Raises:
            DownstreamServerError: sink answered 5xx
            DownstreamClientError: sink answered another non-2xx status
            DownstreamTransportError: no response (connect failure, timeout)
        """
        start = time.perf_counter()
        try:
            response = await self._client.post(self.url, json=payload.model_dump())
        except httpx.TransportError as e:
            self._metrics.record_sink_response(None, time.perf_counter() - start)
            raise DownstreamTransportError.from_exception(
                e,
                message=f"Points sink unreachable: {type(e).__name__}",
                sink=POINTS_SINK_NAME,
                url=self.url,
            ) from e

        self._metrics.record_sink_response(response.status_code, time.perf_counter() - start)
        status = response.status_code

        if 500 <= status < 600:
            raise DownstreamServerError(
                f"Points sink returned {status}",
                status_code=status,
                details={"sink": POINTS_SINK_NAME, "url": self.url},
            )
        if not 200 <= status < 300:
            raise DownstreamClientError(
                f"Points sink returned {status}",
                status_code=status,
                details={"sink": POINTS_SINK_NAME, "url": self.url},
            )

        return response.text
