"""
Orders Module

- **models.py**: Order and PointsPayload
- **points_sink.py**: httpx client for the points sink
- **outbound_pipeline.py**: Persist + resilient points notification
"""

from .models import Order, PointsPayload

__all__ = ["Order", "PointsPayload"]
