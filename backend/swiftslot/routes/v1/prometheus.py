"""
Prometheus metrics endpoint for monitoring infrastructure.

This is a PUBLIC endpoint following standard Prometheus practices. It
exposes metrics collected by @measure_operation and the booking and
payment counters.
"""

from fastapi import APIRouter, Response

from ...monitoring.prometheus_metrics import prometheus_metrics

router = APIRouter(tags=["monitoring"])


@router.get("/prometheus", include_in_schema=False)
def get_prometheus_metrics() -> Response:
    """Expose metrics in Prometheus text format."""
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
