"""Handler for REST API call to provide metrics."""

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    generate_latest,
)

from configuration import configuration
from metrics.utils import setup_model_metrics

router = APIRouter(tags=["metrics"])


@router.get("/metrics", response_class=PlainTextResponse)
async def metrics_endpoint_handler(request: Request) -> PlainTextResponse:
    """
    Handle request to the /metrics endpoint.

    Process GET requests to the /metrics endpoint, returning the
    latest Prometheus metrics in form of a plain text.
    """
    # Nothing interesting in the request
    _ = request

    if configuration.is_loaded():
        setup_model_metrics(configuration.upstream_configuration)
    return PlainTextResponse(generate_latest(), media_type=CONTENT_TYPE_LATEST)
