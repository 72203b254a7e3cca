"""REST API routers."""

from fastapi import FastAPI

from app.endpoints import (
    chat,
    health,
    metrics,
    quota,
    streaming_chat,
)


def include_routers(app: FastAPI) -> None:
    """Include FastAPI routers for different endpoints.

    Args:
        app: The `FastAPI` app instance.
    """
    app.include_router(chat.router)
    app.include_router(streaming_chat.router)
    app.include_router(quota.router)

    # these endpoints are not part of relay API
    app.include_router(health.router)
    app.include_router(metrics.router)
