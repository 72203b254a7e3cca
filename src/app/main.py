"""Definition of FastAPI based web service."""

import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.routing import Mount, Route, WebSocketRoute

import constants
import metrics
import version
from app import routers
from client import UpstreamClientHolder
from configuration import configuration
from log import get_logger
from metrics.utils import setup_model_metrics
from utils.relay_errors import RelayError, ServerError, ValidationFailedError

logger = get_logger(__name__)

logger.info("Initializing app")


service_name = configuration.configuration.name


# running on FastAPI startup
@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """
    Initialize app resources.

    FastAPI lifespan context: initializes configuration, upstream client,
    user store and model metrics before serving requests, and closes upstream
    HTTP session on shutdown.
    """
    configuration.load_configuration(os.environ[constants.CONFIG_PATH_ENV_VAR])
    await UpstreamClientHolder().load(configuration.upstream_configuration)
    setup_model_metrics(configuration.upstream_configuration)

    # make sure the user store is reachable before serving requests
    _ = configuration.user_store
    get_logger("app.endpoints.handlers")
    logger.info("App startup complete")

    yield

    await UpstreamClientHolder().close()
    logger.info("App shutdown complete")


app = FastAPI(
    title=f"{service_name} service - OpenAPI",
    summary=f"{service_name} service API specification.",
    description=f"{service_name} service API specification.",
    version=version.__version__,
    license_info={
        "name": "Apache 2.0",
        "url": "https://www.apache.org/licenses/LICENSE-2.0.html",
    },
    servers=[
        {"url": "http://localhost:8080/", "description": "Locally running service"}
    ],
    lifespan=lifespan,
)

cors = configuration.service_configuration.cors

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.allow_origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)


@app.exception_handler(RelayError)
async def relay_error_handler(_request: Request, exc: RelayError) -> JSONResponse:
    """Render relay error as JSON error response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(exc.to_response(), exclude_none=True),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render malformed request body as VALIDATION error."""
    logger.info("Invalid request to %s: %s", request.url.path, exc.errors())
    return await relay_error_handler(request, ValidationFailedError())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render unexpected failure without leaking any detail."""
    logger.exception("Unexpected failure in %s: %s", request.url.path, exc)
    return await relay_error_handler(request, ServerError())


@app.middleware("http")
async def rest_api_metrics(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Middleware with REST API counter update logic."""
    path = request.url.path
    logger.debug("Received request for path: %s", path)

    # ignore paths that are not part of the app routes
    if path not in app_routes_paths:
        return await call_next(request)

    logger.debug("Processing API request for path: %s", path)

    # measure time to handle duration + update histogram
    with metrics.response_duration_seconds.labels(path).time():
        response = await call_next(request)

    # ignore /metrics endpoint that will be called periodically
    if not path.endswith("/metrics"):
        # just update metrics
        metrics.rest_api_calls_total.labels(path, response.status_code).inc()
    return response


logger.info("Including routers")
routers.include_routers(app)

app_routes_paths = [
    route.path
    for route in app.routes
    if isinstance(route, (Mount, Route, WebSocketRoute))
]
