"""FastAPI application routes, middleware, and metrics."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from city_map.health.health_check import is_redis_available
from city_map.logging_config import logger
from city_map.models.city import CityForm, CityRecord
from city_map.models.health import Dependencies, HealthResponse
from city_map.query_service.query import (
    CityMapError,
    EmptyCollectionError,
    InvalidArgumentError,
    cities_in_state,
    closest,
    farthest,
    list_states,
    parse_direction,
)
from city_map.records.parser import serialize
from city_map.redis_cache.storage import registry_store
from city_map.registry.registry import CityRegistry
from structlog.contextvars import bind_contextvars, clear_contextvars

INVALID_FORM_MESSAGE = "Invalid data in form"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the registry at startup and persist it at shutdown."""
    store = registry_store()
    app.state.registry = store.load()
    yield
    store.save(app.state.registry)


app = FastAPI(lifespan=lifespan)

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "path", "status_code"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "HTTP request duration in seconds", ["path"]
)
CITIES_ADDED = Counter("cities_added_total", "Cities added through the form")


def get_registry(request: Request) -> CityRegistry:
    """Return the registry owned by the running application."""
    return request.app.state.registry


def parse_coordinate(value: str) -> float:
    """Convert a query string value into a float.

    Raises:
        InvalidArgumentError: If the value is not numeric.
    """
    try:
        return float(value)
    except ValueError as exc:
        raise InvalidArgumentError("Invalid latitude or longitude.") from exc


@app.middleware("http")
async def request_logging(request: Request, call_next):
    """Log request details, attach a request ID, and record metrics.

    Args:
        request: Incoming HTTP request.
        call_next: FastAPI handler for the next middleware/app.

    Returns:
        The response produced by the downstream handler.
    """
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    bind_contextvars(request_id=request_id)
    start = time.perf_counter()
    response = None
    try:
        response = await call_next(request)
        response.headers["x-request-id"] = request_id
        return response
    finally:
        duration_s = time.perf_counter() - start
        duration_ms = round(duration_s * 1000, 2)
        status_code = getattr(response, "status_code", 500)
        logger.info(
            "HTTP_REQUEST",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=duration_ms,
        )
        REQUEST_COUNT.labels(
            method=request.method, path=request.url.path, status_code=status_code
        ).inc()
        REQUEST_LATENCY.labels(path=request.url.path).observe(duration_s)
        clear_contextvars()


@app.exception_handler(InvalidArgumentError)
async def invalid_argument_handler(request: Request, exc: InvalidArgumentError):
    """Convert invalid query arguments into 400 responses.

    Args:
        request: Incoming HTTP request.
        exc: Raised argument error.

    Returns:
        A JSON response with the error detail.
    """
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(EmptyCollectionError)
async def empty_collection_handler(request: Request, exc: EmptyCollectionError):
    """Convert queries over an empty registry into 404 responses."""
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(CityMapError)
async def city_map_error_handler(request: Request, exc: CityMapError):
    """Convert unexpected query errors into 500 responses."""
    return JSONResponse(status_code=500, content={"detail": "Unexpected error"})


@app.get("/")
async def root():
    """Return a basic liveness response."""
    return {"message": "Hello World"}


@app.get("/cities")
async def get_cities(registry: CityRegistry = Depends(get_registry)) -> list[CityRecord]:
    """List every city in registry order."""
    return list(registry.all())


@app.post("/cities", status_code=201)
async def add_city(
    form: CityForm, registry: CityRegistry = Depends(get_registry)
) -> CityRecord:
    """Validate an "add city" form and append it to the registry.

    Args:
        form: Raw string fields submitted by the client.

    Returns:
        The stored CityRecord.
    """
    if not form.is_valid():
        logger.info("CITY_FORM_INVALID", city=form.city, state=form.state)
        raise HTTPException(status_code=400, detail=INVALID_FORM_MESSAGE)
    record = form.to_record()
    registry.add(record)
    CITIES_ADDED.inc()
    logger.info("CITY_ADDED", city=record.city, state=record.state)
    return record


@app.get("/cities/farthest/{direction}")
async def get_farthest_city(
    direction: str, registry: CityRegistry = Depends(get_registry)
):
    """Return the city farthest north, east, south or west."""
    cardinal = parse_direction(direction)
    return {"direction": cardinal.value, "city": farthest(registry, cardinal)}


@app.get("/cities/closest")
async def get_closest_city(
    latitude: str, longitude: str, registry: CityRegistry = Depends(get_registry)
):
    """Return the city nearest to the given coordinates.

    Args:
        latitude: Target latitude from the query string.
        longitude: Target longitude from the query string.

    Returns:
        The coordinates echoed back with the nearest city name.
    """
    lat = parse_coordinate(latitude)
    lon = parse_coordinate(longitude)
    return {"latitude": lat, "longitude": lon, "city": closest(registry, lat, lon)}


@app.get("/states")
async def get_states(registry: CityRegistry = Depends(get_registry)):
    """List distinct states in first-occurrence order."""
    return {"states": list_states(registry)}


@app.get("/states/{state}/cities")
async def get_cities_of_state(state: str, registry: CityRegistry = Depends(get_registry)):
    return {"state": state, "cities": cities_in_state(registry, state)}


@app.get("/export")
async def export_cities(registry: CityRegistry = Depends(get_registry)):
    """Return the registry in the storage text format."""
    return PlainTextResponse(serialize(registry.all()))


@app.get("/health", response_model=HealthResponse)
async def health(registry: CityRegistry = Depends(get_registry)) -> HealthResponse:
    """Report API health and dependency availability.

    Returns:
        A HealthResponse containing dependency status and registry size.
    """
    return HealthResponse(
        status="ok",
        dependencies=Dependencies(redis=is_redis_available()),
        cities=len(registry),
    )


@app.get("/metrics")
async def metrics():
    """Expose Prometheus metrics for scraping."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
