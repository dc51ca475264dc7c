"""FastAPI application entrypoint.

Responsibilities kept minimal:
  * App / lifespan initialization
  * Router registration (auth, members, relationships, events, notifications)
  * Cross-cutting concerns: metrics middleware & exception handlers
"""

from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from . import config
from .api.auth import router as auth_router
from .api.events import router as events_router
from .api.members import router as members_router
from .api.notifications import router as notifications_router
from .api.relationships import router as relationships_router
from .db.session import engine, Base
from .errors import BaseAppException
from .metrics import REQUEST_COUNT, REQUEST_LATENCY
from .services.calendar_service import get_event_cache
from .services.event_cache import RedisEventCache

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - simple startup path
    """Initialize database schema (idempotent for tests)."""
    from .db import models  # noqa: F401 register models before create_all

    Base.metadata.create_all(bind=engine)
    logger.info("FamilyHub API started (demo users: %s)", ", ".join(config.DEMO_USER_IDS))
    yield


app = FastAPI(title="FamilyHub API", version="0.1.0", lifespan=lifespan)

# --- CORS (for local frontend dev) ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Register routers once ---
app.include_router(auth_router)
app.include_router(members_router)
app.include_router(relationships_router)
app.include_router(events_router)
app.include_router(notifications_router)

_ID_PREFIXES = ("/events/", "/members/", "/relationships/", "/notifications/")
_STATIC_PATHS = {
    "/events/calendar",
    "/events/rsvps/me",
    "/members/me",
    "/members/hobbies",
    "/members/me/notification-preferences",
    "/relationships/types",
    "/relationships/validate",
    "/relationships/suggestions",
    "/notifications/unread-count",
    "/notifications/read-all",
    "/notifications/read",
    "/notifications/generate/birthdays",
    "/notifications/generate/event-reminders",
}


def path_label(path: str) -> str:
    """Collapse ids out of request paths so metric label cardinality stays bounded."""
    if path in _STATIC_PATHS:
        return path
    for prefix in _ID_PREFIXES:
        if path.startswith(prefix) and len(path) > len(prefix):
            return prefix + ":id"
    return path


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    method = request.method
    label = path_label(request.url.path)
    with REQUEST_LATENCY.labels(method=method, path=label).time():
        response: Response = await call_next(request)
    REQUEST_COUNT.labels(method=method, path=label, status=str(response.status_code)).inc()
    return response


@app.get("/metrics")
def metrics():  # pragma: no cover - external scrape
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.exception_handler(BaseAppException)
async def app_exception_handler(request: Request, exc: BaseAppException):
    return JSONResponse(
        status_code=exc.http_status,
        content={"detail": {"code": exc.code, "message": exc.message}},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):  # pragma: no cover
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": {"code": "INTERNAL_ERROR", "message": "unexpected error"}},
    )


@app.get("/healthz")
async def health():
    health = {"status": "ok"}
    cache = get_event_cache()
    backend = "redis" if isinstance(cache, RedisEventCache) else "memory"
    health["eventCacheBackend"] = backend
    if backend == "redis":
        # PING (non-fatal)
        try:
            pong = cache.redis.ping()
            health["redis"] = "up" if pong else "down"
        except Exception:
            health["redis"] = "error"
    else:
        health["eventCacheEntries"] = cache.size()
    return health
