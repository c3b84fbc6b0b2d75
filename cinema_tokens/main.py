# cinema_tokens/main.py
"""
FastAPI application wiring for the token stores.

Opens one store per backend on startup, exposes liveness and health
endpoints, and stops the probe loops on shutdown.
"""

from contextlib import asynccontextmanager
from typing import Dict, Any, Optional
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cinema_tokens.core.auth_core import init_auth_core
from cinema_tokens.core.config import get_settings, describe_store
from cinema_tokens.core.logging_config import setup_logging
from cinema_tokens.core.viewing_history import init_viewing_history
from cinema_tokens.services.identity import IdentityLookup, SessionIdentityLookup
from cinema_tokens.services.token_store import EphemeralTokenStore, open_token_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open stores on startup, close them on shutdown"""
    settings = get_settings()
    log_level = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL
    setup_logging(settings.LOG_DIR, settings.LOG_FILE, log_level)

    logger.info(f"Starting {settings.APP_NAME}...")
    stores = {}
    try:
        for name, cfg in (
            ("sessions", settings.SESSION_REDIS),
            ("csrf", settings.CSRF_REDIS),
            ("near_films", settings.NEAR_FILMS_REDIS),
        ):
            logger.info(describe_store(name, cfg))
            stores[name] = await open_token_store(cfg, name=name)
    except Exception:
        logger.error("Store is not responding, startup failed")
        for store in stores.values():
            await store.shutdown()
        raise

    try:
        app.state.stores = stores
        app.state.auth_core = init_auth_core(stores["sessions"], stores["csrf"])

        identity = resolve_identity_lookup(app, stores["sessions"])
        if identity is None:
            logger.warning("No identity lookup configured, viewing history disabled")
            app.state.viewing_history = None
        else:
            app.state.viewing_history = init_viewing_history(identity, stores["near_films"])

        logger.info(f"{settings.APP_NAME} ready")

        yield
    finally:
        logger.info(f"{settings.APP_NAME} shutting down...")
        for store in stores.values():
            await store.shutdown()


def resolve_identity_lookup(app: FastAPI, sessions: EphemeralTokenStore) -> Optional[IdentityLookup]:
    """
    IdentityLookup for the viewing history.

    A lookup placed on app.state.identity_lookup (e.g. an RPC client) wins;
    otherwise callers are resolved through the session store and the
    UserDirectory on app.state.user_directory, if one was set.
    """
    identity = getattr(app.state, "identity_lookup", None)
    if identity is not None:
        return identity

    users = getattr(app.state, "user_directory", None)
    if users is None:
        return None
    return SessionIdentityLookup(sessions, users)


app = FastAPI(
    title="cinema-tokens",
    description="Session, CSRF and recently-viewed token stores",
    version="1.0.0",
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log non-health requests"""
    if request.url.path not in ("/", "/health"):
        logger.info(f"Request: {request.method} {request.url.path}")
    return await call_next(request)


@app.get("/")
async def alive() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/health")
async def health(request: Request):
    """Per-store health; 503 if any store is unhealthy"""
    stores = getattr(request.app.state, "stores", {})
    report: Dict[str, Any] = {}
    for name, store in stores.items():
        report[name] = await store.health_check()

    healthy = bool(report) and all(r["healthy"] for r in report.values())
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={"healthy": healthy, "stores": report}
    )


if __name__ == "__main__":
    import os
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Starting server on port {port}...")
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        log_level="info"
    )
