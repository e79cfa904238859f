"""Application entry point for the Salesboard API service."""

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.api.routes import (
    accounts,
    audit,
    auth,
    chat,
    dashboard,
    relationships,
    requests,
    sellers,
    settings as settings_routes,
)
from salesboard.core.cache import close_redis_client, get_redis_client
from salesboard.core.config import settings
from salesboard.core.db import get_session
from salesboard.core.errors import install_error_handlers
from salesboard.core.logging import setup_logging
from salesboard.core.middleware import BodySizeLimitMiddleware, RequestContextLogMiddleware
from salesboard.core.rate_limit import init_rate_limiter

setup_logging()

app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)

init_rate_limiter(app)
install_error_handlers(app)

app.add_middleware(RequestContextLogMiddleware)


def _cors_origins() -> list[str]:
    if settings.ENV == "prod":
        if not settings.CORS_ALLOWED_ORIGINS:
            raise RuntimeError("CORS_ALLOWED_ORIGINS must be configured for prod")
        return settings.CORS_ALLOWED_ORIGINS
    return settings.CORS_ALLOWED_ORIGINS or ["http://localhost:5173"]


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
)

app.add_middleware(BodySizeLimitMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.on_event("startup")
async def startup_event():
    """Probe Redis once; KPI caching falls back to process memory without it."""

    client = await get_redis_client()
    logger.bind(redis=client is not None).info("kpi_cache_ready")


@app.on_event("shutdown")
async def shutdown_event():
    await close_redis_client()


@app.get("/api/healthz", tags=["system"], summary="Liveness probe")
def healthz() -> dict[str, str]:
    """Simple liveness probe that load balancers and monitors can call."""

    return {"status": "ok"}


@app.get("/api/readyz", tags=["system"], summary="Readiness probe")
async def readyz(session: AsyncSession = Depends(get_session)):
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        raise HTTPException(status_code=503, detail="Database not reachable")
    return {"ready": True}


ROUTERS = (
    auth.router,
    accounts.router,
    sellers.router,
    relationships.router,
    requests.router,
    audit.router,
    chat.router,
    dashboard.router,
    settings_routes.router,
)

for router in ROUTERS:
    app.include_router(router, prefix="/api")
