"""Rate limiting utilities using SlowAPI.

Limits are resolved lazily from settings so tests and deployments can tune
them without re-importing the routers.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from salesboard.core.config import settings

limiter = Limiter(key_func=get_remote_address)


def login_rate() -> str:
    return settings.LOGIN_RATE


def chat_post_rate() -> str:
    return settings.CHAT_POST_RATE


def init_rate_limiter(app: FastAPI) -> None:
    """Attach the rate limiter and its 429 handler to the FastAPI app."""

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={"detail": "Too many requests. Please slow down and retry."},
        )

    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
