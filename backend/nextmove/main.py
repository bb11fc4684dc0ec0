import logging
import warnings
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nextmove.config import settings
from nextmove.core.errors import register_error_handlers
from nextmove.core.middleware import AccessLogMiddleware, RequestIDMiddleware
from nextmove.core.rate_limit import RateLimitMiddleware
from nextmove.dependencies import engine
from nextmove.routers import (
    admin, auth, callbacks, customer, metrics, referrals, tutorials,
)

# Validate session secret in production
if settings.is_production and settings.secret_key == "change-me-in-production":
    raise RuntimeError(
        "SECRET_KEY must be set to a secure random value in production. "
        "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
    )

if not settings.is_production and settings.secret_key == "change-me-in-production":
    warnings.warn("SECRET_KEY is using default value. Set it for production.", stacklevel=1)

logger = logging.getLogger("nextmove")


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Create database tables on startup if they don't exist."""
    import nextmove.models  # noqa: F401  (populates Base.metadata)
    from nextmove.models.base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables verified/created")
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Last added = outermost. CORS outermost so 429s carry CORS headers too.
cors_kwargs = {
    "allow_origins": settings.cors_origins_list,
    "allow_credentials": True,
    "allow_methods": ["*"],
    "allow_headers": ["*"],
    "expose_headers": ["x-request-id"],
}
if settings.cors_allow_origin_regex:
    cors_kwargs["allow_origin_regex"] = settings.cors_allow_origin_regex
app.add_middleware(RequestIDMiddleware)
app.add_middleware(AccessLogMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(CORSMiddleware, **cors_kwargs)

register_error_handlers(app)

app.include_router(auth.router)
app.include_router(customer.router)
app.include_router(tutorials.router)
app.include_router(callbacks.router)
app.include_router(referrals.router)
app.include_router(metrics.router)
app.include_router(admin.router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "app": settings.app_name, "version": "0.1.0"}
