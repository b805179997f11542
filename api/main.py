from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fanfrenzy.config import get_settings
from fanfrenzy.db import close_db
from fanfrenzy.errors import register_exception_handlers
from fanfrenzy.logging_config import configure_logging
from fanfrenzy.middleware import RateLimitMiddleware, StructuredLoggingMiddleware
from fanfrenzy.routers import admin, challenges, content, scores
from fanfrenzy.validate_env import validate_env

settings = get_settings()
validate_env(settings)
configure_logging(service="fanfrenzy-api", environment=settings.environment, log_level=settings.log_level)


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    await close_db()


app = FastAPI(title="fanfrenzy", version="1.0.0", lifespan=lifespan)

app.add_middleware(StructuredLoggingMiddleware)
app.add_middleware(
    RateLimitMiddleware,
    limit=settings.rate_limit_requests,
    window_seconds=settings.rate_limit_window_seconds,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(content.router)
app.include_router(scores.router)
app.include_router(challenges.router)
app.include_router(admin.router)


@app.get("/healthz")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
