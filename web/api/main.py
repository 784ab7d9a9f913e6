"""FastAPI app for the tournament and registration API."""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

import config
from nexus.models import init_db
from web.api.auth_routes import router as auth_router
from web.api.errors import register_error_handlers
from web.api.routes import router as api_router
from web.api.team_routes import router as team_router

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("nexus")
access_logger = logging.getLogger("nexus.http")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("Database ready")
    yield


app = FastAPI(title="Nexus-Core Tournament API", lifespan=lifespan)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""

    async def dispatch(self, request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        access_logger.log(
            level,
            "%s %s - %d (%.0fms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


app.add_middleware(AccessLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_error_handlers(app)
app.include_router(api_router)
app.include_router(team_router)
app.include_router(auth_router)


@app.get("/api/health")
async def health():
    return {"status": "ok"}
