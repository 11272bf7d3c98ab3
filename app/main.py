"""
Formula Management Backend

Entry point: builds the FastAPI application, installs error handlers and
CORS, mounts the REST API under ``settings.API_V1_STR`` and the stored-file
route under ``/uploads``.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.api import api_router
from app.api.v1.endpoints import files
from app.core.config import settings
from app.core.db import Base, engine
from app.core.exceptions import register_exception_handlers
from app.core.logging import setup_logging
from app.services.resource_storage import storage
from app import models  # noqa: F401  registers every table on Base.metadata

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    storage.ensure_dirs()
    logger.info("%s %s started, uploads in %s", settings.PROJECT_NAME, settings.VERSION, storage.root)
    yield
    logger.info("%s shutting down", settings.PROJECT_NAME)


app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(api_router, prefix=settings.API_V1_STR)
app.include_router(files.router, prefix="/uploads", tags=["files"])


@app.get("/health")
def health_check():
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.VERSION,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
