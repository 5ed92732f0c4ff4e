# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""FastAPI application entry point."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from missionledger import __version__
from missionledger.config import settings
from missionledger.database import SessionLocal
from missionledger.schemas.common import HealthResponse
from missionledger.services import auth_service, category_limit_service
from missionledger.services.storage_service import BUCKETS, PUBLIC_PREFIX

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Ensure storage directories exist
for bucket in BUCKETS:
    os.makedirs(os.path.join(settings.storage_dir, bucket), exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    db = SessionLocal()
    try:
        category_limit_service.seed_category_limits(db)
        expired = auth_service.cleanup_expired_sessions(db)
        if expired:
            logger.info(f"Removed {expired} expired sessions")
    except SQLAlchemyError as e:
        logger.error(f"Startup database maintenance failed: {e}")
    finally:
        db.close()

    yield

    logger.info("Shutting down")


app = FastAPI(
    title="Mission Ledger",
    description="Field expense tracking with daily category limits and reimbursement",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy")


# Import and include API router after it's created
from missionledger.api.v1.router import api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")

# Uploaded receipts and payment proofs
app.mount(
    PUBLIC_PREFIX,
    StaticFiles(directory=settings.storage_dir),
    name="files",
)
