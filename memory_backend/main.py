from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from memory_backend.api.errors import install_error_handlers
from memory_backend.api.routes import health, people, recognize, summary
from memory_backend.core.config import get_settings
from memory_backend.db.session import init_db

settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("memory_backend")


@asynccontextmanager
async def lifespan(app: FastAPI):
    seeded = init_db(seed_demo=settings.seed_demo_data)
    logger.info(
        "%s ready (face matching: %s, demo people added: %s)",
        settings.app_name,
        settings.face_match_mode,
        seeded,
    )
    yield


app = FastAPI(title=settings.app_name, version="1.0.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=settings.cors_headers,
)
install_error_handlers(app, allow_origins=settings.cors_origins)

app.include_router(health.router)
app.include_router(recognize.router)
app.include_router(summary.router)
app.include_router(people.router)
