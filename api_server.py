from __future__ import annotations  # FastAPI server exposing the interview session engine

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import candidate_router, interviewer_router
from config.settings import Settings, settings
from evaluation_provider import build_provider
from interview_session.engine import InterviewEngine
from notifier import SessionBroadcaster
from storage.migrate import migrate
from storage.sessions import SqliteSessionStore


logger = logging.getLogger(__name__)


def build_engine(cfg: Settings, broadcaster: SessionBroadcaster) -> InterviewEngine:  # Wire store, provider and notifier
    migrate(cfg.DB_PATH)
    store = SqliteSessionStore(cfg.DB_PATH)
    provider = build_provider(cfg)
    logger.info("Interview engine ready db=%s provider=%s", cfg.DB_PATH, provider.name)
    return InterviewEngine(
        store,
        provider,
        broadcaster,
        max_save_attempts=cfg.SAVE_MAX_ATTEMPTS,
        max_duration_ms=cfg.ANSWER_MAX_DURATION_MS,
    )


def create_app(engine: Optional[InterviewEngine] = None, cfg: Settings = settings) -> FastAPI:  # Application factory
    app = FastAPI(title="Interview Session API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in cfg.CLIENT_URL.split(",") if origin.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    broadcaster = SessionBroadcaster()
    app.state.broadcaster = broadcaster
    app.state.engine = engine or build_engine(cfg, broadcaster)
    app.include_router(candidate_router)
    app.include_router(interviewer_router)
    return app
