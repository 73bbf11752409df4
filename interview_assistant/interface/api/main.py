from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ...application.interview_session import InterviewFlow
from ...application.scheduler import TimerScheduler
from ...core.config import Settings, get_settings
from ...core.exceptions import register_exception_handlers
from ...core.logging import setup_logging
from ...managers.evaluation import OpenAICompletionService, OpenAIInterviewManager
from ...processors.resume import ResumeTextExtractor
from ...storage.json_store import JsonStateStore, MemoryStateStore

logger = structlog.get_logger(__name__)


def build_flow(settings: Settings) -> InterviewFlow:
    store = JsonStateStore(settings.STATE_FILE) if settings.PERSIST_STATE else MemoryStateStore()
    evaluator = OpenAIInterviewManager(OpenAICompletionService(settings))
    return InterviewFlow(
        evaluator=evaluator,
        store=store,
        strict_generation=settings.STRICT_QUESTION_GENERATION,
    )


def create_app(settings: Optional[Settings] = None, flow: Optional[InterviewFlow] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)
    flow = flow or build_flow(settings)
    scheduler = TimerScheduler(flow, interval=settings.TIMER_TICK_SECONDS)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await flow.load()
        scheduler.start()
        logger.info("app_started", app_name=settings.APP_NAME, environment=settings.ENVIRONMENT.value)
        yield
        await scheduler.stop()

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.flow = flow
    app.state.extractor = ResumeTextExtractor(max_bytes=settings.MAX_RESUME_BYTES)
    app.state.scheduler = scheduler

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, replace with actual origins
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # Include routers
    from .routers import candidates, health, interview, resume
    app.include_router(health.router, prefix=settings.API_PREFIX)
    app.include_router(resume.router, prefix=settings.API_PREFIX)
    app.include_router(candidates.router, prefix=settings.API_PREFIX)
    app.include_router(interview.router, prefix=settings.API_PREFIX)

    return app
