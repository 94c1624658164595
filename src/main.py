"""FastAPI application entrypoint."""

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.catalog import router as catalog_router
from src.api.health import router as health_router
from src.api.kiosk import router as kiosk_router
from src.config import settings
from src.core.event_bus import EventBus
from src.core.flow.engine import EngineConfig
from src.core.flow.scheduler import AsyncioScheduler
from src.core.logging import get_logger, setup_logging
from src.core.matching.matcher import MatchingConfig
from src.services.ai import get_translator
from src.services.catalog_service import CatalogService
from src.services.session_service import KioskSessionService
from src.services.translation_service import TranslationService
from src.services.voice import get_speech_input, get_speech_output
from src.services.voice_service import VoiceOutputService

setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    # 노드 카탈로그 로드
    logger.info("Loading flow catalog...")
    catalog_service = CatalogService(settings.FLOW_PATH)
    catalog_service.load()
    app.state.catalog_service = catalog_service

    # 음성 입출력 초기화
    logger.info("Initializing voice adapters...")
    speech_output = get_speech_output()
    speech_input = get_speech_input()
    logger.info(
        f"Voice adapters initialized: tts={speech_output.name}, stt={speech_input.name}"
    )

    # 번역 Provider 초기화
    translator = get_translator()
    app.state.translation_service = TranslationService(translator)
    logger.info(f"Translation provider initialized: {translator.name}")

    # KioskSessionService 초기화
    logger.info("Initializing KioskSessionService...")
    event_bus = EventBus()
    session_service = KioskSessionService(
        catalog_service=catalog_service,
        scheduler=AsyncioScheduler(),
        event_bus=event_bus,
        voice_output=VoiceOutputService(speech_output),
        speech_input=speech_input,
        engine_config=EngineConfig.from_settings(settings),
        matching_config=MatchingConfig(
            high_confidence_threshold=settings.MATCH_HIGH_THRESHOLD,
            medium_confidence_threshold=settings.MATCH_MEDIUM_THRESHOLD,
            enable_fuzzy_matching=settings.ENABLE_FUZZY_MATCHING,
            enable_similarity_matching=settings.ENABLE_SIMILARITY_MATCHING,
        ),
        default_language=settings.DEFAULT_LANGUAGE,
    )
    app.state.session_service = session_service
    app.state.event_bus = event_bus
    logger.info("KioskSessionService initialized.")

    # 카탈로그 변경 폴링
    poll_task = None
    if settings.CATALOG_POLL_SECONDS > 0:
        poll_task = asyncio.create_task(
            catalog_service.poll(settings.CATALOG_POLL_SECONDS)
        )

    # 방치 세션 만료
    expiry_task = None
    if settings.SESSION_IDLE_SECONDS > 0:
        expiry_task = asyncio.create_task(
            session_service.expire_idle_periodically(
                settings.SESSION_IDLE_SECONDS, settings.SESSION_SWEEP_SECONDS
            )
        )

    yield

    # 종료 시 정리
    logger.info("Shutting down...")
    for task in (poll_task, expiry_task):
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
    session_service.close()


app = FastAPI(title="Kiosk Dialog", lifespan=lifespan)

app.include_router(health_router)
app.include_router(kiosk_router)
app.include_router(catalog_router)
