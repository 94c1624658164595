"""Kiosk session API endpoints."""

from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.schemas import (
    ChoiceRequest,
    ConfirmRequest,
    CreateSessionRequest,
    InputRequest,
    LanguageRequest,
    SessionResponse,
    TextRequest,
    build_session_response,
)
from src.core.flow.errors import InputValidationError, InvalidOperationError
from src.core.flow.models import DialogSnapshot
from src.core.logging import get_logger
from src.services.session_service import (
    KioskSessionService,
    SessionNotFoundError,
    UnsupportedLanguageError,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])

# 엔진 타이머는 이벤트 루프에 예약되므로 핸들러는 모두 async def (루프 스레드 실행)


def get_session_service(request: Request) -> KioskSessionService:
    """KioskSessionService 인스턴스 반환 (의존성 주입)"""
    service: KioskSessionService = request.app.state.session_service
    return service


def _run(
    session_id: str, operation: Callable[[], DialogSnapshot]
) -> SessionResponse:
    """엔진 조작 실행 + 도메인 예외 → HTTP 상태 코드"""
    try:
        snapshot = operation()
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except UnsupportedLanguageError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except InputValidationError as e:
        raise HTTPException(
            status_code=422, detail={"field": e.field, "message": e.message}
        ) from e
    except InvalidOperationError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return build_session_response(session_id, snapshot)


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(
    body: CreateSessionRequest,
    service: KioskSessionService = Depends(get_session_service),
) -> SessionResponse:
    """세션 생성"""
    try:
        session_id, snapshot = service.create_session(body.language)
    except UnsupportedLanguageError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return build_session_response(session_id, snapshot)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    service: KioskSessionService = Depends(get_session_service),
) -> SessionResponse:
    """현재 스냅샷 (재렌더링)"""
    return _run(session_id, lambda: service.get_snapshot(session_id))


@router.delete("/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    service: KioskSessionService = Depends(get_session_service),
) -> None:
    """세션 종료"""
    try:
        service.delete_session(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.post("/{session_id}/choice", response_model=SessionResponse)
async def select_choice(
    session_id: str,
    body: ChoiceRequest,
    service: KioskSessionService = Depends(get_session_service),
) -> SessionResponse:
    """선택지 탭"""
    return _run(session_id, lambda: service.select_choice(session_id, body.choice_id))


@router.post("/{session_id}/text", response_model=SessionResponse)
async def submit_text(
    session_id: str,
    body: TextRequest,
    service: KioskSessionService = Depends(get_session_service),
) -> SessionResponse:
    """자유 발화"""
    return _run(session_id, lambda: service.submit_text(session_id, body.text))


@router.post("/{session_id}/input", response_model=SessionResponse)
async def submit_input(
    session_id: str,
    body: InputRequest,
    service: KioskSessionService = Depends(get_session_service),
) -> SessionResponse:
    """입력 노드 값 제출"""
    return _run(session_id, lambda: service.submit_input(session_id, body.value))


@router.post("/{session_id}/confirmation", response_model=SessionResponse)
async def submit_confirmation(
    session_id: str,
    body: ConfirmRequest,
    service: KioskSessionService = Depends(get_session_service),
) -> SessionResponse:
    """확인 노드 응답"""
    return _run(
        session_id, lambda: service.submit_confirmation(session_id, body.confirmed)
    )


@router.post("/{session_id}/resolve", response_model=SessionResponse)
async def resolve_pending_confirmation(
    session_id: str,
    body: ConfirmRequest,
    service: KioskSessionService = Depends(get_session_service),
) -> SessionResponse:
    """확인 질문(중간 신뢰도)에 대한 예/아니오"""
    return _run(
        session_id,
        lambda: service.resolve_pending_confirmation(session_id, body.confirmed),
    )


@router.post("/{session_id}/reset", response_model=SessionResponse)
async def reset_session(
    session_id: str,
    service: KioskSessionService = Depends(get_session_service),
) -> SessionResponse:
    """처음으로"""
    return _run(session_id, lambda: service.reset(session_id))


@router.post("/{session_id}/language", response_model=SessionResponse)
async def change_language(
    session_id: str,
    body: LanguageRequest,
    service: KioskSessionService = Depends(get_session_service),
) -> SessionResponse:
    """언어 전환"""
    return _run(
        session_id, lambda: service.change_language(session_id, body.language)
    )


@router.post("/{session_id}/speech", response_model=SessionResponse)
async def submit_speech(
    session_id: str,
    request: Request,
    service: KioskSessionService = Depends(get_session_service),
) -> SessionResponse:
    """녹음 데이터 (request body 그대로) → STT → 자유 발화"""
    audio = await request.body()
    return _run(session_id, lambda: service.submit_speech(session_id, audio))
