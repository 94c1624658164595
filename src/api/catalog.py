"""Node catalog API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from src.api.schemas import CatalogInfo, RefreshResponse, TranslateCatalogRequest
from src.core.logging import get_logger
from src.services.catalog_service import CatalogService
from src.services.translation_service import TranslationService

logger = get_logger(__name__)

router = APIRouter(prefix="/catalogs", tags=["catalogs"])


def get_catalog_service(request: Request) -> CatalogService:
    """CatalogService 인스턴스 반환 (의존성 주입)"""
    service: CatalogService = request.app.state.catalog_service
    return service


def get_translation_service(request: Request) -> TranslationService:
    """TranslationService 인스턴스 반환 (의존성 주입)"""
    service: TranslationService = request.app.state.translation_service
    return service


def _catalog_info(service: CatalogService) -> CatalogInfo:
    document = service.document
    return CatalogInfo(
        version=document.version,
        store_name=document.store_name,
        languages=document.languages,
        node_counts={lang: len(c) for lang, c in document.catalogs.items()},
    )


@router.get("", response_model=CatalogInfo)
async def get_catalogs(
    service: CatalogService = Depends(get_catalog_service),
) -> CatalogInfo:
    """로드된 flow 요약"""
    return _catalog_info(service)


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_catalogs(
    service: CatalogService = Depends(get_catalog_service),
) -> RefreshResponse:
    """flow 파일 즉시 재확인 (폴링 주기 대기 없이)"""
    changed = service.refresh(force=True)
    return RefreshResponse(changed=changed, version=service.document.version)


@router.post("/translate", response_model=CatalogInfo, status_code=201)
async def translate_catalog(
    body: TranslateCatalogRequest,
    service: CatalogService = Depends(get_catalog_service),
    translation: TranslationService = Depends(get_translation_service),
) -> CatalogInfo:
    """기존 언어 카탈로그를 번역해 새 언어로 추가"""
    if not service.has_language(body.source_language):
        raise HTTPException(
            status_code=404,
            detail=f"Unknown source language: {body.source_language}",
        )
    if service.has_language(body.target_language):
        raise HTTPException(
            status_code=409,
            detail=f"Language already exists: {body.target_language}",
        )

    source = service.get_catalog(body.source_language)
    # 번역은 노드마다 외부 호출이므로 스레드 풀에서. 엔진 교체는 루프 스레드에서.
    catalog = await run_in_threadpool(
        translation.translate_catalog, source, body.target_language
    )
    service.add_catalog(catalog)
    logger.info(
        "Catalog translated via API: %s -> %s",
        body.source_language,
        body.target_language,
    )
    return _catalog_info(service)
