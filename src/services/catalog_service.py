"""노드 카탈로그 Provider Service - flow JSON 로드, 변경 감지, 엔진 핫스왑

엔진은 카탈로그를 주입받은 불변 스냅샷으로만 다룬다. 파일이 바뀌면 이 서비스가
등록된 엔진마다 swap_catalog를 호출하고, 엔진이 현재 노드를 재검증한다.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from src.core.catalog.loader import CatalogFormatError, load_flow_file
from src.core.catalog.models import FlowDocument, NodeCatalog
from src.core.flow.engine import DialogEngine

logger = logging.getLogger(__name__)


class CatalogService:
    """flow 파일 1개에 대한 카탈로그 공급자"""

    def __init__(self, flow_path: Union[str, Path]) -> None:
        self._path = Path(flow_path)
        self._document: Optional[FlowDocument] = None
        self._mtime_ns: Optional[int] = None
        # 번역으로 추가된 언어 (파일에 없음, 갱신 후에도 유지)
        self._extra: dict[str, NodeCatalog] = {}
        self._engines: list[DialogEngine] = []

    # === 조회 ===

    @property
    def document(self) -> FlowDocument:
        if self._document is None:
            raise RuntimeError("Flow document not loaded")
        return self._document

    @property
    def is_loaded(self) -> bool:
        return self._document is not None

    @property
    def languages(self) -> list[str]:
        return self.document.languages

    def get_catalog(self, language: str) -> NodeCatalog:
        """Raises: KeyError (미지원 언어)"""
        return self.document.get_catalog(language)

    def has_language(self, language: str) -> bool:
        return self._document is not None and language in self._document.catalogs

    # === 로드 / 갱신 ===

    def load(self) -> FlowDocument:
        """flow 파일 강제 로드. 실패 시 예외 전파 (기동 시 사용)."""
        document = load_flow_file(self._path)
        self._mtime_ns = self._path.stat().st_mtime_ns
        self._document = self._merge_extra(document)
        logger.info(
            "Flow loaded: %s (version=%s, languages=%s)",
            self._path,
            document.version,
            ",".join(self._document.languages),
        )
        return self._document

    def refresh(self, force: bool = False) -> bool:
        """파일이 바뀌었으면 다시 읽고 등록된 엔진에 교체 반영.

        Returns:
            카탈로그가 실제로 바뀌었으면 True.
            읽기/파싱 실패 시 기존 카탈로그를 유지하고 False.
        """
        try:
            mtime_ns = self._path.stat().st_mtime_ns
        except OSError as e:
            logger.error("Flow file not accessible: %s (%s)", self._path, e)
            return False

        if not force and self._document is not None and mtime_ns == self._mtime_ns:
            return False

        try:
            document = self._merge_extra(load_flow_file(self._path))
        except (OSError, CatalogFormatError) as e:
            logger.error("Flow reload failed, keeping previous catalog: %s", e)
            return False

        self._mtime_ns = mtime_ns
        if document == self._document:
            logger.debug("Flow file touched but content unchanged")
            return False

        self._document = document
        logger.info("Flow catalog changed (version=%s)", document.version)
        self._push_to_engines()
        return True

    def add_catalog(self, catalog: NodeCatalog) -> None:
        """파일에 없는 언어의 카탈로그 추가 (번역 결과 등)"""
        self._extra[catalog.language] = catalog
        document = self.document
        catalogs = dict(document.catalogs)
        catalogs[catalog.language] = catalog
        self._document = FlowDocument(
            version=document.version,
            store_name=document.store_name,
            catalogs=catalogs,
        )
        logger.info("Catalog added for language '%s'", catalog.language)
        self._push_to_engines()

    async def poll(self, interval_seconds: float) -> None:
        """interval마다 refresh. 취소될 때까지 실행.

        한 번의 갱신 실패로 폴링이 멈추지 않도록 에러는 로그만 남긴다.
        """
        logger.info("Catalog polling every %.1fs: %s", interval_seconds, self._path)
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                self.refresh()
            except Exception:
                logger.exception("Catalog refresh failed: %s", self._path)

    # === 엔진 등록 ===

    def register(self, engine: DialogEngine) -> None:
        if engine not in self._engines:
            self._engines.append(engine)

    def unregister(self, engine: DialogEngine) -> None:
        if engine in self._engines:
            self._engines.remove(engine)

    @property
    def engine_count(self) -> int:
        return len(self._engines)

    # === 내부 ===

    def _merge_extra(self, document: FlowDocument) -> FlowDocument:
        extra = {
            lang: catalog
            for lang, catalog in self._extra.items()
            if lang not in document.catalogs
        }
        if not extra:
            return document
        catalogs = dict(document.catalogs)
        catalogs.update(extra)
        return FlowDocument(
            version=document.version,
            store_name=document.store_name,
            catalogs=catalogs,
        )

    def _push_to_engines(self) -> None:
        for engine in list(self._engines):
            catalog = self.document.catalogs.get(engine.language)
            if catalog is None:
                logger.warning(
                    "Language '%s' removed from flow, session %s keeps old catalog",
                    engine.language,
                    engine.session_id,
                )
                continue
            if catalog != engine.catalog:
                engine.swap_catalog(catalog)
