"""의도 매처 - 발화 1개를 선택지 목록에 대해 점수화

신호별 후보 신뢰도 중 최댓값을 취한다 (합산하지 않음).
1. 정규화 후 완전 일치 → 1.0 (즉시 반환)
2. 선택지 텍스트와 양방향 부분 포함 → 0.9
3. 키워드 점수 (숫자 키워드 가중, 음성 오인식 변형 포함)
4. 제외 키워드가 발화에 있으면 여기까지의 신뢰도에 0.1을 곱한다
5. 편집 거리 유사도 (신뢰도 < 0.7일 때만)
6. 문자 집합 Jaccard (신뢰도 < 0.5일 때만)

순수 함수이며 예외를 던지지 않는다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from src.core.catalog.models import Choice
from src.core.matching.normalize import is_number_keyword, normalize_text
from src.core.matching.similarity import fuzzy_score, jaccard_similarity
from src.core.matching.variants import voice_variations

logger = logging.getLogger(__name__)

# --- 신호별 신뢰도 ---
EXACT_CONFIDENCE = 1.0
PARTIAL_CONFIDENCE = 0.9
EXCLUDE_PENALTY = 0.1
FUZZY_GATE = 0.7
SIMILARITY_GATE = 0.5

# --- 키워드 점수 ---
NUMBER_EXACT_SCORE = 15
NUMBER_PARTIAL_SCORE = 12
KEYWORD_EXACT_SCORE = 10
LONG_KEYWORD_SCORE = 7
SHORT_KEYWORD_SCORE = 3
LONG_KEYWORD_MIN_LENGTH = 3
NUMBER_VARIANT_SCORE = 10
VARIANT_SCORE = 5

# 정규화 분모: 숫자 키워드가 하나라도 있으면 15점 만점
NUMBER_MAX_SCORE = 15
KEYWORD_MAX_SCORE = 10


class MatchType(str, Enum):
    """최종 신뢰도를 만든 신호"""

    EXACT = "exact"
    KEYWORD = "keyword"
    PARTIAL = "partial"
    SIMILARITY = "similarity"


class ConfidenceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class MatchResult:
    """선택지 1개에 대한 점수화 결과"""

    choice: Choice
    confidence: float
    matched_keywords: tuple[str, ...] = ()
    match_type: MatchType = MatchType.PARTIAL


@dataclass(frozen=True)
class MatchingConfig:
    """매칭 임계값 및 보조 신호 토글"""

    high_confidence_threshold: float = 0.8  # 이상이면 즉시 전이
    medium_confidence_threshold: float = 0.5  # 이상이면 확인 질문
    enable_fuzzy_matching: bool = True
    enable_similarity_matching: bool = True

    def __post_init__(self) -> None:
        if not (
            0.0 <= self.medium_confidence_threshold
            <= self.high_confidence_threshold
            <= 1.0
        ):
            raise ValueError(
                "Thresholds must satisfy 0 <= medium <= high <= 1 "
                f"(medium={self.medium_confidence_threshold}, "
                f"high={self.high_confidence_threshold})"
            )


class IntentMatcher:
    """다중 신호 퍼지/키워드 매처

    사용 패턴:
        matcher = IntentMatcher()
        best = matcher.get_best_match("お金を預けたい", node.choices)
    """

    def __init__(self, config: Optional[MatchingConfig] = None) -> None:
        self.config = config or MatchingConfig()

    # === 공개 API ===

    def find_best_matches(
        self, utterance: str, choices: Sequence[Choice]
    ) -> list[MatchResult]:
        """신뢰도 > 0인 결과를 내림차순 정렬. 동점은 선택지 선언 순서 유지."""
        results = [self.score(utterance, choice) for choice in choices]
        ranked = [r for r in results if r.confidence > 0]
        ranked.sort(key=lambda r: r.confidence, reverse=True)
        return ranked

    def get_best_match(
        self, utterance: str, choices: Sequence[Choice]
    ) -> Optional[MatchResult]:
        matches = self.find_best_matches(utterance, choices)
        return matches[0] if matches else None

    def confidence_level(self, confidence: float) -> ConfidenceLevel:
        if confidence >= self.config.high_confidence_threshold:
            return ConfidenceLevel.HIGH
        if confidence >= self.config.medium_confidence_threshold:
            return ConfidenceLevel.MEDIUM
        return ConfidenceLevel.LOW

    def score(self, utterance: str, choice: Choice) -> MatchResult:
        text = normalize_text(utterance)
        choice_text = normalize_text(choice.text)

        # 빈 발화는 모든 텍스트에 "포함"되므로 별도 처리
        if not text:
            return MatchResult(choice=choice, confidence=0.0)

        if text == choice_text:
            return MatchResult(
                choice=choice,
                confidence=EXACT_CONFIDENCE,
                matched_keywords=(choice.text,),
                match_type=MatchType.EXACT,
            )

        confidence = 0.0
        matched: tuple[str, ...] = ()
        match_type = MatchType.PARTIAL

        if choice_text and (choice_text in text or text in choice_text):
            confidence = PARTIAL_CONFIDENCE
            matched = (choice.text,)

        if choice.keywords:
            keyword_confidence, keyword_matched = _score_keywords(
                text, choice.keywords
            )
            if keyword_confidence > confidence:
                confidence = keyword_confidence
                matched = tuple(keyword_matched)
                match_type = MatchType.KEYWORD

        if _has_excluded_keyword(text, choice.exclude_keywords):
            logger.debug(
                "Exclude keyword hit for choice '%s', damping %.3f",
                choice.id,
                confidence,
            )
            confidence *= EXCLUDE_PENALTY

        # 감쇠된 값으로 보조 신호 관문을 판정한다 (유사도가 다시 끌어올릴 수 있음)
        if self.config.enable_fuzzy_matching and confidence < FUZZY_GATE:
            fuzzy = fuzzy_score(text, choice_text)
            if fuzzy > confidence:
                confidence = fuzzy
                match_type = MatchType.SIMILARITY

        if self.config.enable_similarity_matching and confidence < SIMILARITY_GATE:
            similarity = jaccard_similarity(text, choice_text)
            if similarity > confidence:
                confidence = similarity
                match_type = MatchType.SIMILARITY

        return MatchResult(
            choice=choice,
            confidence=max(0.0, min(1.0, confidence)),
            matched_keywords=matched,
            match_type=match_type,
        )


def _score_keywords(text: str, keywords: Sequence[str]) -> tuple[float, list[str]]:
    """키워드 포함 점수 → 0~1 신뢰도"""
    matched: list[str] = []
    total = 0
    has_number = False

    for keyword in keywords:
        normalized = normalize_text(keyword)
        if not normalized:
            continue
        number = is_number_keyword(keyword)
        has_number = has_number or number

        if normalized in text:
            matched.append(keyword)
            if number:
                total += NUMBER_EXACT_SCORE if text == normalized else NUMBER_PARTIAL_SCORE
            elif text == normalized:
                total += KEYWORD_EXACT_SCORE
            elif len(normalized) >= LONG_KEYWORD_MIN_LENGTH:
                total += LONG_KEYWORD_SCORE
            else:
                total += SHORT_KEYWORD_SCORE
            continue

        # 오인식 변형은 키워드당 1회만 인정
        for variation in voice_variations(normalized):
            if variation in text:
                matched.append(keyword)
                total += NUMBER_VARIANT_SCORE if number else VARIANT_SCORE
                break

    max_score = NUMBER_MAX_SCORE if has_number else KEYWORD_MAX_SCORE
    return min(total / max_score, 1.0), matched


def _has_excluded_keyword(text: str, exclude_keywords: Sequence[str]) -> bool:
    for keyword in exclude_keywords:
        normalized = normalize_text(keyword)
        if normalized and normalized in text:
            return True
    return False
