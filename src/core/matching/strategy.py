"""신뢰도 → 응답 티어 결정

- high 이상: direct (즉시 전이)
- [medium, high): confirmation (최상위 후보 예/아니오 확인)
- (0, medium): choices (상위 3개 후보 제시)
- 0 또는 후보 없음: fallback (재질문)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.core.matching.matcher import MatchingConfig, MatchResult

# choices 티어에서 제시하는 후보 수
ALTERNATIVES_LIMIT = 3


class ResponseTier(str, Enum):
    DIRECT = "direct"
    CONFIRMATION = "confirmation"
    CHOICES = "choices"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ResponseDecision:
    tier: ResponseTier
    match: Optional[MatchResult] = None


class ResponseStrategy:
    """임계값 기반 응답 전략"""

    def __init__(self, high: float = 0.8, medium: float = 0.5) -> None:
        # 검증은 MatchingConfig에 위임
        MatchingConfig(high_confidence_threshold=high, medium_confidence_threshold=medium)
        self.high = high
        self.medium = medium

    @classmethod
    def from_config(cls, config: MatchingConfig) -> "ResponseStrategy":
        return cls(
            high=config.high_confidence_threshold,
            medium=config.medium_confidence_threshold,
        )

    def tier_for(self, confidence: float) -> ResponseTier:
        if confidence >= self.high:
            return ResponseTier.DIRECT
        if confidence >= self.medium:
            return ResponseTier.CONFIRMATION
        if confidence > 0:
            return ResponseTier.CHOICES
        return ResponseTier.FALLBACK

    def determine(self, match: Optional[MatchResult]) -> ResponseDecision:
        if match is None:
            return ResponseDecision(tier=ResponseTier.FALLBACK)
        tier = self.tier_for(match.confidence)
        if tier is ResponseTier.FALLBACK:
            return ResponseDecision(tier=tier)
        return ResponseDecision(tier=tier, match=match)
