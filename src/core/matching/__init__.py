"""의도 매칭 Core 패키지

발화 → 선택지 신뢰도 점수화 + 신뢰도 티어 응답 전략. 순수 Python, 부작용 없음.
"""

from src.core.matching.matcher import (
    ConfidenceLevel,
    IntentMatcher,
    MatchingConfig,
    MatchResult,
    MatchType,
)
from src.core.matching.normalize import is_number_keyword, normalize_text
from src.core.matching.similarity import (
    fuzzy_score,
    jaccard_similarity,
    levenshtein_distance,
)
from src.core.matching.strategy import (
    ALTERNATIVES_LIMIT,
    ResponseDecision,
    ResponseStrategy,
    ResponseTier,
)
from src.core.matching.variants import voice_variations

__all__ = [
    "ConfidenceLevel",
    "IntentMatcher",
    "MatchingConfig",
    "MatchResult",
    "MatchType",
    "is_number_keyword",
    "normalize_text",
    "fuzzy_score",
    "jaccard_similarity",
    "levenshtein_distance",
    "ALTERNATIVES_LIMIT",
    "ResponseDecision",
    "ResponseStrategy",
    "ResponseTier",
    "voice_variations",
]
