"""문자열 유사도 (편집 거리, 문자 집합 Jaccard)"""

# 범용 유사도로 싼 고득점이 나오지 않도록 빼는 값
FUZZY_BIAS = 0.3


def levenshtein_distance(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + cost,  # substitution
                )
            )
        previous = current
    return previous[-1]


def fuzzy_score(a: str, b: str) -> float:
    """1 - 정규화 편집 거리 - FUZZY_BIAS, 0 하한"""
    max_length = max(len(a), len(b))
    if max_length == 0:
        return 1.0
    similarity = 1 - levenshtein_distance(a, b) / max_length
    return max(0.0, similarity - FUZZY_BIAS)


def jaccard_similarity(a: str, b: str) -> float:
    """문자 집합 Jaccard 계수"""
    set_a, set_b = set(a), set(b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)
