"""음성 인식 오인식 변형 테이블

키워드(정규화 후)별로 STT가 자주 내놓는 대체 표기.
"""

# 숫자 키워드의 읽기 변형
NUMBER_VARIANTS: dict[str, tuple[str, ...]] = {
    "1": ("いち", "ひとつ", "わん", "one"),
    "2": ("に", "ふたつ", "つー", "two"),
    "3": ("さん", "みっつ", "すりー", "three"),
    "4": ("よん", "し", "よっつ", "ふぉー", "four"),
    "5": ("ご", "いつつ", "ふぁいぶ", "five"),
    "6": ("ろく", "むっつ", "しっくす", "six"),
    "7": ("なな", "しち", "ななつ", "せぶん", "seven"),
    "8": ("はち", "やっつ", "えいと", "eight"),
    "9": ("きゅう", "く", "ここのつ", "ないん", "nine"),
}

# 자주 발생하는 오인식 패턴
COMMON_MISRECOGNITIONS: dict[str, tuple[str, ...]] = {
    "よにゅう": ("にゅうきん", "よきん"),
    "ひきだし": ("ひきだ", "だし"),
    "ふりこみ": ("ふりく", "りこみ"),
    "みずほ": ("みず", "ほう"),
    "mitsubishi": ("みつび", "つびし"),
}


def voice_variations(normalized_keyword: str) -> list[str]:
    """정규화된 키워드의 오인식 변형 목록"""
    variations: list[str] = []
    variations.extend(NUMBER_VARIANTS.get(normalized_keyword, ()))
    variations.extend(COMMON_MISRECOGNITIONS.get(normalized_keyword, ()))
    return variations
