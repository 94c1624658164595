"""발화/키워드 정규화

비교 전 발화와 모든 키워드에 동일하게 적용한다.
- 소문자화, 앞뒤 공백 제거
- 가타카나 → 히라가나
- 전각 영숫자 → 반각
- 연속 공백 → 공백 1개
"""

import re

_KATAKANA_RE = re.compile("[ァ-ヶ]")
_FULLWIDTH_ALNUM_RE = re.compile("[Ａ-Ｚａ-ｚ０-９]")
_WHITESPACE_RE = re.compile(r"\s+")

# 가타카나와 히라가나 블록 간격
_KANA_OFFSET = 0x60
# 전각 ASCII 블록 간격
_FULLWIDTH_OFFSET = 0xFEE0

# 숫자(수량) 키워드 판정: "3", "三", "10", "3番" 등
NUMBER_KEYWORD_RE = re.compile("^[0-9一二三四五六七八九十]+(番|ばん)?$")


def normalize_text(text: str) -> str:
    text = text.lower().strip()
    text = _KATAKANA_RE.sub(lambda m: chr(ord(m.group()) - _KANA_OFFSET), text)
    text = _FULLWIDTH_ALNUM_RE.sub(
        lambda m: chr(ord(m.group()) - _FULLWIDTH_OFFSET), text
    )
    return _WHITESPACE_RE.sub(" ", text)


def is_number_keyword(keyword: str) -> bool:
    """정규화 후 숫자/번호 형태 키워드인지"""
    return bool(NUMBER_KEYWORD_RE.match(normalize_text(keyword)))
