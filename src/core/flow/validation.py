"""입력 노드 값 검증

- 공백 제거 후 비어 있으면 실패
- 금액 필드(field 또는 노드 ID에 "amount")는 양의 정수여야 한다
  (쉼표, 공백, 통화 기호, 전각 숫자 허용)
"""

import re
from typing import Optional

from src.core.catalog.models import InputNode
from src.core.flow.errors import InputValidationError
from src.core.flow.messages import get_message
from src.core.matching.normalize import normalize_text

AMOUNT_MARKER = "amount"

_AMOUNT_NOISE_RE = re.compile(r"[,\s¥￥円$]")
_DIGITS_RE = re.compile(r"\d+")

# 이보다 긴 숫자열은 정수 변환 없이 포화값으로 본다 (어떤 한도보다도 큼)
MAX_AMOUNT_DIGITS = 18
AMOUNT_SATURATION = 10**MAX_AMOUNT_DIGITS


def is_amount_field(field: Optional[str], node_id: str = "") -> bool:
    return AMOUNT_MARKER in (field or "").lower() or AMOUNT_MARKER in node_id.lower()


def parse_amount(value: str) -> Optional[int]:
    """금액 문자열 → 정수. 숫자 외 문자가 남으면 None.

    자릿수가 MAX_AMOUNT_DIGITS를 넘으면 AMOUNT_SATURATION을 반환한다.
    """
    cleaned = _AMOUNT_NOISE_RE.sub("", normalize_text(value))
    if not _DIGITS_RE.fullmatch(cleaned):
        return None
    if len(cleaned.lstrip("0")) > MAX_AMOUNT_DIGITS:
        return AMOUNT_SATURATION
    return int(cleaned)


def validate_input_value(node: InputNode, value: str, language: str) -> Optional[int]:
    """검증 통과 시 금액 필드면 파싱된 금액, 아니면 None 반환.

    Raises:
        InputValidationError: 빈 값, 숫자가 아니거나 0 이하인 금액
    """
    field_key = node.field_key
    if not value or not value.strip():
        raise InputValidationError(field_key, get_message(language, "input_required"))

    if not is_amount_field(node.field, node.id):
        return None

    amount = parse_amount(value)
    if amount is None or amount <= 0:
        raise InputValidationError(field_key, get_message(language, "invalid_amount"))
    return amount


def format_field_value(field: Optional[str], value: str) -> str:
    """확인 화면 표시용. 금액은 ¥12,345 형식."""
    if value and is_amount_field(field):
        amount = parse_amount(value)
        if amount is not None:
            return f"¥{amount:,}"
    return value
