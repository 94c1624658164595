"""언어별 고정 봇 문구 + 예/아니오 판정용 선택지

카탈로그에 없는 문구(확인 질문, 후보 제시, 재질문, 사과)만 여기 둔다.
지원하지 않는 언어는 영어 문구를 쓴다.
"""

import re

from src.core.catalog.models import Choice
from src.core.matching.normalize import normalize_text

FALLBACK_LANGUAGE = "en"

YES_CHOICE_ID = "yes"
NO_CHOICE_ID = "no"

MESSAGES: dict[str, dict[str, str]] = {
    "ja": {
        "confirm_choice": "「{choice}」についてのご質問でしょうか？",
        "choice_list": "以下のいずれかでしょうか？\n\n{choices}\n\n該当するものをお選びください。",
        "choice_bullet": "・{text}",
        "fallback": "すみません、よく聞き取れませんでした。選択肢からお選びいただくか、もう一度お聞かせください。",
        "apology": "失礼いたしました。改めてご用件をお聞かせください。",
        "yes": "はい",
        "no": "いいえ",
        "input_required": "入力してください",
        "invalid_amount": "正しい金額を入力してください",
    },
    "en": {
        "confirm_choice": 'Are you asking about "{choice}"?',
        "choice_list": "Did you mean one of these?\n\n{choices}\n\nPlease select the appropriate option.",
        "choice_bullet": "・{text}",
        "fallback": "Sorry, I didn't understand. Please select from the options or try again.",
        "apology": "I apologize. Please let me know how I can help you.",
        "yes": "Yes",
        "no": "No",
        "input_required": "Please enter a value",
        "invalid_amount": "Please enter a valid amount",
    },
}

# 확인 대기 중 자유 발화를 예/아니오로 분류할 때 쓰는 키워드
YES_NO_KEYWORDS: dict[str, dict[str, tuple[str, ...]]] = {
    "ja": {
        "yes": ("はい", "ええ", "うん", "そうです", "お願い", "おねがい", "yes"),
        "no": ("いいえ", "いや", "違う", "ちがう", "ちがいます", "no"),
    },
    "en": {
        "yes": ("yes", "yeah", "yep", "sure", "correct", "right", "please"),
        "no": ("no", "nope", "wrong", "not", "don't", "cancel"),
    },
}

# 공백으로 단어를 나누는 언어. 예/아니오 판정을 단어 단위로 한다 ("know" 안의 "no" 무시).
WORD_SEPARATED_LANGUAGES = frozenset({"en"})

_WORD_RE = re.compile(r"[\w']+")


def get_message(language: str, key: str, **kwargs: str) -> str:
    table = MESSAGES.get(language, MESSAGES[FALLBACK_LANGUAGE])
    template = table.get(key, MESSAGES[FALLBACK_LANGUAGE][key])
    return template.format(**kwargs) if kwargs else template


def format_choice_list(language: str, texts: list[str]) -> str:
    bullets = "\n".join(get_message(language, "choice_bullet", text=t) for t in texts)
    return get_message(language, "choice_list", choices=bullets)


def yes_no_choices(language: str) -> tuple[Choice, Choice]:
    """예/아니오 판정용 가상 선택지. next는 쓰이지 않는다."""
    keywords = YES_NO_KEYWORDS.get(language, YES_NO_KEYWORDS[FALLBACK_LANGUAGE])
    yes = Choice(
        id=YES_CHOICE_ID,
        text=get_message(language, "yes"),
        next="",
        keywords=keywords["yes"],
        exclude_keywords=keywords["no"],
    )
    no = Choice(
        id=NO_CHOICE_ID,
        text=get_message(language, "no"),
        next="",
        keywords=keywords["no"],
    )
    return yes, no


def yes_no_utterance(utterance: str, language: str) -> str:
    """예/아니오 판정에 넘길 발화.

    단어 구분 언어(와 미지원 언어)는 예/아니오 키워드와 정확히 같은 단어만 남긴다.
    남는 단어가 없으면 빈 문자열이 되어 어느 쪽과도 매칭되지 않는다.
    """
    if language in YES_NO_KEYWORDS and language not in WORD_SEPARATED_LANGUAGES:
        return utterance
    keywords = YES_NO_KEYWORDS.get(language, YES_NO_KEYWORDS[FALLBACK_LANGUAGE])
    vocabulary = {normalize_text(k) for k in keywords["yes"] + keywords["no"]}
    words = _WORD_RE.findall(normalize_text(utterance))
    return " ".join(w for w in words if w in vocabulary)
