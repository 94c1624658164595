"""이벤트 유형 상수

DialogEngine / CatalogService가 발행한다.
"""


class DialogEventTypes:
    """이벤트 유형 문자열 상수"""

    # 노드 전이
    NODE_ENTERED = "node_entered"
    DIALOG_IDLE = "dialog_idle"
    DIALOG_RESET = "dialog_reset"

    # 이력
    BOT_MESSAGE_APPENDED = "bot_message_appended"
    USER_MESSAGE_APPENDED = "user_message_appended"

    # 입력/매칭
    FIELD_STORED = "field_stored"
    MATCH_RESOLVED = "match_resolved"
    STAFF_ASSISTANCE_ROUTED = "staff_assistance_routed"

    # 카탈로그
    CATALOG_SWAPPED = "catalog_swapped"
