"""대화 엔진 Core 패키지

노드 그래프 상태 기계 + 대화 상태 모델 + 입력 검증 + 지연 실행 스케줄러.
"""

from src.core.flow.engine import DialogEngine, EngineConfig
from src.core.flow.errors import (
    DialogError,
    InputValidationError,
    InvalidOperationError,
)
from src.core.flow.messages import (
    NO_CHOICE_ID,
    YES_CHOICE_ID,
    format_choice_list,
    get_message,
    yes_no_choices,
    yes_no_utterance,
)
from src.core.flow.models import (
    ChatMessage,
    DialogSnapshot,
    DialogState,
    DialogStatus,
    PendingConfirmation,
    Role,
)
from src.core.flow.scheduler import (
    AsyncioScheduler,
    ManualScheduler,
    ScheduledCall,
    Scheduler,
)
from src.core.flow.validation import (
    format_field_value,
    is_amount_field,
    parse_amount,
    validate_input_value,
)

__all__ = [
    "DialogEngine",
    "EngineConfig",
    "DialogError",
    "InputValidationError",
    "InvalidOperationError",
    "NO_CHOICE_ID",
    "YES_CHOICE_ID",
    "format_choice_list",
    "get_message",
    "yes_no_choices",
    "yes_no_utterance",
    "ChatMessage",
    "DialogSnapshot",
    "DialogState",
    "DialogStatus",
    "PendingConfirmation",
    "Role",
    "AsyncioScheduler",
    "ManualScheduler",
    "ScheduledCall",
    "Scheduler",
    "format_field_value",
    "is_amount_field",
    "parse_amount",
    "validate_input_value",
]
