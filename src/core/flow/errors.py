"""대화 엔진 예외

- InputValidationError: 입력값 검증 실패. 전이를 막고 상태를 변경하지 않는다.
- InvalidOperationError: 현재 노드 종류에서 허용되지 않는 조작.

한도 초과(직원 호출 노드 분기)와 dangling 참조(IDLE)는 예외가 아니다.
"""


class DialogError(Exception):
    """대화 엔진 예외 기반 클래스"""


class InputValidationError(DialogError):
    """입력 필드 단위 검증 실패"""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class InvalidOperationError(DialogError):
    """현재 상태에서 수행할 수 없는 조작"""
