"""
도메인 예외 정의

모든 예외는 ExchangeError를 상속하고 고정된 code를 가짐.
Web 계층은 code를 그대로 응답의 "error" 필드로 사용.
"""


class ExchangeError(Exception):
    """거래소 도메인 예외 기본 클래스"""

    code: str = "ExchangeError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class InsufficientFunds(ExchangeError):
    """사용 가능 잔고 부족"""

    code = "InsufficientFunds"


class InvalidAmount(ExchangeError):
    """금액/수량/가격이 유효하지 않음"""

    code = "InvalidAmount"


class InvalidPair(ExchangeError):
    """존재하지 않거나 비활성화된 거래쌍"""

    code = "InvalidPair"


class MissingPrice(ExchangeError):
    """지정가 주문에 가격 누락"""

    code = "MissingPrice"


class NotFound(ExchangeError):
    """대상 없음"""

    code = "NotFound"


class AlreadyFinalized(ExchangeError):
    """이미 처리 완료된 입출금"""

    code = "AlreadyFinalized"


class AlreadyTerminal(ExchangeError):
    """이미 종료 상태인 주문"""

    code = "AlreadyTerminal"


class Overfill(ExchangeError):
    """잔여 수량 초과 체결"""

    code = "Overfill"


class InvariantViolation(ExchangeError):
    """내부 일관성 위반

    정상 입력으로는 발생하지 않아야 함. 발생 시 버그.
    """

    code = "InvariantViolation"


class StorageUnavailable(ExchangeError):
    """저장소 접근 실패 (타임아웃, 잠금 등)"""

    code = "StorageUnavailable"
