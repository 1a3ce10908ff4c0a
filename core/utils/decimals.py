"""
Decimal 유틸리티

금액은 float를 거치지 않고 문자열 ↔ Decimal로만 변환.
모든 금액/수량/가격은 소수점 AMOUNT_DECIMALS 자리 격자 위에 있어야 함.
곱셈/나눗셈 결과는 quantize로 격자에 맞춘 뒤 원장에 전달.
"""

from decimal import ROUND_DOWN, ROUND_HALF_EVEN, Context, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")

# 금액 최소 단위 (소수점 18자리)
AMOUNT_DECIMALS = 18
AMOUNT_QUANTUM = Decimal(1).scaleb(-AMOUNT_DECIMALS)

# 격자 계산용 컨텍스트 (28자리 기본 정밀도보다 넓게)
_WIDE = Context(prec=80)


def to_decimal(value: Any) -> Decimal:
    """값을 Decimal로 변환

    Args:
        value: Decimal, int, str (float는 str 경유)

    Returns:
        Decimal 값

    Raises:
        ValueError: 숫자로 해석할 수 없거나 유한하지 않은 경우
    """
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, TypeError) as e:
            raise ValueError(f"Not a decimal value: {value!r}") from e

    if not result.is_finite():
        raise ValueError(f"Not a finite decimal value: {value!r}")

    return result


def to_db(value: Decimal) -> str:
    """DB 저장용 문자열 (지수 표기 없이)"""
    return format(value, "f")


def from_db(value: Any) -> Decimal:
    """DB 값 → Decimal (NULL/빈 값은 0)"""
    if value is None or value == "":
        return ZERO
    return Decimal(str(value))


def scale_of(value: Decimal) -> int:
    """유효 소수 자릿수 (뒤쪽 0 제외)"""
    _, digits, exponent = value.as_tuple()
    assert isinstance(exponent, int)
    trailing = 0
    for digit in reversed(digits):
        if digit != 0:
            break
        trailing += 1
    return max(0, -(exponent + trailing))


def quantize_amount(value: Decimal, rounding: str = ROUND_HALF_EVEN) -> Decimal:
    """금액 격자(AMOUNT_QUANTUM)에 맞춤"""
    return value.quantize(AMOUNT_QUANTUM, rounding=rounding, context=_WIDE)


def mul_amount(a: Decimal, b: Decimal, rounding: str = ROUND_DOWN) -> Decimal:
    """a * b를 정확히 계산한 뒤 격자에 맞춤 (기본: 내림)"""
    return quantize_amount(_WIDE.multiply(a, b), rounding)


def add_amount(a: Decimal, b: Decimal) -> Decimal:
    """a + b (정밀도 손실 없이)"""
    return _WIDE.add(a, b)


def div_amount(a: Decimal, b: Decimal, rounding: str = ROUND_HALF_EVEN) -> Decimal:
    """a / b를 넓은 정밀도로 계산한 뒤 격자에 맞춤"""
    return quantize_amount(_WIDE.divide(a, b), rounding)


def positive_amount(value: Any, field: str = "amount") -> Decimal:
    """0보다 크고 격자 위에 있는 금액/수량/가격 검증

    Raises:
        InvalidAmount: 숫자가 아니거나 0 이하, 또는 소수점 18자리 초과
    """
    # core.errors는 core.utils를 참조하지 않으므로 순환 없음
    from core.errors import InvalidAmount

    try:
        result = to_decimal(value)
    except ValueError as e:
        raise InvalidAmount(f"Invalid {field}: {value!r}") from e
    if result <= 0:
        raise InvalidAmount(f"{field} must be positive: {result}")
    if scale_of(result) > AMOUNT_DECIMALS:
        raise InvalidAmount(
            f"{field} has more than {AMOUNT_DECIMALS} decimal places: {value!r}"
        )
    return result
