"""
Numerical Safeguards — целочисленная fixed-point арифметика

Все суммы, цены и ставки в аллокаторе — целые числа (fixed-point).
Модуль обеспечивает детерминированную целочисленную арифметику:
- Деление с явным направлением округления (floor / ceil)
- mul_div без промежуточного float
- Валидация целочисленных параметров

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Float никогда не участвует в денежной арифметике
2. Направление округления всегда задано явно
3. Деление на ноль никогда не происходит молча (ValueError)
4. Все операции детерминированы и воспроизводимы
"""

from typing import Final

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Полная стоимость unit price / 100% в basis points
SCALE: Final[int] = 10_000

# Секунд в году (365 дней)
SECONDS_PER_YEAR: Final[int] = 365 * 24 * 60 * 60


# =============================================================================
# ДЕЛЕНИЕ С ЯВНЫМ ОКРУГЛЕНИЕМ
# =============================================================================


def ceil_div(numerator: int, denominator: int) -> int:
    """
    Целочисленное деление с округлением вверх.

    Args:
        numerator: Делимое (>= 0)
        denominator: Делитель (> 0)

    Returns:
        ceil(numerator / denominator)

    Raises:
        ValueError: Если denominator <= 0 или numerator < 0

    Examples:
        >>> ceil_div(10, 3)
        4
        >>> ceil_div(9, 3)
        3
        >>> ceil_div(0, 7)
        0
    """
    if denominator <= 0:
        raise ValueError(f"denominator must be positive, got {denominator}")
    if numerator < 0:
        raise ValueError(f"numerator must be non-negative, got {numerator}")

    return -(-numerator // denominator)


def mul_div(a: int, b: int, denominator: int) -> int:
    """
    floor(a * b / denominator) без потери точности.

    Examples:
        >>> mul_div(1_000_000, 4, 10)
        400000
        >>> mul_div(7, 3, 2)
        10
    """
    if denominator <= 0:
        raise ValueError(f"denominator must be positive, got {denominator}")

    return (a * b) // denominator


def mul_div_up(a: int, b: int, denominator: int) -> int:
    """
    ceil(a * b / denominator) без потери точности.

    Используется там, где округление должно быть консервативным
    (никогда не завышать освобождённые средства).

    Examples:
        >>> mul_div_up(7, 3, 2)
        11
        >>> mul_div_up(6, 3, 2)
        9
    """
    return ceil_div(a * b, denominator)


# =============================================================================
# УТИЛИТЫ
# =============================================================================


def clamp(
    value: int,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    """
    Ограничение значения в заданном диапазоне.

    Examples:
        >>> clamp(12_000, 0, SCALE)
        10000
        >>> clamp(-5, 0)
        0
    """
    result = value

    if min_value is not None:
        result = max(result, min_value)

    if max_value is not None:
        result = min(result, max_value)

    return result


# =============================================================================
# ВАЛИДАЦИЯ И ПРОВЕРКИ
# =============================================================================


def _require_int(value: int, name: str) -> None:
    # bool является подклассом int, но как сумма не допускается
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")


def validate_positive(value: int, name: str) -> None:
    """
    Валидация, что целое значение строго положительное.

    Args:
        value: Проверяемое значение
        name: Имя параметра (для сообщения об ошибке)

    Raises:
        ValueError: Если value <= 0 или не целое
    """
    _require_int(value, name)

    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")


def validate_non_negative(value: int, name: str) -> None:
    """
    Валидация, что целое значение неотрицательное.

    Args:
        value: Проверяемое значение
        name: Имя параметра (для сообщения об ошибке)

    Raises:
        ValueError: Если value < 0 или не целое
    """
    _require_int(value, name)

    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def validate_in_range(
    value: int,
    name: str,
    min_value: int | None = None,
    max_value: int | None = None,
) -> None:
    """
    Валидация, что целое значение в заданном диапазоне (включительно).

    Raises:
        ValueError: Если value вне диапазона или не целое
    """
    _require_int(value, name)

    if min_value is not None and value < min_value:
        raise ValueError(f"{name} must be >= {min_value}, got {value}")

    if max_value is not None and value > max_value:
        raise ValueError(f"{name} must be <= {max_value}, got {value}")
