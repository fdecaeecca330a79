"""
RatePrice — конверсия годовой ставки (APR) и unit price

Unit price — дисконт-фактор в fixed-point базисе SCALE (10_000 = 100%):
полная стоимость без дисконта равна SCALE, меньшая цена означает большую
доходность для кредитора.

ФОРМУЛЫ:
    rate_term = ceil(rate_bps * ttm / SECONDS_PER_YEAR)
    price     = min(SCALE * SCALE // (SCALE + rate_term), SCALE)

    rate      = ((SCALE * SCALE // price) - SCALE) * SECONDS_PER_YEAR // ttm

где ttm = maturity - now (секунды).

Округление rate_term вверх смещает цену вниз — консервативно для кредитора.
Round-trip price -> rate -> price отличается не более чем на 1 tick.
"""

from src.core.math.numerical_safeguards import (
    SCALE,
    SECONDS_PER_YEAR,
    ceil_div,
    clamp,
    validate_in_range,
    validate_non_negative,
)


def time_to_maturity(maturity: int, now: int) -> int:
    """
    Время до погашения в секундах (0, если maturity уже наступила).

    Args:
        maturity: Timestamp погашения (Unix seconds)
        now: Текущее время (Unix seconds)

    Returns:
        max(maturity - now, 0)
    """
    return max(maturity - now, 0)


def rate_to_price(rate_bps: int, maturity: int, now: int) -> int:
    """
    Конверсия: годовая ставка (bps) → unit price.

    Args:
        rate_bps: Годовая ставка в basis points (>= 0)
        maturity: Timestamp погашения
        now: Текущее время

    Returns:
        Unit price в [0, SCALE]; SCALE если maturity уже прошла

    Raises:
        ValueError: Если rate_bps отрицательная

    Examples:
        >>> rate_to_price(0, 2_000_000_000, 1_700_000_000)
        10000
        >>> rate_to_price(500, 1_000, 2_000)  # maturity в прошлом
        10000
    """
    validate_non_negative(rate_bps, "rate_bps")

    ttm = time_to_maturity(maturity, now)
    if ttm == 0:
        return SCALE

    # Округление вверх: консервативная (меньшая) цена для кредитора
    rate_term = ceil_div(rate_bps * ttm, SECONDS_PER_YEAR)
    price = (SCALE * SCALE) // (SCALE + rate_term)

    return clamp(price, 0, SCALE)


def price_to_rate(unit_price: int, maturity: int, now: int) -> int:
    """
    Конверсия: unit price → годовая ставка (bps).

    Обратная к rate_to_price, деление с округлением вниз.

    Args:
        unit_price: Unit price в [0, SCALE]
        maturity: Timestamp погашения
        now: Текущее время

    Returns:
        Годовая ставка в bps; 0 если price == 0 или maturity прошла

    Raises:
        ValueError: Если unit_price вне [0, SCALE]
    """
    validate_in_range(unit_price, "unit_price", 0, SCALE)

    ttm = time_to_maturity(maturity, now)
    if unit_price == 0 or ttm == 0:
        return 0

    return ((SCALE * SCALE // unit_price) - SCALE) * SECONDS_PER_YEAR // ttm
