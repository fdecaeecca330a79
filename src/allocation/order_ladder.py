"""Order Ladder Builder — лесенка lend ордеров для одного бакета

Эффективная ставка-пол:
    floor_rate = max(market_rate, min_apr_bps)

Ровно LADDER_TIER_COUNT (3) уровня в пространстве ставок:
    floor, floor + 5 bps, floor + 10 bps
каждый конвертируется в unit price через rate_to_price.

Капитал делится 40% / 30% / 30%, последний уровень забирает остаток
округления. Уровень с нулевым капиталом в бакет не размещается (решает
вызывающий по LadderTier.amount).
"""

from dataclasses import dataclass
from typing import Final

from src.core.math.numerical_safeguards import mul_div, validate_non_negative
from src.core.math.rate_price import rate_to_price


# =============================================================================
# CONSTANTS
# =============================================================================

# Число уровней лесенки
LADDER_TIER_COUNT: Final[int] = 3

# Шаг между уровнями в пространстве ставок (bps)
LADDER_RATE_STEP_BPS: Final[int] = 5

# Доли капитала по уровням (%), в сумме 100
LADDER_SPLIT_PCT: Final[tuple[int, ...]] = (40, 30, 30)


# =============================================================================
# TIER
# =============================================================================


@dataclass(frozen=True)
class LadderTier:
    """Один уровень лесенки."""

    rate_bps: int  # Годовая ставка уровня
    unit_price: int  # Unit price ордера
    amount: int  # Капитал уровня

    @property
    def is_empty(self) -> bool:
        return self.amount == 0


# =============================================================================
# BUILDING BLOCKS
# =============================================================================


def effective_floor_rate(market_rate_bps: int, min_apr_bps: int) -> int:
    """max(текущая рыночная ставка, сконфигурированный rate floor)."""
    return max(market_rate_bps, min_apr_bps)


def ladder_tier_rates(floor_rate_bps: int) -> tuple[int, ...]:
    """
    Ставки уровней лесенки.

    Examples:
        >>> ladder_tier_rates(500)
        (500, 505, 510)
    """
    validate_non_negative(floor_rate_bps, "floor_rate_bps")
    return tuple(floor_rate_bps + i * LADDER_RATE_STEP_BPS for i in range(LADDER_TIER_COUNT))


def split_ladder_amount(amount: int) -> tuple[int, ...]:
    """
    Разбиение капитала по уровням 40/30/30 с точным остатком в последнем.

    Examples:
        >>> split_ladder_amount(1000)
        (400, 300, 300)
        >>> split_ladder_amount(7)
        (2, 2, 3)
    """
    validate_non_negative(amount, "amount")

    parts = [mul_div(amount, pct, 100) for pct in LADDER_SPLIT_PCT[:-1]]
    parts.append(amount - sum(parts))
    return tuple(parts)


# =============================================================================
# BUILDER
# =============================================================================


class OrderLadderBuilder:
    """Построение лесенки для бакета при заданном rate floor."""

    def __init__(self, min_apr_bps: int):
        if min_apr_bps <= 0:
            raise ValueError(f"min_apr_bps must be positive, got {min_apr_bps}")
        self.min_apr_bps = min_apr_bps

    def tier_rates(self, market_rate_bps: int) -> tuple[int, ...]:
        """Ставки уровней при текущей рыночной ставке."""
        return ladder_tier_rates(effective_floor_rate(market_rate_bps, self.min_apr_bps))

    def build(
        self,
        amount: int,
        market_rate_bps: int,
        maturity: int,
        now: int,
    ) -> tuple[LadderTier, ...]:
        """
        Построение всех уровней лесенки (включая пустые).

        Args:
            amount: Капитал бакета (новый + возвращённый отменой)
            market_rate_bps: Текущая рыночная ставка бакета
            maturity: Timestamp погашения бакета
            now: Текущее время

        Returns:
            LADDER_TIER_COUNT уровней, Σ amount == amount
        """
        rates = self.tier_rates(market_rate_bps)
        amounts = split_ladder_amount(amount)

        return tuple(
            LadderTier(
                rate_bps=rate,
                unit_price=rate_to_price(rate, maturity, now),
                amount=tier_amount,
            )
            for rate, tier_amount in zip(rates, amounts)
        )
