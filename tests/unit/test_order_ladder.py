"""
Тесты для Order Ladder Builder

Проверяет:
1. Ставку-пол max(market, min_apr)
2. Три уровня floor / +5 / +10 bps и их unit prices
3. Распределение 40/30/30 с точным остатком
4. Пустые уровни при малом капитале
"""

import pytest

from src.allocation.order_ladder import (
    LADDER_RATE_STEP_BPS,
    LADDER_SPLIT_PCT,
    LADDER_TIER_COUNT,
    LadderTier,
    OrderLadderBuilder,
    effective_floor_rate,
    ladder_tier_rates,
    split_ladder_amount,
)
from src.core.math.rate_price import rate_to_price

NOW = 1_700_000_000
MATURITY = NOW + 180 * 86_400


class TestConstants:
    def test_ladder_shape(self) -> None:
        assert LADDER_TIER_COUNT == 3
        assert LADDER_RATE_STEP_BPS == 5
        assert LADDER_SPLIT_PCT == (40, 30, 30)
        assert sum(LADDER_SPLIT_PCT) == 100


class TestFloorAndRates:
    """Тесты ставки-пола и ставок уровней"""

    @pytest.mark.parametrize(
        "market_rate,min_apr,expected",
        [(100, 200, 200), (1_228, 200, 1_228), (200, 200, 200), (0, 50, 50)],
    )
    def test_effective_floor(self, market_rate: int, min_apr: int, expected: int) -> None:
        assert effective_floor_rate(market_rate, min_apr) == expected

    def test_tier_rates(self) -> None:
        assert ladder_tier_rates(500) == (500, 505, 510)

    def test_builder_uses_floor(self) -> None:
        builder = OrderLadderBuilder(min_apr_bps=200)
        assert builder.tier_rates(150) == (200, 205, 210)
        assert builder.tier_rates(409) == (409, 414, 419)

    @pytest.mark.parametrize("min_apr", [0, -5])
    def test_non_positive_min_apr_raises(self, min_apr: int) -> None:
        with pytest.raises(ValueError):
            OrderLadderBuilder(min_apr_bps=min_apr)


class TestSplitLadderAmount:
    """Тесты распределения 40/30/30"""

    @pytest.mark.parametrize(
        "amount,expected",
        [
            (1_000, (400, 300, 300)),
            (400_000, (160_000, 120_000, 120_000)),
            (7, (2, 2, 3)),
            (1, (0, 0, 1)),
            (0, (0, 0, 0)),
        ],
    )
    def test_split(self, amount: int, expected: tuple[int, ...]) -> None:
        assert split_ladder_amount(amount) == expected

    @pytest.mark.parametrize("amount", [2, 3, 11, 333, 99_999, 123_456_789, 10**21 + 17])
    def test_conservation(self, amount: int) -> None:
        """Σ уровней == amount"""
        parts = split_ladder_amount(amount)
        assert len(parts) == LADDER_TIER_COUNT
        assert sum(parts) == amount

    def test_negative_raises(self) -> None:
        with pytest.raises(ValueError):
            split_ladder_amount(-1)


class TestOrderLadderBuilder:
    """Тесты построения лесенки"""

    @pytest.fixture
    def builder(self) -> OrderLadderBuilder:
        return OrderLadderBuilder(min_apr_bps=200)

    def test_build_tiers(self, builder: OrderLadderBuilder) -> None:
        tiers = builder.build(1_000, market_rate_bps=150, maturity=MATURITY, now=NOW)

        assert tiers == (
            LadderTier(rate_bps=200, unit_price=rate_to_price(200, MATURITY, NOW), amount=400),
            LadderTier(rate_bps=205, unit_price=rate_to_price(205, MATURITY, NOW), amount=300),
            LadderTier(rate_bps=210, unit_price=rate_to_price(210, MATURITY, NOW), amount=300),
        )

    def test_prices_descend_with_rate(self, builder: OrderLadderBuilder) -> None:
        """Более высокая ставка уровня — более низкая цена"""
        prices = [t.unit_price for t in builder.build(1_000, 150, MATURITY, NOW)]
        assert prices[0] > prices[1] > prices[2]

    def test_zero_amount_all_tiers_empty(self, builder: OrderLadderBuilder) -> None:
        tiers = builder.build(0, 150, MATURITY, NOW)
        assert len(tiers) == LADDER_TIER_COUNT
        assert all(t.is_empty for t in tiers)

    def test_small_amount_leaves_empty_tiers(self, builder: OrderLadderBuilder) -> None:
        tiers = builder.build(2, 150, MATURITY, NOW)
        assert [t.is_empty for t in tiers] == [True, True, False]

    @pytest.mark.parametrize("amount", [1, 10, 1_001, 7_777_777])
    def test_build_conserves_amount(self, builder: OrderLadderBuilder, amount: int) -> None:
        assert sum(t.amount for t in builder.build(amount, 1_228, MATURITY, NOW)) == amount
