"""
Общие фикстуры unit-тестов аллокатора

- FixedClock: детерминированные часы со счётчиком чтений
- market: SimulatedLendingMarket с тремя бакетами (30 / 90 / 180 дней)
- config: AllocationConfig на 2 target-бакета с весами [4, 6]
- make_strategy: фабрика MaturityAllocationStrategy поверх market
"""

import pytest

from src.core.domain.allocation_config import AllocationConfig
from src.engine.strategy import MaturityAllocationStrategy
from src.market.simulated import SimulatedLendingMarket
from src.market.view import MarketView

NOW = 1_700_000_000
DAY = 86_400

CURRENCY = "USDC"
ASSET = "0xasset"
HOLDER = "strategy"

M30 = NOW + 30 * DAY
M90 = NOW + 90 * DAY
M180 = NOW + 180 * DAY

# Рыночная unit price всех бакетов по умолчанию
MARKET_PRICE = 9_900


class FixedClock:
    """Часы, которые двигаются только явно."""

    def __init__(self, now: int = NOW):
        self.now = now
        self.reads = 0

    def __call__(self) -> int:
        self.reads += 1
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def market(clock: FixedClock) -> SimulatedLendingMarket:
    """Рынок с бакетами 30/90/180 дней, все открыты, цена 9_900."""
    m = SimulatedLendingMarket(CURRENCY, HOLDER, token_address=ASSET, clock=clock)
    for maturity in (M30, M90, M180):
        m.add_maturity(maturity, market_unit_price=MARKET_PRICE)
    return m


@pytest.fixture
def view(market: SimulatedLendingMarket) -> MarketView:
    return MarketView(market, market, market, market.token, CURRENCY, HOLDER)


@pytest.fixture
def config() -> AllocationConfig:
    return AllocationConfig(
        currency=CURRENCY,
        asset=ASSET,
        holder=HOLDER,
        weights=(4, 6),
        max_buckets=2,
        min_apr_bps=200,
        min_tend_amount=1_000,
    )


@pytest.fixture
def make_strategy(market: SimulatedLendingMarket, config: AllocationConfig, clock: FixedClock):
    """Фабрика стратегии; по умолчанию — фикстурные config и clock."""

    def _make(cfg: AllocationConfig | None = None, strategy_clock=None) -> MaturityAllocationStrategy:
        return MaturityAllocationStrategy(
            cfg or config,
            controller=market,
            order_book=market,
            vault=market,
            token=market.token,
            clock=strategy_clock or clock,
        )

    return _make


@pytest.fixture
def strategy(make_strategy) -> MaturityAllocationStrategy:
    return make_strategy()


@pytest.fixture
def deployed(strategy: MaturityAllocationStrategy, market: SimulatedLendingMarket) -> MaturityAllocationStrategy:
    """
    Стратегия после deploy(1_000_000).

    Ордера: M30 → ids 1, 2, 3 (160_000 / 120_000 / 120_000),
            M90 → ids 4, 5, 6 (240_000 / 180_000 / 180_000).
    """
    market.token.mint(HOLDER, 1_000_000)
    strategy.deploy(1_000_000)
    return strategy
