"""
Тесты для Valuation (report_assets)

Проверяет:
1. total_assets = idle + vault + Σ(ордера + PV)
2. Учёт всех бакетов рынка, а не только target
3. Обновление last_unit_prices только при PV > 0 и цене > 0
4. InvariantViolation на отрицательной позиции
5. Соответствие отчёта JSON Schema контракту
"""

import pytest

from src.core.contracts import validate_asset_report
from src.core.errors import InvariantViolation
from src.core.math.numerical_safeguards import SCALE
from src.engine.strategy import MaturityAllocationStrategy
from src.market.simulated import SimulatedLendingMarket
from tests.unit.conftest import CURRENCY, HOLDER, M30, M90, M180, NOW


class TestReportAssets:
    """Тесты снимка капитала"""

    def test_empty(self, strategy: MaturityAllocationStrategy) -> None:
        report = strategy.report_assets()

        assert report.total_assets == 0
        assert report.buckets == ()
        assert report.observed_at == NOW

    def test_idle_and_vault(self, strategy: MaturityAllocationStrategy, market: SimulatedLendingMarket) -> None:
        market.token.mint(HOLDER, 3_000)
        market.deposit(CURRENCY, 1_000)
        report = strategy.report_assets()

        assert (report.idle, report.vault_deposit) == (2_000, 1_000)
        assert report.total_assets == 3_000
        assert report.deployed == 0

    def test_deployed_capital(self, deployed: MaturityAllocationStrategy) -> None:
        report = deployed.report_assets()

        assert report.total_assets == 1_000_000
        assert report.deployed == 1_000_000
        assert [(b.maturity, b.order_amount) for b in report.buckets] == [(M30, 400_000), (M90, 600_000)]

    def test_filled_order_valued_at_present_value(
        self, deployed: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        fv = market.fill_lend_order(M30, 1)
        report = deployed.report_assets()

        m30 = report.buckets[0]
        assert m30.order_amount == 240_000
        assert m30.future_value == fv
        assert m30.present_value == fv * 9_900 // SCALE
        assert report.total_assets == 1_000_000 - 160_000 + m30.present_value

    def test_non_target_bucket_counted(
        self, strategy: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        market.set_position(HOLDER, M180, 50_000)
        report = strategy.report_assets()

        assert [b.maturity for b in report.buckets] == [M180]
        assert report.total_assets == 49_500

    def test_matured_position_at_full_value(
        self, strategy: MaturityAllocationStrategy, market: SimulatedLendingMarket, clock
    ) -> None:
        market.set_position(HOLDER, M30, 50_000)
        clock.advance(M30 - NOW)

        assert strategy.report_assets().total_assets == 50_000

    def test_negative_position_raises(
        self, strategy: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        market.set_position(HOLDER, M90, -5)

        with pytest.raises(InvariantViolation, match="negative position"):
            strategy.report_assets()

    def test_report_matches_schema(
        self, deployed: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        market.fill_lend_order(M30, 2)
        validate_asset_report(deployed.report_assets().model_dump(mode="json"))


class TestLastUnitPrices:
    """Тесты карты последних наблюдённых цен"""

    def test_empty_before_first_report(self, strategy: MaturityAllocationStrategy) -> None:
        assert strategy.last_unit_prices == {}

    def test_recorded_for_positive_present_value(
        self, strategy: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        market.set_position(HOLDER, M90, 10_000)
        strategy.report_assets()

        assert strategy.last_unit_prices == {M90: 9_900}

    def test_overwritten_on_every_pass(
        self, strategy: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        market.set_position(HOLDER, M90, 10_000)
        strategy.report_assets()
        market.set_book_state(M90, market_unit_price=9_850)
        strategy.report_assets()

        assert strategy.last_unit_prices == {M90: 9_850}

    def test_not_recorded_without_market_price(
        self, strategy: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        """PV > 0, но рынок без цены — карта не обновляется"""
        market.set_book_state(M90, market_unit_price=0)
        market.set_position(HOLDER, M90, 10_000)
        strategy.report_assets()

        assert strategy.last_unit_prices == {}

    def test_orders_only_not_recorded(self, deployed: MaturityAllocationStrategy) -> None:
        deployed.report_assets()
        assert deployed.last_unit_prices == {}

    def test_returned_map_is_a_copy(
        self, strategy: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        market.set_position(HOLDER, M90, 10_000)
        strategy.report_assets()

        strategy.last_unit_prices[M90] = 1
        assert strategy.last_unit_prices == {M90: 9_900}
