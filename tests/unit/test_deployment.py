"""
Тесты для Deployment Orchestrator

Проверяет:
1. Распределение нового капитала по target-бакетам (веса [4, 6])
2. Cancel-and-replace: возвращённый principal переразмещается
3. Пропуск пустых уровней и no-op для пустого бакета
4. Отклонённый cancel — skip and continue
5. Отказ размещения: фатален в deploy, не фатален в tend
"""

import pytest

from src.allocation.order_ladder import OrderLadderBuilder
from src.core.errors import OrderSubmissionError
from src.engine.strategy import MaturityAllocationStrategy
from src.market.simulated import SimulatedLendingMarket
from src.market.view import MarketView
from tests.unit.conftest import CURRENCY, HOLDER, M30, M90, M180, NOW


def live_amounts(market: SimulatedLendingMarket, maturity: int) -> dict[int, int]:
    """order id → оставшийся principal живых ордеров бакета."""
    return {oid: o.amount for oid, o in sorted(market.book(maturity).orders.items()) if o.amount > 0}


class TestDeploy:
    """Тесты deposit-пути"""

    def test_weighted_split_across_two_buckets(
        self, strategy: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        """1_000_000 на 2 бакета с весами [4, 6] → 400_000 / 600_000"""
        market.token.mint(HOLDER, 1_000_000)
        report = strategy.deploy(1_000_000)

        assert report.deposited == 1_000_000
        assert report.deployable == 1_000_000
        assert [b.bucket.maturity for b in report.buckets] == [M30, M90]
        assert [b.placed_amount for b in report.buckets] == [400_000, 600_000]
        assert report.placed_amount == 1_000_000

        assert live_amounts(market, M30) == {1: 160_000, 2: 120_000, 3: 120_000}
        assert live_amounts(market, M90) == {4: 240_000, 5: 180_000, 6: 180_000}
        assert live_amounts(market, M180) == {}

        assert market.token.balance_of(HOLDER) == 0
        assert market.get_deposit_amount(HOLDER, CURRENCY) == 0

    def test_orders_priced_by_ladder(
        self, deployed: MaturityAllocationStrategy, market: SimulatedLendingMarket, view: MarketView
    ) -> None:
        """Цены ордеров — цены уровней лесенки при текущей рыночной ставке"""
        bucket = view.bucket(M30)
        expected = OrderLadderBuilder(200).build(400_000, view.market_rate(bucket, NOW), M30, NOW)

        orders = view.live_lend_orders(bucket)
        assert [o.unit_price for o in orders] == [t.unit_price for t in expected]
        assert [o.amount for o in orders] == [t.amount for t in expected]

    def test_sweeps_existing_vault_deposit(
        self, strategy: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        """Ранее не размещённый депозит распределяется вместе с новым капиталом"""
        market.token.mint(HOLDER, 1_500)
        market.deposit(CURRENCY, 500)

        report = strategy.deploy(1_000)

        assert report.deposited == 1_000
        assert report.deployable == 1_500
        assert report.placed_amount == 1_500
        assert market.get_deposit_amount(HOLDER, CURRENCY) == 0

    def test_redeploy_cancels_and_replaces(
        self, deployed: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        """deploy(0) перевыставляет существующие лесенки без потери капитала"""
        report = deployed.deploy(0)

        assert [b.new_capital for b in report.buckets] == [0, 0]
        assert [b.recovered_capital for b in report.buckets] == [400_000, 600_000]
        assert live_amounts(market, M30) == {7: 160_000, 8: 120_000, 9: 120_000}
        assert live_amounts(market, M90) == {10: 240_000, 11: 180_000, 12: 180_000}

    def test_empty_bucket_is_noop(
        self, strategy: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        report = strategy.deploy(0)

        assert report.placed_amount == 0
        assert all(b.details == "no capital and no outstanding orders" for b in report.buckets)
        assert live_amounts(market, M30) == {}

    def test_empty_tiers_not_submitted(
        self, strategy: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        """2 единицы: M30 получает 0 (no-op), M90 — один уровень из трёх"""
        market.token.mint(HOLDER, 2)
        report = strategy.deploy(2)

        assert [b.new_capital for b in report.buckets] == [0, 2]
        assert report.buckets[0].placed_tiers == ()
        assert [t.amount for t in report.buckets[1].placed_tiers] == [2]
        assert live_amounts(market, M90) == {1: 2}

    def test_filled_orders_not_cancelled(
        self, deployed: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        """Полностью исполненный ордер (amount == 0) не отменяется и не переразмещается"""
        market.fill_lend_order(M30, 1)
        report = deployed.deploy(0)

        assert report.buckets[0].recovered_capital == 240_000
        assert report.buckets[0].cancel_failures == ()
        assert 1 in market.book(M30).orders

    def test_rejected_cancel_is_skipped(
        self, deployed: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        """Отклонённый cancel: из ордера ничего не возвращено, остальные обрабатываются"""
        market.rejected_cancel_ids = {1}
        report = deployed.deploy(0)

        m30 = report.buckets[0]
        assert m30.cancel_failures == (1,)
        assert m30.recovered_capital == 240_000
        assert live_amounts(market, M30) == {1: 160_000, 7: 96_000, 8: 72_000, 9: 72_000}

    def test_rejected_submission_is_fatal(
        self, strategy: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        market.token.mint(HOLDER, 1_000)
        market.reject_submissions = True

        with pytest.raises(OrderSubmissionError) as exc_info:
            strategy.deploy(1_000)

        assert exc_info.value.maturity == M30
        assert exc_info.value.tier_index == 0
        # Внесённый капитал остаётся в vault
        assert market.get_deposit_amount(HOLDER, CURRENCY) == 1_000

    def test_negative_amount_raises(self, strategy: MaturityAllocationStrategy) -> None:
        with pytest.raises(ValueError):
            strategy.deploy(-1)

    def test_no_target_buckets_keeps_capital_in_vault(
        self, strategy: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        for maturity in (M30, M90, M180):
            market.set_book_state(maturity, opened=False)
        market.token.mint(HOLDER, 1_000)

        report = strategy.deploy(1_000)

        assert report.buckets == ()
        assert market.get_deposit_amount(HOLDER, CURRENCY) == 1_000


class TestTendDeployment:
    """Тесты maintenance-пути (non-strict)"""

    def test_tend_deploys_idle_capital(
        self, strategy: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        market.token.mint(HOLDER, 1_000_000)
        report = strategy.tend()

        assert report.deposited == 1_000_000
        assert report.placed_amount == 1_000_000
        assert market.token.balance_of(HOLDER) == 0

    def test_rejected_submission_is_not_fatal(
        self, strategy: MaturityAllocationStrategy, market: SimulatedLendingMarket
    ) -> None:
        """В tend отказ размещения логируется, капитал остаётся в vault"""
        market.token.mint(HOLDER, 1_000)
        market.reject_submissions = True

        report = strategy.tend()

        assert report.placed_amount == 0
        assert [len(b.rejected_tiers) for b in report.buckets] == [3, 3]
        assert market.get_deposit_amount(HOLDER, CURRENCY) == 1_000
        assert strategy.tend_trigger().due
