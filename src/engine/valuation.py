"""Valuation — снимок капитала стратегии

total_assets = idle + vault_deposit + Σ(order_amount + present_value)

по всем бакетам рынка (не только target: капитал в бакетах, вышедших из
target-набора, продолжает учитываться до погашения).

Побочный эффект: для каждого бакета с PV > 0 и положительной рыночной
unit price цена записывается в карту last_unit_prices — единственное место,
где эта карта обновляется.
"""

from typing import MutableMapping

from src.core.domain.asset_report import AssetReport, BucketExposure
from src.market.view import MarketView


class ValuationEngine:
    """Агрегация ledger-а капитала по трём локациям."""

    def __init__(self, view: MarketView, last_unit_prices: MutableMapping[int, int]):
        self.view = view
        self.last_unit_prices = last_unit_prices

    def report(self, now: int) -> AssetReport:
        """
        Raises:
            InvariantViolation: Отрицательная позиция или бакет без order book
        """
        exposures: list[BucketExposure] = []

        for bucket in self.view.buckets():
            order_amount = sum(o.amount for o in self.view.live_lend_orders(bucket))
            position = self.view.position(bucket)

            if position.present_value > 0:
                unit_price = self.view.order_book.get_market_unit_price(bucket.book_id)
                if unit_price > 0:
                    self.last_unit_prices[bucket.maturity] = unit_price

            if order_amount == 0 and not position.is_open:
                continue

            exposures.append(
                BucketExposure(
                    maturity=bucket.maturity,
                    book_id=bucket.book_id,
                    order_amount=order_amount,
                    present_value=position.present_value,
                    future_value=position.future_value,
                )
            )

        idle = self.view.idle_balance()
        vault_deposit = self.view.deposit_amount()

        return AssetReport(
            idle=idle,
            vault_deposit=vault_deposit,
            buckets=tuple(exposures),
            total_assets=idle + vault_deposit + sum(e.value for e in exposures),
            observed_at=now,
        )
