"""Rebalance Trigger — решение "нужно ли обслуживание"

Maintenance due, если выполнено хотя бы одно:
1. idle ≥ min_tend_amount
2. в custodial vault лежит не размещённый депозит (> 0)
3. в каком-либо target-бакете ставка живого ордера отклонилась от ставки
   соответствующего уровня лесенки на ≥ RATE_DRIFT_THRESHOLD_BPS

Ставка уровня берётся после округления до unit price, по которой уровень
реально выставляется: price_to_rate(rate_to_price(tier_rate)). Вблизи
погашения один tick цены стоит десятки bps, и идеальная ставка уровня
недостижима.

Сопоставление ордеров с уровнями — по позиции с конца: если часть лесенки
исполнилась и ордеров меньше, чем уровней, оставшиеся ордера сравниваются
с последними уровнями (самыми дальними от floor).

Только чтение: рынок не мутируется.
"""

from dataclasses import dataclass
from typing import Final

from src.allocation.maturity_selector import MaturitySelection
from src.allocation.order_ladder import LADDER_TIER_COUNT, OrderLadderBuilder
from src.core.math.rate_price import price_to_rate, rate_to_price
from src.market.view import MarketView


# Отклонение ставки ордера от уровня, при котором нужно перевыставление (bps)
RATE_DRIFT_THRESHOLD_BPS: Final[int] = 25

REASON_IDLE = "idle_capital"
REASON_VAULT = "vault_deposit"
REASON_DRIFT = "rate_drift"
REASON_NONE = ""


@dataclass(frozen=True)
class TriggerDecision:
    """Результат проверки trigger."""

    due: bool
    reason: str  # REASON_* ("" если обслуживание не нужно)

    # Детали
    details: str

    def __bool__(self) -> bool:
        return self.due


class RebalanceTrigger:
    """Pull-based проверка необходимости tend()."""

    def __init__(self, view: MarketView, ladder: OrderLadderBuilder, min_tend_amount: int):
        self.view = view
        self.ladder = ladder
        self.min_tend_amount = min_tend_amount

    def check(self, selection: MaturitySelection, now: int) -> TriggerDecision:
        """
        Проверка условий обслуживания.

        Args:
            selection: Target-бакеты на момент now
            now: Текущее время

        Returns:
            TriggerDecision с первой сработавшей причиной
        """
        idle = self.view.idle_balance()
        if idle >= self.min_tend_amount:
            return TriggerDecision(
                due=True,
                reason=REASON_IDLE,
                details=f"idle {idle} >= min_tend_amount {self.min_tend_amount}",
            )

        deposit = self.view.deposit_amount()
        if deposit > 0:
            return TriggerDecision(
                due=True,
                reason=REASON_VAULT,
                details=f"un-deployed vault deposit {deposit}",
            )

        for bucket in selection.buckets:
            orders = self.view.live_lend_orders(bucket)
            if not orders:
                continue

            tier_rates = [
                price_to_rate(rate_to_price(rate, bucket.maturity, now), bucket.maturity, now)
                for rate in self.ladder.tier_rates(self.view.market_rate(bucket, now))
            ]
            # Выравнивание по позиции с конца
            orders = orders[-LADDER_TIER_COUNT:]
            offset = LADDER_TIER_COUNT - len(orders)

            for i, order in enumerate(orders):
                order_rate = price_to_rate(order.unit_price, bucket.maturity, now)
                drift = abs(order_rate - tier_rates[offset + i])
                if drift >= RATE_DRIFT_THRESHOLD_BPS:
                    return TriggerDecision(
                        due=True,
                        reason=REASON_DRIFT,
                        details=(
                            f"order {order.order_id} in maturity {bucket.maturity}: "
                            f"rate {order_rate} vs tier {tier_rates[offset + i]} "
                            f"(drift {drift} bps)"
                        ),
                    )

        return TriggerDecision(due=False, reason=REASON_NONE, details="no maintenance due")
