"""Fund Recovery Engine — каскад освобождения капитала

free_funds(target) освобождает не меньше target, предпочитая отмену ордеров
(без потерь) unwind позиций (возможны потери) и сохраняя самую короткую
экспозицию:

0. Свободный депозит vault засчитывается первым: freed = min(deposit, target)
1. Cancel-фаза: бакеты от дальнего погашения к ближнему, ордера по order id;
   остановка как только freed >= target. Отклонённый cancel пропускается.
2. Unwind-фаза (только если не хватило): бакеты от ближнего к дальнему,
   позиции с FV > 0:
       shortfall    = target - freed
       shortfall_fv = ceil(shortfall * SCALE / last_unit_price)
       (filled, filled_fv, fee_fv) = unwind_position_with_cap(shortfall_fv)
       recovered    = ceil((filled_fv + fee_fv) * shortfall / shortfall_fv)
       recovered > filled  → loss   += recovered - filled
       иначе               → profit += filled - recovered
       freed += recovered
   Бакет без наблюдённой unit price пропускается (деления на 0 нет).
3. freed < target после обеих фаз → InsufficientLiquidity
4. Из vault выводится freed + profit - loss

recovered округляется вверх, поэтому при равной цене расхождение с
реализованной суммой попадает в loss, а не в profit.
"""

import logging
from dataclasses import dataclass
from typing import Mapping

from src.core.errors import InsufficientLiquidity
from src.core.math.numerical_safeguards import SCALE, mul_div_up, validate_non_negative
from src.market.view import MarketView

logger = logging.getLogger(__name__)


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class RecoveryResult:
    """Результат освобождения капитала."""

    target: int
    freed: int  # освобождено в учётном (amount) пространстве
    profit: int  # реализованная прибыль unwind
    loss: int  # реализованный убыток unwind
    withdrawn: int  # выведено из vault

    cancelled_order_ids: tuple[int, ...]
    unwound_maturities: tuple[int, ...]

    # Детали
    details: str

    @property
    def recovered_net(self) -> int:
        """freed + profit - loss (равно withdrawn)."""
        return self.freed + self.profit - self.loss


# =============================================================================
# ENGINE
# =============================================================================


class FundRecoveryEngine:
    """Waterfall: свободный депозит → отмена ордеров → capped unwind."""

    def __init__(self, view: MarketView, last_unit_prices: Mapping[int, int]):
        """
        Args:
            view: Фасад рынка стратегии
            last_unit_prices: maturity → последняя наблюдённая unit price
                (владелец — стратегия, движок только читает)
        """
        self.view = view
        self.last_unit_prices = last_unit_prices

    def free_funds(self, target: int, now: int) -> RecoveryResult:
        """
        Освобождение не менее target капитала и вывод его из vault.

        Args:
            target: Требуемая сумма (>= 0)
            now: Текущее время (для единообразия вызова; каскад от него не зависит)

        Returns:
            RecoveryResult, freed >= target, withdrawn == freed + profit - loss

        Raises:
            InsufficientLiquidity: Если обе фазы не набрали target
        """
        validate_non_negative(target, "target")

        if target == 0:
            return RecoveryResult(
                target=0, freed=0, profit=0, loss=0, withdrawn=0,
                cancelled_order_ids=(), unwound_maturities=(),
                details="nothing to free",
            )

        freed = min(self.view.deposit_amount(), target)
        profit = 0
        loss = 0
        cancelled: list[int] = []
        unwound: list[int] = []

        buckets = sorted(self.view.buckets(), key=lambda b: b.maturity)

        # 1. Cancel-фаза: от дальних погашений к ближним
        for bucket in reversed(buckets):
            if freed >= target:
                break
            for order in self.view.lend_orders(bucket):
                if freed >= target:
                    break
                if not order.is_live:
                    continue
                if self.view.controller.cancel_order(self.view.currency, bucket.maturity, order.order_id):
                    freed += order.amount
                    cancelled.append(order.order_id)
                else:
                    logger.warning(
                        "cancel of order %d in maturity %d rejected during recovery, skipping",
                        order.order_id, bucket.maturity,
                    )

        # 2. Unwind-фаза: от ближних погашений к дальним
        for bucket in buckets:
            if freed >= target:
                break

            position = self.view.position(bucket)
            if not position.is_open:
                continue

            unit_price = self.last_unit_prices.get(bucket.maturity, 0)
            if unit_price <= 0:
                logger.warning(
                    "no unit price observed for maturity %d yet, skipping unwind",
                    bucket.maturity,
                )
                continue

            shortfall = target - freed
            shortfall_fv = mul_div_up(shortfall, SCALE, unit_price)

            filled_amount, filled_fv, fee_fv = self.view.controller.unwind_position_with_cap(
                self.view.currency, bucket.maturity, shortfall_fv
            )
            if filled_fv + fee_fv == 0:
                continue

            recovered = mul_div_up(filled_fv + fee_fv, shortfall, shortfall_fv)
            if recovered > filled_amount:
                loss += recovered - filled_amount
            else:
                profit += filled_amount - recovered

            freed += recovered
            unwound.append(bucket.maturity)
            logger.debug(
                "unwind maturity %d: recovered=%d realized=%d fv=%d fee_fv=%d",
                bucket.maturity, recovered, filled_amount, filled_fv, fee_fv,
            )

        # 3. Нехватка ликвидности фатальна
        if freed < target:
            raise InsufficientLiquidity(
                f"cannot free {target}: only {freed} available after cancel and unwind",
                requested=target,
                available=freed,
            )

        # 4. Вывод из vault
        withdrawn = freed + profit - loss
        if withdrawn > 0:
            self.view.vault.withdraw(self.view.currency, withdrawn)

        result = RecoveryResult(
            target=target,
            freed=freed,
            profit=profit,
            loss=loss,
            withdrawn=withdrawn,
            cancelled_order_ids=tuple(cancelled),
            unwound_maturities=tuple(unwound),
            details=(
                f"target={target}, freed={freed}, profit={profit}, loss={loss}, "
                f"cancelled={len(cancelled)}, unwound={list(unwound)}"
            ),
        )
        logger.info("free_funds: %s", result.details)
        return result
