"""Withdrawal Limit Estimator — сколько держатель может вывести прямо сейчас

limit = idle + vault_deposit
      + Σ по target-бакетам (principal живых ордеров
                             + оценка unwind позиции при FV > 0)

Оценка unwind берётся из get_order_estimation_from_fv (симуляция на стороне
рынка, без мутаций). Если симуляция сообщает о нехватке обеспечения
(is_insufficient_deposit_amount) — это InsufficientLiquidity, а не
заниженная оценка.
"""

from src.allocation.maturity_selector import MaturitySelection
from src.core.domain.order import OrderSide
from src.core.errors import InsufficientLiquidity
from src.market.interfaces import OrderEstimationParams
from src.market.view import MarketView


class WithdrawalLimitEstimator:
    """Read-only оценка доступного к выводу капитала."""

    def __init__(self, view: MarketView):
        self.view = view

    def estimate(self, selection: MaturitySelection, holder: str | None = None) -> int:
        """
        Raises:
            InsufficientLiquidity: Если симуляция unwind сообщила о нехватке
            InvariantViolation: Если позиция отрицательна
        """
        owner = holder or self.view.holder

        limit = self.view.idle_balance(owner) + self.view.deposit_amount(owner)

        for bucket in selection.buckets:
            limit += sum(o.amount for o in self.view.live_lend_orders(bucket, owner))

            position = self.view.position(bucket, owner)
            if not position.is_open:
                continue

            estimation = self.view.controller.get_order_estimation_from_fv(
                OrderEstimationParams(
                    currency=self.view.currency,
                    maturity=bucket.maturity,
                    user=owner,
                    side=OrderSide.BORROW,
                    future_value=position.future_value,
                )
            )
            if estimation.is_insufficient_deposit_amount:
                raise InsufficientLiquidity(
                    f"unwind estimate for maturity {bucket.maturity} reports "
                    f"insufficient deposit (fv={position.future_value})",
                    requested=position.future_value,
                    available=estimation.filled_amount_in_fv,
                )
            limit += estimation.filled_amount

        return limit
