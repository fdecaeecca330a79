"""Deployment Orchestrator — перевыставление лесенки в target-бакетах

Для каждого бакета:
1. Читает собственные lend ордера бакета
2. newCapital == 0 и ордеров нет → no-op
3. Отменяет все ордера с положительным principal, возвращённый principal —
   existing_capital (отклонённый cancel = ничего не возвращено, продолжаем)
4. Строит лесенку на new_capital + existing_capital и размещает уровни

Отказ размещения:
- strict (deposit-путь): OrderSubmissionError, вызов прерывается
- non-strict (maintenance/tend): предупреждение в лог, капитал остаётся
  в vault и trigger остаётся активным
"""

import logging
from dataclasses import dataclass

from src.allocation.allocation_splitter import split_allocation
from src.allocation.maturity_selector import MaturitySelection
from src.allocation.order_ladder import LadderTier, OrderLadderBuilder
from src.core.domain.maturity import MaturityBucket
from src.core.domain.order import OrderSide
from src.core.errors import OrderSubmissionError
from src.core.math.numerical_safeguards import validate_non_negative
from src.market.view import MarketView

logger = logging.getLogger(__name__)


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class BucketDeployment:
    """Результат перевыставления одного бакета."""

    bucket: MaturityBucket
    new_capital: int
    recovered_capital: int  # principal, возвращённый отменой старых ордеров

    placed_tiers: tuple[LadderTier, ...]
    rejected_tiers: tuple[LadderTier, ...]
    cancel_failures: tuple[int, ...]  # order ids, отмену которых рынок отклонил

    # Детали
    details: str

    @property
    def placed_amount(self) -> int:
        return sum(t.amount for t in self.placed_tiers)


@dataclass(frozen=True)
class DeploymentReport:
    """Результат deploy по всем target-бакетам."""

    deposited: int  # внесено в vault в этом вызове
    deployable: int  # свободный депозит vault, распределённый по бакетам
    buckets: tuple[BucketDeployment, ...]

    # Детали
    details: str

    @property
    def placed_amount(self) -> int:
        return sum(b.placed_amount for b in self.buckets)


# =============================================================================
# ORCHESTRATOR
# =============================================================================


class DeploymentOrchestrator:
    """Cancel-and-replace лесенок в target-бакетах."""

    def __init__(self, view: MarketView, ladder: OrderLadderBuilder, weights: tuple[int, ...]):
        self.view = view
        self.ladder = ladder
        self.weights = weights

    def deploy(
        self,
        amount: int,
        selection: MaturitySelection,
        now: int,
        strict: bool = True,
    ) -> DeploymentReport:
        """
        Внесение капитала в vault и распределение свободного депозита.

        Распределяется весь свободный депозит vault (не только amount), так что
        ранее не размещённый капитал подметается вместе с новым.

        Args:
            amount: Новый idle-капитал для внесения в vault (>= 0)
            selection: Target-бакеты, отобранные на момент now
            now: Текущее время
            strict: True для deposit-пути (отказ размещения фатален)

        Raises:
            OrderSubmissionError: strict и рынок отклонил размещение уровня
        """
        validate_non_negative(amount, "amount")

        if amount > 0:
            self.view.vault.deposit(self.view.currency, amount)

        if not selection.buckets:
            logger.info("deploy: no target maturities, %d kept in vault", self.view.deposit_amount())
            return DeploymentReport(
                deposited=amount,
                deployable=0,
                buckets=(),
                details=f"no target buckets ({selection.details})",
            )

        deployable = self.view.deposit_amount()
        allocations = split_allocation(deployable, self.weights, len(selection.buckets))

        results = tuple(
            self.deploy_bucket(bucket, bucket_amount, now, strict=strict)
            for bucket, bucket_amount in zip(selection.buckets, allocations)
        )

        report = DeploymentReport(
            deposited=amount,
            deployable=deployable,
            buckets=results,
            details=(
                f"deployable={deployable}, allocations={list(allocations)}, "
                f"placed={sum(r.placed_amount for r in results)}"
            ),
        )
        logger.info("deploy: %s", report.details)
        return report

    def deploy_bucket(
        self,
        bucket: MaturityBucket,
        new_capital: int,
        now: int,
        strict: bool = True,
    ) -> BucketDeployment:
        """Перевыставление лесенки одного бакета."""
        validate_non_negative(new_capital, "new_capital")

        orders = self.view.lend_orders(bucket)
        if new_capital == 0 and not any(o.is_live for o in orders):
            return BucketDeployment(
                bucket=bucket,
                new_capital=0,
                recovered_capital=0,
                placed_tiers=(),
                rejected_tiers=(),
                cancel_failures=(),
                details="no capital and no outstanding orders",
            )

        # Отмена старых ордеров: возвращённый principal переразмещается
        recovered = 0
        cancel_failures: list[int] = []
        for order in orders:
            if not order.is_live:
                continue
            if self.view.controller.cancel_order(self.view.currency, bucket.maturity, order.order_id):
                recovered += order.amount
            else:
                cancel_failures.append(order.order_id)
                logger.warning(
                    "cancel of order %d in maturity %d rejected, skipping",
                    order.order_id, bucket.maturity,
                )

        tiers = self.ladder.build(
            new_capital + recovered,
            self.view.market_rate(bucket, now),
            bucket.maturity,
            now,
        )

        placed: list[LadderTier] = []
        rejected: list[LadderTier] = []
        for index, tier in enumerate(tiers):
            if tier.is_empty:
                continue

            accepted = self.view.controller.execute_order(
                self.view.currency,
                bucket.maturity,
                OrderSide.LEND,
                tier.amount,
                tier.unit_price,
            )
            if accepted:
                placed.append(tier)
                logger.debug(
                    "maturity %d tier %d: %d @ %d (%d bps)",
                    bucket.maturity, index, tier.amount, tier.unit_price, tier.rate_bps,
                )
                continue

            if strict:
                raise OrderSubmissionError(
                    f"order submission rejected for maturity {bucket.maturity} "
                    f"tier {index}: {tier.amount} @ {tier.unit_price}",
                    maturity=bucket.maturity,
                    tier_index=index,
                )
            rejected.append(tier)
            logger.warning(
                "order submission rejected for maturity %d tier %d, capital stays in vault",
                bucket.maturity, index,
            )

        return BucketDeployment(
            bucket=bucket,
            new_capital=new_capital,
            recovered_capital=recovered,
            placed_tiers=tuple(placed),
            rejected_tiers=tuple(rejected),
            cancel_failures=tuple(cancel_failures),
            details=(
                f"new={new_capital}, recovered={recovered}, "
                f"placed={sum(t.amount for t in placed)}, rejected={len(rejected)}"
            ),
        )
