"""
MaturityAllocationStrategy — единая точка входа аллокатора

Фиксированный набор операций, вызываемых host-фреймворком:
- deploy(amount)            — после притока капитала (strict: отказ фатален)
- free_funds(amount)        — перед оттоком капитала
- report_assets()           — периодическая оценка (обновляет last_unit_prices)
- tend() / tend_trigger()   — обслуживание по запросу (pull-based)
- emergency_withdraw(amount)— best-effort остановка: unwind → cancel → withdraw

Каждая операция читает часы ровно один раз и передаёт now во все
подвычисления. Изменяемое состояние стратегии — только окно исключения
и карта last_unit_prices.
"""

import logging
import time
from typing import Callable, Protocol

from src.allocation.maturity_selector import MaturitySelection, MaturitySelector
from src.allocation.order_ladder import OrderLadderBuilder
from src.core.domain.allocation_config import AllocationConfig
from src.core.domain.asset_report import AssetReport
from src.core.errors import ConfigurationError
from src.core.math.numerical_safeguards import validate_non_negative
from src.engine.deployment import DeploymentOrchestrator, DeploymentReport
from src.engine.fund_recovery import FundRecoveryEngine, RecoveryResult
from src.engine.rebalance_trigger import RebalanceTrigger, TriggerDecision
from src.engine.valuation import ValuationEngine
from src.engine.withdrawal_limit import WithdrawalLimitEstimator
from src.market.interfaces import (
    AssetToken,
    CustodialVault,
    MarketController,
    MarketError,
    OrderBook,
)
from src.market.view import MarketView

logger = logging.getLogger(__name__)


class AllocationStrategy(Protocol):
    """Операции, которые host-фреймворк вызывает у стратегии."""

    def deploy(self, amount: int) -> DeploymentReport: ...

    def free_funds(self, amount: int) -> RecoveryResult: ...

    def report_assets(self) -> AssetReport: ...

    def tend(self) -> DeploymentReport: ...

    def tend_trigger(self) -> TriggerDecision: ...

    def emergency_withdraw(self, amount: int | None = None) -> int: ...


def _system_clock() -> int:
    return int(time.time())


class MaturityAllocationStrategy:
    """Аллокатор капитала по бакетам погашения поверх внешнего lending-рынка."""

    def __init__(
        self,
        config: AllocationConfig,
        controller: MarketController,
        order_book: OrderBook,
        vault: CustodialVault,
        token: AssetToken,
        clock: Callable[[], int] | None = None,
    ):
        """
        Args:
            config: Неизменяемая конфигурация аллокации
            controller: Контроллер рынка
            order_book: Order book рынка
            vault: Custodial vault рынка
            token: Токен актива (idle-капитал держателя)
            clock: Источник времени (Unix seconds), по умолчанию системные часы

        Raises:
            ConfigurationError: Несовпадение актива или рынок без maturities
        """
        vault_asset = vault.get_token_address(config.currency)
        if vault_asset != config.asset:
            raise ConfigurationError(
                f"asset mismatch: config {config.asset!r}, "
                f"vault {vault_asset!r} for currency {config.currency!r}"
            )
        if not controller.get_maturities(config.currency):
            raise ConfigurationError(f"no market found for currency {config.currency!r}")

        self.config = config
        self._clock = clock or _system_clock
        self._exclusion_window = config.maturity_exclusion_window_sec
        self._last_unit_prices: dict[int, int] = {}

        self.view = MarketView(
            controller=controller,
            order_book=order_book,
            vault=vault,
            token=token,
            currency=config.currency,
            holder=config.holder,
        )
        ladder = OrderLadderBuilder(config.min_apr_bps)

        self.selector = MaturitySelector(self.view, config.max_buckets)
        self.deployer = DeploymentOrchestrator(self.view, ladder, config.weights)
        self.recovery = FundRecoveryEngine(self.view, self._last_unit_prices)
        self.trigger = RebalanceTrigger(self.view, ladder, config.min_tend_amount)
        self.valuation = ValuationEngine(self.view, self._last_unit_prices)
        self.withdrawal_limit = WithdrawalLimitEstimator(self.view)

    # -------------------------------------------------------------------------
    # Состояние
    # -------------------------------------------------------------------------

    @property
    def maturity_exclusion_window(self) -> int:
        return self._exclusion_window

    def set_maturity_exclusion_window(self, seconds: int) -> None:
        """Изменение окна исключения (операция оператора)."""
        validate_non_negative(seconds, "maturity_exclusion_window")
        logger.info("maturity exclusion window: %d -> %d", self._exclusion_window, seconds)
        self._exclusion_window = seconds

    @property
    def last_unit_prices(self) -> dict[int, int]:
        """Копия карты maturity → последняя наблюдённая unit price."""
        return dict(self._last_unit_prices)

    def target_buckets(self) -> MaturitySelection:
        return self._select(self._clock())

    def _select(self, now: int) -> MaturitySelection:
        return self.selector.select(now, self._exclusion_window)

    # -------------------------------------------------------------------------
    # Операции host-фреймворка
    # -------------------------------------------------------------------------

    def deploy(self, amount: int) -> DeploymentReport:
        """
        Размещение нового капитала (deposit-путь).

        Raises:
            OrderSubmissionError: Рынок отклонил размещение уровня лесенки
        """
        now = self._clock()
        return self.deployer.deploy(amount, self._select(now), now, strict=True)

    def free_funds(self, amount: int) -> RecoveryResult:
        """
        Освобождение капитала перед выводом.

        Raises:
            InsufficientLiquidity: Не удалось набрать amount
        """
        now = self._clock()
        return self.recovery.free_funds(amount, now)

    def report_assets(self) -> AssetReport:
        now = self._clock()
        report = self.valuation.report(now)
        logger.info(
            "report_assets: total=%d idle=%d vault=%d deployed=%d",
            report.total_assets, report.idle, report.vault_deposit, report.deployed,
        )
        return report

    def tend(self) -> DeploymentReport:
        """Обслуживание: idle и свободный депозит vault перевыставляются лесенкой."""
        now = self._clock()
        idle = self.view.idle_balance()
        return self.deployer.deploy(idle, self._select(now), now, strict=False)

    def tend_trigger(self) -> TriggerDecision:
        now = self._clock()
        return self.trigger.check(self._select(now), now)

    def available_withdraw_limit(self, holder: str | None = None) -> int:
        """
        Сколько держатель может вывести сейчас (без мутаций рынка).

        Raises:
            InsufficientLiquidity: Симуляция unwind сообщила о нехватке обеспечения
        """
        now = self._clock()
        return self.withdrawal_limit.estimate(self._select(now), holder)

    def emergency_withdraw(self, amount: int | None = None) -> int:
        """
        Best-effort остановка: unwind всех позиций, отмена всех ордеров,
        вывод из vault.

        Args:
            amount: Верхняя граница вывода (None — весь депозит)

        Returns:
            Фактически выведенная сумма (0 на пустом vault — не ошибка)
        """
        if amount is not None:
            validate_non_negative(amount, "amount")

        buckets = self.view.buckets()
        unwound = 0
        cancelled = 0

        for bucket in buckets:
            if not self.view.position(bucket).is_open:
                continue
            try:
                self.view.controller.unwind_position(self.view.currency, bucket.maturity)
                unwound += 1
            except MarketError as e:
                logger.warning("emergency unwind of maturity %d failed: %s", bucket.maturity, e)

        for bucket in buckets:
            for order in self.view.live_lend_orders(bucket):
                if self.view.controller.cancel_order(self.view.currency, bucket.maturity, order.order_id):
                    cancelled += 1
                else:
                    logger.warning(
                        "emergency cancel of order %d in maturity %d rejected, skipping",
                        order.order_id, bucket.maturity,
                    )

        deposit = self.view.deposit_amount()
        withdrawn = deposit if amount is None else min(amount, deposit)
        if withdrawn > 0:
            self.view.vault.withdraw(self.view.currency, withdrawn)

        logger.info(
            "emergency_withdraw: unwound=%d cancelled=%d withdrawn=%d",
            unwound, cancelled, withdrawn,
        )
        return withdrawn
