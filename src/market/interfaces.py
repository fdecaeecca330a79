"""
Market Interfaces — контракты внешних коллабораторов

Аллокатор не владеет рынком: order book, market controller, custodial vault
и токен реализуются внешними системами. Здесь зафиксированы только их
интерфейсы (structural typing через typing.Protocol) и типы результатов.

Отклонение операции рынком сигнализируется двумя способами:
- bool False от execute_order/cancel_order — штатный "rejected" путь
- MarketError — операционный отказ (неизвестный бакет, нехватка средств)
"""

from dataclasses import dataclass
from typing import NamedTuple, Protocol

from src.core.domain.order import Order, OrderSide


class MarketError(Exception):
    """Операционный отказ внешнего рынка."""


# =============================================================================
# RESULT TYPES
# =============================================================================


class UnwindResult(NamedTuple):
    """Результат частичного unwind позиции (capped)."""

    filled_amount: int  # Реализованная сумма (amount space)
    filled_amount_in_fv: int  # Исполненный FV
    fee_in_fv: int  # Комиссия (FV space)


@dataclass(frozen=True)
class OrderEstimationParams:
    """Параметры симуляции ордера по future value (без изменения состояния)."""

    currency: str
    maturity: int
    user: str
    side: OrderSide
    future_value: int
    additional_deposit_amount: int = 0
    ignore_borrowed_amount: bool = False


class OrderEstimation(NamedTuple):
    """Результат симуляции ордера."""

    last_unit_price: int
    filled_amount: int
    filled_amount_in_fv: int
    order_fee_in_fv: int
    placed_order_amount: int
    coverage: int
    is_insufficient_deposit_amount: bool


# =============================================================================
# PROTOCOLS
# =============================================================================


class MarketController(Protocol):
    """Контроллер рынка: maturities, ордера, позиции."""

    def get_maturities(self, currency: str) -> list[int]: ...

    def get_order_book_id(self, currency: str, maturity: int) -> int: ...

    def execute_order(
        self,
        currency: str,
        maturity: int,
        side: OrderSide,
        amount: int,
        unit_price: int,
    ) -> bool: ...

    def cancel_order(self, currency: str, maturity: int, order_id: int) -> bool: ...

    def unwind_position(self, currency: str, maturity: int) -> None: ...

    def unwind_position_with_cap(
        self, currency: str, maturity: int, max_future_value: int
    ) -> UnwindResult: ...

    def get_position(self, currency: str, maturity: int, holder: str) -> tuple[int, int]: ...

    def get_order_estimation_from_fv(self, params: OrderEstimationParams) -> OrderEstimation: ...


class OrderBook(Protocol):
    """Order book отдельного бакета (адресуется по book id)."""

    def is_opened(self, book_id: int) -> bool: ...

    def is_opening_auction_period(self, book_id: int) -> bool: ...

    def is_pre_order_only_period(self, book_id: int) -> bool: ...

    def get_market_unit_price(self, book_id: int) -> int: ...

    def get_best_lend_price(self, book_id: int) -> int: ...

    def get_best_borrow_price(self, book_id: int) -> int: ...

    def get_order_fee_rate(self) -> int: ...

    def get_lend_order_ids(self, book_id: int, holder: str) -> list[int]: ...

    def get_order(self, book_id: int, order_id: int) -> Order: ...


class CustodialVault(Protocol):
    """Custodial vault: депозиты, из которых размещаются ордера."""

    def deposit(self, currency: str, amount: int) -> None: ...

    def withdraw(self, currency: str, amount: int) -> None: ...

    def get_deposit_amount(self, holder: str, currency: str) -> int: ...

    def get_token_address(self, currency: str) -> str: ...


class AssetToken(Protocol):
    """Токен актива: idle-капитал держателя."""

    address: str

    def balance_of(self, holder: str) -> int: ...
