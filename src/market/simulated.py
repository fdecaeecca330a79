"""
SimulatedLendingMarket — in-memory рынок с фиксированными погашениями

Paper/backtest backend: реализует MarketController, OrderBook и
CustodialVault в памяти и владеет SimulatedToken (AssetToken).

Модель:
- lend ордер блокирует principal из депозита вызывающего в vault
- cancel возвращает оставшийся principal в депозит
- fill_lend_order переводит principal в позицию:
      fv = amount * SCALE // unit_price - order_fee_in_fv
- PV позиции = fv * market_unit_price // SCALE (fv после погашения или
  при отсутствии рыночной цены)
- unwind расходует min(position_fv, cap) FV, берёт комиссию в FV и
  зачисляет filled_fv * unwind_price // SCALE в депозит

Fault injection для тестов: отклонённые cancel по order id, отклонённые
размещения, падающие unwind, принудительный insufficient в симуляции.
"""

import logging
import time
from dataclasses import dataclass, field, fields
from typing import Callable

from src.core.domain.order import Order, OrderSide
from src.core.math.numerical_safeguards import SCALE, SECONDS_PER_YEAR
from src.market.interfaces import (
    MarketError,
    OrderEstimation,
    OrderEstimationParams,
    UnwindResult,
)

logger = logging.getLogger(__name__)

# Аккаунт, на котором vault держит токены депозитов
VAULT_ACCOUNT = "custodial-vault"


# =============================================================================
# TOKEN
# =============================================================================


class SimulatedToken:
    """Токен актива с балансами по держателям."""

    def __init__(self, address: str):
        self.address = address
        self._balances: dict[str, int] = {}

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def mint(self, holder: str, amount: int) -> None:
        if amount < 0:
            raise MarketError(f"cannot mint negative amount {amount}")
        self._balances[holder] = self.balance_of(holder) + amount

    def burn(self, holder: str, amount: int) -> None:
        if amount > self.balance_of(holder):
            raise MarketError(f"burn of {amount} exceeds balance of {holder}")
        self._balances[holder] = self.balance_of(holder) - amount

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise MarketError(f"cannot transfer negative amount {amount}")
        if amount > self.balance_of(sender):
            raise MarketError(
                f"transfer of {amount} exceeds balance {self.balance_of(sender)} of {sender}"
            )
        self._balances[sender] = self.balance_of(sender) - amount
        self._balances[recipient] = self.balance_of(recipient) + amount


# =============================================================================
# ORDER BOOK STATE
# =============================================================================


@dataclass
class SimulatedBook:
    """Состояние одного order book."""

    book_id: int
    maturity: int
    opened: bool = True
    opening_auction: bool = False
    pre_order_only: bool = False
    market_unit_price: int = 0
    best_lend_price: int = 0
    best_borrow_price: int = 0
    # Цена исполнения unwind (None → market_unit_price), моделирует проскальзывание
    unwind_unit_price: int | None = None
    orders: dict[int, Order] = field(default_factory=dict)


_MUTABLE_BOOK_FIELDS = frozenset(
    f.name for f in fields(SimulatedBook) if f.name not in ("book_id", "maturity", "orders")
)


# =============================================================================
# MARKET
# =============================================================================


class SimulatedLendingMarket:
    """In-memory рынок: controller + order book + custodial vault."""

    def __init__(
        self,
        currency: str,
        account: str,
        token_address: str = "0xasset",
        order_fee_rate_bps: int = 0,
        clock: Callable[[], int] | None = None,
    ):
        """
        Args:
            currency: Единственная валюта рынка
            account: Аккаунт, от имени которого выполняются мутирующие вызовы
            token_address: Адрес токена актива
            order_fee_rate_bps: Годовая ставка комиссии ордеров (bps)
            clock: Источник текущего времени (Unix seconds)
        """
        self.currency = currency
        self.account = account
        self.token = SimulatedToken(token_address)
        self.order_fee_rate_bps = order_fee_rate_bps
        self._clock = clock or (lambda: int(time.time()))

        self._books: dict[int, SimulatedBook] = {}  # maturity -> book
        self._books_by_id: dict[int, SimulatedBook] = {}
        self._deposits: dict[str, int] = {}
        self._positions: dict[tuple[int, str], int] = {}  # (maturity, holder) -> fv
        self._next_book_id = 1
        self._next_order_id = 1

        # Fault injection
        self.rejected_cancel_ids: set[int] = set()
        self.reject_submissions: bool = False
        self.failing_unwind_maturities: set[int] = set()
        self.force_insufficient_estimation: bool = False

        # Журнал запросов unwind: (maturity, cap или None для полного unwind)
        self.unwind_calls: list[tuple[int, int | None]] = []

    # -------------------------------------------------------------------------
    # Setup helpers
    # -------------------------------------------------------------------------

    def add_maturity(self, maturity: int, **book_state) -> int:
        """Регистрация нового бакета; возвращает назначенный book id."""
        if maturity in self._books:
            raise MarketError(f"maturity {maturity} already registered")
        book = SimulatedBook(book_id=self._next_book_id, maturity=maturity)
        self._next_book_id += 1
        self._books[maturity] = book
        self._books_by_id[book.book_id] = book
        self.set_book_state(maturity, **book_state)
        return book.book_id

    def set_book_state(self, maturity: int, **changes) -> None:
        """Изменение фазы/цен order book (opened, market_unit_price, ...)."""
        book = self._book(maturity)
        for name, value in changes.items():
            if name not in _MUTABLE_BOOK_FIELDS:
                raise MarketError(f"unknown order book attribute: {name}")
            setattr(book, name, value)

    def book(self, maturity: int) -> SimulatedBook:
        """Прямой доступ к состоянию order book (для инспекции в тестах)."""
        return self._book(maturity)

    def set_position(self, holder: str, maturity: int, future_value: int) -> None:
        """Прямая установка FV позиции (допускает некорректные значения)."""
        self._book(maturity)
        self._positions[(maturity, holder)] = future_value

    def fill_lend_order(self, maturity: int, order_id: int, amount: int | None = None) -> int:
        """
        Исполнение lend ордера контрагентом.

        Returns:
            Прирост FV позиции мейкера (за вычетом комиссии)
        """
        book = self._book(maturity)
        order = book.orders.get(order_id)
        if order is None:
            raise MarketError(f"unknown order {order_id} in maturity {maturity}")

        filled = order.amount if amount is None else amount
        if filled <= 0 or filled > order.amount:
            raise MarketError(f"invalid fill amount {filled} for order {order_id}")

        gross_fv = filled * SCALE // order.unit_price
        fv = gross_fv - self._order_fee_in_fv(gross_fv, maturity)

        book.orders[order_id] = order.model_copy(update={"amount": order.amount - filled})
        key = (maturity, order.maker)
        self._positions[key] = self._positions.get(key, 0) + fv
        # Principal уходит заёмщику
        self.token.burn(VAULT_ACCOUNT, filled)
        return fv

    # -------------------------------------------------------------------------
    # MarketController
    # -------------------------------------------------------------------------

    def get_maturities(self, currency: str) -> list[int]:
        if currency != self.currency:
            return []
        return sorted(self._books)

    def get_order_book_id(self, currency: str, maturity: int) -> int:
        if currency != self.currency or maturity not in self._books:
            return 0
        return self._books[maturity].book_id

    def execute_order(
        self,
        currency: str,
        maturity: int,
        side: OrderSide,
        amount: int,
        unit_price: int,
    ) -> bool:
        book = self._require_book(currency, maturity)
        if side != OrderSide.LEND:
            raise MarketError("simulated market accepts lend orders only")

        if self.reject_submissions or not book.opened:
            return False
        if amount <= 0 or not 0 < unit_price <= SCALE:
            return False

        deposit = self._deposits.get(self.account, 0)
        if amount > deposit:
            return False

        self._deposits[self.account] = deposit - amount
        order = Order(
            order_id=self._next_order_id,
            side=side,
            unit_price=unit_price,
            maturity=maturity,
            maker=self.account,
            amount=amount,
            timestamp=self._clock(),
            is_pre_order=book.pre_order_only,
        )
        self._next_order_id += 1
        book.orders[order.order_id] = order
        logger.debug("order %d placed: %d @ %d (maturity %d)", order.order_id, amount, unit_price, maturity)
        return True

    def cancel_order(self, currency: str, maturity: int, order_id: int) -> bool:
        book = self._require_book(currency, maturity)
        if order_id in self.rejected_cancel_ids:
            return False

        order = book.orders.get(order_id)
        if order is None or order.maker != self.account:
            return False

        del book.orders[order_id]
        self._deposits[self.account] = self._deposits.get(self.account, 0) + order.amount
        return True

    def unwind_position(self, currency: str, maturity: int) -> None:
        self._require_book(currency, maturity)
        self._unwind(maturity, None)

    def unwind_position_with_cap(
        self, currency: str, maturity: int, max_future_value: int
    ) -> UnwindResult:
        self._require_book(currency, maturity)
        return self._unwind(maturity, max_future_value)

    def get_position(self, currency: str, maturity: int, holder: str) -> tuple[int, int]:
        book = self._require_book(currency, maturity)
        fv = self._positions.get((maturity, holder), 0)
        if self._clock() >= maturity or book.market_unit_price == 0:
            return fv, fv
        return fv * book.market_unit_price // SCALE, fv

    def get_order_estimation_from_fv(self, params: OrderEstimationParams) -> OrderEstimation:
        book = self._require_book(params.currency, params.maturity)
        position_fv = self._positions.get((params.maturity, params.user), 0)
        _, result = self._estimate_unwind(book, position_fv, params.future_value)
        insufficient = self.force_insufficient_estimation or params.future_value > position_fv

        return OrderEstimation(
            last_unit_price=self._unwind_price(book),
            filled_amount=result.filled_amount,
            filled_amount_in_fv=result.filled_amount_in_fv,
            order_fee_in_fv=result.fee_in_fv,
            placed_order_amount=0,
            coverage=0,
            is_insufficient_deposit_amount=insufficient,
        )

    # -------------------------------------------------------------------------
    # OrderBook
    # -------------------------------------------------------------------------

    def is_opened(self, book_id: int) -> bool:
        return self._book_by_id(book_id).opened

    def is_opening_auction_period(self, book_id: int) -> bool:
        return self._book_by_id(book_id).opening_auction

    def is_pre_order_only_period(self, book_id: int) -> bool:
        return self._book_by_id(book_id).pre_order_only

    def get_market_unit_price(self, book_id: int) -> int:
        return self._book_by_id(book_id).market_unit_price

    def get_best_lend_price(self, book_id: int) -> int:
        return self._book_by_id(book_id).best_lend_price

    def get_best_borrow_price(self, book_id: int) -> int:
        return self._book_by_id(book_id).best_borrow_price

    def get_order_fee_rate(self) -> int:
        return self.order_fee_rate_bps

    def get_lend_order_ids(self, book_id: int, holder: str) -> list[int]:
        book = self._book_by_id(book_id)
        return sorted(
            oid
            for oid, order in book.orders.items()
            if order.maker == holder and order.side == OrderSide.LEND
        )

    def get_order(self, book_id: int, order_id: int) -> Order:
        book = self._book_by_id(book_id)
        if order_id not in book.orders:
            raise MarketError(f"unknown order {order_id} in book {book_id}")
        return book.orders[order_id]

    # -------------------------------------------------------------------------
    # CustodialVault
    # -------------------------------------------------------------------------

    def deposit(self, currency: str, amount: int) -> None:
        self._require_currency(currency)
        self.token.transfer(self.account, VAULT_ACCOUNT, amount)
        self._deposits[self.account] = self._deposits.get(self.account, 0) + amount

    def withdraw(self, currency: str, amount: int) -> None:
        self._require_currency(currency)
        deposit = self._deposits.get(self.account, 0)
        if amount > deposit:
            raise MarketError(f"withdraw of {amount} exceeds deposit {deposit}")
        self._deposits[self.account] = deposit - amount
        self.token.transfer(VAULT_ACCOUNT, self.account, amount)

    def get_deposit_amount(self, holder: str, currency: str) -> int:
        if currency != self.currency:
            return 0
        return self._deposits.get(holder, 0)

    def get_token_address(self, currency: str) -> str:
        if currency != self.currency:
            return ""
        return self.token.address

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _book(self, maturity: int) -> SimulatedBook:
        if maturity not in self._books:
            raise MarketError(f"unknown maturity {maturity}")
        return self._books[maturity]

    def _book_by_id(self, book_id: int) -> SimulatedBook:
        if book_id not in self._books_by_id:
            raise MarketError(f"unknown order book {book_id}")
        return self._books_by_id[book_id]

    def _require_currency(self, currency: str) -> None:
        if currency != self.currency:
            raise MarketError(f"unsupported currency {currency}")

    def _require_book(self, currency: str, maturity: int) -> SimulatedBook:
        self._require_currency(currency)
        return self._book(maturity)

    def _order_fee_in_fv(self, future_value: int, maturity: int) -> int:
        ttm = max(maturity - self._clock(), 0)
        return future_value * self.order_fee_rate_bps * ttm // (SCALE * SECONDS_PER_YEAR)

    def _unwind_price(self, book: SimulatedBook) -> int:
        if book.unwind_unit_price is not None:
            return book.unwind_unit_price
        return book.market_unit_price or SCALE

    def _estimate_unwind(
        self, book: SimulatedBook, position_fv: int, cap: int | None
    ) -> tuple[int, UnwindResult]:
        consumed = position_fv if cap is None else min(position_fv, cap)
        consumed = max(consumed, 0)
        fee_fv = self._order_fee_in_fv(consumed, book.maturity)
        filled_fv = consumed - fee_fv
        filled_amount = filled_fv * self._unwind_price(book) // SCALE
        return consumed, UnwindResult(filled_amount, filled_fv, fee_fv)

    def _unwind(self, maturity: int, cap: int | None) -> UnwindResult:
        self.unwind_calls.append((maturity, cap))
        if maturity in self.failing_unwind_maturities:
            raise MarketError(f"unwind rejected for maturity {maturity}")

        book = self._book(maturity)
        key = (maturity, self.account)
        consumed, result = self._estimate_unwind(book, self._positions.get(key, 0), cap)
        if consumed == 0:
            return result

        self._positions[key] = self._positions[key] - consumed
        self._deposits[self.account] = self._deposits.get(self.account, 0) + result.filled_amount
        # Выручка от продажи FV поступает в vault
        self.token.mint(VAULT_ACCOUNT, result.filled_amount)
        logger.debug(
            "unwind maturity %d: consumed_fv=%d filled=%d fee_fv=%d",
            maturity, consumed, result.filled_amount, result.fee_in_fv,
        )
        return result
