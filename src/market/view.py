"""
MarketView — фасад над коллабораторами рынка для одной стратегии

Связывает controller, order book, vault и токен с конкретными currency
и holder. Чтения возвращают доменные модели; нарушения инвариантов внешней
системы (отрицательные PV/FV, отсутствующий order book) превращаются
в InvariantViolation.
"""

from src.core.domain.maturity import MaturityBucket
from src.core.domain.order import Order, OrderSide
from src.core.domain.position import Position
from src.core.errors import InvariantViolation
from src.core.math.rate_price import price_to_rate
from src.market.interfaces import AssetToken, CustodialVault, MarketController, OrderBook


class MarketView:
    """Чтение состояния рынка от имени держателя стратегии."""

    def __init__(
        self,
        controller: MarketController,
        order_book: OrderBook,
        vault: CustodialVault,
        token: AssetToken,
        currency: str,
        holder: str,
    ):
        self.controller = controller
        self.order_book = order_book
        self.vault = vault
        self.token = token
        self.currency = currency
        self.holder = holder

    # -------------------------------------------------------------------------
    # Бакеты
    # -------------------------------------------------------------------------

    def maturities(self) -> list[int]:
        """Maturities рынка в порядке, который отдаёт контроллер (по возрастанию)."""
        return list(self.controller.get_maturities(self.currency))

    def bucket(self, maturity: int) -> MaturityBucket:
        """
        Бакет для maturity.

        Raises:
            InvariantViolation: Если у maturity нет order book
        """
        book_id = self.controller.get_order_book_id(self.currency, maturity)
        if book_id <= 0:
            raise InvariantViolation(
                f"no order book for {self.currency} maturity {maturity}"
            )
        return MaturityBucket(book_id=book_id, maturity=maturity)

    def buckets(self) -> list[MaturityBucket]:
        """Все бакеты рынка (порядок контроллера)."""
        return [self.bucket(m) for m in self.maturities()]

    # -------------------------------------------------------------------------
    # Ордера и позиции
    # -------------------------------------------------------------------------

    def lend_orders(self, bucket: MaturityBucket, holder: str | None = None) -> list[Order]:
        """
        Lend ордера держателя в бакете, по возрастанию order id.

        Включает исполненные ордера с amount == 0; фильтрация — на стороне
        вызывающего.
        """
        order_ids = sorted(self.order_book.get_lend_order_ids(bucket.book_id, holder or self.holder))
        orders = [self.order_book.get_order(bucket.book_id, oid) for oid in order_ids]
        return [o for o in orders if o.side == OrderSide.LEND]

    def live_lend_orders(self, bucket: MaturityBucket, holder: str | None = None) -> list[Order]:
        """Lend ордера с положительным оставшимся principal."""
        return [o for o in self.lend_orders(bucket, holder) if o.is_live]

    def position(self, bucket: MaturityBucket, holder: str | None = None) -> Position:
        """
        Позиция держателя в бакете.

        Raises:
            InvariantViolation: Если рынок вернул отрицательный PV или FV
        """
        owner = holder or self.holder
        present_value, future_value = self.controller.get_position(
            self.currency, bucket.maturity, owner
        )
        if present_value < 0 or future_value < 0:
            raise InvariantViolation(
                f"negative position for {owner} at maturity {bucket.maturity}: "
                f"pv={present_value}, fv={future_value}"
            )
        return Position(
            maturity=bucket.maturity,
            present_value=present_value,
            future_value=future_value,
        )

    # -------------------------------------------------------------------------
    # Капитал
    # -------------------------------------------------------------------------

    def deposit_amount(self, holder: str | None = None) -> int:
        """Свободный депозит держателя в custodial vault."""
        return self.vault.get_deposit_amount(holder or self.holder, self.currency)

    def idle_balance(self, holder: str | None = None) -> int:
        """Незадействованный капитал держателя (баланс токена)."""
        return self.token.balance_of(holder or self.holder)

    # -------------------------------------------------------------------------
    # Ставки
    # -------------------------------------------------------------------------

    def market_unit_price(self, bucket: MaturityBucket) -> int:
        """
        Текущая рыночная unit price бакета.

        Если сделок ещё не было (market unit price == 0), используется
        лучшая цена lend-стороны.
        """
        price = self.order_book.get_market_unit_price(bucket.book_id)
        if price == 0:
            price = self.order_book.get_best_lend_price(bucket.book_id)
        return price

    def market_rate(self, bucket: MaturityBucket, now: int) -> int:
        """Текущая рыночная годовая ставка бакета (bps)."""
        return price_to_rate(self.market_unit_price(bucket), bucket.maturity, now)
