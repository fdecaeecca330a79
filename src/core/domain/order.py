"""
Order — ордер во внешнем order book

Ордера принадлежат рынку: ядро только запрашивает создание/отмену и читает
результирующее состояние по числовому order id.
"""

from enum import Enum

from pydantic import BaseModel, Field

from src.core.math.numerical_safeguards import SCALE


# =============================================================================
# ENUMS
# =============================================================================


class OrderSide(str, Enum):
    """Сторона ордера"""

    LEND = "lend"
    BORROW = "borrow"


# =============================================================================
# ORDER MODEL
# =============================================================================


class Order(BaseModel):
    """
    Снапшот ордера в order book.

    amount — оставшийся (неисполненный) principal. Полностью исполненный
    ордер может оставаться в списке ids с amount == 0.
    """

    order_id: int = Field(..., gt=0, description="Идентификатор ордера в order book")
    side: OrderSide = Field(..., description="Сторона ордера (lend/borrow)")
    unit_price: int = Field(..., ge=0, le=SCALE, description="Unit price ордера")
    maturity: int = Field(..., gt=0, description="Timestamp погашения order book")
    maker: str = Field(..., min_length=1, description="Владелец ордера")
    amount: int = Field(..., ge=0, description="Оставшийся principal")
    timestamp: int = Field(0, ge=0, description="Время размещения (Unix seconds)")
    is_pre_order: bool = Field(False, description="Размещён в pre-order фазе")

    model_config = {"frozen": True}

    @property
    def is_live(self) -> bool:
        """Ордер ещё держит principal."""
        return self.amount > 0
