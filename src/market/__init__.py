"""Market — интерфейсы внешнего рынка, фасад чтения и in-memory симулятор.

- interfaces: Protocol-контракты controller / order book / vault / token
- view: MarketView — чтение состояния от имени держателя стратегии
- simulated: SimulatedLendingMarket — paper/test backend
"""

from .interfaces import (
    AssetToken,
    CustodialVault,
    MarketController,
    MarketError,
    OrderBook,
    OrderEstimation,
    OrderEstimationParams,
    UnwindResult,
)
from .simulated import SimulatedLendingMarket, SimulatedToken
from .view import MarketView

__all__ = [
    # Protocols
    "AssetToken",
    "CustodialVault",
    "MarketController",
    "OrderBook",
    # Types
    "MarketError",
    "OrderEstimation",
    "OrderEstimationParams",
    "UnwindResult",
    # Implementations
    "MarketView",
    "SimulatedLendingMarket",
    "SimulatedToken",
]
