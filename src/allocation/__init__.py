"""Allocation — отбор бакетов, распределение капитала и лесенки ордеров.

Чистые решения без мутаций рынка:
- Maturity Selector: до max_buckets торгуемых бакетов вне окна исключения
- Allocation Splitter: split по весам с точным остатком
- Order Ladder Builder: 3 уровня floor / +5 / +10 bps, капитал 40/30/30
"""

from .allocation_splitter import split_allocation
from .maturity_selector import MaturitySelection, MaturitySelector
from .order_ladder import (
    LADDER_RATE_STEP_BPS,
    LADDER_SPLIT_PCT,
    LADDER_TIER_COUNT,
    LadderTier,
    OrderLadderBuilder,
    effective_floor_rate,
    ladder_tier_rates,
    split_ladder_amount,
)

__all__ = [
    # Selector
    "MaturitySelection",
    "MaturitySelector",
    # Splitter
    "split_allocation",
    # Ladder
    "LADDER_RATE_STEP_BPS",
    "LADDER_SPLIT_PCT",
    "LADDER_TIER_COUNT",
    "LadderTier",
    "OrderLadderBuilder",
    "effective_floor_rate",
    "ladder_tier_rates",
    "split_ladder_amount",
]
