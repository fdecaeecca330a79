"""
Domain models and value objects.

Contains fundamental domain entities: MaturityBucket, Order, Position,
AllocationConfig, AssetReport.
"""

from src.core.domain.allocation_config import AllocationConfig
from src.core.domain.asset_report import AssetReport, BucketExposure
from src.core.domain.maturity import MaturityBucket
from src.core.domain.order import Order, OrderSide
from src.core.domain.position import Position

__all__ = [
    # Config
    "AllocationConfig",
    # Buckets
    "MaturityBucket",
    # Orders
    "Order",
    "OrderSide",
    # Positions
    "Position",
    # Valuation
    "AssetReport",
    "BucketExposure",
]
