"""
Contract Validation Module

Модуль для валидации JSON контрактов аллокатора и загрузки конфигурации.
"""

from .validators import (
    AllocationConfigValidator,
    AssetReportValidator,
    ContractValidator,
    SchemaLoader,
    load_allocation_config,
    parse_allocation_config,
    validate_allocation_config,
    validate_asset_report,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "AllocationConfigValidator",
    "AssetReportValidator",
    # Functions
    "validate_allocation_config",
    "validate_asset_report",
    "parse_allocation_config",
    "load_allocation_config",
]
