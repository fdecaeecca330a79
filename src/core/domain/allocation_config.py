"""
AllocationConfig — неизменяемая конфигурация стратегии

Задаётся один раз при создании стратегии:
- веса распределения капитала по слотам target-бакетов (max_buckets слотов)
- минимальная годовая ставка (rate floor)
- порог idle-капитала для rebalance trigger
- начальное окно исключения maturities (живое значение хранит стратегия)

ИНВАРИАНТЫ:
1. Каждый вес > 0, сумма весов > 0
2. len(weights) == max_buckets
3. min_apr_bps > 0
4. min_tend_amount задаётся явно: при 0 trigger срабатывает всегда
"""

from pydantic import BaseModel, Field, field_validator, model_validator


class AllocationConfig(BaseModel):
    """
    Конфигурация аллокатора.

    Immutable модель (frozen=True).
    """

    # Рынок
    currency: str = Field(..., min_length=1, description="Ключ валюты рынка (например, 'USDC')")
    asset: str = Field(..., min_length=1, description="Адрес токена, которым управляет host framework")
    holder: str = Field(..., min_length=1, description="Аккаунт стратегии внутри рынка")

    # Распределение капитала
    weights: tuple[int, ...] = Field(..., min_length=1, description="Веса слотов target-бакетов")
    max_buckets: int = Field(..., ge=1, description="Максимум target-бакетов")

    # Ставки и пороги
    min_apr_bps: int = Field(..., gt=0, description="Минимальная годовая ставка (bps)")
    min_tend_amount: int = Field(
        ..., ge=0, description="Порог idle-капитала для tend (0: trigger due при любом idle)"
    )
    maturity_exclusion_window_sec: int = Field(
        0, ge=0, description="Начальное окно исключения maturities (секунды)"
    )

    model_config = {"frozen": True}

    @field_validator("currency", "asset", "holder")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Пустая (или из пробелов) строка эквивалентна нулевому адресу."""
        if not v.strip():
            raise ValueError("value must not be blank")
        return v

    @field_validator("weights")
    @classmethod
    def validate_weights_positive(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        """Каждый вес строго положителен."""
        for i, w in enumerate(v):
            if w <= 0:
                raise ValueError(f"weight[{i}] must be positive, got {w}")
        return v

    @model_validator(mode="after")
    def validate_weights_length(self) -> "AllocationConfig":
        """len(weights) == max_buckets."""
        if len(self.weights) != self.max_buckets:
            raise ValueError(
                f"weights length {len(self.weights)} does not match "
                f"max_buckets {self.max_buckets}"
            )
        return self
