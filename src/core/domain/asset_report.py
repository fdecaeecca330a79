"""
AssetReport — снапшот оценки капитала стратегии

Immutable Pydantic модель. Полная совместимость с JSON Schema
(contracts/schema/asset_report.json).

Капитал в любой момент распределён по трём наблюдаемым местам:
    total_assets = idle + vault_deposit + Σ (order_amount + present_value)
"""

from pydantic import BaseModel, Field, model_validator


class BucketExposure(BaseModel):
    """Экспозиция стратегии в одном бакете погашения."""

    maturity: int = Field(..., gt=0, description="Timestamp погашения")
    book_id: int = Field(..., gt=0, description="Идентификатор order book")
    order_amount: int = Field(..., ge=0, description="Principal в активных lend ордерах")
    present_value: int = Field(..., ge=0, description="PV позиции")
    future_value: int = Field(..., ge=0, description="FV позиции")

    model_config = {"frozen": True}

    @property
    def value(self) -> int:
        """Вклад бакета в total_assets."""
        return self.order_amount + self.present_value


class AssetReport(BaseModel):
    """
    Оценка капитала стратегии (harvest and report).

    Immutable модель (frozen=True).
    """

    idle: int = Field(..., ge=0, description="Незадействованный капитал у держателя")
    vault_deposit: int = Field(..., ge=0, description="Свободный депозит в custodial vault")
    buckets: tuple[BucketExposure, ...] = Field(default=(), description="Экспозиция по бакетам")
    total_assets: int = Field(..., ge=0, description="Полная стоимость стратегии")
    observed_at: int = Field(..., ge=0, description="Время снапшота (Unix seconds)")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_total(self) -> "AssetReport":
        """total_assets равен сумме трёх мест хранения капитала."""
        expected = self.idle + self.vault_deposit + sum(b.value for b in self.buckets)
        if self.total_assets != expected:
            raise ValueError(
                f"total_assets {self.total_assets} does not match ledger sum {expected}"
            )
        return self

    @property
    def deployed(self) -> int:
        """Капитал в ордерах и позициях."""
        return sum(b.value for b in self.buckets)
