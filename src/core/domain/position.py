"""
Position — позиция стратегии в одном бакете погашения

Внешняя сущность рынка per (currency, maturity, holder). Для кредитора
present value и future value неотрицательны: отрицательное значение означает
нарушение инварианта во внешней системе и должно прерывать вызов, а не
молча обрезаться до нуля.
"""

from pydantic import BaseModel, Field


class Position(BaseModel):
    """
    Модель позиции кредитора.

    Immutable модель (frozen=True). Отрицательные значения отклоняются
    валидацией; MarketView переводит их в InvariantViolation.
    """

    maturity: int = Field(..., gt=0, description="Timestamp погашения")
    present_value: int = Field(..., ge=0, description="Текущая дисконтированная стоимость")
    future_value: int = Field(..., ge=0, description="Сумма к погашению")

    model_config = {"frozen": True}

    @property
    def is_open(self) -> bool:
        """Позиция имеет ненулевой future value."""
        return self.future_value > 0
