"""
MaturityBucket — дискретная дата погашения с собственным order book

Immutable Pydantic модель. Бакеты не хранятся между вызовами: на каждом
вызове они заново строятся из списка maturities внешнего рынка.
"""

from pydantic import BaseModel, Field


class MaturityBucket(BaseModel):
    """
    Бакет погашения: идентификатор order book + timestamp погашения.

    Immutable модель (frozen=True), hashable — может быть ключом dict.
    """

    book_id: int = Field(..., gt=0, description="Идентификатор order book, назначенный рынком")
    maturity: int = Field(..., gt=0, description="Timestamp погашения (Unix seconds)")

    model_config = {"frozen": True}
