"""
VaultState — модель состояния vault

Immutable Pydantic модель. Reserve не хранится здесь: это фактический
баланс base asset на адресе vault (BaseAsset.balance_of).
"""

from pydantic import BaseModel, Field


class VaultState(BaseModel):
    """
    Состояние vault.

    total_liability — накопленный principal (deposits - redemptions), с полом
    в нуле. Это приближение обязательств: неурегулированные проценты сюда
    не входят.
    """

    total_liability: int = Field(
        default=0, ge=0, description="Principal депозиторов без процентов"
    )

    model_config = {"frozen": True}
