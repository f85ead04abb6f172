"""Vault — депозиты и выкуп единиц ledger за базовый актив 1:1."""

from .base_asset import BaseAsset, ReceiveHook
from .vault import Vault

__all__ = [
    "BaseAsset",
    "ReceiveHook",
    "Vault",
]
