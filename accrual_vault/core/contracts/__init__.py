"""
Contract Validation Module

Проверка persisted state ledger и vault по JSON Schema контрактам.
"""

from .validators import (
    ContractValidator,
    SchemaLoader,
    get_validator,
    validate_ledger_state,
    validate_vault_state,
)

__all__ = [
    "SchemaLoader",
    "ContractValidator",
    "get_validator",
    "validate_ledger_state",
    "validate_vault_state",
]
