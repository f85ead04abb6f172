"""
Contract validators — проверка persisted state по JSON Schema.

Схемы лежат в пакете (contracts/schema/) и проверяются на корректность
(Draft 2020-12) при первой загрузке:
- ledger_state.json: таблица аккаунтов, supply, глобальная ставка, allowances
- vault_state.json: total_liability
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema
from jsonschema import Draft202012Validator

SCHEMA_DIR = Path(__file__).parent / "schema"


class SchemaLoader:
    """Чтение схем из каталога с кэшированием по имени."""

    def __init__(self, schema_dir: Optional[Path] = None):
        self._schema_dir = schema_dir or SCHEMA_DIR
        if not self._schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")
        self._cache: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, name: str) -> Dict[str, Any]:
        """
        Схема по имени файла без расширения.

        Raises:
            FileNotFoundError: файла нет
            ValueError: файл не является корректной JSON Schema
        """
        if name not in self._cache:
            path = self._schema_dir / f"{name}.json"
            if not path.exists():
                raise FileNotFoundError(f"Schema not found: {path}")
            schema = json.loads(path.read_text(encoding="utf-8"))
            try:
                Draft202012Validator.check_schema(schema)
            except jsonschema.SchemaError as exc:
                raise ValueError(f"Invalid JSON Schema in {name}.json: {exc.message}") from exc
            self._cache[name] = schema
        return self._cache[name]


class ContractValidator:
    """Validator одного контракта."""

    def __init__(self, schema_name: str, loader: Optional[SchemaLoader] = None):
        self.schema_name = schema_name
        self._validator = Draft202012Validator((loader or SchemaLoader()).load_schema(schema_name))

    def validate(self, data: Dict[str, Any]) -> None:
        """Raises: jsonschema.ValidationError"""
        self._validator.validate(data)

    def errors(self, data: Dict[str, Any]) -> List[str]:
        """Все нарушения в виде "путь: сообщение" (пустой список, если данные валидны)."""
        found = sorted(self._validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
        return [f"{'/'.join(map(str, e.absolute_path)) or '<root>'}: {e.message}" for e in found]


_VALIDATORS: Dict[str, ContractValidator] = {}


def get_validator(schema_name: str) -> ContractValidator:
    """ContractValidator для схемы пакета (создаётся один раз на процесс)."""
    if schema_name not in _VALIDATORS:
        _VALIDATORS[schema_name] = ContractValidator(schema_name)
    return _VALIDATORS[schema_name]


def validate_ledger_state(data: Dict[str, Any]) -> None:
    """Raises: jsonschema.ValidationError"""
    get_validator("ledger_state").validate(data)


def validate_vault_state(data: Dict[str, Any]) -> None:
    """Raises: jsonschema.ValidationError"""
    get_validator("vault_state").validate(data)
