"""
Cell Snapshot Contract

Проверка диагностического снапшота CacheCell (CellSnapshot.to_contract())
по JSON Schema src/core/contracts/schema/cell_snapshot.json (draft 2020-12).
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

import jsonschema
from jsonschema import Draft202012Validator, ValidationError

SCHEMA_DIR = Path(__file__).parent / "schema"


class SchemaLoader:
    """Чтение и meta-валидация схем из SCHEMA_DIR, с кэшем по имени."""

    def __init__(self, schema_dir: Path = SCHEMA_DIR):
        self._schema_dir = schema_dir
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Raises:
            FileNotFoundError: нет файла <schema_name>.json
            ValueError: файл не является корректной JSON Schema
        """
        if schema_name not in self._schemas:
            path = self._schema_dir / f"{schema_name}.json"
            if not path.exists():
                raise FileNotFoundError(f"Schema not found: {path}")

            schema = json.loads(path.read_text(encoding="utf-8"))
            try:
                Draft202012Validator.check_schema(schema)
            except jsonschema.SchemaError as e:
                raise ValueError(f"Invalid JSON Schema in {path.name}: {e.message}") from e
            self._schemas[schema_name] = schema

        return self._schemas[schema_name]


class CellSnapshotValidator:
    """Валидатор контракта cell_snapshot."""

    SCHEMA_NAME = "cell_snapshot"

    def __init__(self, loader: Optional[SchemaLoader] = None):
        self.schema = (loader or SchemaLoader()).load_schema(self.SCHEMA_NAME)
        self._validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: данные не соответствуют контракту
        """
        self._validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self._validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[ValidationError]:
        return self._validator.iter_errors(data)


_VALIDATOR = None


def validate_cell_snapshot(data: Dict[str, Any]) -> None:
    """
    Валидация снапшота общим экземпляром CellSnapshotValidator.

    Raises:
        ValidationError: данные не соответствуют контракту
    """
    global _VALIDATOR
    if _VALIDATOR is None:
        _VALIDATOR = CellSnapshotValidator()
    _VALIDATOR.validate(data)
