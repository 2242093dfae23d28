"""
Contract Validation Module

Валидация JSON контракта снапшота CacheCell.
"""

from .validators import (
    CellSnapshotValidator,
    SchemaLoader,
    validate_cell_snapshot,
)

__all__ = [
    "SchemaLoader",
    "CellSnapshotValidator",
    "validate_cell_snapshot",
]
