"""
CellSnapshot — диагностический снапшот CacheCell

Immutable Pydantic модель: текущая матрица, состояние слота обратной и
сама обратная (если вычислена). Совместима с JSON Schema
(src/core/contracts/schema/cell_snapshot.json).

NaN/Inf не представимы в JSON, поэтому такие элементы сериализуются как null.
"""

from typing import List, Optional

import numpy as np
from pydantic import BaseModel, Field

from src.core.domain.inverse_state import InverseSlot, InverseStatus

MatrixRows = List[List[Optional[float]]]


def _as_2d(matrix: np.ndarray) -> np.ndarray:
    a = np.atleast_2d(np.asarray(matrix, dtype=float))
    if a.ndim > 2:
        a = a.reshape(a.shape[0], -1)
    return a


def _matrix_to_rows(a: np.ndarray) -> MatrixRows:
    """2-D матрица → список строк, не-конечные элементы → None."""
    return [[float(x) if np.isfinite(x) else None for x in row] for row in a]


class CellSnapshot(BaseModel):
    """
    Снапшот состояния CacheCell.

    inverse задан только при status == VALID.
    """

    status: InverseStatus = Field(..., description="Состояние слота обратной")
    rows: int = Field(..., ge=0, description="Количество строк матрицы")
    cols: int = Field(..., ge=0, description="Количество столбцов матрицы")
    value: MatrixRows = Field(..., description="Текущая матрица (null для NaN/Inf)")
    inverse: Optional[MatrixRows] = Field(
        None, description="Кэшированная обратная (nullable)"
    )

    model_config = {"frozen": True}

    @classmethod
    def from_state(cls, value: np.ndarray, slot: InverseSlot) -> "CellSnapshot":
        """Построение снапшота из матрицы и слота обратной."""
        a = _as_2d(value)
        inverse = _matrix_to_rows(_as_2d(slot.matrix)) if slot.is_valid else None
        return cls(
            status=slot.status,
            rows=a.shape[0],
            cols=a.shape[1],
            value=_matrix_to_rows(a),
            inverse=inverse,
        )

    @classmethod
    def from_cell(cls, cell) -> "CellSnapshot":
        """Снапшот объекта с интерфейсом CacheCell (get / get_cached_inverse)."""
        return cls.from_state(cell.get(), cell.get_cached_inverse())

    def to_contract(self) -> dict:
        """JSON-совместимый dict для validate_cell_snapshot."""
        return self.model_dump(mode="json")
