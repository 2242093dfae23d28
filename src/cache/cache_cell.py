"""CacheCell — матрица вместе с кэшем своей обратной.

Контейнер владеет двумя полями:
- value: текущая матрица
- слот обратной (InverseSlot: UNSET / VALID / SINGULAR)

ИНВАРИАНТЫ:
1. Любая замена value в той же операции сбрасывает слот в UNSET,
   поэтому кэшированная обратная всегда соответствует текущей матрице
2. Ячейка хранит собственную read-only копию матрицы: ни исходный массив
   вызывающего, ни результат get() не позволяют изменить value в обход set()

Контейнер не потокобезопасен: для конкурентного доступа вызывающий код
должен оборачивать последовательности read-modify-write во внешний lock.
"""

from typing import Optional, Union

import numpy as np

from src.core.domain.cell_snapshot import CellSnapshot
from src.core.domain.inverse_state import UNSET, InverseSlot, InverseStatus


def _placeholder_matrix() -> np.ndarray:
    """Плейсхолдер пустой ячейки: матрица 1×1 с NaN."""
    return np.full((1, 1), np.nan)


def _owned_copy(value: np.ndarray) -> np.ndarray:
    """Собственная read-only копия матрицы (float)."""
    owned = np.array(value, dtype=float)
    owned.flags.writeable = False
    return owned


class CacheCell:
    """Матрица с лениво вычисляемой и инвалидируемой обратной.

    Операции:
    - set(new_value): замена матрицы, слот → UNSET
    - get(): текущая матрица
    - set_cached_inverse(inv): прямая запись слота (hook для тестов/сброса)
    - get_cached_inverse(): текущий слот
    """

    def __init__(self, value: Optional[np.ndarray] = None):
        """
        Args:
            value: начальная матрица (default: плейсхолдер 1×1 NaN)
        """
        self._value = _owned_copy(_placeholder_matrix() if value is None else value)
        self._inverse: InverseSlot = UNSET

    def set(self, new_value: np.ndarray) -> None:
        """Замена матрицы. Кэш обратной безусловно сбрасывается."""
        self._value = _owned_copy(new_value)
        self._inverse = UNSET

    def get(self) -> np.ndarray:
        return self._value

    def set_cached_inverse(self, inv: Union[InverseSlot, np.ndarray, None]) -> None:
        """Прямая запись слота обратной без валидации.

        Args:
            inv: InverseSlot (UNSET для принудительного пересчёта, SINGULAR,
                VALID); None эквивалентен UNSET; голая матрица оборачивается
                в VALID.
        """
        if inv is None:
            self._inverse = UNSET
        elif isinstance(inv, InverseSlot):
            self._inverse = inv
        else:
            self._inverse = InverseSlot.valid(inv)

    def get_cached_inverse(self) -> InverseSlot:
        return self._inverse

    @property
    def status(self) -> InverseStatus:
        """Текущее состояние слота обратной."""
        return self._inverse.status

    def snapshot(self) -> CellSnapshot:
        """Диагностический снапшот (матрица, состояние, обратная)."""
        return CellSnapshot.from_cell(self)

    def __repr__(self) -> str:
        return f"CacheCell(shape={self._value.shape}, inverse={self._inverse.status.value})"
