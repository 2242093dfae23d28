"""
InverseSlot — состояние кэшированной обратной матрицы

Tagged union для слота производного значения CacheCell:
- UNSET: обратная ещё не вычислялась (или кэш сброшен)
- VALID: обратная вычислена, слот несёт матрицу
- SINGULAR: матрица сингулярна, обратной не существует (результат тоже кэшируется)

UNSET и SINGULAR — разные состояния: отрицательный результат для
сингулярной матрицы кэшируется и не путается с "ещё не пробовали".

Переходы:
- set(new_value)            → UNSET (всегда)
- cached_inverse при UNSET  → VALID | SINGULAR (по тесту детерминанта)
- cached_inverse при VALID/SINGULAR → без перехода
- set_cached_inverse(x)     → состояние x
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np


class InverseStatus(str, Enum):
    """Состояние слота обратной матрицы."""

    UNSET = "UNSET"
    VALID = "VALID"
    SINGULAR = "SINGULAR"


@dataclass(frozen=True, eq=False)
class InverseSlot:
    """
    Значение слота обратной матрицы.

    matrix задан только для VALID. Экземпляры создаются через
    InverseSlot.unset() / .valid(m) / .singular().
    """

    status: InverseStatus
    matrix: Optional[np.ndarray] = None

    @classmethod
    def unset(cls) -> "InverseSlot":
        return UNSET

    @classmethod
    def singular(cls) -> "InverseSlot":
        return SINGULAR

    @classmethod
    def valid(cls, matrix: np.ndarray) -> "InverseSlot":
        """
        VALID-слот с вычисленной обратной.

        Слот хранит read-only копию matrix: изменения исходного массива
        не затрагивают кэш, а slot.matrix нельзя изменить на месте.

        Raises:
            ValueError: если matrix is None
        """
        if matrix is None:
            raise ValueError("VALID inverse slot requires a matrix, got None")
        frozen = np.array(matrix)
        frozen.flags.writeable = False
        return cls(status=InverseStatus.VALID, matrix=frozen)

    @property
    def is_unset(self) -> bool:
        return self.status == InverseStatus.UNSET

    @property
    def is_valid(self) -> bool:
        return self.status == InverseStatus.VALID

    @property
    def is_singular(self) -> bool:
        return self.status == InverseStatus.SINGULAR

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InverseSlot):
            return NotImplemented
        if self.status != other.status:
            return False
        if self.status != InverseStatus.VALID:
            return True
        return self.matrix is other.matrix or np.array_equal(self.matrix, other.matrix)

    def __hash__(self) -> int:
        # ndarray не хэшируется, равные слоты всегда имеют одинаковый status
        return hash(self.status)

    def __repr__(self) -> str:
        if self.status == InverseStatus.VALID:
            return f"InverseSlot(VALID, shape={np.shape(self.matrix)})"
        return f"InverseSlot({self.status.value})"


# Синглтоны для состояний без payload
UNSET = InverseSlot(status=InverseStatus.UNSET)
SINGULAR = InverseSlot(status=InverseStatus.SINGULAR)
