"""CachedInverse — обратная матрица CacheCell с кэшированием.

Алгоритм:
1. Слот не UNSET (VALID или SINGULAR) → уведомление "cache hit", возврат слота
   без пересчёта и без повторной проверки сингулярности.
2. UNSET → детерминант текущей матрицы, тест на ТОЧНЫЙ ноль:
   - det ≠ 0: внешняя процедура обращения (доп. параметры передаются как есть),
     результат → VALID, без уведомления
   - det == 0: уведомление "singular", слот → SINGULAR

Ошибки внешних процедур (детерминант, обращение) не перехватываются:
они пропагируют к вызывающему, слот остаётся UNSET.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

import numpy as np

from src.cache.cache_cell import CacheCell
from src.core.domain.inverse_state import SINGULAR, InverseSlot
from src.core.math.linalg import singularity_determinant, solve_inverse
from src.core.math.numerical_safeguards import is_exact_zero

logger = logging.getLogger(__name__)


class CacheEvent(str, Enum):
    """Пользовательские уведомления кэша."""

    CACHE_HIT = "CACHE_HIT"
    SINGULAR_MATRIX = "SINGULAR_MATRIX"


Notifier = Callable[[CacheEvent, str], None]
Inverter = Callable[..., np.ndarray]
Determinant = Callable[[np.ndarray], Any]


@dataclass(frozen=True)
class NotificationConfig:
    """Тексты уведомлений и уровень логирования sink'а по умолчанию."""

    cache_hit_message: str = "getting cached data"
    singular_message: str = "Singular matrix, inverse does not exist."
    log_level: int = logging.INFO

    def message_for(self, event: CacheEvent) -> str:
        if event == CacheEvent.CACHE_HIT:
            return self.cache_hit_message
        return self.singular_message


class CachedInverseSolver:
    """Оркестрация кэша обратной матрицы.

    Внешние коллабораторы (обращение, детерминант, sink уведомлений)
    инъецируются, что позволяет инструментировать их в тестах.
    """

    def __init__(
        self,
        inverter: Inverter = solve_inverse,
        determinant: Determinant = singularity_determinant,
        notifier: Optional[Notifier] = None,
        config: Optional[NotificationConfig] = None,
    ):
        """
        Args:
            inverter: процедура обращения (default: solve_inverse)
            determinant: процедура детерминанта (default: singularity_determinant)
            notifier: sink уведомлений (default: лог модуля)
            config: тексты уведомлений
        """
        self.inverter = inverter
        self.determinant = determinant
        self.config = config or NotificationConfig()
        self.notifier = notifier or self._log_notification

    def __call__(self, cell: CacheCell, *args: Any, **kwargs: Any) -> InverseSlot:
        """Обратная для cell.get(), из кэша если возможно.

        Args:
            cell: ячейка с матрицей
            *args, **kwargs: передаются во внешнюю процедуру обращения без изменений

        Returns:
            InverseSlot: VALID (slot.matrix — обратная) или SINGULAR
        """
        cached = cell.get_cached_inverse()
        if not cached.is_unset:
            self._notify(CacheEvent.CACHE_HIT)
            return cached

        mat = cell.get()
        if is_exact_zero(self.determinant(mat)):
            self._notify(CacheEvent.SINGULAR_MATRIX)
            cell.set_cached_inverse(SINGULAR)
            return SINGULAR

        result = InverseSlot.valid(self.inverter(mat, *args, **kwargs))
        cell.set_cached_inverse(result)
        logger.debug("Computed inverse for %s matrix", "x".join(map(str, np.shape(mat))))
        return result

    def _notify(self, event: CacheEvent) -> None:
        self.notifier(event, self.config.message_for(event))

    def _log_notification(self, event: CacheEvent, message: str) -> None:
        logger.log(self.config.log_level, message, extra={"cache_event": event.value})


_DEFAULT_SOLVER = CachedInverseSolver()


def cached_inverse(cell: CacheCell, *args: Any, **kwargs: Any) -> InverseSlot:
    """Обратная матрицы cell с кэшированием (solver по умолчанию).

    Examples:
        >>> cell = CacheCell([[2.0, 0.0], [0.0, 4.0]])
        >>> cached_inverse(cell).matrix.tolist()
        [[0.5, 0.0], [0.0, 0.25]]
    """
    return _DEFAULT_SOLVER(cell, *args, **kwargs)
