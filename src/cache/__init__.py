"""Cache — матрица с кэшированной обратной.

- CacheCell: контейнер матрицы и слота обратной
- CachedInverseSolver / cached_inverse: вычисление обратной с кэшированием
"""

from .cache_cell import CacheCell
from .cached_inverse import (
    CacheEvent,
    CachedInverseSolver,
    NotificationConfig,
    cached_inverse,
)

__all__ = [
    "CacheCell",
    "CacheEvent",
    "CachedInverseSolver",
    "NotificationConfig",
    "cached_inverse",
]
