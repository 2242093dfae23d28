"""
Numerical Safeguards — Float & Matrix Primitives

Модуль собирает численные примитивы, на которые опирается кэш обратной матрицы:
- Точное сравнение с нулём (без epsilon) для теста сингулярности
- Проверка валидности float/матриц (NaN/Inf)
- Толерантности для проверки I × M ≈ E

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Тест сингулярности — только точный ноль, никакой толерантности
2. Толерантности применяются только к проверке результата, не к решению о кэше
3. Все операции детерминированы и воспроизводимы
"""

import math
from typing import Final

import numpy as np

# =============================================================================
# EPSILON-ПАРАМЕТРЫ
# =============================================================================

# Абсолютная толерантность проверки I × M ≈ E
# Соответствует округлению до 8 знаков в исходной проверке
EPS_INVERSE_CHECK: Final[float] = 1e-8

# Количество знаков при округлении произведения I × M
IDENTITY_ROUND_DECIMALS: Final[int] = 8


# =============================================================================
# ТОЧНЫЕ СРАВНЕНИЯ
# =============================================================================


def is_exact_zero(value: float) -> bool:
    """
    Точная проверка на ноль.

    Намеренно без epsilon: почти сингулярные матрицы (det ≠ 0 точно)
    считаются обратимыми и уходят во внешнюю процедуру обращения.

    Examples:
        >>> is_exact_zero(0.0)
        True
        >>> is_exact_zero(-0.0)
        True
        >>> is_exact_zero(1e-300)
        False
    """
    return value == 0


# =============================================================================
# NaN/Inf ПРОВЕРКИ
# =============================================================================


def is_valid_float(value: float) -> bool:
    """
    Проверка, является ли float валидным (не NaN, не Inf).

    Args:
        value: Проверяемое значение

    Returns:
        True если значение валидное (finite), False если NaN или Inf
    """
    return math.isfinite(value)


def all_finite(matrix: np.ndarray) -> bool:
    """
    Проверка, что все элементы матрицы конечны.

    Плейсхолдер пустой ячейки (1×1 NaN) не проходит эту проверку.
    """
    return bool(np.all(np.isfinite(np.asarray(matrix, dtype=float))))


def validate_tolerance(tol: float, name: str = "tol") -> float:
    """
    Валидация толерантности.

    Raises:
        ValueError: если tol не конечен или отрицателен
    """
    if not is_valid_float(tol):
        raise ValueError(f"{name} contains NaN/Inf: {tol}")
    if tol < 0:
        raise ValueError(f"{name} must be non-negative, got {tol}")
    return tol
