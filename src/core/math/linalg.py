"""
Linear Algebra Collaborators — Determinant, Inversion, Checks

Внешние численные процедуры, которыми пользуется кэш обратной матрицы.
Сам кэш рассматривает их как чёрный ящик: не валидирует входы и не
перехватывает их ошибки.

Состав:
- matrix_from_values: построение матрицы по плоскому списку (column-major по умолчанию)
- exact_determinant: точный детерминант (целочисленное масштабирование + CRT)
- singularity_determinant: точный тест на ноль с ранним выходом (по умолчанию в кэше)
- solve_inverse: процедура обращения по умолчанию (numpy.linalg)
- inverse_residual / is_inverse / round_product: проверка I × M ≈ E

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. exact_determinant(M) == 0 и singularity_determinant(M) == 0.0 тогда и
   только тогда, когда M точно сингулярна (каждый конечный float — точное
   двоично-рациональное число)
2. numpy.linalg.det не решает вопрос сингулярности (для [[1,4,7],[2,5,8],[3,6,9]]
   он может вернуть ~1e-16 вместо нуля), а только даёт значение для
   несингулярной матрицы
"""

import math
from fractions import Fraction
from typing import Iterable, List, Optional, Tuple

import numpy as np

from src.core.math.modular import crt_combine, determinant_mod, modular_primes, reduce_mod
from src.core.math.numerical_safeguards import (
    EPS_INVERSE_CHECK,
    IDENTITY_ROUND_DECIMALS,
    validate_tolerance,
)

# =============================================================================
# ПОСТРОЕНИЕ МАТРИЦ
# =============================================================================


def matrix_from_values(
    values: Iterable[float],
    nrow: int,
    byrow: bool = False,
) -> np.ndarray:
    """
    Построение матрицы из плоской последовательности значений.

    По умолчанию заполнение идёт по столбцам (column-major), как у
    R matrix(values, nrow=...). При byrow=True — по строкам.

    Args:
        values: Плоская последовательность значений
        nrow: Количество строк (> 0)
        byrow: Заполнять по строкам

    Returns:
        Матрица float формы (nrow, len(values) // nrow)

    Raises:
        ValueError: если nrow <= 0 или длина не кратна nrow

    Examples:
        >>> matrix_from_values(range(1, 10), nrow=3).tolist()
        [[1.0, 4.0, 7.0], [2.0, 5.0, 8.0], [3.0, 6.0, 9.0]]
        >>> matrix_from_values([1, 2, 3, 4], nrow=2, byrow=True).tolist()
        [[1.0, 2.0], [3.0, 4.0]]
    """
    if nrow <= 0:
        raise ValueError(f"nrow must be positive, got {nrow}")

    data = np.asarray(list(values), dtype=float)
    if data.size == 0 or data.size % nrow != 0:
        raise ValueError(
            f"Number of values ({data.size}) is not a positive multiple of nrow={nrow}"
        )

    ncol = data.size // nrow
    order = "C" if byrow else "F"
    return data.reshape((nrow, ncol), order=order)


# =============================================================================
# ДЕТЕРМИНАНТ
# =============================================================================


def _integer_matrix(matrix: np.ndarray) -> Tuple[List[List[int]], int]:
    """
    Квадратная float-матрица → (целочисленная матрица B, масштаб D), M = B / D.

    Каждый конечный float — двоично-рациональное число, D — общая степень двойки.

    Raises:
        numpy.linalg.LinAlgError: если матрица не квадратная
        ValueError: если матрица содержит NaN
        OverflowError: если матрица содержит ±Inf
    """
    a = np.asarray(matrix, dtype=float)
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise np.linalg.LinAlgError(
            f"Last 2 dimensions of the array must be square, got shape {a.shape}"
        )

    ratios = [[x.as_integer_ratio() for x in row] for row in a.tolist()]
    scale = max((den for row in ratios for _, den in row), default=1)
    rows = [[num * (scale // den) for num, den in row] for row in ratios]
    return rows, scale


def _hadamard_bits(rows: List[List[int]]) -> int:
    """H такое, что |det B| < 2**H (оценка Адамара по нормам строк)."""
    return sum((sum(x * x for x in row).bit_length() + 1) // 2 for row in rows)


def _has_zero_row(rows: List[List[int]]) -> bool:
    return any(not any(row) for row in rows)


def exact_determinant(matrix: np.ndarray) -> Fraction:
    """
    Точный детерминант квадратной матрицы.

    M = B / D (B целочисленная, D — степень двойки), det M = det B / D**n.
    det B восстанавливается из вычетов по простым модулям (CRT), пока
    произведение модулей не превысит удвоенную оценку Адамара.
    Результат равен нулю тогда и только тогда, когда матрица (в точном
    представлении её float-элементов) сингулярна.

    Args:
        matrix: Квадратная матрица

    Returns:
        Детерминант как Fraction (float(det) для приближённого значения)

    Raises:
        numpy.linalg.LinAlgError: если матрица не квадратная
        ValueError: если матрица содержит NaN
        OverflowError: если матрица содержит ±Inf

    Examples:
        >>> exact_determinant([[1, -1, 0], [-1, 0, 1], [6, -2, -3]])
        Fraction(-1, 1)
        >>> exact_determinant([[1, 4, 7], [2, 5, 8], [3, 6, 9]])
        Fraction(0, 1)
    """
    rows, scale = _integer_matrix(matrix)
    if _has_zero_row(rows):
        return Fraction(0)

    # |det B| < 2**H, симметричный вычет однозначен при modulus >= 2**(H + 1)
    bound_bits = _hadamard_bits(rows) + 1
    residue, modulus = 0, 1
    for p in modular_primes():
        r = determinant_mod(reduce_mod(rows, p), p)
        residue, modulus = crt_combine(residue, modulus, r, p)
        if modulus.bit_length() > bound_bits:
            break

    if residue > modulus // 2:
        residue -= modulus
    return Fraction(residue, scale ** len(rows))


def singularity_determinant(matrix: np.ndarray) -> float:
    """
    Детерминант для точного теста на ноль (процедура по умолчанию в кэше).

    Возвращает 0.0 тогда и только тогда, когда матрица точно сингулярна.
    Для несингулярной матрицы — ненулевое приближение детерминанта
    (numpy.linalg.det; если оно округлилось до нуля, то наименьший
    положительный float).

    Несингулярность подтверждается первым ненулевым вычетом det B mod p,
    обычно уже на первом простом. Ноль подтверждается, когда произведение
    проверенных модулей превышает оценку Адамара.

    Raises:
        numpy.linalg.LinAlgError: если матрица не квадратная
        ValueError: если матрица содержит NaN
        OverflowError: если матрица содержит ±Inf

    Examples:
        >>> singularity_determinant([[1, 4, 7], [2, 5, 8], [3, 6, 9]])
        0.0
    """
    rows, _ = _integer_matrix(matrix)
    if _has_zero_row(rows):
        return 0.0

    bound_bits = _hadamard_bits(rows)
    modulus = 1
    for p in modular_primes():
        if determinant_mod(reduce_mod(rows, p), p) != 0:
            break
        modulus *= p
        if modulus.bit_length() > bound_bits:
            return 0.0

    estimate = float(np.linalg.det(np.asarray(matrix, dtype=float)))
    if estimate == 0.0 or math.isnan(estimate):
        return math.ulp(0.0)
    return estimate


# =============================================================================
# ОБРАЩЕНИЕ
# =============================================================================


def solve_inverse(matrix: np.ndarray, b: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Процедура обращения по умолчанию.

    Без b возвращает A⁻¹ (numpy.linalg.inv). С b решает A·x = b
    (numpy.linalg.solve) — так дополнительные параметры, переданные в
    cached_inverse, доходят до решателя без изменений.

    Raises:
        numpy.linalg.LinAlgError: если numpy не может обратить матрицу
    """
    if b is None:
        return np.linalg.inv(matrix)
    return np.linalg.solve(matrix, b)


# =============================================================================
# ПРОВЕРКА РЕЗУЛЬТАТА
# =============================================================================


def round_product(
    inverse: np.ndarray,
    matrix: np.ndarray,
    decimals: int = IDENTITY_ROUND_DECIMALS,
) -> np.ndarray:
    """Округлённое произведение I × M (для обратной должно дать E)."""
    return np.round(np.asarray(inverse) @ np.asarray(matrix), decimals)


def inverse_residual(matrix: np.ndarray, inverse: np.ndarray) -> float:
    """
    Максимальное по модулю отклонение I × M от единичной матрицы.

    Raises:
        ValueError: если формы I и M несовместимы
    """
    product = np.asarray(inverse, dtype=float) @ np.asarray(matrix, dtype=float)
    if product.ndim != 2 or product.shape[0] != product.shape[1]:
        raise ValueError(f"I × M must be square, got shape {product.shape}")
    return float(np.max(np.abs(product - np.eye(product.shape[0]))))


def is_inverse(
    matrix: np.ndarray,
    inverse: np.ndarray,
    atol: float = EPS_INVERSE_CHECK,
) -> bool:
    """
    Проверка, что inverse — обратная к matrix с точностью atol.

    Examples:
        >>> m = [[2.0, 0.0], [0.0, 4.0]]
        >>> is_inverse(m, [[0.5, 0.0], [0.0, 0.25]])
        True
    """
    validate_tolerance(atol, "atol")
    return inverse_residual(matrix, inverse) <= atol
