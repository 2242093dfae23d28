"""
Core math modules для кэша обратной матрицы

Численные примитивы и внешние процедуры линейной алгебры.
"""

# Numerical Safeguards
from src.core.math.numerical_safeguards import (
    # Epsilon constants
    EPS_INVERSE_CHECK,
    IDENTITY_ROUND_DECIMALS,
    # Exact comparisons
    is_exact_zero,
    # NaN/Inf checks
    all_finite,
    is_valid_float,
    # Validation
    validate_tolerance,
)

# Linear algebra collaborators
from src.core.math.linalg import (
    exact_determinant,
    singularity_determinant,
    inverse_residual,
    is_inverse,
    matrix_from_values,
    round_product,
    solve_inverse,
)

__all__ = [
    # Numerical Safeguards — Epsilon constants
    "EPS_INVERSE_CHECK",
    "IDENTITY_ROUND_DECIMALS",
    # Numerical Safeguards — Exact comparisons
    "is_exact_zero",
    # Numerical Safeguards — NaN/Inf checks
    "all_finite",
    "is_valid_float",
    # Numerical Safeguards — Validation
    "validate_tolerance",
    # Linalg — Construction
    "matrix_from_values",
    # Linalg — Collaborators
    "exact_determinant",
    "singularity_determinant",
    "solve_inverse",
    # Linalg — Checks
    "inverse_residual",
    "is_inverse",
    "round_product",
]
