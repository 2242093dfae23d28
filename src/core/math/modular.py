"""
Modular Arithmetic — детерминант целочисленной матрицы по модулю простых

Строительные блоки точного детерминанта:
- modular_primes: простые p < 2**31 по убыванию (кэшируются)
- reduce_mod / determinant_mod: исключение Гаусса в GF(p) на numpy int64
- crt_combine: наращивание вычета по китайской теореме об остатках

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. p < 2**31, поэтому произведение двух вычетов < 2**62 и помещается в int64
2. is_prime детерминирован для всех n < 3_215_031_751 (Miller-Rabin, базы 2, 3, 5, 7)
"""

from typing import Final, Iterator, List, Sequence, Tuple

import numpy as np

# Верхняя граница модулей
MODULUS_LIMIT: Final[int] = 2**31

_SMALL_PRIMES: Final[Tuple[int, ...]] = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37)
_MILLER_RABIN_BASES: Final[Tuple[int, ...]] = (2, 3, 5, 7)

# Уже найденные простые, по убыванию
_PRIMES: List[int] = []


# =============================================================================
# ПРОСТЫЕ ЧИСЛА
# =============================================================================


def is_prime(n: int) -> bool:
    """
    Проверка простоты для n < 3_215_031_751.

    Examples:
        >>> is_prime(2**31 - 1)
        True
        >>> is_prime(2**31 - 3)
        False
    """
    if n < 2:
        return False
    for p in _SMALL_PRIMES:
        if n % p == 0:
            return n == p

    d, s = n - 1, 0
    while d % 2 == 0:
        d //= 2
        s += 1

    for a in _MILLER_RABIN_BASES:
        x = pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(s - 1):
            x = x * x % n
            if x == n - 1:
                break
        else:
            return False
    return True


def _prime_below(n: int) -> int:
    candidate = n - 1 if n % 2 == 0 else n - 2
    while not is_prime(candidate):
        candidate -= 2
    return candidate


def modular_primes() -> Iterator[int]:
    """Простые по убыванию, начиная с 2**31 - 1."""
    index = 0
    while True:
        if index == len(_PRIMES):
            _PRIMES.append(_prime_below(_PRIMES[-1] if _PRIMES else MODULUS_LIMIT))
        yield _PRIMES[index]
        index += 1


# =============================================================================
# ДЕТЕРМИНАНТ В GF(p)
# =============================================================================


def reduce_mod(rows: Sequence[Sequence[int]], p: int) -> np.ndarray:
    """Целочисленная квадратная матрица (Python int любой длины) → вычеты mod p."""
    n = len(rows)
    return np.array([[x % p for x in row] for row in rows], dtype=np.int64).reshape(n, n)


def determinant_mod(residues: np.ndarray, p: int) -> int:
    """
    Детерминант по модулю простого p.

    Args:
        residues: Квадратная матрица int64 с элементами в [0, p)
        p: Простой модуль < 2**31

    Returns:
        det mod p в [0, p)
    """
    m = residues.copy()
    n = m.shape[0]
    det = 1

    for col in range(n):
        nonzero = np.flatnonzero(m[col:, col])
        if nonzero.size == 0:
            return 0

        pivot = col + int(nonzero[0])
        if pivot != col:
            m[[col, pivot]] = m[[pivot, col]]
            det = -det

        pivot_value = int(m[col, col])
        det = det * pivot_value % p

        factors = m[col + 1:, col] * pow(pivot_value, -1, p) % p
        m[col + 1:, col:] = (m[col + 1:, col:] - np.outer(factors, m[col, col:]) % p) % p

    return det % p


def crt_combine(residue: int, modulus: int, r: int, p: int) -> Tuple[int, int]:
    """
    Китайская теорема об остатках: x ≡ residue (mod modulus), x ≡ r (mod p).

    Returns:
        (x, modulus * p), 0 <= x < modulus * p

    Examples:
        >>> crt_combine(2, 3, 3, 5)
        (8, 15)
    """
    step = (r - residue) * pow(modulus % p, -1, p) % p
    return residue + modulus * step, modulus * p
