"""Тесты для CachedInverse.

Coverage:
- Cache hit / cache miss
- Инвалидация через set и через set_cached_inverse
- Сингулярные матрицы (маркер кэшируется)
- Корректность результата (I × M ≈ E)
- Уведомления (sink и лог по умолчанию)
- Пропагация ошибок внешних процедур
- Передача дополнительных параметров в процедуру обращения
"""

import logging
import time

import numpy as np
import pytest

from src.cache.cache_cell import CacheCell
from src.cache.cached_inverse import (
    CacheEvent,
    CachedInverseSolver,
    NotificationConfig,
    cached_inverse,
)
from src.core.domain.inverse_state import SINGULAR, UNSET, InverseStatus
from src.core.math.linalg import is_inverse, matrix_from_values, round_product, solve_inverse

LOGGER_NAME = "src.cache.cached_inverse"


# =============================================================================
# FIXTURES
# =============================================================================


class CountingInverter:
    """Процедура обращения с подсчётом вызовов."""

    def __init__(self):
        self.calls = []

    def __call__(self, matrix, *args, **kwargs):
        self.calls.append((args, kwargs))
        return solve_inverse(matrix, *args, **kwargs)

    @property
    def count(self):
        return len(self.calls)


class RecordingNotifier:
    """Sink уведомлений, запоминающий события."""

    def __init__(self):
        self.events = []

    def __call__(self, event, message):
        self.events.append((event, message))


@pytest.fixture
def inverter():
    return CountingInverter()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def solver(inverter, notifier):
    return CachedInverseSolver(inverter=inverter, notifier=notifier)


@pytest.fixture
def m1():
    """M = [[1,-1,0],[-1,0,1],[6,-2,-3]] (по строкам), det = -1."""
    return matrix_from_values([1, -1, 0, -1, 0, 1, 6, -2, -3], nrow=3, byrow=True)


@pytest.fixture
def m1_inverse():
    return np.array([[-2.0, 3.0, 1.0], [-3.0, 3.0, 1.0], [-2.0, 4.0, 1.0]])


@pytest.fixture
def m3():
    """Сингулярная матрица matrix(1:9, nrow=3) (по столбцам)."""
    return matrix_from_values(range(1, 10), nrow=3)


# =============================================================================
# CACHE HIT / MISS
# =============================================================================


class TestCaching:
    """Тесты кэширования."""

    def test_first_call_computes_second_is_cached(self, solver, inverter, m1):
        cell = CacheCell()
        cell.set(m1)

        first = solver(cell)
        assert inverter.count == 1

        second = solver(cell)
        assert inverter.count == 1
        assert second is first
        assert second.matrix is first.matrix

    def test_result_is_stored_in_cell(self, solver, m1):
        cell = CacheCell(m1)

        result = solver(cell)

        assert cell.get_cached_inverse() is result
        assert cell.status == InverseStatus.VALID

    def test_fresh_computation_emits_no_notification(self, solver, notifier, m1):
        solver(CacheCell(m1))

        assert notifier.events == []

    def test_cache_hit_emits_one_notification(self, solver, notifier, m1):
        cell = CacheCell(m1)
        solver(cell)

        solver(cell)

        assert notifier.events == [(CacheEvent.CACHE_HIT, "getting cached data")]

    def test_many_hits_single_computation(self, solver, inverter, notifier, m1):
        cell = CacheCell(m1)

        for _ in range(5):
            solver(cell)

        assert inverter.count == 1
        assert len(notifier.events) == 4
        assert all(event == CacheEvent.CACHE_HIT for event, _ in notifier.events)


# =============================================================================
# INVALIDATION
# =============================================================================


class TestInvalidation:
    """Тесты инвалидации."""

    def test_external_mutation_cannot_stale_cache(self, solver):
        """Изменение переданного в set() массива не рассинхронизирует кэш."""
        m = np.array([[2.0, 0.0], [0.0, 4.0]])
        cell = CacheCell()
        cell.set(m)
        solver(cell)

        m[0, 0] = 8.0
        result = solver(cell)

        np.testing.assert_array_equal(result.matrix @ cell.get(), np.eye(2))

    def test_returned_inverse_cannot_be_edited(self, solver, m1):
        cell = CacheCell(m1)
        result = solver(cell)

        with pytest.raises(ValueError):
            result.matrix[0, 0] = 0.0

        assert is_inverse(cell.get(), solver(cell).matrix)

    def test_set_forces_recompute(self, solver, inverter, m1):
        cell = CacheCell(m1)
        solver(cell)

        cell.set(m1.copy())
        solver(cell)

        assert inverter.count == 2

    def test_set_identical_matrix_forces_recompute(self, solver, inverter, notifier, m1):
        """Численно идентичная матрица всё равно сбрасывает кэш."""
        cell = CacheCell(m1)
        solver(cell)

        cell.set(m1)
        solver(cell)

        assert inverter.count == 2
        assert notifier.events == []

    def test_manual_uncache_recomputes_equal_value(self, solver, inverter, m1):
        cell = CacheCell(m1)
        original = solver(cell).matrix.copy()

        cell.set_cached_inverse(UNSET)
        recomputed = solver(cell)

        assert inverter.count == 2
        np.testing.assert_allclose(recomputed.matrix, original, atol=1e-12)

        # И снова из кэша
        solver(cell)
        assert inverter.count == 2

    def test_manual_uncache_with_none(self, solver, inverter, m1):
        cell = CacheCell(m1)
        solver(cell)

        cell.set_cached_inverse(None)
        solver(cell)

        assert inverter.count == 2

    def test_forced_singular_marker_is_trusted(self, solver, inverter, notifier, m1):
        """Записанный вручную SINGULAR возвращается без проверки."""
        cell = CacheCell(m1)
        cell.set_cached_inverse(SINGULAR)

        result = solver(cell)

        assert result is SINGULAR
        assert inverter.count == 0
        assert notifier.events == [(CacheEvent.CACHE_HIT, "getting cached data")]


# =============================================================================
# SINGULAR MATRICES
# =============================================================================


class TestSingular:
    """Тесты сингулярных матриц."""

    def test_singular_returns_marker(self, solver, inverter, m3):
        cell = CacheCell(m3)

        result = solver(cell)

        assert result is SINGULAR
        assert result.is_singular
        assert result.matrix is None
        assert inverter.count == 0

    def test_singular_marker_is_cached(self, solver, inverter, notifier, m3):
        cell = CacheCell(m3)

        first = solver(cell)
        second = solver(cell)

        assert first is SINGULAR
        assert second is SINGULAR
        assert inverter.count == 0
        assert notifier.events == [
            (CacheEvent.SINGULAR_MATRIX, "Singular matrix, inverse does not exist."),
            (CacheEvent.CACHE_HIT, "getting cached data"),
        ]

    def test_singular_marker_distinct_from_unset(self, solver, m3):
        cell = CacheCell(m3)
        solver(cell)

        slot = cell.get_cached_inverse()
        assert slot is not UNSET
        assert slot != UNSET
        assert not slot.is_unset

    def test_zero_matrix_is_singular(self, solver):
        assert solver(CacheCell(np.zeros((2, 2)))) is SINGULAR

    def test_set_after_singular_recomputes(self, solver, inverter, m1, m3):
        cell = CacheCell(m3)
        solver(cell)

        cell.set(m1)
        result = solver(cell)

        assert result.is_valid
        assert inverter.count == 1

    def test_near_singular_goes_to_inverter(self, solver, inverter):
        """Почти сингулярная матрица (det ≠ 0 точно) считается обратимой."""
        m = np.array([[1.0, 1.0], [1.0, 1.0 + 1e-15]])
        cell = CacheCell(m)

        result = solver(cell)

        assert inverter.count == 1
        assert result.is_valid


# =============================================================================
# CORRECTNESS
# =============================================================================


class TestCorrectness:
    """Тесты корректности результата."""

    def test_concrete_inverse(self, m1, m1_inverse):
        cell = CacheCell()
        cell.set(m1)

        result = cached_inverse(cell)

        np.testing.assert_allclose(result.matrix, m1_inverse, atol=1e-12)
        np.testing.assert_array_equal(round_product(result.matrix, m1), np.eye(3))
        assert cached_inverse(cell) is result

    def test_random_matrix_inverse(self):
        rng = np.random.default_rng(20240101)
        m2 = rng.standard_normal((4, 4))
        cell = CacheCell(m2)

        result = cached_inverse(cell)

        assert is_inverse(m2, result.matrix, atol=1e-8)
        np.testing.assert_array_equal(round_product(cell.get_cached_inverse().matrix, m2), np.eye(4))

    def test_default_solver_singular(self, m3):
        assert cached_inverse(CacheCell(m3)) is SINGULAR

    def test_default_solver_large_singular(self):
        rng = np.random.default_rng(31)
        m = rng.standard_normal((50, 50))
        m[49] = m[0]

        assert cached_inverse(CacheCell(m)) is SINGULAR

    def test_default_solver_100x100_is_fast(self):
        rng = np.random.default_rng(100)
        m = rng.standard_normal((100, 100))
        cell = CacheCell(m)

        start = time.perf_counter()
        result = cached_inverse(cell)
        elapsed = time.perf_counter() - start

        assert result.is_valid
        assert is_inverse(m, result.matrix, atol=1e-6)
        assert elapsed < 2.0


# =============================================================================
# NOTIFICATIONS (LOGGING)
# =============================================================================


class TestLoggingNotifications:
    """Тесты sink'а уведомлений по умолчанию (logging)."""

    def test_cache_hit_logged(self, caplog, m1):
        caplog.set_level(logging.INFO, logger=LOGGER_NAME)
        cell = CacheCell(m1)

        cached_inverse(cell)
        cached_inverse(cell)

        messages = [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]
        assert messages == ["getting cached data"]
        hit = [r for r in caplog.records if r.levelno == logging.INFO][0]
        assert hit.cache_event == "CACHE_HIT"

    def test_singular_logged(self, caplog, m3):
        caplog.set_level(logging.INFO, logger=LOGGER_NAME)
        cell = CacheCell(m3)

        cached_inverse(cell)
        cached_inverse(cell)

        messages = [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]
        assert messages == [
            "Singular matrix, inverse does not exist.",
            "getting cached data",
        ]

    def test_computation_logged_at_debug(self, caplog, m1):
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)

        cached_inverse(CacheCell(m1))

        assert [r.levelno for r in caplog.records] == [logging.DEBUG]
        assert "3x3" in caplog.records[0].getMessage()

    def test_custom_config(self, caplog, m1):
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
        solver = CachedInverseSolver(
            config=NotificationConfig(cache_hit_message="hit", log_level=logging.WARNING)
        )
        cell = CacheCell(m1)

        solver(cell)
        solver(cell)

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert [r.getMessage() for r in warnings] == ["hit"]

    def test_config_message_for(self):
        config = NotificationConfig()

        assert config.message_for(CacheEvent.CACHE_HIT) == "getting cached data"
        assert config.message_for(CacheEvent.SINGULAR_MATRIX) == (
            "Singular matrix, inverse does not exist."
        )


# =============================================================================
# ERRORS & OPTIONS
# =============================================================================


class TestErrorPropagation:
    """Тесты пропагации ошибок внешних процедур."""

    def test_inverter_failure_propagates_and_leaves_unset(self, notifier, m1):
        def failing_inverter(matrix, *args, **kwargs):
            raise np.linalg.LinAlgError("numerical failure")

        solver = CachedInverseSolver(inverter=failing_inverter, notifier=notifier)
        cell = CacheCell(m1)

        with pytest.raises(np.linalg.LinAlgError, match="numerical failure"):
            solver(cell)

        assert cell.get_cached_inverse() is UNSET
        assert notifier.events == []

    def test_placeholder_matrix_propagates_error(self, solver):
        """Плейсхолдер 1×1 NaN: ошибка детерминанта пропагирует."""
        cell = CacheCell()

        with pytest.raises(ValueError):
            solver(cell)

        assert cell.get_cached_inverse() is UNSET

    def test_non_square_propagates(self, solver):
        cell = CacheCell([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])

        with pytest.raises(np.linalg.LinAlgError):
            solver(cell)

        assert cell.status == InverseStatus.UNSET

    def test_none_from_inverter_rejected(self, m1):
        solver = CachedInverseSolver(inverter=lambda matrix: None)
        cell = CacheCell(m1)

        with pytest.raises(ValueError):
            solver(cell)

        assert cell.get_cached_inverse() is UNSET


class TestOptionForwarding:
    """Тесты передачи дополнительных параметров."""

    def test_args_forwarded_verbatim(self, solver, inverter, m1):
        b = np.array([1.0, 0.0, 0.0])

        result = solver(CacheCell(m1), b)

        assert len(inverter.calls) == 1
        args, kwargs = inverter.calls[0]
        assert args[0] is b
        assert kwargs == {}
        np.testing.assert_allclose(result.matrix, [-2.0, -3.0, -2.0], atol=1e-12)

    def test_kwargs_forwarded_verbatim(self, solver, inverter, m1):
        b = np.eye(3)

        solver(CacheCell(m1), b=b)

        _, kwargs = inverter.calls[0]
        assert kwargs["b"] is b

    def test_options_ignored_on_cache_hit(self, solver, inverter, m1):
        cell = CacheCell(m1)
        first = solver(cell)

        second = solver(cell, np.ones(3))

        assert second is first
        assert inverter.count == 1

    def test_custom_determinant(self, inverter, m1):
        """numpy.linalg.det как коллаборатор детерминанта."""
        solver = CachedInverseSolver(inverter=inverter, determinant=np.linalg.det)

        result = solver(CacheCell(m1))

        assert result.is_valid
        assert inverter.count == 1
