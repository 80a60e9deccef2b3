"""Тесты библиотеки функций агрегации."""

import math

import pytest

from lead_pivot.core.domain.models import Reducer
from lead_pivot.core.domain.services import REDUCERS, ReducerLibrary


@pytest.fixture
def library() -> ReducerLibrary:
    return ReducerLibrary()


class TestReducerCatalog:
    """Каталог и разбор имён функций."""

    def test_every_reducer_has_implementation(self):
        assert set(REDUCERS) == set(Reducer)

    def test_available_lists_all_names(self, library):
        assert library.available() == [
            "count", "sum", "avg", "min", "max", "median",
            "mode", "stddev", "variance", "countDistinct",
        ]

    def test_unknown_name_falls_back_to_count(self):
        assert Reducer.parse("percentile") is Reducer.COUNT
        assert not Reducer.is_known("percentile")

    def test_legacy_aliases(self):
        assert Reducer.parse("countUnique") is Reducer.COUNT_DISTINCT
        assert Reducer.parse("average") is Reducer.AVG
        assert Reducer.is_known("countUnique")


class TestEmptyInput:
    """Пустой список даёт 0 для всех функций."""

    @pytest.mark.parametrize("reducer", list(Reducer))
    def test_empty_is_zero(self, library, reducer):
        assert library.reduce([], reducer) == 0.0


class TestReducers:
    """Значения функций агрегации."""

    values = [4.0, 1.0, 3.0, 1.0, 6.0]

    def test_count(self, library):
        assert library.reduce(self.values, "count") == 5

    def test_sum(self, library):
        assert library.reduce(self.values, "sum") == 15

    def test_avg(self, library):
        assert library.reduce(self.values, "avg") == 3

    def test_min_max(self, library):
        assert library.reduce(self.values, "min") == 1
        assert library.reduce(self.values, "max") == 6

    def test_median_odd(self, library):
        assert library.reduce(self.values, "median") == 3

    def test_median_even(self, library):
        assert library.reduce([1, 2, 3, 10], "median") == 2.5

    def test_mode(self, library):
        assert library.reduce(self.values, "mode") == 1

    def test_mode_tie_takes_first_encountered(self, library):
        assert library.reduce([7, 2, 2, 7], "mode") == 7
        assert library.reduce([2, 7, 7, 2], "mode") == 2

    def test_population_variance_and_stddev(self, library):
        values = [2, 4, 4, 4, 5, 5, 7, 9]
        assert library.reduce(values, "variance") == 4
        assert library.reduce(values, "stddev") == 2

    def test_single_value_has_zero_spread(self, library):
        assert library.reduce([42], "variance") == 0
        assert library.reduce([42], "stddev") == 0

    def test_count_distinct(self, library):
        assert library.reduce(self.values, "countDistinct") == 4

    def test_count_distinct_on_text(self, library):
        assert library.reduce(["Web", "Ad", "Web", "N/A"], "countDistinct") == 3

    def test_unknown_method_counts(self, library):
        assert library.reduce(self.values, "bogus") == 5


class TestMixedValues:
    """Нечисловые значения не участвуют в арифметике."""

    def test_text_is_ignored_by_sum(self, library):
        assert library.reduce([1, "Web", 2, None], "sum") == 3

    def test_count_includes_everything(self, library):
        assert library.reduce([1, "Web", 2, None], "count") == 4

    def test_bools_are_not_numbers(self, library):
        assert library.reduce([True, 5], "avg") == 5

    def test_sum_is_exact_for_many_small_values(self, library):
        assert library.reduce([0.1] * 10, "sum") == 1.0

    def test_results_are_finite(self, library):
        for reducer in Reducer:
            assert math.isfinite(library.reduce([1e10, -1e10, 3], reducer))
