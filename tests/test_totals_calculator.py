"""Тесты расчёта итогов повторной агрегацией."""

import pytest

from lead_pivot.core.domain.models import AggregationSpec
from lead_pivot.core.domain.services import ReducerLibrary, TotalsCalculatorService

AVG = AggregationSpec.of("ltv", "avg")
MEDIAN = AggregationSpec.of("ltv", "median")
SUM = AggregationSpec.of("ltv", "sum")


@pytest.fixture
def calculator() -> TotalsCalculatorService:
    return TotalsCalculatorService(ReducerLibrary())


@pytest.fixture
def buckets():
    # Строка A: одна большая корзина и одна маленькая
    data = {
        ("A", "x"): [10.0, 20.0, 30.0, 40.0],
        ("A", "y"): [100.0],
        ("B", "x"): [1.0],
    }
    result = {}
    for (row, col), values in data.items():
        for measure in (AVG, MEDIAN, SUM):
            result[(row, col, measure.key)] = list(values)
    return result


class TestRowTotals:
    """Итоги по строкам."""

    def test_avg_is_not_mean_of_means(self, calculator, buckets):
        total = calculator.row_total(buckets, "A", ["x", "y"], [AVG])
        # Среднее средних дало бы (25 + 100) / 2 = 62.5
        assert total[AVG.key] == pytest.approx(40.0)

    def test_median_of_union(self, calculator, buckets):
        total = calculator.row_total(buckets, "A", ["x", "y"], [MEDIAN])
        assert total[MEDIAN.key] == 30.0

    def test_missing_bucket_is_empty(self, calculator, buckets):
        total = calculator.row_total(buckets, "B", ["x", "y"], [SUM])
        assert total[SUM.key] == 1.0


class TestColTotals:
    """Итоги по колонкам."""

    def test_union_over_rows(self, calculator, buckets):
        total = calculator.col_total(buckets, "x", ["A", "B"], [AVG, SUM])
        assert total[SUM.key] == 101.0
        assert total[AVG.key] == pytest.approx(101.0 / 5)

    def test_empty_column(self, calculator, buckets):
        total = calculator.col_total(buckets, "z", ["A", "B"], [AVG])
        assert total[AVG.key] == 0.0


class TestGrandTotal:
    """Общий итог."""

    def test_all_buckets(self, calculator, buckets):
        total = calculator.grand_total(buckets, ["A", "B"], ["x", "y"], [AVG, MEDIAN, SUM])
        assert total[SUM.key] == 201.0
        assert total[AVG.key] == pytest.approx(201.0 / 6)
        assert total[MEDIAN.key] == 25.0

    def test_compute_returns_all_levels(self, calculator, buckets):
        row_totals, col_totals, grand_total = calculator.compute(
            buckets, ["A", "B"], ["x", "y"], [SUM]
        )
        assert row_totals == {"A": {SUM.key: 200.0}, "B": {SUM.key: 1.0}}
        assert col_totals == {"x": {SUM.key: 101.0}, "y": {SUM.key: 100.0}}
        assert grand_total == {SUM.key: 201.0}

    def test_no_keys(self, calculator):
        row_totals, col_totals, grand_total = calculator.compute({}, [], [], [SUM])
        assert row_totals == {}
        assert col_totals == {}
        assert grand_total == {SUM.key: 0.0}
