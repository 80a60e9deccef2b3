"""
Сервис расчёта итогов сводной таблицы.

Итоги считаются повторной агрегацией исходных значений,
а не суммированием уже агрегированных ячеек: среднее от средних
или медиана от медиан дают неверный результат.
"""

from typing import Dict, List, Sequence, Tuple

from lead_pivot.core.domain.models import AggregationSpec
from lead_pivot.core.domain.services.reducers import ReducerLibrary

# (row_key, col_key, measure_key) -> значения
BucketMap = Dict[Tuple[str, str, str], List]


class TotalsCalculatorService:
    """Сервис для расчёта итогов по строкам, колонкам и общего итога."""

    def __init__(self, reducers: ReducerLibrary):
        """
        Инициализирует сервис.

        Args:
            reducers: Библиотека функций агрегации.
        """
        self._reducers = reducers

    def compute(
        self,
        buckets: BucketMap,
        row_keys: Sequence[str],
        col_keys: Sequence[str],
        measures: Sequence[AggregationSpec],
    ) -> Tuple[Dict[str, Dict[str, float]], Dict[str, Dict[str, float]], Dict[str, float]]:
        """
        Рассчитывает все итоги сводной таблицы.

        Args:
            buckets: Корзины исходных значений по ячейкам.
            row_keys: Значения строк.
            col_keys: Значения колонок.
            measures: Показатели.

        Returns:
            Кортеж (итоги по строкам, итоги по колонкам, общий итог).
        """
        row_totals = {
            row_key: self.row_total(buckets, row_key, col_keys, measures)
            for row_key in row_keys
        }
        col_totals = {
            col_key: self.col_total(buckets, col_key, row_keys, measures)
            for col_key in col_keys
        }
        grand_total = self.grand_total(buckets, row_keys, col_keys, measures)
        return row_totals, col_totals, grand_total

    def row_total(
        self,
        buckets: BucketMap,
        row_key: str,
        col_keys: Sequence[str],
        measures: Sequence[AggregationSpec],
    ) -> Dict[str, float]:
        """Итог строки: агрегация объединения корзин строки по всем колонкам."""
        return {
            m.key: self._reduce_union(
                buckets, [(row_key, col_key) for col_key in col_keys], m
            )
            for m in measures
        }

    def col_total(
        self,
        buckets: BucketMap,
        col_key: str,
        row_keys: Sequence[str],
        measures: Sequence[AggregationSpec],
    ) -> Dict[str, float]:
        """Итог колонки: агрегация объединения корзин колонки по всем строкам."""
        return {
            m.key: self._reduce_union(
                buckets, [(row_key, col_key) for row_key in row_keys], m
            )
            for m in measures
        }

    def grand_total(
        self,
        buckets: BucketMap,
        row_keys: Sequence[str],
        col_keys: Sequence[str],
        measures: Sequence[AggregationSpec],
    ) -> Dict[str, float]:
        """Общий итог: агрегация всех корзин."""
        pairs = [(row_key, col_key) for row_key in row_keys for col_key in col_keys]
        return {m.key: self._reduce_union(buckets, pairs, m) for m in measures}

    def _reduce_union(
        self,
        buckets: BucketMap,
        pairs: List[Tuple[str, str]],
        measure: AggregationSpec,
    ) -> float:
        values: List = []
        for row_key, col_key in pairs:
            values.extend(buckets.get((row_key, col_key, measure.key), ()))
        return self._reducers.reduce(values, measure.reducer)
