"""
Сервис построения сводных таблиц.

Содержит бизнес-логику кросс-табуляции лидов: группировку по полю
строк и полю колонок, сбор значений показателей по ячейкам,
агрегацию и расчёт итогов.
"""

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from loguru import logger

from lead_pivot.core.domain.models import (
    AggregationSpec,
    FormulaSpec,
    FormulaValues,
    PivotConfiguration,
    PivotResult,
    Reducer,
)
from lead_pivot.core.domain.services.field_resolver import (
    FieldResolverService,
    to_number,
)
from lead_pivot.core.domain.services.formula_evaluator import FormulaEvaluatorService
from lead_pivot.core.domain.services.reducers import ReducerLibrary
from lead_pivot.core.domain.services.totals_calculator import (
    BucketMap,
    TotalsCalculatorService,
)


class PivotBuilderService:
    """Сервис для построения сводной таблицы из списка лидов."""

    def __init__(
        self,
        field_resolver: Optional[FieldResolverService] = None,
        reducers: Optional[ReducerLibrary] = None,
        totals_calculator: Optional[TotalsCalculatorService] = None,
        formula_evaluator: Optional[FormulaEvaluatorService] = None,
    ):
        """
        Инициализирует сервис.

        Args:
            field_resolver: Сервис извлечения значений полей.
            reducers: Библиотека функций агрегации.
            totals_calculator: Сервис расчёта итогов.
            formula_evaluator: Сервис вычисления пользовательских формул.
        """
        self._fields = field_resolver or FieldResolverService()
        self._reducers = reducers or ReducerLibrary()
        self._totals = totals_calculator or TotalsCalculatorService(self._reducers)
        self._formulas = formula_evaluator or FormulaEvaluatorService()

    def aggregate(
        self,
        records: Iterable[Mapping[str, Any]],
        row_field: str,
        col_field: str,
        measures: Sequence[AggregationSpec],
    ) -> PivotResult:
        """
        Строит сводную таблицу по одному полю строк и одному полю колонок.

        Args:
            records: Записи лидов.
            row_field: Поле строк.
            col_field: Поле колонок.
            measures: Показатели ячеек.

        Returns:
            Результат с ячейками и итогами.
        """
        config = PivotConfiguration(
            row_fields=[row_field],
            col_fields=[col_field],
            measures=list(measures),
        )
        return self.build(records, config)

    def build(
        self, records: Iterable[Mapping[str, Any]], config: PivotConfiguration
    ) -> PivotResult:
        """
        Строит сводную таблицу по конфигурации.

        Таблица плотная: каждая комбинация строки и колонки содержит
        значение каждого показателя, пустые ячейки равны 0.

        Args:
            records: Записи лидов.
            config: Конфигурация сводной таблицы.

        Returns:
            Результат с ячейками, итогами и значениями формул.
        """
        row_field, col_field = config.row_field, config.col_field
        measures = config.active_measures()
        self._warn_about_config(config, measures)

        # Ключи в порядке появления, сортировка только для отображения
        row_seen: Dict[str, None] = {}
        col_seen: Dict[str, None] = {}
        buckets: BucketMap = defaultdict(list)

        record_count = 0
        for record in records:
            record_count += 1
            row_key = self._fields.resolve_key(record, row_field)
            col_key = self._fields.resolve_key(record, col_field)
            row_seen.setdefault(row_key, None)
            col_seen.setdefault(col_key, None)

            for measure in measures:
                buckets[(row_key, col_key, measure.key)].append(
                    self._measure_value(record, measure)
                )

        raw_rows, raw_cols = list(row_seen), list(col_seen)

        cells: Dict[str, Dict[str, Dict[str, float]]] = {}
        for row_key in raw_rows:
            cells[row_key] = {}
            for col_key in raw_cols:
                cells[row_key][col_key] = {
                    m.key: self._reducers.reduce(
                        buckets.get((row_key, col_key, m.key), []), m.reducer
                    )
                    for m in measures
                }

        row_totals, col_totals, grand_total = self._totals.compute(
            buckets, raw_rows, raw_cols, measures
        )

        result = PivotResult(
            row_field=row_field,
            col_field=col_field,
            measures=measures,
            row_keys=sorted(raw_rows),
            col_keys=sorted(raw_cols),
            cells=cells,
            row_totals=row_totals,
            col_totals=col_totals,
            grand_total=grand_total,
            record_count=record_count,
        )

        if config.formulas:
            result.formulas = self._apply_formulas(result, config.formulas)

        logger.debug(
            f"Сводная таблица {row_field} x {col_field}: "
            f"{record_count} записей, {len(raw_rows)} строк, "
            f"{len(raw_cols)} колонок, {len(measures)} показателей"
        )
        return result

    def _measure_value(self, record: Mapping[str, Any], measure: AggregationSpec) -> Any:
        """
        Возвращает значение показателя для корзины.

        Для подсчёта записей и уникальных значений сохраняется исходное
        значение поля (текст категориальных полей), для остальных
        функций - число.
        """
        if measure.field == "count":
            return 1
        value = self._fields.resolve(record, measure.field)
        if measure.reducer.counts_values:
            return value
        return to_number(value)

    def _apply_formulas(
        self, result: PivotResult, formulas: Sequence[FormulaSpec]
    ) -> FormulaValues:
        """Вычисляет пользовательские формулы по ячейкам и итогам."""
        compiled = []
        for formula in formulas:
            tree = self._formulas.compile(formula.expression)
            if tree is not None:
                compiled.append((formula.name, tree))

        values = FormulaValues()
        if not compiled:
            return values

        def evaluate(measure_values: Mapping[str, float]) -> Dict[str, Optional[float]]:
            variables = self._formula_variables(result.measures, measure_values)
            return {
                name: self._formulas.evaluate(tree, variables)
                for name, tree in compiled
            }

        values.cells = {
            row_key: {
                col_key: evaluate(cell_values)
                for col_key, cell_values in row_cells.items()
            }
            for row_key, row_cells in result.cells.items()
        }
        values.row_totals = {k: evaluate(v) for k, v in result.row_totals.items()}
        values.col_totals = {k: evaluate(v) for k, v in result.col_totals.items()}
        values.grand_total = evaluate(result.grand_total)
        return values

    @staticmethod
    def _formula_variables(
        measures: Sequence[AggregationSpec], measure_values: Mapping[str, float]
    ) -> Dict[str, float]:
        return {
            m.variable_name: measure_values.get(m.key, 0.0) for m in measures
        }

    def _warn_about_config(
        self, config: PivotConfiguration, measures: List[AggregationSpec]
    ) -> None:
        """Логирует поля конфигурации, которые не участвуют в расчёте."""
        if len(config.row_fields) > 1 or len(config.col_fields) > 1:
            logger.debug(
                "Многоуровневая группировка не поддерживается, "
                f"используются поля {config.row_field} и {config.col_field}"
            )

        field_ids = {config.row_field, config.col_field} | {m.field for m in measures}
        for field_id in sorted(field_ids):
            if not self._fields.is_known_field(field_id):
                logger.warning(f"Неизвестное поле '{field_id}', значение читается как есть")


def reducer_for(name: str) -> Reducer:
    """Возвращает функцию агрегации по имени с заменой неизвестных на count."""
    if not Reducer.is_known(name):
        logger.warning(f"Неизвестная функция агрегации '{name}', используется count")
    return Reducer.parse(name)
