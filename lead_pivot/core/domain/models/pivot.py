"""
Доменные модели сводной таблицы.

Содержит конфигурацию сводной таблицы, описание показателей
и структуру результата агрегации.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

# Границы точности отображения
MIN_DECIMAL_PLACES = 0
MAX_DECIMAL_PLACES = 10

DEFAULT_ROW_FIELD = "status"
DEFAULT_COL_FIELD = "source"

# row_key -> col_key -> measure_key -> value
CellMatrix = Dict[str, Dict[str, Dict[str, float]]]
TotalsMap = Dict[str, Dict[str, float]]


class Reducer(str, Enum):
    """Перечисление статистических функций агрегации."""

    COUNT = "count"
    SUM = "sum"
    AVG = "avg"
    MIN = "min"
    MAX = "max"
    MEDIAN = "median"
    MODE = "mode"
    STDDEV = "stddev"
    VARIANCE = "variance"
    COUNT_DISTINCT = "countDistinct"

    @classmethod
    def is_known(cls, value: str) -> bool:
        """Проверяет, есть ли такая функция в каталоге."""
        return value in cls._value2member_map_ or value in _REDUCER_ALIASES

    @classmethod
    def parse(cls, value: "str | Reducer") -> "Reducer":
        """
        Возвращает функцию агрегации по имени.

        Неизвестные имена заменяются на COUNT, чтобы таблица
        оставалась работоспособной при некорректной конфигурации.

        Args:
            value: Имя функции из конфигурации.

        Returns:
            Функция агрегации.
        """
        if isinstance(value, Reducer):
            return value
        value = _REDUCER_ALIASES.get(value, value)
        try:
            return cls(value)
        except ValueError:
            return cls.COUNT

    @property
    def counts_values(self) -> bool:
        """Функция считает значения, а не работает с их величиной."""
        return self in (Reducer.COUNT, Reducer.COUNT_DISTINCT)


# Названия из старого интерфейса сводной таблицы
_REDUCER_ALIASES: Dict[str, str] = {
    "countUnique": Reducer.COUNT_DISTINCT.value,
    "average": Reducer.AVG.value,
    "mean": Reducer.AVG.value,
}


@dataclass(frozen=True)
class AggregationSpec:
    """
    Показатель сводной таблицы: поле и функция агрегации.

    Attributes:
        field: Идентификатор поля.
        reducer: Функция агрегации.
    """

    field: str
    reducer: Reducer

    @classmethod
    def of(cls, field_id: str, reducer: "str | Reducer") -> "AggregationSpec":
        """Создаёт показатель, приводя имя функции к Reducer."""
        return cls(field=field_id, reducer=Reducer.parse(reducer))

    @property
    def key(self) -> str:
        """Ключ показателя в ячейках и итогах."""
        return f"{self.field}:{self.reducer.value}"

    @property
    def variable_name(self) -> str:
        """Имя показателя в пользовательских формулах."""
        return f"{self.field}_{self.reducer.value}"


@dataclass(frozen=True)
class FormulaSpec:
    """
    Пользовательская формула над показателями.

    Attributes:
        name: Название вычисляемого столбца.
        expression: Выражение, например "ltv_sum / count_count".
        is_percentage: Отображать результат как процент.
    """

    name: str
    expression: str
    is_percentage: bool = False


@dataclass
class FormatOptions:
    """
    Параметры отображения значений.

    Attributes:
        decimal_places: Количество знаков после запятой (0-10).
        locale: Правила группировки разрядов (en_IN или en_US).
        compact_currency: Сокращать крупные денежные суммы (K, L, Cr).
        currency_symbol: Символ валюты.
        show_totals: Показывать итоги по строкам и колонкам.
    """

    decimal_places: int = 2
    locale: str = "en_IN"
    compact_currency: bool = True
    currency_symbol: str = "₹"
    show_totals: bool = True

    def __post_init__(self) -> None:
        self.decimal_places = max(
            MIN_DECIMAL_PLACES, min(MAX_DECIMAL_PLACES, int(self.decimal_places))
        )


@dataclass
class PivotConfiguration:
    """
    Конфигурация сводной таблицы.

    Интерфейс позволяет выбрать несколько полей строк и колонок,
    но в расчёте участвует только первое поле каждого списка.

    Attributes:
        row_fields: Поля для строк.
        col_fields: Поля для колонок.
        measures: Показатели ячеек.
        formulas: Пользовательские формулы.
        format: Параметры отображения.
    """

    row_fields: List[str] = field(default_factory=lambda: [DEFAULT_ROW_FIELD])
    col_fields: List[str] = field(default_factory=lambda: [DEFAULT_COL_FIELD])
    measures: List[AggregationSpec] = field(default_factory=list)
    formulas: List[FormulaSpec] = field(default_factory=list)
    format: FormatOptions = field(default_factory=FormatOptions)

    @property
    def row_field(self) -> str:
        """Активное поле строк."""
        return self.row_fields[0] if self.row_fields else DEFAULT_ROW_FIELD

    @property
    def col_field(self) -> str:
        """Активное поле колонок."""
        return self.col_fields[0] if self.col_fields else DEFAULT_COL_FIELD

    def active_measures(self) -> List[AggregationSpec]:
        """
        Возвращает показатели без повторов.

        При пустом списке используется подсчёт количества записей.
        """
        if not self.measures:
            return [AggregationSpec(field="count", reducer=Reducer.COUNT)]

        seen = set()
        result: List[AggregationSpec] = []
        for measure in self.measures:
            if measure.key in seen:
                continue
            seen.add(measure.key)
            result.append(measure)
        return result


@dataclass
class FormulaValues:
    """Значения пользовательских формул в тех же разрезах, что и показатели."""

    cells: Dict[str, Dict[str, Dict[str, Optional[float]]]] = field(default_factory=dict)
    row_totals: Dict[str, Dict[str, Optional[float]]] = field(default_factory=dict)
    col_totals: Dict[str, Dict[str, Optional[float]]] = field(default_factory=dict)
    grand_total: Dict[str, Optional[float]] = field(default_factory=dict)


@dataclass
class PivotResult:
    """
    Результат построения сводной таблицы.

    Attributes:
        row_field: Активное поле строк.
        col_field: Активное поле колонок.
        measures: Рассчитанные показатели.
        row_keys: Отсортированные значения строк.
        col_keys: Отсортированные значения колонок.
        cells: Значения ячеек row -> col -> measure_key.
        row_totals: Итоги по строкам row -> measure_key.
        col_totals: Итоги по колонкам col -> measure_key.
        grand_total: Общий итог measure_key -> value.
        record_count: Количество обработанных записей.
        formulas: Значения пользовательских формул.
    """

    row_field: str
    col_field: str
    measures: List[AggregationSpec]
    row_keys: List[str]
    col_keys: List[str]
    cells: CellMatrix
    row_totals: TotalsMap
    col_totals: TotalsMap
    grand_total: Dict[str, float]
    record_count: int = 0
    formulas: FormulaValues = field(default_factory=FormulaValues)

    @property
    def measure_keys(self) -> List[str]:
        """Ключи показателей в порядке конфигурации."""
        return [m.key for m in self.measures]

    def cell(self, row_key: str, col_key: str, measure_key: str) -> float:
        """Возвращает значение ячейки (0 для отсутствующей комбинации)."""
        return self.cells.get(row_key, {}).get(col_key, {}).get(measure_key, 0.0)

    def to_dict(self) -> Dict[str, object]:
        """Преобразует в словарь для JSON ответа."""
        return {
            "row_field": self.row_field,
            "col_field": self.col_field,
            "measures": [
                {"key": m.key, "field": m.field, "reducer": m.reducer.value}
                for m in self.measures
            ],
            "row_keys": list(self.row_keys),
            "col_keys": list(self.col_keys),
            "cells": self.cells,
            "row_totals": self.row_totals,
            "col_totals": self.col_totals,
            "grand_total": self.grand_total,
            "record_count": self.record_count,
            "formulas": {
                "cells": self.formulas.cells,
                "row_totals": self.formulas.row_totals,
                "col_totals": self.formulas.col_totals,
                "grand_total": self.formulas.grand_total,
            },
        }
