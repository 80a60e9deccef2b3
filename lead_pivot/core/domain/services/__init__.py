"""Доменные сервисы."""

from .field_resolver import FieldResolverService, parse_date, to_number
from .formula_evaluator import FormulaEvaluatorService
from .pivot_builder import PivotBuilderService, reducer_for
from .reducers import REDUCERS, ReducerLibrary
from .totals_calculator import TotalsCalculatorService
from .value_formatter import ValueFormatterService, format_number, group_digits

__all__ = [
    "FieldResolverService",
    "FormulaEvaluatorService",
    "PivotBuilderService",
    "ReducerLibrary",
    "REDUCERS",
    "TotalsCalculatorService",
    "ValueFormatterService",
    "format_number",
    "group_digits",
    "parse_date",
    "reducer_for",
    "to_number",
]
