"""Доменные модели."""

from .field import (
    CREATED_AT_ALIASES,
    CREATED_AT_ATTRIBUTE,
    FIELD_CATALOG,
    NOT_AVAILABLE,
    UNKNOWN_DATE,
    FieldKind,
    FieldSpec,
)
from .pivot import (
    DEFAULT_COL_FIELD,
    DEFAULT_ROW_FIELD,
    AggregationSpec,
    FormatOptions,
    FormulaSpec,
    FormulaValues,
    PivotConfiguration,
    PivotResult,
    Reducer,
)

__all__ = [
    "CREATED_AT_ALIASES",
    "CREATED_AT_ATTRIBUTE",
    "FIELD_CATALOG",
    "NOT_AVAILABLE",
    "UNKNOWN_DATE",
    "DEFAULT_ROW_FIELD",
    "DEFAULT_COL_FIELD",
    "FieldKind",
    "FieldSpec",
    "AggregationSpec",
    "FormatOptions",
    "FormulaSpec",
    "FormulaValues",
    "PivotConfiguration",
    "PivotResult",
    "Reducer",
]
