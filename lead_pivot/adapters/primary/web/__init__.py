"""Web адаптер FastAPI."""

from .router import defaults_router, pivot_router, system_router
from .schemas import (
    DefaultPivotResponse,
    DefaultPivotSchema,
    ErrorResponse,
    FieldListResponse,
    FormatOptionsSchema,
    FormulaSchema,
    HealthResponse,
    MeasureSchema,
    OperationResponse,
    PivotRequestSchema,
    PivotResponseSchema,
    ReducerListResponse,
)

__all__ = [
    "pivot_router",
    "defaults_router",
    "system_router",
    "PivotRequestSchema",
    "PivotResponseSchema",
    "MeasureSchema",
    "FormulaSchema",
    "FormatOptionsSchema",
    "FieldListResponse",
    "ReducerListResponse",
    "DefaultPivotSchema",
    "DefaultPivotResponse",
    "OperationResponse",
    "ErrorResponse",
    "HealthResponse",
]
