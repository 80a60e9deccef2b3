"""
Pydantic схемы для Web API.

Определяет модели запросов и ответов для REST API.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class MeasureSchema(BaseModel):
    """Показатель сводной таблицы."""

    field: str = Field(..., description="Поле показателя", examples=["ltv"])
    reducer: str = Field(
        default="sum",
        description=(
            "Функция агрегации: count, sum, avg, min, max, median, mode, "
            "stddev, variance, countDistinct. Неизвестная функция заменяется на count."
        ),
        examples=["sum"],
    )


class FormulaSchema(BaseModel):
    """Пользовательская формула над показателями."""

    name: str = Field(..., description="Название вычисляемого значения")
    expression: str = Field(
        ...,
        description=(
            "Выражение над показателями вида <поле>_<функция>, "
            "например ltv_sum / count_count"
        ),
        examples=["ltv_sum / count_count"],
    )
    is_percentage: bool = Field(default=False, description="Отображать как процент")


class FormatOptionsSchema(BaseModel):
    """Параметры отображения значений."""

    decimal_places: int = Field(
        default=2, ge=0, le=10, description="Количество знаков после запятой"
    )
    locale: str = Field(default="en_IN", description="Группировка разрядов: en_IN или en_US")
    compact_currency: bool = Field(default=True, description="Сокращать денежные суммы")
    currency_symbol: str = Field(default="₹", description="Символ валюты")
    show_totals: bool = Field(default=True, description="Показывать итоги")


class PivotRequestSchema(BaseModel):
    """
    Схема запроса на построение сводной таблицы.

    Используется в Swagger UI для ввода параметров.
    """

    row_fields: Optional[List[str]] = Field(
        default=None,
        description=(
            "Поля строк. Используется только первое поле. "
            "Если не указаны, берётся конфигурация по умолчанию."
        ),
        examples=[["status"]],
    )
    col_fields: Optional[List[str]] = Field(
        default=None,
        description="Поля колонок. Используется только первое поле.",
        examples=[["source"]],
    )
    measures: Optional[List[MeasureSchema]] = Field(
        default=None,
        description="Показатели ячеек. По умолчанию - количество лидов.",
    )
    formulas: List[FormulaSchema] = Field(
        default_factory=list,
        description="Пользовательские формулы",
    )
    custom_formula: Optional[str] = Field(
        default=None,
        description="Одна формула без названия (отображается как 'custom')",
    )
    format: Optional[FormatOptionsSchema] = Field(
        default=None,
        description="Параметры отображения",
    )
    records: Optional[List[Dict[str, Any]]] = Field(
        default=None,
        description="Записи лидов. Если не указаны, загружаются из Google Sheets.",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "row_fields": ["status"],
                    "col_fields": ["createdAtMonthYear"],
                    "measures": [
                        {"field": "count", "reducer": "count"},
                        {"field": "ltv", "reducer": "avg"},
                    ],
                    "format": {"decimal_places": 2},
                }
            ]
        }
    }


class MeasureInfo(BaseModel):
    """Описание рассчитанного показателя."""

    key: str
    field: str
    reducer: str


class PivotResponseSchema(BaseModel):
    """Схема ответа со сводной таблицей."""

    success: bool = True
    row_field: str = Field(..., description="Активное поле строк")
    col_field: str = Field(..., description="Активное поле колонок")
    measures: List[MeasureInfo] = Field(..., description="Рассчитанные показатели")
    row_keys: List[str] = Field(..., description="Значения строк (отсортированы)")
    col_keys: List[str] = Field(..., description="Значения колонок (отсортированы)")
    cells: Dict[str, Dict[str, Dict[str, float]]] = Field(
        ..., description="Значения ячеек: строка -> колонка -> показатель"
    )
    row_totals: Dict[str, Dict[str, float]] = Field(..., description="Итоги по строкам")
    col_totals: Dict[str, Dict[str, float]] = Field(..., description="Итоги по колонкам")
    grand_total: Dict[str, float] = Field(..., description="Общий итог")
    record_count: int = Field(0, description="Количество лидов")
    formulas: Dict[str, Any] = Field(
        default_factory=dict, description="Значения пользовательских формул"
    )
    formatted: Dict[str, Any] = Field(
        default_factory=dict, description="Отформатированные значения для отображения"
    )


class FieldInfo(BaseModel):
    """Описание поля лида."""

    id: str
    label: str
    kind: str
    is_monetary: bool
    is_percentage: bool
    numeric: bool
    groupable: bool


class FieldListResponse(BaseModel):
    """Схема ответа со списком полей."""

    fields: List[FieldInfo] = Field(..., description="Поля, доступные в сводной таблице")


class ReducerListResponse(BaseModel):
    """Схема ответа со списком функций агрегации."""

    reducers: List[str] = Field(..., description="Функции агрегации")


class DefaultPivotSchema(BaseModel):
    """Конфигурация сводной таблицы по умолчанию."""

    row_field: str = Field(..., description="Поле строк", examples=["status"])
    col_field: str = Field(..., description="Поле колонок", examples=["source"])
    measures: List[MeasureSchema] = Field(
        default_factory=list, description="Показатели"
    )
    decimal_places: int = Field(default=2, ge=0, le=10)


class DefaultPivotResponse(BaseModel):
    """Схема ответа с конфигурацией по умолчанию."""

    pivot: DefaultPivotSchema
    source: str = Field(
        ..., description="Источник: user_settings или builtin"
    )


class OperationResponse(BaseModel):
    """Схема ответа на операцию изменения настроек."""

    success: bool
    message: str
    pivot: Optional[DefaultPivotSchema] = None


class ErrorResponse(BaseModel):
    """Схема ответа с ошибкой."""

    success: bool = False
    error: str = Field(..., description="Описание ошибки")


class HealthResponse(BaseModel):
    """Схема ответа проверки здоровья."""

    status: str = Field(..., description="Статус сервиса")
    version: str = Field(..., description="Версия приложения")
    timestamp: datetime = Field(..., description="Время ответа")
