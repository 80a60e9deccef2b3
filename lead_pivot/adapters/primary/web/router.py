"""
FastAPI роутеры.

Определяет REST API endpoints для построения сводных таблиц
и управления конфигурацией по умолчанию.
"""

from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from loguru import logger
from pydantic import ValidationError

from lead_pivot.adapters.primary.web.dependencies import (
    get_build_pivot_use_case,
    get_cached_settings,
    get_field_resolver,
    get_lead_source,
    get_user_settings,
)
from lead_pivot.adapters.primary.web.schemas import (
    DefaultPivotResponse,
    DefaultPivotSchema,
    ErrorResponse,
    FieldInfo,
    FieldListResponse,
    HealthResponse,
    MeasureSchema,
    OperationResponse,
    PivotRequestSchema,
    PivotResponseSchema,
    ReducerListResponse,
)
from lead_pivot.adapters.secondary.user_settings import UserSettingsAdapter
from lead_pivot.core.application.ports import LeadSourcePort
from lead_pivot.core.application.use_cases import BuildPivotUseCase, PivotRequest
from lead_pivot.core.domain.models import (
    FIELD_CATALOG,
    AggregationSpec,
    FormatOptions,
    FormulaSpec,
    PivotConfiguration,
    Reducer,
)
from lead_pivot.core.domain.services import FieldResolverService, reducer_for
from lead_pivot.settings import Settings

# Роутер для сводных таблиц
pivot_router = APIRouter(prefix="/pivot", tags=["Сводные таблицы"])

# Роутер для конфигурации по умолчанию
defaults_router = APIRouter(prefix="/pivot/default", tags=["Настройки"])

# Роутер для системных endpoints
system_router = APIRouter(tags=["Система"])


def builtin_default_pivot(settings: Settings) -> DefaultPivotSchema:
    """Возвращает встроенную конфигурацию из настроек приложения."""
    return DefaultPivotSchema(
        row_field=settings.default_row_field,
        col_field=settings.default_col_field,
        measures=[MeasureSchema(field="count", reducer="count")],
        decimal_places=settings.default_decimal_places,
    )


def resolve_default_pivot(
    settings: Settings, user_settings: UserSettingsAdapter
) -> DefaultPivotSchema:
    """Возвращает сохранённую конфигурацию или встроенную."""
    if user_settings.has_default_pivot():
        try:
            return DefaultPivotSchema(**user_settings.get_default_pivot())
        except ValidationError as e:
            logger.warning(f"Сохранённая конфигурация повреждена, используется встроенная: {e}")
    return builtin_default_pivot(settings)


def build_configuration(
    request: PivotRequestSchema,
    settings: Settings,
    defaults: DefaultPivotSchema,
) -> PivotConfiguration:
    """
    Преобразует запрос API в конфигурацию сводной таблицы.

    Незаданные поля берутся из конфигурации по умолчанию.
    Неизвестные функции агрегации заменяются на count.
    """
    measures = request.measures if request.measures is not None else defaults.measures

    formulas = [
        FormulaSpec(name=f.name, expression=f.expression, is_percentage=f.is_percentage)
        for f in request.formulas
    ]
    if request.custom_formula and request.custom_formula.strip():
        formulas.append(FormulaSpec(name="custom", expression=request.custom_formula))

    if request.format is not None:
        options = FormatOptions(**request.format.model_dump())
    else:
        options = FormatOptions(
            decimal_places=defaults.decimal_places,
            locale=settings.number_locale,
            currency_symbol=settings.currency_symbol,
        )

    return PivotConfiguration(
        row_fields=request.row_fields or [defaults.row_field],
        col_fields=request.col_fields or [defaults.col_field],
        measures=[AggregationSpec(m.field, reducer_for(m.reducer)) for m in measures],
        formulas=formulas,
        format=options,
    )


@system_router.get(
    "/health",
    response_model=HealthResponse,
    summary="Проверка здоровья",
    description="Проверяет доступность сервиса.",
)
async def health_check(
    settings: Settings = Depends(get_cached_settings),
) -> HealthResponse:
    """Возвращает статус здоровья сервиса."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        timestamp=datetime.now(),
    )


# --- Справочники ---


@pivot_router.get(
    "/fields",
    response_model=FieldListResponse,
    summary="Поля лидов",
    description="""
Возвращает поля, доступные для строк, колонок и показателей.

- `categorical` и `date_derived` подходят для строк и колонок
- `numeric` и `constant` (count) - для показателей
    """,
)
async def list_fields(
    resolver: FieldResolverService = Depends(get_field_resolver),
) -> FieldListResponse:
    """Возвращает каталог полей."""
    return FieldListResponse(
        fields=[
            FieldInfo(**resolver.get_field(field_id).to_dict())
            for field_id in FIELD_CATALOG
        ]
    )


@pivot_router.get(
    "/reducers",
    response_model=ReducerListResponse,
    summary="Функции агрегации",
)
async def list_reducers() -> ReducerListResponse:
    """Возвращает список функций агрегации."""
    return ReducerListResponse(reducers=[reducer.value for reducer in Reducer])


# --- Сводные таблицы ---


@pivot_router.post(
    "",
    response_model=PivotResponseSchema,
    summary="Построить сводную таблицу",
    description="""
Строит сводную таблицу по лидам.

**Параметры:**
- `row_fields`, `col_fields` — поля строк и колонок (используется первое поле)
- `measures` — показатели: поле и функция агрегации
- `formulas`, `custom_formula` — вычисляемые значения над показателями
- `format` — параметры отображения
- `records` — лиды (опционально, иначе загружаются из Google Sheets)

Итоги по строкам, колонкам и общий итог рассчитываются повторной агрегацией
исходных значений, поэтому среднее и медиана в итогах корректны.
    """,
    responses={
        500: {"model": ErrorResponse, "description": "Ошибка получения лидов"},
    },
)
async def build_pivot(
    request: PivotRequestSchema,
    settings: Settings = Depends(get_cached_settings),
    user_settings: UserSettingsAdapter = Depends(get_user_settings),
    use_case: BuildPivotUseCase = Depends(get_build_pivot_use_case),
) -> PivotResponseSchema:
    """Строит сводную таблицу и возвращает значения с форматированием."""
    config = build_configuration(
        request, settings, resolve_default_pivot(settings, user_settings)
    )
    result = use_case.execute(PivotRequest(config=config, records=request.records))

    if not result.success or result.result is None:
        raise HTTPException(
            status_code=500,
            detail=result.error_message or "Ошибка построения сводной таблицы",
        )

    payload: Dict[str, Any] = result.result.to_dict()
    return PivotResponseSchema(**payload, formatted=result.formatted)


@pivot_router.post(
    "/export",
    summary="Выгрузить сводную таблицу в Excel",
    description="""
Строит сводную таблицу и возвращает Excel-файл.

**Листы файла:**
- **Сводка** — общие итоги по показателям и формулам
- по листу на каждый показатель — строки x колонки с итогами
- по листу на каждую формулу
    """,
    responses={
        200: {
            "content": {
                "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": {}
            },
            "description": "Excel-файл со сводной таблицей",
        },
        500: {"model": ErrorResponse, "description": "Ошибка сервера"},
    },
)
async def export_pivot(
    request: PivotRequestSchema,
    settings: Settings = Depends(get_cached_settings),
    user_settings: UserSettingsAdapter = Depends(get_user_settings),
    use_case: BuildPivotUseCase = Depends(get_build_pivot_use_case),
) -> Response:
    """Строит сводную таблицу и возвращает файл."""
    config = build_configuration(
        request, settings, resolve_default_pivot(settings, user_settings)
    )
    result = use_case.export(PivotRequest(config=config, records=request.records))

    if not result.success:
        raise HTTPException(
            status_code=500,
            detail=result.error_message or "Ошибка выгрузки сводной таблицы",
        )

    return Response(
        content=result.file_bytes,
        media_type=result.content_type,
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"',
            "X-Records-Count": str(result.records_count),
        },
    )


@pivot_router.post(
    "/refresh",
    response_model=OperationResponse,
    summary="Обновить лиды",
    description="Сбрасывает кэш лидов. Следующий запрос загрузит данные из Google Sheets заново.",
)
async def refresh_leads(
    lead_source: LeadSourcePort = Depends(get_lead_source),
) -> OperationResponse:
    """Сбрасывает кэш источника лидов."""
    lead_source.invalidate()
    logger.info("Кэш лидов сброшен по запросу")

    return OperationResponse(success=True, message="Кэш лидов сброшен")


# --- Конфигурация по умолчанию ---


@defaults_router.get(
    "",
    response_model=DefaultPivotResponse,
    summary="Посмотреть конфигурацию по умолчанию",
    description="""
Показывает конфигурацию, которая используется, если в запросе не заданы поля.

В ответе указан источник настроек:
- `user_settings` — конфигурация сохранена через `PUT /pivot/default`
- `builtin` — используются значения из настроек приложения
    """,
)
async def get_default_pivot(
    settings: Settings = Depends(get_cached_settings),
    user_settings: UserSettingsAdapter = Depends(get_user_settings),
) -> DefaultPivotResponse:
    """Возвращает конфигурацию по умолчанию."""
    source = "user_settings" if user_settings.has_default_pivot() else "builtin"
    return DefaultPivotResponse(
        pivot=resolve_default_pivot(settings, user_settings),
        source=source,
    )


@defaults_router.put(
    "",
    response_model=OperationResponse,
    summary="Изменить конфигурацию по умолчанию",
)
async def set_default_pivot(
    request: DefaultPivotSchema,
    user_settings: UserSettingsAdapter = Depends(get_user_settings),
) -> OperationResponse:
    """Сохраняет конфигурацию по умолчанию."""
    user_settings.set_default_pivot(request.model_dump())

    return OperationResponse(
        success=True,
        message=f"Сохранена конфигурация {request.row_field} x {request.col_field}",
        pivot=request,
    )


@defaults_router.delete(
    "",
    response_model=OperationResponse,
    summary="Сбросить к встроенным значениям",
)
async def reset_default_pivot(
    settings: Settings = Depends(get_cached_settings),
    user_settings: UserSettingsAdapter = Depends(get_user_settings),
) -> OperationResponse:
    """Удаляет сохранённую конфигурацию."""
    user_settings.reset_default_pivot()

    return OperationResponse(
        success=True,
        message="Настройки сброшены. Используются встроенные значения",
        pivot=builtin_default_pivot(settings),
    )
