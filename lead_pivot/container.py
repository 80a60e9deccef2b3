"""
DI Container - сборка зависимостей приложения.

Отвечает за создание и связывание всех компонентов системы.
"""

from dataclasses import dataclass

from lead_pivot.adapters.secondary.excel_export import ExcelExportAdapter
from lead_pivot.adapters.secondary.google_sheets import GoogleSheetsLeadAdapter, LeadCache
from lead_pivot.adapters.secondary.user_settings import UserSettingsAdapter
from lead_pivot.core.application.ports import ExportPort, LeadSourcePort
from lead_pivot.core.application.use_cases import BuildPivotUseCase
from lead_pivot.core.domain.services import (
    FieldResolverService,
    FormulaEvaluatorService,
    PivotBuilderService,
    ReducerLibrary,
    TotalsCalculatorService,
    ValueFormatterService,
)
from lead_pivot.settings import Settings


@dataclass
class Container:
    """
    Контейнер зависимостей приложения.

    Хранит все сервисы и адаптеры, обеспечивая их правильную инициализацию.
    """

    settings: Settings
    lead_source: LeadSourcePort
    export_adapter: ExportPort
    user_settings: UserSettingsAdapter
    field_resolver: FieldResolverService
    reducers: ReducerLibrary
    pivot_builder: PivotBuilderService
    value_formatter: ValueFormatterService
    build_pivot_use_case: BuildPivotUseCase


def create_container(settings: Settings) -> Container:
    """
    Создаёт контейнер с инициализированными зависимостями.

    Args:
        settings: Настройки приложения.

    Returns:
        Контейнер с готовыми к использованию сервисами.
    """
    # Создаём адаптеры
    lead_source = GoogleSheetsLeadAdapter(
        settings, cache=LeadCache(settings.lead_cache_ttl_seconds)
    )
    export_adapter = ExcelExportAdapter()
    user_settings = UserSettingsAdapter(settings.user_settings_path)

    # Создаём доменные сервисы
    field_resolver = FieldResolverService()
    reducers = ReducerLibrary()
    pivot_builder = PivotBuilderService(
        field_resolver=field_resolver,
        reducers=reducers,
        totals_calculator=TotalsCalculatorService(reducers),
        formula_evaluator=FormulaEvaluatorService(),
    )
    value_formatter = ValueFormatterService(field_resolver)

    # Создаём use cases
    build_pivot_use_case = BuildPivotUseCase(
        lead_source=lead_source,
        export_port=export_adapter,
        pivot_builder=pivot_builder,
        value_formatter=value_formatter,
    )

    return Container(
        settings=settings,
        lead_source=lead_source,
        export_adapter=export_adapter,
        user_settings=user_settings,
        field_resolver=field_resolver,
        reducers=reducers,
        pivot_builder=pivot_builder,
        value_formatter=value_formatter,
        build_pivot_use_case=build_pivot_use_case,
    )
