"""
Зависимости FastAPI.

Определяет функции для внедрения зависимостей в обработчики запросов.
"""

from functools import lru_cache

from fastapi import Depends

from lead_pivot.adapters.secondary.excel_export import ExcelExportAdapter
from lead_pivot.adapters.secondary.google_sheets import GoogleSheetsLeadAdapter, LeadCache
from lead_pivot.adapters.secondary.user_settings import UserSettingsAdapter
from lead_pivot.core.application.ports import LeadSourcePort
from lead_pivot.core.application.use_cases import BuildPivotUseCase
from lead_pivot.core.domain.services import (
    FieldResolverService,
    PivotBuilderService,
    ValueFormatterService,
)
from lead_pivot.settings import Settings, get_settings


@lru_cache
def get_cached_settings() -> Settings:
    """
    Возвращает закэшированные настройки.

    Использует lru_cache для избежания повторного чтения .env файла.
    """
    return get_settings()


@lru_cache
def get_lead_source() -> LeadSourcePort:
    """
    Возвращает источник лидов.

    Один экземпляр на процесс, чтобы кэш лидов переживал запросы.
    """
    settings = get_cached_settings()
    return GoogleSheetsLeadAdapter(
        settings, cache=LeadCache(settings.lead_cache_ttl_seconds)
    )


def get_user_settings(
    settings: Settings = Depends(get_cached_settings),
) -> UserSettingsAdapter:
    """Создаёт адаптер пользовательских настроек."""
    return UserSettingsAdapter(settings.user_settings_path)


def get_export_adapter() -> ExcelExportAdapter:
    """Создаёт адаптер экспорта в Excel."""
    return ExcelExportAdapter()


def get_field_resolver() -> FieldResolverService:
    """Создаёт сервис полей."""
    return FieldResolverService()


def get_pivot_builder() -> PivotBuilderService:
    """Создаёт сервис построения сводных таблиц."""
    return PivotBuilderService(field_resolver=get_field_resolver())


def get_value_formatter() -> ValueFormatterService:
    """Создаёт сервис форматирования значений."""
    return ValueFormatterService(get_field_resolver())


def get_build_pivot_use_case(
    lead_source: LeadSourcePort = Depends(get_lead_source),
) -> BuildPivotUseCase:
    """
    Создаёт use case построения сводной таблицы.

    Собирает все необходимые зависимости.
    """
    return BuildPivotUseCase(
        lead_source=lead_source,
        export_port=get_export_adapter(),
        pivot_builder=get_pivot_builder(),
        value_formatter=get_value_formatter(),
    )
