"""
Настройки приложения.

Все настройки загружаются из переменных окружения с возможностью
указания значений по умолчанию.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Конфигурация приложения Lead Pivot."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Google OAuth
    google_client_id: Optional[str] = Field(
        default=None,
        description="Client ID приложения Google OAuth",
    )
    google_client_secret: Optional[str] = Field(
        default=None,
        description="Client secret приложения Google OAuth",
    )
    google_refresh_token: Optional[str] = Field(
        default=None,
        description="Refresh token для получения access token",
    )

    # Google Sheets API
    spreadsheet_id: str = Field(
        default="",
        description="ID таблицы с лидами",
    )
    sheet_range: str = Field(
        default="◉ Leads!A:AF",
        description="Диапазон листа с лидами (первая строка - заголовки)",
    )
    sheets_api_base_url: str = Field(
        default="https://sheets.googleapis.com/v4/spreadsheets",
        description="Базовый URL Google Sheets API",
    )
    oauth_token_url: str = Field(
        default="https://oauth2.googleapis.com/token",
        description="URL обновления access token",
    )
    api_timeout: int = Field(
        default=30,
        description="Таймаут запросов к API в секундах",
    )
    api_max_retries: int = Field(
        default=3,
        description="Максимальное количество повторных попыток запроса",
    )
    lead_cache_ttl_seconds: float = Field(
        default=300,
        description="Время жизни кэша лидов в секундах",
    )

    # Pivot defaults
    default_row_field: str = Field(
        default="status",
        description="Поле строк по умолчанию",
    )
    default_col_field: str = Field(
        default="source",
        description="Поле колонок по умолчанию",
    )
    default_decimal_places: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Количество знаков после запятой по умолчанию",
    )
    number_locale: str = Field(
        default="en_IN",
        description="Правила группировки разрядов (en_IN, en_US)",
    )
    currency_symbol: str = Field(
        default="₹",
        description="Символ валюты для денежных показателей",
    )
    user_settings_path: str = Field(
        default="user_settings.json",
        description="Файл с сохранённой конфигурацией сводной таблицы",
    )

    # Application Settings
    app_name: str = Field(
        default="Lead Pivot",
        description="Название приложения",
    )
    app_version: str = Field(
        default="1.0.0",
        description="Версия приложения",
    )
    debug: bool = Field(
        default=False,
        description="Режим отладки",
    )

    # Server Settings
    host: str = Field(
        default="0.0.0.0",
        description="Хост для запуска сервера",
    )
    port: int = Field(
        default=8000,
        description="Порт для запуска сервера",
    )
    workers: int = Field(
        default=1,
        description="Количество воркеров uvicorn",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Уровень логирования (DEBUG, INFO, WARNING, ERROR)",
    )
    log_format: str = Field(
        default="json",
        description="Формат логов (json, text)",
    )


def get_settings() -> Settings:
    """Возвращает экземпляр настроек приложения."""
    return Settings()
