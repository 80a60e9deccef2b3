"""
Адаптер для хранения пользовательских настроек.

Сохраняет конфигурацию сводной таблицы "по умолчанию" в JSON файл,
позволяя менеджерам менять её через API.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

_EMPTY_SETTINGS: Dict[str, Any] = {"default_pivot": {}}


class UserSettingsAdapter:
    """
    Адаптер для хранения пользовательских настроек в JSON файле.

    Позволяет сохранять и загружать конфигурацию сводной таблицы
    по умолчанию без необходимости редактировать .env файл.
    """

    DEFAULT_FILENAME = "user_settings.json"

    def __init__(self, settings_path: Optional[str] = None):
        """
        Инициализирует адаптер.

        Args:
            settings_path: Путь к файлу настроек.
                          По умолчанию user_settings.json в текущей директории.
        """
        self._path = Path(settings_path or self.DEFAULT_FILENAME)
        self._ensure_file_exists()

    def _ensure_file_exists(self) -> None:
        """Создаёт файл настроек, если его нет."""
        if not self._path.exists():
            self._save_settings(dict(_EMPTY_SETTINGS))
            logger.info(f"Создан файл настроек: {self._path}")

    def _load_settings(self) -> dict:
        """Загружает настройки из файла."""
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, FileNotFoundError):
            return dict(_EMPTY_SETTINGS)
        return data if isinstance(data, dict) else dict(_EMPTY_SETTINGS)

    def _save_settings(self, settings: dict) -> None:
        """Сохраняет настройки в файл."""
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(settings, f, ensure_ascii=False, indent=2)

    def get_default_pivot(self) -> Dict[str, Any]:
        """
        Получает сохранённую конфигурацию сводной таблицы.

        Returns:
            Словарь с полями row_field, col_field, measures, decimal_places
            или пустой словарь, если конфигурация не сохранялась.
        """
        settings = self._load_settings()
        pivot = settings.get("default_pivot") or {}
        return pivot if isinstance(pivot, dict) else {}

    def set_default_pivot(self, pivot: Dict[str, Any]) -> None:
        """
        Сохраняет конфигурацию сводной таблицы по умолчанию.

        Args:
            pivot: Конфигурация в виде словаря.
        """
        settings = self._load_settings()
        settings["default_pivot"] = pivot
        self._save_settings(settings)
        logger.info(
            f"Обновлена конфигурация по умолчанию: "
            f"{pivot.get('row_field')} x {pivot.get('col_field')}"
        )

    def reset_default_pivot(self) -> None:
        """Удаляет сохранённую конфигурацию."""
        self.set_default_pivot({})

    def has_default_pivot(self) -> bool:
        """Проверяет, сохранена ли конфигурация по умолчанию."""
        return bool(self.get_default_pivot())
