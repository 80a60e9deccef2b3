"""Адаптер пользовательских настроек."""

from .adapter import UserSettingsAdapter

__all__ = ["UserSettingsAdapter"]
