"""Ядро приложения: доменная логика и сценарии использования."""
