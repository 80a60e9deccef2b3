"""Lead Pivot - сводные таблицы по лидам."""

__version__ = "1.0.0"
