"""Адаптер экспорта в Excel."""

from .adapter import ExcelExportAdapter

__all__ = ["ExcelExportAdapter"]
