"""Порты приложения."""

from .export_port import ExportPort
from .lead_source_port import LeadSourcePort

__all__ = ["ExportPort", "LeadSourcePort"]
