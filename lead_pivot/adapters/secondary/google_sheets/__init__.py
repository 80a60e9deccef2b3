"""Адаптер Google Sheets."""

from .adapter import GoogleSheetsLeadAdapter
from .cache import LeadCache

__all__ = ["GoogleSheetsLeadAdapter", "LeadCache"]
