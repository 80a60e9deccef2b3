"""Адаптеры."""
