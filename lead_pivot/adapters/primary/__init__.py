"""Первичные адаптеры (входящие)."""
