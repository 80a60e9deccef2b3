"""Вторичные адаптеры (исходящие)."""
