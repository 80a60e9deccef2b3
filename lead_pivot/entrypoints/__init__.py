"""Точки входа."""
