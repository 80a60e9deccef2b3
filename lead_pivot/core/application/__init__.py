"""Слой приложения."""
