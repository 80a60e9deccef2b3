"""Доменный слой."""
