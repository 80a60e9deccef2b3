"""Сценарии использования."""

from .build_pivot import BuildPivotUseCase, PivotRequest, PivotResponse

__all__ = ["BuildPivotUseCase", "PivotRequest", "PivotResponse"]
