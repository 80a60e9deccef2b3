"""
Use case построения сводной таблицы.

Основной сценарий использования - построение сводной таблицы
по лидам из источника с выбранными полями и показателями,
с форматированием значений и экспортом в файл.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from loguru import logger

from lead_pivot.core.application.ports import ExportPort, LeadSourcePort
from lead_pivot.core.domain.models import (
    FormulaSpec,
    PivotConfiguration,
    PivotResult,
)
from lead_pivot.core.domain.services import (
    PivotBuilderService,
    ValueFormatterService,
)


@dataclass
class PivotRequest:
    """Запрос на построение сводной таблицы."""

    config: PivotConfiguration
    # Если записи переданы, источник лидов не используется
    records: Optional[List[Dict[str, Any]]] = None


@dataclass
class PivotResponse:
    """Ответ с результатом построения сводной таблицы."""

    success: bool
    result: Optional[PivotResult] = None
    formatted: Dict[str, Any] = field(default_factory=dict)
    file_bytes: Optional[bytes] = None
    filename: Optional[str] = None
    content_type: Optional[str] = None
    error_message: Optional[str] = None
    records_count: int = 0


class BuildPivotUseCase:
    """
    Use case для построения сводной таблицы по лидам.

    Оркестрирует получение лидов из источника, агрегацию,
    форматирование значений и экспорт в файл.
    """

    def __init__(
        self,
        lead_source: LeadSourcePort,
        export_port: ExportPort,
        pivot_builder: PivotBuilderService,
        value_formatter: ValueFormatterService,
    ):
        """
        Инициализирует use case.

        Args:
            lead_source: Порт источника лидов.
            export_port: Порт для экспорта сводной таблицы.
            pivot_builder: Сервис построения сводных таблиц.
            value_formatter: Сервис форматирования значений.
        """
        self._source = lead_source
        self._export = export_port
        self._pivot_builder = pivot_builder
        self._formatter = value_formatter

    def execute(self, request: PivotRequest) -> PivotResponse:
        """
        Строит сводную таблицу.

        Args:
            request: Параметры запроса.

        Returns:
            Ответ с результатом и отформатированными значениями или ошибкой.
        """
        config = request.config

        try:
            records = self._load_records(request)
        except Exception as e:
            logger.error(f"Ошибка получения лидов: {e}")
            return PivotResponse(success=False, error_message=str(e))

        logger.info(
            f"Строю сводную таблицу {config.row_field} x {config.col_field} "
            f"по {len(records)} лидам"
        )
        result = self._pivot_builder.build(records, config)

        return PivotResponse(
            success=True,
            result=result,
            formatted=self.format_result(result, config),
            records_count=result.record_count,
        )

    def export(self, request: PivotRequest) -> PivotResponse:
        """
        Строит сводную таблицу и экспортирует её в файл.

        Args:
            request: Параметры запроса.

        Returns:
            Ответ с файлом или ошибкой.
        """
        response = self.execute(request)
        if not response.success or response.result is None:
            return response

        try:
            response.file_bytes = self._export.export_to_bytes(
                response.result, request.config.format
            )
        except Exception as e:
            logger.error(f"Ошибка экспорта сводной таблицы: {e}")
            return PivotResponse(success=False, error_message=str(e))

        response.filename = (
            f"Lead_Pivot_{response.result.row_field}_x_{response.result.col_field}"
            f"{self._export.get_file_extension()}"
        )
        response.content_type = self._export.get_content_type()

        logger.success(
            f"Сводная таблица выгружена: {response.filename}, "
            f"{response.records_count} лидов"
        )
        return response

    def format_result(
        self, result: PivotResult, config: PivotConfiguration
    ) -> Dict[str, Any]:
        """
        Форматирует все значения сводной таблицы для отображения.

        Args:
            result: Результат построения сводной таблицы.
            config: Конфигурация с параметрами отображения.

        Returns:
            Словарь той же структуры, что и результат, со строками вместо чисел.
        """
        options = config.format

        def fmt(values: Mapping[str, float]) -> Dict[str, str]:
            return {
                m.key: self._formatter.format(
                    values.get(m.key, 0.0), m.field, options, reducer=m.reducer
                )
                for m in result.measures
            }

        formatted: Dict[str, Any] = {
            "cells": {
                row_key: {col_key: fmt(values) for col_key, values in row_cells.items()}
                for row_key, row_cells in result.cells.items()
            },
            "row_totals": {k: fmt(v) for k, v in result.row_totals.items()},
            "col_totals": {k: fmt(v) for k, v in result.col_totals.items()},
            "grand_total": fmt(result.grand_total),
        }

        if config.formulas:
            formatted["formulas"] = self._format_formulas(result, config.formulas, options)

        return formatted

    def _format_formulas(self, result: PivotResult, formulas: List[FormulaSpec], options):
        percentages = {f.name: f.is_percentage for f in formulas}

        def fmt(values: Mapping[str, Optional[float]]) -> Dict[str, Optional[str]]:
            return {
                name: (
                    None
                    if value is None
                    else self._formatter.format(
                        value, name, options, is_percentage=percentages.get(name, False)
                    )
                )
                for name, value in values.items()
            }

        return {
            "cells": {
                row_key: {col_key: fmt(values) for col_key, values in row_cells.items()}
                for row_key, row_cells in result.formulas.cells.items()
            },
            "row_totals": {k: fmt(v) for k, v in result.formulas.row_totals.items()},
            "col_totals": {k: fmt(v) for k, v in result.formulas.col_totals.items()},
            "grand_total": fmt(result.formulas.grand_total),
        }

    def _load_records(self, request: PivotRequest) -> List[Dict[str, Any]]:
        """Возвращает записи из запроса или из источника лидов."""
        if request.records is not None:
            return request.records
        return self._source.fetch_leads()
