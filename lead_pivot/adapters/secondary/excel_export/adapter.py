"""
Адаптер для экспорта сводных таблиц в Excel.

Реализует порт ExportPort для сохранения данных в формате XLSX.
"""

import re
from io import BytesIO
from typing import Callable, Dict, List, Mapping, Optional

import pandas as pd
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from lead_pivot.core.application.ports import ExportPort
from lead_pivot.core.domain.models import FormatOptions, PivotResult

TOTAL_LABEL = "Total"

# Ограничения Excel на имя листа
_SHEET_NAME_MAX = 31
_SHEET_NAME_INVALID = re.compile(r"[\[\]:*?/\\]")


class ExcelExportAdapter(ExportPort):
    """
    Адаптер для экспорта сводной таблицы в Excel (XLSX).

    Формирует файл с несколькими листами:
    - Сводка: общие итоги по всем показателям
    - по листу на каждый показатель: строки x колонки с итогами
    - по листу на каждую пользовательскую формулу
    """

    CONTENT_TYPE = (
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    FILE_EXTENSION = ".xlsx"

    def export_to_bytes(self, result: PivotResult, options: FormatOptions) -> bytes:
        """Экспортирует сводную таблицу в байтовый поток."""
        output = BytesIO()

        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            # Сводка
            summary_df = pd.DataFrame([
                {
                    "Показатель": measure.key,
                    "Поле": measure.field,
                    "Функция": measure.reducer.value,
                    "Общий итог": result.grand_total.get(measure.key, 0.0),
                }
                for measure in result.measures
            ] + [
                {
                    "Показатель": name,
                    "Поле": "",
                    "Функция": "formula",
                    "Общий итог": value,
                }
                for name, value in result.formulas.grand_total.items()
            ])
            summary_df.to_excel(writer, sheet_name="Сводка", index=False)

            used_names = {"Сводка"}

            # Листы показателей
            for measure in result.measures:
                df = self._build_grid(
                    result,
                    cell_value=lambda r, c, key=measure.key: result.cells[r][c].get(key, 0.0),
                    row_totals={k: v.get(measure.key) for k, v in result.row_totals.items()},
                    col_totals={k: v.get(measure.key) for k, v in result.col_totals.items()},
                    grand_total=result.grand_total.get(measure.key),
                    show_totals=options.show_totals,
                )
                df.to_excel(
                    writer,
                    sheet_name=self._sheet_name(measure.variable_name, used_names),
                )

            # Листы формул
            for name in result.formulas.grand_total:
                df = self._build_formula_grid(result, name, options.show_totals)
                df.to_excel(writer, sheet_name=self._sheet_name(name, used_names))

            self._style_sheets(writer, options)

        output.seek(0)
        return output.getvalue()

    def export_to_file(
        self, result: PivotResult, options: FormatOptions, filepath: str
    ) -> None:
        """Экспортирует сводную таблицу в файл."""
        data = self.export_to_bytes(result, options)
        with open(filepath, "wb") as f:
            f.write(data)

    def get_content_type(self) -> str:
        """Возвращает MIME-тип для Excel."""
        return self.CONTENT_TYPE

    def get_file_extension(self) -> str:
        """Возвращает расширение файла."""
        return self.FILE_EXTENSION

    def _build_grid(
        self,
        result: PivotResult,
        cell_value: Callable[[str, str], Optional[float]],
        row_totals: Mapping[str, Optional[float]],
        col_totals: Mapping[str, Optional[float]],
        grand_total: Optional[float],
        show_totals: bool,
    ) -> pd.DataFrame:
        """Формирует DataFrame строки x колонки для одного показателя."""
        columns: List[str] = list(result.col_keys)
        data: Dict[str, List[Optional[float]]] = {
            col_key: [cell_value(row_key, col_key) for row_key in result.row_keys]
            for col_key in columns
        }
        df = pd.DataFrame(data, index=list(result.row_keys), columns=columns)

        if show_totals:
            # Подпись итогов не должна совпадать с ключом строки или колонки
            df[self._total_label(columns)] = [
                row_totals.get(row_key) for row_key in result.row_keys
            ]
            totals_row = [col_totals.get(col_key) for col_key in columns] + [grand_total]
            df.loc[self._total_label(result.row_keys)] = totals_row

        df.index.name = f"{result.row_field} \\ {result.col_field}"
        return df

    def _build_formula_grid(
        self, result: PivotResult, name: str, show_totals: bool
    ) -> pd.DataFrame:
        """Формирует DataFrame для пользовательской формулы."""
        formulas = result.formulas
        return self._build_grid(
            result,
            cell_value=lambda r, c: formulas.cells.get(r, {}).get(c, {}).get(name),
            row_totals={k: v.get(name) for k, v in formulas.row_totals.items()},
            col_totals={k: v.get(name) for k, v in formulas.col_totals.items()},
            grand_total=formulas.grand_total.get(name),
            show_totals=show_totals,
        )

    @staticmethod
    def _total_label(keys: List[str]) -> str:
        """Возвращает подпись итогов, отличную от всех ключей оси."""
        label = TOTAL_LABEL
        while label in keys:
            label = f"[{label}]"
        return label

    @staticmethod
    def _sheet_name(name: str, used: set) -> str:
        """Возвращает допустимое и уникальное имя листа."""
        base = _SHEET_NAME_INVALID.sub("_", name)[:_SHEET_NAME_MAX] or "Sheet"
        candidate, counter = base, 1
        while candidate in used:
            counter += 1
            suffix = f"_{counter}"
            candidate = base[: _SHEET_NAME_MAX - len(suffix)] + suffix
        used.add(candidate)
        return candidate

    def _style_sheets(self, writer: pd.ExcelWriter, options: FormatOptions) -> None:
        """Применяет формат чисел, выделяет заголовки и подбирает ширину колонок."""
        number_format = "#,##0" + ("." + "0" * options.decimal_places if options.decimal_places else "")

        for sheet in writer.sheets.values():
            for cell in sheet[1]:
                cell.font = Font(bold=True)

            for row in sheet.iter_rows(min_row=2, min_col=2):
                for cell in row:
                    if isinstance(cell.value, (int, float)):
                        cell.number_format = number_format

            for column in sheet.columns:
                max_length = 0
                column_letter = get_column_letter(column[0].column)

                for cell in column:
                    try:
                        cell_length = len(str(cell.value))
                        if cell_length > max_length:
                            max_length = cell_length
                    except (TypeError, AttributeError):
                        pass

                # Ограничиваем максимальную ширину
                adjusted_width = min(max_length + 2, 60)
                sheet.column_dimensions[column_letter].width = adjusted_width
