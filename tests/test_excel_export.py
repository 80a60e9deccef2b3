"""Тесты выгрузки сводной таблицы в Excel."""

from io import BytesIO

import pandas as pd
import pytest
from openpyxl import load_workbook

from lead_pivot.adapters.secondary.excel_export import ExcelExportAdapter
from lead_pivot.core.domain.models import (
    AggregationSpec,
    FormatOptions,
    FormulaSpec,
    PivotConfiguration,
)

RECORDS = [
    {"status": "Hot", "source": "Web", "v": 10},
    {"status": "Hot", "source": "Web", "v": 20},
    {"status": "Cold", "source": "Ad", "v": 5},
]


@pytest.fixture
def adapter() -> ExcelExportAdapter:
    return ExcelExportAdapter()


@pytest.fixture
def result(builder):
    config = PivotConfiguration(
        measures=[AggregationSpec.of("v", "sum"), AggregationSpec.of("v", "avg")],
        formulas=[FormulaSpec(name="double", expression="v_sum * 2")],
    )
    return builder.build(RECORDS, config)


class TestWorkbook:
    """Содержимое файла."""

    def test_sheets(self, adapter, result):
        workbook = load_workbook(BytesIO(adapter.export_to_bytes(result, FormatOptions())))
        assert workbook.sheetnames == ["Сводка", "v_sum", "v_avg", "double"]

    def test_measure_grid_with_totals(self, adapter, result):
        data = adapter.export_to_bytes(result, FormatOptions())
        df = pd.read_excel(BytesIO(data), sheet_name="v_sum", index_col=0)

        assert list(df.index) == ["Cold", "Hot", "Total"]
        assert list(df.columns) == ["Ad", "Web", "Total"]
        assert df.loc["Hot", "Web"] == 30
        assert df.loc["Hot", "Ad"] == 0
        assert df.loc["Hot", "Total"] == 30
        assert df.loc["Total", "Total"] == 35

    def test_avg_totals_are_recomputed(self, adapter, result):
        data = adapter.export_to_bytes(result, FormatOptions())
        df = pd.read_excel(BytesIO(data), sheet_name="v_avg", index_col=0)

        assert df.loc["Total", "Total"] == pytest.approx(35 / 3)

    def test_summary(self, adapter, result):
        data = adapter.export_to_bytes(result, FormatOptions())
        df = pd.read_excel(BytesIO(data), sheet_name="Сводка")

        assert list(df["Показатель"]) == ["v:sum", "v:avg", "double"]
        assert list(df["Общий итог"])[0] == 35
        assert list(df["Общий итог"])[2] == 70

    def test_formula_grid(self, adapter, result):
        data = adapter.export_to_bytes(result, FormatOptions())
        df = pd.read_excel(BytesIO(data), sheet_name="double", index_col=0)

        assert df.loc["Hot", "Web"] == 60
        assert df.loc["Total", "Total"] == 70

    def test_without_totals(self, adapter, result):
        data = adapter.export_to_bytes(result, FormatOptions(show_totals=False))
        df = pd.read_excel(BytesIO(data), sheet_name="v_sum", index_col=0)

        assert "Total" not in df.columns
        assert "Total" not in df.index

    def test_total_key_is_not_overwritten(self, adapter, builder):
        records = [
            {"status": "Total", "source": "Web", "v": 7},
            {"status": "Hot", "source": "Web", "v": 3},
        ]
        config = PivotConfiguration(measures=[AggregationSpec.of("v", "sum")])
        data = adapter.export_to_bytes(builder.build(records, config), FormatOptions())
        df = pd.read_excel(BytesIO(data), sheet_name="v_sum", index_col=0)

        assert list(df.index) == ["Hot", "Total", "[Total]"]
        assert df.loc["Total", "Web"] == 7
        assert df.loc["[Total]", "Total"] == 10

    def test_empty_result(self, adapter, builder):
        result = builder.build([], PivotConfiguration())
        workbook = load_workbook(BytesIO(adapter.export_to_bytes(result, FormatOptions())))
        assert workbook.sheetnames == ["Сводка", "count_count"]


class TestStyling:
    """Оформление листов."""

    def test_header_and_number_format(self, adapter, result):
        data = adapter.export_to_bytes(result, FormatOptions(decimal_places=3))
        sheet = load_workbook(BytesIO(data))["v_avg"]

        assert sheet["B1"].font.bold
        assert sheet["B2"].number_format == "#,##0.000"

    def test_integer_format_for_zero_decimals(self, adapter, result):
        data = adapter.export_to_bytes(result, FormatOptions(decimal_places=0))
        sheet = load_workbook(BytesIO(data))["v_sum"]

        assert sheet["B2"].number_format == "#,##0"


class TestSheetName:
    """Имена листов."""

    def test_invalid_characters(self):
        assert ExcelExportAdapter._sheet_name("a/b:c*d", set()) == "a_b_c_d"

    def test_length_limit(self):
        assert len(ExcelExportAdapter._sheet_name("x" * 40, set())) == 31

    def test_unique(self):
        used = set()
        first = ExcelExportAdapter._sheet_name("y" * 40, used)
        second = ExcelExportAdapter._sheet_name("y" * 40, used)

        assert first != second
        assert second.endswith("_2")
        assert len(second) == 31


class TestAdapterInfo:
    """Сведения о формате и запись в файл."""

    def test_content_type_and_extension(self, adapter):
        assert adapter.get_content_type().endswith("spreadsheetml.sheet")
        assert adapter.get_file_extension() == ".xlsx"

    def test_export_to_file(self, adapter, result, tmp_path):
        path = tmp_path / "pivot.xlsx"
        adapter.export_to_file(result, FormatOptions(), str(path))

        assert load_workbook(path).sheetnames[0] == "Сводка"
