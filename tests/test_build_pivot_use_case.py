"""Тесты use case построения сводной таблицы."""

from typing import Any, Dict, List

import pytest

from lead_pivot.adapters.secondary.excel_export import ExcelExportAdapter
from lead_pivot.core.application.ports import LeadSourcePort
from lead_pivot.core.application.use_cases import BuildPivotUseCase, PivotRequest
from lead_pivot.core.domain.models import (
    AggregationSpec,
    FormatOptions,
    FormulaSpec,
    PivotConfiguration,
)


class FakeLeadSource(LeadSourcePort):
    """Источник лидов в памяти."""

    def __init__(self, leads: List[Dict[str, Any]]):
        self.leads = leads
        self.calls = 0
        self.invalidated = False

    def fetch_leads(self) -> List[Dict[str, Any]]:
        self.calls += 1
        return self.leads

    def invalidate(self) -> None:
        self.invalidated = True


class BrokenLeadSource(LeadSourcePort):
    """Источник лидов, который всегда падает."""

    def fetch_leads(self) -> List[Dict[str, Any]]:
        raise ConnectionError("sheet unavailable")

    def invalidate(self) -> None:
        pass


def make_use_case(source: LeadSourcePort, builder, formatter) -> BuildPivotUseCase:
    return BuildPivotUseCase(
        lead_source=source,
        export_port=ExcelExportAdapter(),
        pivot_builder=builder,
        value_formatter=formatter,
    )


@pytest.fixture
def config() -> PivotConfiguration:
    return PivotConfiguration(
        row_fields=["status"],
        col_fields=["source"],
        measures=[AggregationSpec.of("count", "count"), AggregationSpec.of("ltv", "sum")],
    )


class TestExecute:
    """Построение сводной таблицы."""

    def test_reads_leads_from_source(self, builder, formatter, leads, config):
        source = FakeLeadSource(leads)
        response = make_use_case(source, builder, formatter).execute(PivotRequest(config=config))

        assert response.success
        assert source.calls == 1
        assert response.records_count == len(leads)
        assert response.result.grand_total["count:count"] == len(leads)

    def test_inline_records_skip_source(self, builder, formatter, config):
        source = FakeLeadSource([])
        records = [{"status": "Hot", "source": "Web", "ltv": "150000"}]
        response = make_use_case(source, builder, formatter).execute(
            PivotRequest(config=config, records=records)
        )

        assert source.calls == 0
        assert response.result.cells["Hot"]["Web"]["ltv:sum"] == 150000.0

    def test_formatted_values(self, builder, formatter, config):
        records = [
            {"status": "Hot", "source": "Web", "ltv": "150000"},
            {"status": "Hot", "source": "Ad", "ltv": "2000"},
        ]
        response = make_use_case(FakeLeadSource([]), builder, formatter).execute(
            PivotRequest(config=config, records=records)
        )

        formatted = response.formatted
        assert formatted["cells"]["Hot"]["Web"] == {"count:count": "1", "ltv:sum": "₹1.50L"}
        assert formatted["cells"]["Hot"]["Ad"]["ltv:sum"] == "₹2.00K"
        assert formatted["row_totals"]["Hot"]["count:count"] == "2"
        assert formatted["grand_total"]["ltv:sum"] == "₹1.52L"
        assert "formulas" not in formatted

    def test_formatted_formulas(self, builder, formatter):
        config = PivotConfiguration(
            measures=[AggregationSpec.of("ltv", "sum"), AggregationSpec.of("count", "count")],
            formulas=[
                FormulaSpec(name="share", expression="count_count * 100 / 4", is_percentage=True),
                FormulaSpec(name="per_lead", expression="ltv_sum / count_count"),
            ],
            format=FormatOptions(decimal_places=1),
        )
        records = [
            {"status": "Hot", "source": "Web", "ltv": "100"},
            {"status": "Hot", "source": "Web", "ltv": "300"},
            {"status": "Cold", "source": "Ad", "ltv": "50"},
            {"status": "Cold", "source": "Ad", "ltv": "50"},
        ]
        response = make_use_case(FakeLeadSource([]), builder, formatter).execute(
            PivotRequest(config=config, records=records)
        )

        formulas = response.formatted["formulas"]
        assert formulas["cells"]["Hot"]["Web"]["share"] == "50.0%"
        assert formulas["cells"]["Hot"]["Web"]["per_lead"] == "200.0"
        assert formulas["cells"]["Hot"]["Ad"]["per_lead"] is None
        assert formulas["grand_total"]["share"] == "100.0%"

    def test_source_failure_is_reported(self, builder, formatter, config):
        response = make_use_case(BrokenLeadSource(), builder, formatter).execute(
            PivotRequest(config=config)
        )

        assert not response.success
        assert response.result is None
        assert "sheet unavailable" in response.error_message


class TestExport:
    """Выгрузка в файл."""

    def test_export_returns_file(self, builder, formatter, leads, config):
        response = make_use_case(FakeLeadSource(leads), builder, formatter).export(
            PivotRequest(config=config)
        )

        assert response.success
        assert response.filename == "Lead_Pivot_status_x_source.xlsx"
        assert response.content_type == ExcelExportAdapter.CONTENT_TYPE
        assert response.file_bytes[:2] == b"PK"

    def test_export_propagates_source_failure(self, builder, formatter, config):
        response = make_use_case(BrokenLeadSource(), builder, formatter).export(
            PivotRequest(config=config)
        )

        assert not response.success
        assert response.file_bytes is None
