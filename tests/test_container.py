"""Тесты сборки зависимостей."""

from lead_pivot.adapters.secondary.google_sheets import GoogleSheetsLeadAdapter
from lead_pivot.container import create_container
from lead_pivot.core.application.use_cases import PivotRequest
from lead_pivot.core.domain.models import PivotConfiguration
from lead_pivot.settings import Settings


def test_container_builds_working_use_case(tmp_path):
    settings = Settings(
        spreadsheet_id="",
        user_settings_path=str(tmp_path / "user_settings.json"),
    )
    container = create_container(settings)

    assert isinstance(container.lead_source, GoogleSheetsLeadAdapter)
    assert container.reducers.available()[0] == "count"
    assert not container.user_settings.has_default_pivot()

    # Без настроенной таблицы источник возвращает пустой список
    response = container.build_pivot_use_case.execute(PivotRequest(config=PivotConfiguration()))
    assert response.success
    assert response.records_count == 0
