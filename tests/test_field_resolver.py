"""Тесты извлечения значений полей из записей лидов."""

from datetime import date, datetime

import pytest

from lead_pivot.core.domain.models import NOT_AVAILABLE, UNKNOWN_DATE, FieldKind
from lead_pivot.core.domain.services import parse_date, to_number


class TestToNumber:
    """Приведение значений к числу."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (42, 42.0),
            (3.5, 3.5),
            ("1,234", 1234.0),
            ("₹12,000", 12000.0),
            ("1,50,000.75", 150000.75),
            ("-250", -250.0),
            ("-₹500", -500.0),
            ("-$1,200", -1200.0),
            ("  17  ", 17.0),
        ],
    )
    def test_numeric_values(self, raw, expected):
        assert to_number(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "abc", "-", float("nan"), float("inf")])
    def test_invalid_values_become_zero(self, raw):
        assert to_number(raw) == 0.0

    def test_bool_is_not_a_quantity(self):
        assert to_number(True) == 1.0
        assert to_number(False) == 0.0


class TestParseDate:
    """Разбор даты создания."""

    def test_iso_with_z_suffix(self):
        assert parse_date("2024-01-15T10:00:00Z") == datetime(2024, 1, 15, 10, 0)

    def test_plain_iso_date(self):
        assert parse_date("2024-03-01") == datetime(2024, 3, 1)

    def test_day_first_slash_format(self):
        assert parse_date("25/12/2023") == datetime(2023, 12, 25)

    def test_month_first_fallback(self):
        # 25 не может быть месяцем, поэтому 12/25/2023 читается как MM/DD/YYYY
        assert parse_date("12/25/2023") == datetime(2023, 12, 25)

    def test_date_and_datetime_objects(self):
        assert parse_date(date(2024, 5, 6)) == datetime(2024, 5, 6)
        assert parse_date(datetime(2024, 5, 6, 7, 8)) == datetime(2024, 5, 6, 7, 8)

    @pytest.mark.parametrize("raw", [None, "", "   ", "-", "not a date", "2024-13-45"])
    def test_unparsable_returns_none(self, raw):
        assert parse_date(raw) is None


class TestResolveCategorical:
    """Категориальные поля."""

    def test_value_is_stripped(self, resolver):
        assert resolver.resolve({"status": "  Hot "}, "status") == "Hot"

    @pytest.mark.parametrize("record", [{}, {"status": None}, {"status": ""}, {"status": "   "}])
    def test_missing_value_is_sentinel(self, resolver, record):
        assert resolver.resolve(record, "status") == NOT_AVAILABLE

    def test_alias_lookup(self, resolver):
        assert resolver.resolve({"Lead Source": "Walk-in"}, "source") == "Walk-in"
        assert resolver.resolve({"assigned to": "Kiran"}, "associate") == "Kiran"

    def test_case_and_space_insensitive_lookup(self, resolver):
        assert resolver.resolve({"Full_Name": "Asha"}, "fullName") == "Asha"
        assert resolver.resolve({"STATUS": "Cold"}, "status") == "Cold"

    def test_exact_name_wins_over_alias(self, resolver):
        record = {"source": "Web", "lead source": "Ad"}
        assert resolver.resolve(record, "source") == "Web"

    def test_numbers_are_stringified(self, resolver):
        assert resolver.resolve({"center": 12}, "center") == "12"


class TestResolveNumeric:
    """Числовые поля."""

    def test_currency_is_stripped(self, resolver):
        assert resolver.resolve({"ltv": "₹1,50,000"}, "ltv") == 150000.0

    def test_inconsistent_attribute_names(self, resolver):
        assert resolver.resolve({"LTV": "500"}, "ltv") == 500.0
        assert resolver.resolve({"Purchases Made": "4"}, "purchasesMade") == 4.0

    def test_missing_is_zero(self, resolver):
        assert resolver.resolve({}, "visits") == 0.0


class TestResolveDerived:
    """Производные поля даты создания и константа count."""

    def test_count_is_always_one(self, resolver):
        assert resolver.resolve({}, "count") == 1

    def test_month_year(self, resolver):
        assert resolver.resolve({"createdAt": "2024-01-15"}, "createdAtMonthYear") == "Jan '24"

    def test_legacy_created_at_means_month_year(self, resolver):
        assert resolver.resolve({"createdAt": "2024-01-15"}, "createdAt") == "Jan '24"

    def test_year_and_month(self, resolver):
        record = {"createdAt": "2023-09-02T08:30:00Z"}
        assert resolver.resolve(record, "createdAtYear") == "2023"
        assert resolver.resolve(record, "createdAtMonth") == "September"

    def test_date_alias(self, resolver):
        assert resolver.resolve({"Created Date": "2024-02-29"}, "createdAtYear") == "2024"

    @pytest.mark.parametrize("record", [{}, {"createdAt": ""}, {"createdAt": "someday"}])
    def test_unparsable_date_is_unknown(self, resolver, record):
        assert resolver.resolve(record, "createdAtMonthYear") == UNKNOWN_DATE


class TestUnknownFields:
    """Неизвестные поля читаются как есть."""

    def test_passthrough_spec(self, resolver):
        spec = resolver.get_field("favouriteColour")
        assert spec.kind == FieldKind.CATEGORICAL
        assert spec.attribute == "favouriteColour"
        assert not resolver.is_known_field("favouriteColour")

    def test_passthrough_value(self, resolver):
        assert resolver.resolve({"favouriteColour": "teal"}, "favouriteColour") == "teal"
        assert resolver.resolve({}, "favouriteColour") == NOT_AVAILABLE

    def test_non_mapping_record_does_not_raise(self, resolver):
        assert resolver.resolve(None, "status") == NOT_AVAILABLE
        assert resolver.resolve("garbage", "ltv") == 0.0


class TestResolveKey:
    """Строковые ключи группировки."""

    def test_integral_float_has_no_fraction(self, resolver):
        assert resolver.resolve_key({"visits": "3"}, "visits") == "3"

    def test_fractional_float_is_kept(self, resolver):
        assert resolver.resolve_key({"ltv": "99.5"}, "ltv") == "99.5"

    def test_count_key(self, resolver):
        assert resolver.resolve_key({}, "count") == "1"
