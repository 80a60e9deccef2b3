"""
Сервис извлечения значений полей из записей лидов.

Содержит логику чтения прямых атрибутов, вычисления производных
полей по дате создания и приведения значений к безопасным умолчаниям.
"""

import math
import re
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from lead_pivot.core.domain.models import (
    CREATED_AT_ALIASES,
    FIELD_CATALOG,
    NOT_AVAILABLE,
    UNKNOWN_DATE,
    FieldKind,
    FieldSpec,
)

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

# Форматы дат, встречающиеся в таблице лидов (после ISO 8601)
_DATE_FORMATS = (
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%Y/%m/%d",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
)

_NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")
_NON_NUMERIC = re.compile(r"[^\d.\-]")


def _normalize_name(name: str) -> str:
    """Приводит название атрибута к виду для нечувствительного сравнения."""
    return re.sub(r"[\s_\-]", "", str(name)).lower()


def parse_date(value: Any) -> Optional[datetime]:
    """
    Парсит дату создания лида.

    Args:
        value: Строка, datetime или date.

    Returns:
        Объект datetime без часового пояса или None, если разобрать не удалось.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    text = str(value).strip()
    if not text or text == "-":
        return None

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    return None


def to_number(value: Any) -> float:
    """
    Приводит значение к числу.

    Символы валют, разделители разрядов и прочий текст отбрасываются.
    Нечисловые и отсутствующие значения дают 0.

    Args:
        value: Значение атрибута.

    Returns:
        Конечное число с плавающей точкой.
    """
    if value is None or isinstance(value, bool):
        return float(value or 0)

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _NUMBER_PATTERN.search(_NON_NUMERIC.sub("", str(value)))
        if not match:
            return 0.0
        number = float(match.group())

    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


class FieldResolverService:
    """Сервис для получения значения поля из записи лида."""

    def get_field(self, field_id: str) -> FieldSpec:
        """
        Возвращает описание поля по идентификатору.

        Для неизвестного идентификатора возвращает категориальное
        поле, читающее атрибут с тем же именем.
        """
        spec = FIELD_CATALOG.get(field_id)
        if spec is None:
            return FieldSpec.passthrough(field_id)
        return spec

    def is_known_field(self, field_id: str) -> bool:
        """Проверяет, есть ли поле в каталоге."""
        return field_id in FIELD_CATALOG

    def resolve(self, record: Mapping[str, Any], field_id: str) -> Any:
        """
        Возвращает значение поля для группировки или агрегации.

        Args:
            record: Запись лида.
            field_id: Идентификатор поля.

        Returns:
            1 для поля count, строку для категориальных и производных полей,
            число для числовых полей. Исключения не выбрасываются.
        """
        spec = self.get_field(field_id)

        if spec.kind == FieldKind.CONSTANT:
            return 1

        if spec.kind == FieldKind.DATE_DERIVED:
            return self._resolve_date(record, spec)

        raw = self._lookup(record, spec)

        if spec.kind == FieldKind.NUMERIC:
            return to_number(raw)

        if raw is None:
            return NOT_AVAILABLE
        text = str(raw).strip()
        return text if text else NOT_AVAILABLE

    def resolve_key(self, record: Mapping[str, Any], field_id: str) -> str:
        """Возвращает значение поля в виде строкового ключа группировки."""
        value = self.resolve(record, field_id)
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)

    def _resolve_date(self, record: Mapping[str, Any], spec: FieldSpec) -> str:
        """Вычисляет производное поле по дате создания."""
        raw = self._lookup(record, spec, extra_aliases=CREATED_AT_ALIASES)
        created = parse_date(raw)
        if created is None:
            return UNKNOWN_DATE

        if spec.id == "createdAtYear":
            return str(created.year)
        if spec.id == "createdAtMonth":
            return MONTH_NAMES[created.month - 1]
        # Месяц и год: "Jan '24"
        return f"{MONTH_NAMES[created.month - 1][:3]} '{created.year % 100:02d}"

    def _lookup(
        self,
        record: Mapping[str, Any],
        spec: FieldSpec,
        extra_aliases: tuple = (),
    ) -> Any:
        """
        Ищет атрибут в записи с учётом альтернативных названий.

        Порядок поиска: точное имя, псевдонимы, сравнение без учёта
        регистра, пробелов и подчёркиваний.
        """
        if not isinstance(record, Mapping):
            return None

        if spec.attribute in record:
            return record[spec.attribute]

        names = spec.aliases + extra_aliases
        for alias in names:
            if alias in record:
                return record[alias]

        normalized: Dict[str, Any] = {}
        for key, value in record.items():
            normalized.setdefault(_normalize_name(key), value)

        for name in (spec.attribute,) + names:
            name = _normalize_name(name)
            if name in normalized:
                return normalized[name]

        return None
