"""
Доменная модель полей лида.

Содержит каталог полей, доступных для группировки и агрегации
в сводной таблице, и признаки их отображения.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

# Заглушки для отсутствующих значений
NOT_AVAILABLE = "N/A"
UNKNOWN_DATE = "Unknown"

# Атрибут записи, из которого вычисляются производные поля дат
CREATED_AT_ATTRIBUTE = "createdAt"


class FieldKind(str, Enum):
    """Тип поля лида."""

    CATEGORICAL = "categorical"
    NUMERIC = "numeric"
    DATE_DERIVED = "date_derived"
    CONSTANT = "constant"


@dataclass(frozen=True)
class FieldSpec:
    """
    Описание поля, доступного в сводной таблице.

    Attributes:
        id: Идентификатор поля в конфигурации.
        label: Отображаемое название.
        kind: Тип поля.
        attribute: Атрибут записи, из которого читается значение.
        aliases: Альтернативные названия атрибута в источнике данных.
        is_monetary: Денежное поле (форматируется как валюта).
        is_percentage: Процентное поле (форматируется со знаком %).
    """

    id: str
    label: str
    kind: FieldKind
    attribute: str
    aliases: Tuple[str, ...] = ()
    is_monetary: bool = False
    is_percentage: bool = False

    @property
    def is_numeric(self) -> bool:
        """Проверяет, возвращает ли поле число."""
        return self.kind in (FieldKind.NUMERIC, FieldKind.CONSTANT)

    @property
    def is_groupable(self) -> bool:
        """Проверяет, можно ли использовать поле для строк и колонок."""
        return self.kind in (FieldKind.CATEGORICAL, FieldKind.DATE_DERIVED)

    def to_dict(self) -> Dict[str, object]:
        """Преобразует в словарь для API."""
        return {
            "id": self.id,
            "label": self.label,
            "kind": self.kind.value,
            "is_monetary": self.is_monetary,
            "is_percentage": self.is_percentage,
            "numeric": self.is_numeric,
            "groupable": self.is_groupable,
        }

    @classmethod
    def passthrough(cls, field_id: str) -> "FieldSpec":
        """Создаёт категориальное поле для неизвестного идентификатора."""
        return cls(
            id=field_id,
            label=field_id,
            kind=FieldKind.CATEGORICAL,
            attribute=field_id,
        )


_CATALOG: List[FieldSpec] = [
    # Категориальные поля
    FieldSpec("status", "Status", FieldKind.CATEGORICAL, "status"),
    FieldSpec("stage", "Stage", FieldKind.CATEGORICAL, "stage", ("stage name",)),
    FieldSpec(
        "source", "Source", FieldKind.CATEGORICAL, "source",
        ("source name", "lead source"),
    ),
    FieldSpec(
        "associate", "Associate", FieldKind.CATEGORICAL, "associate",
        ("assigned to",),
    ),
    FieldSpec("center", "Center", FieldKind.CATEGORICAL, "center", ("location",)),
    FieldSpec(
        "fullName", "Full Name", FieldKind.CATEGORICAL, "fullName",
        ("name", "full name", "client name"),
    ),
    FieldSpec("email", "Email", FieldKind.CATEGORICAL, "email", ("email address",)),
    # Числовые поля
    FieldSpec(
        "ltv", "Lifetime Value", FieldKind.NUMERIC, "ltv",
        ("LTV", "lifetime value"), is_monetary=True,
    ),
    FieldSpec("visits", "Visits", FieldKind.NUMERIC, "visits", ("Visits",)),
    FieldSpec(
        "purchasesMade", "Purchases Made", FieldKind.NUMERIC, "purchasesMade",
        ("Purchases Made", "purchases"),
    ),
    # Производные поля от даты создания
    FieldSpec(
        "createdAtMonthYear", "Created (Month-Year)", FieldKind.DATE_DERIVED,
        CREATED_AT_ATTRIBUTE,
    ),
    # В старом интерфейсе "createdAt" означало разбивку по месяцу и году
    FieldSpec(
        "createdAt", "Created (Month-Year)", FieldKind.DATE_DERIVED,
        CREATED_AT_ATTRIBUTE,
    ),
    FieldSpec(
        "createdAtYear", "Created (Year)", FieldKind.DATE_DERIVED,
        CREATED_AT_ATTRIBUTE,
    ),
    FieldSpec(
        "createdAtMonth", "Created (Month)", FieldKind.DATE_DERIVED,
        CREATED_AT_ATTRIBUTE,
    ),
    # Константа для подсчёта записей
    FieldSpec("count", "Count", FieldKind.CONSTANT, "count"),
]

FIELD_CATALOG: Dict[str, FieldSpec] = {spec.id: spec for spec in _CATALOG}

# Атрибуты дат в источнике данных
CREATED_AT_ALIASES: Tuple[str, ...] = ("created at", "created date", "date")
