"""
Сервис форматирования значений сводной таблицы.

Форматирование применяется только при отображении и не изменяет
рассчитанные числа.
"""

import math
import re
from typing import List, Optional, Tuple

from lead_pivot.core.domain.models import FormatOptions, Reducer
from lead_pivot.core.domain.services.field_resolver import FieldResolverService

# Единицы сокращения денежных сумм по правилам локали
_COMPACT_UNITS = {
    "en_IN": [(10_000_000, "Cr"), (100_000, "L"), (1_000, "K")],
    "en_US": [(1_000_000_000, "B"), (1_000_000, "M"), (1_000, "K")],
}

_UNIT_MULTIPLIERS = {
    "Cr": 10_000_000,
    "L": 100_000,
    "K": 1_000,
    "M": 1_000_000,
    "B": 1_000_000_000,
}

_PARSE_PATTERN = re.compile(r"^(-?)\D*?([\d.]+)\s*(Cr|L|K|M|B)?\s*%?$")


def group_digits(digits: str, locale: str = "en_IN") -> str:
    """
    Расставляет разделители разрядов в целой части числа.

    en_IN: 12,34,567 (последние три цифры, затем группы по две).
    en_US: 1,234,567.
    """
    if len(digits) <= 3:
        return digits

    head, tail = digits[:-3], digits[-3:]
    size = 2 if locale == "en_IN" else 3

    groups: List[str] = []
    while head:
        groups.insert(0, head[-size:])
        head = head[:-size]
    return ",".join(groups + [tail])


def format_number(value: float, decimal_places: int = 2, locale: str = "en_IN") -> str:
    """Форматирует число с разделителями разрядов и заданной точностью."""
    value = _finite(value)
    text = f"{abs(value):.{decimal_places}f}"
    integer, _, fraction = text.partition(".")
    result = group_digits(integer, locale)
    if fraction:
        result = f"{result}.{fraction}"
    if value < 0 and float(text) != 0:
        result = f"-{result}"
    return result


def _finite(value: Optional[float]) -> float:
    if value is None:
        return 0.0
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


class ValueFormatterService:
    """Сервис для отображения значений ячеек и итогов."""

    def __init__(self, field_resolver: FieldResolverService):
        """
        Инициализирует сервис.

        Args:
            field_resolver: Сервис полей для определения типа показателя.
        """
        self._fields = field_resolver

    def format(
        self,
        value: Optional[float],
        field_id: str,
        options: Optional[FormatOptions] = None,
        reducer: "Optional[Reducer | str]" = None,
        is_percentage: bool = False,
    ) -> str:
        """
        Форматирует значение показателя для отображения.

        Args:
            value: Рассчитанное значение.
            field_id: Поле показателя.
            options: Параметры отображения.
            reducer: Функция агрегации показателя.
            is_percentage: Принудительно отобразить как процент.

        Returns:
            Строка для отображения.
        """
        options = options or FormatOptions()
        spec = self._fields.get_field(field_id)
        parsed_reducer = Reducer.parse(reducer) if reducer is not None else None

        # Количество записей всегда целое
        if parsed_reducer is not None and parsed_reducer.counts_values:
            return format_number(value, 0, options.locale)

        if is_percentage or spec.is_percentage:
            return self.format_percentage(value, options)

        if spec.is_monetary:
            return self.format_currency(value, options)

        return format_number(value, options.decimal_places, options.locale)

    def format_currency(self, value: Optional[float], options: FormatOptions) -> str:
        """
        Форматирует денежную сумму.

        Крупные суммы сокращаются: для en_IN - K, L (лакх), Cr (крор),
        для en_US - K, M, B.
        """
        value = _finite(value)
        sign = "-" if value < 0 else ""
        amount = abs(value)

        if options.compact_currency:
            unit, divider = self._compact_unit(amount, options.locale)
            if unit:
                number = format_number(amount / divider, options.decimal_places, options.locale)
                return f"{sign}{options.currency_symbol}{number}{unit}"

        number = format_number(amount, options.decimal_places, options.locale)
        if float(number.replace(",", "")) == 0:
            sign = ""
        return f"{sign}{options.currency_symbol}{number}"

    def format_percentage(self, value: Optional[float], options: FormatOptions) -> str:
        """Форматирует процент."""
        return f"{format_number(value, options.decimal_places, options.locale)}%"

    def parse(self, display: str) -> float:
        """
        Восстанавливает число из отображаемой строки.

        Понимает символ валюты, разделители разрядов, суффиксы
        K, L, Cr, M, B и знак процента. Нераспознанная строка даёт 0.
        """
        text = str(display).strip().replace(",", "")
        match = _PARSE_PATTERN.match(text)
        if not match:
            return 0.0

        sign, number, unit = match.groups()
        try:
            value = float(number)
        except ValueError:
            return 0.0

        if unit:
            value *= _UNIT_MULTIPLIERS[unit]
        return -value if sign else value

    def _compact_unit(self, amount: float, locale: str) -> Tuple[str, float]:
        units = _COMPACT_UNITS.get(locale, _COMPACT_UNITS["en_IN"])
        for divider, unit in units:
            if amount >= divider:
                return unit, divider
        return "", 1
