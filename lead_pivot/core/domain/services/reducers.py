"""
Библиотека статистических функций агрегации.

Каждая функция сворачивает список значений в одно число.
Для пустого списка все функции возвращают 0.
"""

import math
from collections import Counter
from typing import Callable, Dict, Hashable, List, Sequence

from lead_pivot.core.domain.models import Reducer

ReducerFunc = Callable[[Sequence], float]


def _numbers(values: Sequence) -> List[float]:
    """Оставляет только числовые значения."""
    return [
        float(v) for v in values
        if isinstance(v, (int, float)) and not isinstance(v, bool)
    ]


def reduce_count(values: Sequence) -> float:
    return float(len(values))


def reduce_sum(values: Sequence) -> float:
    return float(math.fsum(_numbers(values)))


def reduce_avg(values: Sequence) -> float:
    numbers = _numbers(values)
    if not numbers:
        return 0.0
    return math.fsum(numbers) / len(numbers)


def reduce_min(values: Sequence) -> float:
    numbers = _numbers(values)
    return min(numbers) if numbers else 0.0


def reduce_max(values: Sequence) -> float:
    numbers = _numbers(values)
    return max(numbers) if numbers else 0.0


def reduce_median(values: Sequence) -> float:
    """Медиана: средний элемент, для чётной длины - среднее двух средних."""
    numbers = sorted(_numbers(values))
    if not numbers:
        return 0.0
    middle = len(numbers) // 2
    if len(numbers) % 2:
        return numbers[middle]
    return (numbers[middle - 1] + numbers[middle]) / 2


def reduce_mode(values: Sequence) -> float:
    """
    Мода: значение с наибольшей частотой.

    При равенстве частот выбирается значение, встретившееся первым.
    """
    numbers = _numbers(values)
    if not numbers:
        return 0.0
    # Counter сохраняет порядок первого появления, max() берёт первый максимум
    counts = Counter(numbers)
    return max(counts, key=counts.__getitem__)


def reduce_variance(values: Sequence) -> float:
    """Дисперсия генеральной совокупности."""
    numbers = _numbers(values)
    if not numbers:
        return 0.0
    mean = math.fsum(numbers) / len(numbers)
    return math.fsum((x - mean) ** 2 for x in numbers) / len(numbers)


def reduce_stddev(values: Sequence) -> float:
    """Стандартное отклонение генеральной совокупности."""
    return math.sqrt(reduce_variance(values))


def reduce_count_distinct(values: Sequence) -> float:
    unique = set()
    for value in values:
        unique.add(value if isinstance(value, Hashable) else repr(value))
    return float(len(unique))


REDUCERS: Dict[Reducer, ReducerFunc] = {
    Reducer.COUNT: reduce_count,
    Reducer.SUM: reduce_sum,
    Reducer.AVG: reduce_avg,
    Reducer.MIN: reduce_min,
    Reducer.MAX: reduce_max,
    Reducer.MEDIAN: reduce_median,
    Reducer.MODE: reduce_mode,
    Reducer.STDDEV: reduce_stddev,
    Reducer.VARIANCE: reduce_variance,
    Reducer.COUNT_DISTINCT: reduce_count_distinct,
}


class ReducerLibrary:
    """Каталог функций агрегации."""

    def reduce(self, values: Sequence, method: "str | Reducer") -> float:
        """
        Применяет функцию агрегации к списку значений.

        Args:
            values: Значения корзины (возможно пустой список).
            method: Имя функции. Неизвестные имена заменяются на count.

        Returns:
            Результат агрегации.
        """
        return REDUCERS[Reducer.parse(method)](values)

    def available(self) -> List[str]:
        """Возвращает имена всех функций агрегации."""
        return [reducer.value for reducer in Reducer]
