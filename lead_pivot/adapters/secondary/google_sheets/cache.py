"""
Кэш лидов.

Хранит последний загруженный список лидов и время загрузки.
Часы передаются снаружи, что позволяет управлять временем в тестах.
"""

import time
from typing import Any, Callable, Dict, List, Optional

Clock = Callable[[], float]


class LeadCache:
    """Кэш списка лидов с ограниченным временем жизни."""

    def __init__(self, ttl_seconds: float = 300, clock: Optional[Clock] = None):
        """
        Инициализирует кэш.

        Args:
            ttl_seconds: Время жизни данных в секундах.
            clock: Функция текущего времени в секундах. По умолчанию time.monotonic.
        """
        self._ttl = ttl_seconds
        self._clock = clock or time.monotonic
        self._leads: List[Dict[str, Any]] = []
        self._stored_at: Optional[float] = None

    def is_fresh(self) -> bool:
        """Проверяет, что в кэше есть данные моложе TTL."""
        if self._stored_at is None or not self._leads:
            return False
        return (self._clock() - self._stored_at) < self._ttl

    def get(self) -> Optional[List[Dict[str, Any]]]:
        """Возвращает лиды, если они ещё актуальны."""
        if self.is_fresh():
            return self._leads
        return None

    def last_known(self) -> List[Dict[str, Any]]:
        """Возвращает последние загруженные лиды независимо от TTL."""
        return self._leads

    def put(self, leads: List[Dict[str, Any]]) -> None:
        """Сохраняет лиды с текущим временем."""
        self._leads = leads
        self._stored_at = self._clock()

    def invalidate(self) -> None:
        """Помечает данные как устаревшие, сохраняя их для резервного ответа."""
        self._stored_at = None
