"""
Порт для получения записей лидов.

Определяет интерфейс, который должен реализовать адаптер
хранилища лидов (таблица Google Sheets, файл, тестовый источник).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class LeadSourcePort(ABC):
    """
    Абстрактный порт источника лидов.

    Адаптер отвечает за загрузку, кэширование и авторизацию,
    сводная таблица получает готовый список записей.
    """

    @abstractmethod
    def fetch_leads(self) -> List[Dict[str, Any]]:
        """
        Получает список лидов.

        Returns:
            Список записей лидов в виде словарей.
        """
        pass

    @abstractmethod
    def invalidate(self) -> None:
        """Сбрасывает закэшированные данные источника."""
        pass
