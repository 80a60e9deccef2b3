"""
Адаптер для получения лидов из Google Sheets.

Реализует порт LeadSourcePort: обновляет OAuth токен, загружает
лист с лидами и преобразует строки таблицы в записи.
"""

import re
import time
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from lead_pivot.adapters.secondary.google_sheets.cache import Clock, LeadCache
from lead_pivot.core.application.ports import LeadSourcePort
from lead_pivot.settings import Settings

# Заголовки колонок таблицы -> атрибуты лида
HEADER_ALIASES: Dict[str, str] = {
    "id": "id",
    "name": "fullName",
    "full name": "fullName",
    "client name": "fullName",
    "email": "email",
    "email address": "email",
    "phone": "phone",
    "phone number": "phone",
    "contact number": "phone",
    "mobile": "phone",
    "source": "source",
    "source name": "source",
    "lead source": "source",
    "associate": "associate",
    "assigned to": "associate",
    "status": "status",
    "stage": "stage",
    "stage name": "stage",
    "created at": "createdAt",
    "date": "createdAt",
    "created date": "createdAt",
    "center": "center",
    "location": "center",
    "remarks": "remarks",
    "notes": "remarks",
    "comments": "remarks",
    "ltv": "ltv",
    "visits": "visits",
    "purchases made": "purchasesMade",
}

_FOLLOW_UP_DATE = re.compile(r"^(?:follow[\s_-]?up|fu)[\s_]*(\d)[\s_]*date$")
_FOLLOW_UP_COMMENTS = re.compile(
    r"^(?:(?:follow[\s_-]?up|fu)[\s_]*(\d)[\s_]*comments|follow up comments \((\d)\))$"
)

# Значения по умолчанию для обязательных полей
_DEFAULTS: Dict[str, str] = {
    "fullName": "Unknown",
    "email": "",
    "phone": "",
    "source": "Other",
    "associate": "",
    "status": "New",
    "stage": "Initial Contact",
    "createdAt": "",
    "center": "",
    "remarks": "",
}


def map_header(header: str) -> str:
    """
    Возвращает атрибут лида для заголовка колонки.

    Неизвестные заголовки сохраняются как есть.
    """
    normalized = " ".join(str(header).lower().split())

    if normalized in HEADER_ALIASES:
        return HEADER_ALIASES[normalized]

    match = _FOLLOW_UP_DATE.match(normalized)
    if match:
        return f"followUp{match.group(1)}Date"

    match = _FOLLOW_UP_COMMENTS.match(normalized)
    if match:
        return f"followUp{match.group(1) or match.group(2)}Comments"

    return header


def _is_meaningful(value: str) -> bool:
    """Проверяет, что значение не пустое и не заглушка."""
    return value.strip() not in ("", "-")


def parse_rows(rows: List[List[Any]]) -> List[Dict[str, Any]]:
    """
    Преобразует строки листа в записи лидов.

    Args:
        rows: Значения листа, первая строка - заголовки.

    Returns:
        Список записей. Пустой список, если данных нет.
    """
    if len(rows) < 2:
        return []

    attributes = [map_header(header) for header in rows[0]]
    leads: List[Dict[str, Any]] = []

    for index, row in enumerate(rows[1:], start=1):
        lead: Dict[str, Any] = {}
        for col_index, attribute in enumerate(attributes):
            value = row[col_index] if col_index < len(row) else ""
            lead[attribute] = value if value is not None else ""

        for attribute, default in _DEFAULTS.items():
            if not str(lead.get(attribute) or "").strip():
                lead[attribute] = default

        if not str(lead.get("id") or "").strip():
            lead["id"] = f"lead-{index}"

        for attribute in list(lead):
            if attribute.startswith("followUp") and not _is_meaningful(str(lead[attribute])):
                lead[attribute] = ""

        leads.append(lead)

    return leads


class GoogleSheetsLeadAdapter(LeadSourcePort):
    """
    Адаптер для Google Sheets API.

    Загружает лиды с листа таблицы и кэширует их на время TTL.
    При ошибке загрузки возвращает последние успешно загруженные данные.
    """

    def __init__(
        self,
        settings: Settings,
        cache: Optional[LeadCache] = None,
        client: Optional[httpx.Client] = None,
        clock: Optional[Clock] = None,
        retry_delay: float = 5.0,
    ):
        """
        Инициализирует адаптер.

        Args:
            settings: Настройки приложения с credentials.
            cache: Кэш лидов. По умолчанию создаётся с TTL из настроек.
            client: HTTP клиент. По умолчанию создаётся новый.
            clock: Функция текущего времени для срока действия токена.
            retry_delay: Пауза перед повтором при ограничении частоты запросов.
        """
        self._settings = settings
        self._clock = clock or time.time
        self._cache = cache or LeadCache(settings.lead_cache_ttl_seconds)
        self._client = client or httpx.Client(timeout=settings.api_timeout)
        self._max_retries = settings.api_max_retries
        self._retry_delay = retry_delay

        self._access_token: Optional[str] = None
        self._token_expires_at: float = 0.0

    def __del__(self):
        """Закрывает HTTP клиент при удалении объекта."""
        if hasattr(self, "_client"):
            self._client.close()

    def fetch_leads(self) -> List[Dict[str, Any]]:
        """Получает лиды из кэша или из таблицы."""
        cached = self._cache.get()
        if cached is not None:
            logger.debug(f"Использую кэш лидов: {len(cached)} записей")
            return cached

        if not self._settings.spreadsheet_id or not self._settings.google_refresh_token:
            logger.warning("Google Sheets не настроен, возвращаю последние загруженные лиды")
            return self._cache.last_known()

        try:
            rows = self._fetch_rows()
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.error(f"Ошибка при получении лидов из Google Sheets: {e}")
            return self._cache.last_known()

        leads = parse_rows(rows)
        logger.info(f"Загружено {len(leads)} лидов из Google Sheets")

        self._cache.put(leads)
        return leads

    def invalidate(self) -> None:
        """Сбрасывает кэш лидов."""
        self._cache.invalidate()

    def _fetch_rows(self) -> List[List[Any]]:
        """Загружает значения листа с повтором при ограничении частоты."""
        url = (
            f"{self._settings.sheets_api_base_url}/"
            f"{self._settings.spreadsheet_id}/values/{self._settings.sheet_range}"
        )

        for attempt in range(self._max_retries):
            response = self._get_values(url)

            if response.status_code == 401:
                # Токен отозван раньше срока, повторяем один раз с новым
                logger.warning("Access token отклонён, запрашиваю новый...")
                self._access_token = None
                response = self._get_values(url)

            if response.status_code == 429 and attempt < self._max_retries - 1:
                logger.warning(f"Rate limit, ожидаю {self._retry_delay} сек...")
                time.sleep(self._retry_delay)
                continue

            if response.status_code == 401:
                self._access_token = None

            response.raise_for_status()
            return response.json().get("values", [])

        return []

    def _get_values(self, url: str) -> httpx.Response:
        """Выполняет запрос значений листа с текущим access token."""
        return self._client.get(
            url,
            headers={
                "Authorization": f"Bearer {self._get_access_token()}",
                "Content-Type": "application/json",
            },
        )

    def _get_access_token(self) -> str:
        """Возвращает действующий access token, обновляя его при необходимости."""
        now = self._clock()
        if self._access_token and self._token_expires_at > now:
            return self._access_token

        logger.info("Обновляю access token Google...")
        response = self._client.post(
            self._settings.oauth_token_url,
            data={
                "client_id": self._settings.google_client_id or "",
                "client_secret": self._settings.google_client_secret or "",
                "refresh_token": self._settings.google_refresh_token or "",
                "grant_type": "refresh_token",
            },
        )
        response.raise_for_status()
        data = response.json()

        self._access_token = data["access_token"]
        self._token_expires_at = now + float(data.get("expires_in", 3599))
        return self._access_token
