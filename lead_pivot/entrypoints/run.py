"""
Точка входа приложения.

Запускает FastAPI сервер с Swagger UI для построения сводных таблиц.
"""

import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from loguru import logger

from lead_pivot.adapters.primary.web import defaults_router, pivot_router, system_router
from lead_pivot.adapters.secondary.user_settings import UserSettingsAdapter
from lead_pivot.settings import Settings, get_settings


def configure_logging(settings: Settings) -> None:
    """Настраивает логирование приложения."""
    logger.remove()

    # Формат логов
    if settings.log_format == "json":
        log_format = (
            '{{"time":"{time:YYYY-MM-DDTHH:mm:ss.SSS}", '
            '"level":"{level}", '
            '"pid":{process}, '
            '"message":"{message}"}}'
        )
    else:
        log_format = (
            "{time:YYYY-MM-DD HH:mm:ss} | {level:<8} | "
            "PID:{process} | {message}"
        )

    # Вывод в stdout (для Docker)
    logger.add(
        sys.stdout,
        format=log_format,
        level=settings.log_level,
        colorize=settings.log_format != "json",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Управление жизненным циклом приложения.

    Выполняет инициализацию при старте и очистку при завершении.
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info(f"Запуск {settings.app_name} v{settings.app_version}")
    logger.info(f"Режим отладки: {settings.debug}")

    if not settings.spreadsheet_id or not settings.google_refresh_token:
        logger.warning(
            "Google Sheets не настроен: сводные таблицы строятся только по лидам из запроса"
        )

    user_settings = UserSettingsAdapter(settings.user_settings_path)
    default_pivot = user_settings.get_default_pivot()
    if default_pivot:
        logger.info(
            f"Конфигурация по умолчанию из {settings.user_settings_path}: "
            f"{default_pivot.get('row_field')} x {default_pivot.get('col_field')}"
        )
    else:
        logger.info(
            f"Конфигурация по умолчанию из кода: "
            f"{settings.default_row_field} x {settings.default_col_field}"
        )

    yield

    logger.info("Завершение работы приложения")


def create_app() -> FastAPI:
    """
    Создаёт и настраивает FastAPI приложение.

    Returns:
        Настроенное FastAPI приложение.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="""
## Lead Pivot API

Сервис сводных таблиц по лидам.

### Быстрый старт:
1. **Посмотрите поля**: `/pivot/fields` — поля для строк, колонок и показателей
2. **Постройте таблицу**: `POST /pivot` — значения ячеек и итоги
3. **Выгрузите в Excel**: `POST /pivot/export`
4. **Сохраните настройки**: `PUT /pivot/default`
5. **Обновите лиды**: `POST /pivot/refresh` — сброс кэша Google Sheets

### Возможности:
- **Любые поля строк и колонок** — статус, этап, источник, менеджер, центр, месяц создания
- **Несколько показателей** — у каждого своя функция агрегации
- **10 функций** — count, sum, avg, min, max, median, mode, stddev, variance, countDistinct
- **Честные итоги** — итоги пересчитываются по исходным значениям
- **Формулы** — вычисляемые значения над показателями
- **Форматирование** — K / L / Cr для денежных сумм, группировка разрядов
        """,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Подключаем роутеры
    app.include_router(system_router)
    app.include_router(pivot_router)
    app.include_router(defaults_router)

    return app


# Создаём приложение для uvicorn
app = create_app()


def main() -> None:
    """Запускает сервер uvicorn."""
    settings = get_settings()

    uvicorn.run(
        "lead_pivot.entrypoints.run:app",
        host=settings.host,
        port=settings.port,
        workers=settings.workers,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
