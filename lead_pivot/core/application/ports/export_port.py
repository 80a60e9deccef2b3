"""
Порт для экспорта сводных таблиц.

Определяет интерфейс для сохранения результата агрегации в файл.
"""

from abc import ABC, abstractmethod

from lead_pivot.core.domain.models import FormatOptions, PivotResult


class ExportPort(ABC):
    """
    Абстрактный порт для экспорта сводной таблицы.

    Адаптер должен реализовать этот интерфейс для сохранения
    результата в формате файла (например, .xlsx).
    """

    @abstractmethod
    def export_to_bytes(self, result: PivotResult, options: FormatOptions) -> bytes:
        """
        Экспортирует сводную таблицу в байтовый поток.

        Args:
            result: Результат построения сводной таблицы.
            options: Параметры отображения.

        Returns:
            Байтовое представление файла.
        """
        pass

    @abstractmethod
    def export_to_file(
        self, result: PivotResult, options: FormatOptions, filepath: str
    ) -> None:
        """
        Экспортирует сводную таблицу в файл.

        Args:
            result: Результат построения сводной таблицы.
            options: Параметры отображения.
            filepath: Путь к файлу для сохранения.
        """
        pass

    @abstractmethod
    def get_content_type(self) -> str:
        """
        Возвращает MIME-тип для формата экспорта.

        Returns:
            MIME-тип (например, "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet").
        """
        pass

    @abstractmethod
    def get_file_extension(self) -> str:
        """
        Возвращает расширение файла для формата экспорта.

        Returns:
            Расширение файла (например, ".xlsx").
        """
        pass
