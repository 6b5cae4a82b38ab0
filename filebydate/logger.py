"""
Логирование событий запуска: начало и итоги, результат по каждому файлу,
ошибки валидации. Пишет в консоль (с цветом) и, если задан файл, в лог
с ротацией.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import List, Optional
from datetime import datetime

try:
    from .config_loader import LoggingConfig
except ImportError:
    from config_loader import LoggingConfig


LOGGER_NAME = 'file_by_date'


class ColoredFormatter(logging.Formatter):
    """Форматтер с цветным выводом для консоли."""

    # Цветовые коды ANSI
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        """Форматирует запись лога с цветом, не изменяя саму запись."""
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


class FileByDateLogger:
    """Класс для управления логированием приложения File By Date."""

    def __init__(self, config: LoggingConfig):
        """
        Инициализация логгера.

        Args:
            config: Конфигурация логирования
        """
        self.config = config
        self.logger: Optional[logging.Logger] = None
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Настраивает логгер с файловым и консольным выводом."""
        level = getattr(logging, self.config.level.upper())

        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(level)

        # Очищаем существующие обработчики
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)

        fmt = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        datefmt = '%Y-%m-%d %H:%M:%S'

        if self.config.log_file:
            log_file_path = Path(self.config.log_file)
            log_file_path.parent.mkdir(parents=True, exist_ok=True)

            # Файловый обработчик с ротацией
            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_file_path,
                maxBytes=self.config.max_log_size * 1024 * 1024,  # MB в байты
                backupCount=self.config.backup_count,
                encoding='utf-8'
            )
            file_handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
            file_handler.setLevel(level)
            self.logger.addHandler(file_handler)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ColoredFormatter(fmt=fmt, datefmt=datefmt))
        console_handler.setLevel(level)
        self.logger.addHandler(console_handler)

        # Предотвращаем дублирование сообщений
        self.logger.propagate = False

    def log_run_start(self, command: str, source_dir: Path, dest_dir: Path, dry_run: bool) -> None:
        """
        Логирует начало запуска.

        Args:
            command: Операция (COPY или MOVE)
            source_dir: Исходный каталог
            dest_dir: Каталог назначения
            dry_run: Режим пробного запуска
        """
        mode = " (dry run)" if dry_run else ""
        self.logger.info(f"🚀 Начало {command}{mode}: {source_dir} → {dest_dir}")
        self.logger.info(f"⏰ Время начала: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    def log_run_end(self, copied: int, moved: int, skipped: int, failed: int) -> None:
        """
        Логирует завершение запуска.

        Args:
            copied: Скопировано файлов
            moved: Перемещено файлов
            skipped: Пропущено (dry run)
            failed: Ошибок
        """
        self.logger.info("✅ Обработка завершена")
        self.logger.info(f"📊 Статистика:")
        self.logger.info(f"   • Скопировано: {copied}")
        self.logger.info(f"   • Перемещено: {moved}")
        self.logger.info(f"   • Пропущено: {skipped}")
        self.logger.info(f"   • Ошибок: {failed}")
        self.logger.info(f"⏰ Время завершения: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    def log_files_found(self, count: int, source_dir: Path) -> None:
        self.logger.info(f"🔍 Найдено файлов: {count} в {source_dir}")

    def log_file_result(self, message: str) -> None:
        """
        Логирует результат обработки файла.

        Args:
            message: Описание результата
        """
        self.logger.info(f"📁 {message}")

    def log_file_error(self, file_path: Path, error: Exception) -> None:
        """
        Логирует ошибку при обработке файла.

        Args:
            file_path: Путь к файлу
            error: Исключение
        """
        self.logger.error(f"❌ Ошибка при обработке файла {file_path}: {error}")

    def log_validation_errors(self, errors: List[str]) -> None:
        """
        Логирует ошибки валидации параметров.

        Args:
            errors: Список сообщений об ошибках
        """
        for error in errors:
            self.logger.error(f"⚙️ {error}")

    def log_system_info(self, info: str) -> None:
        """Служебное сообщение (например, откуда загружены настройки)."""
        self.logger.info(f"ℹ️ {info}")

    def log_warning(self, message: str) -> None:
        """Пропущенный каталог, прерывание и подобные события."""
        self.logger.warning(f"⚠️ {message}")

    def log_critical_error(self, message: str, error: Exception = None) -> None:
        """Ошибка, из-за которой запуск не может продолжаться."""
        if error:
            self.logger.critical(f"💥 {message}: {error}")
        else:
            self.logger.critical(f"💥 {message}")
