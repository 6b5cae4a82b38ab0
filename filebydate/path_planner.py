"""
Модуль для расчета путей назначения.

Путь назначения строится как ``dest_dir / шаблон(дата) / имя_файла``.
Шаблон даты может содержать разделители каталогов, тогда создаются
вложенные каталоги.
"""

import os
import threading
from datetime import datetime
from pathlib import Path
from typing import Set, Tuple

try:
    from .options import Configuration
except ImportError:
    from options import Configuration


class PathPlanningError(Exception):
    """Исключение для случая, когда путь назначения построить невозможно."""
    pass


class PathPlanner:
    """Класс для построения путей назначения и разрешения коллизий имен."""

    def __init__(self, config: Configuration):
        """
        Инициализация планировщика путей.

        Args:
            config: Проверенная конфигурация запуска
        """
        self.config = config
        self.dest_dir = Path(config.dest_dir)
        self._lock = threading.Lock()
        self._reserved: Set[Path] = set()

    def get_date_directory(self, dt: datetime) -> Path:
        """
        Получает каталог назначения для даты.

        Args:
            dt: Дата файла

        Returns:
            Path: Каталог назначения

        Raises:
            PathPlanningError: Если шаблон дает выход за пределы каталога назначения
        """
        formatted = self.config.formatter.format(dt)
        segments = [s for s in formatted.replace('\\', '/').split('/') if s and s != '.']

        if '..' in segments:
            raise PathPlanningError(f"Шаблон даты дает недопустимый путь: {formatted}")

        return self.dest_dir.joinpath(*segments)

    def plan(self, source: Path, dt: datetime) -> Path:
        """
        Вычисляет путь назначения для файла.

        Args:
            source: Исходный файл
            dt: Дата файла

        Returns:
            Path: Путь назначения (без учета коллизий)
        """
        return self.get_date_directory(dt) / Path(source).name

    def ensure_directory(self, directory: Path) -> Path:
        """Создает цепочку каталогов, если ее еще нет."""
        with self._lock:
            directory.mkdir(parents=True, exist_ok=True)
        return directory

    def reserve(self, target: Path) -> Tuple[Path, bool]:
        """
        Резервирует путь назначения, избегая перезаписи.

        Если путь уже существует на диске или был выдан ранее в этом запуске,
        к имени добавляется суффикс ``_1``, ``_2`` и т.д. перед расширением.

        Args:
            target: Желаемый путь назначения

        Returns:
            Tuple[Path, bool]: (зарезервированный путь, было ли переименование)
        """
        with self._lock:
            unique = self._get_unique_filename(target.parent, target.name)
            self._reserved.add(unique)
            return unique, unique != target

    def release(self, target: Path) -> None:
        """Снимает резерв с пути (после неудачной операции)."""
        with self._lock:
            self._reserved.discard(target)

    def _is_taken(self, path: Path) -> bool:
        return path in self._reserved or os.path.lexists(path)

    def _get_unique_filename(self, directory: Path, filename: str) -> Path:
        """
        Получает уникальное имя файла в каталоге.

        Args:
            directory: Каталог для проверки
            filename: Исходное имя файла

        Returns:
            Path: Уникальное имя файла
        """
        base_path = directory / filename
        if not self._is_taken(base_path):
            return base_path

        # Добавляем суффикс с номером
        name_parts = filename.rsplit('.', 1)
        if len(name_parts) == 2 and name_parts[0]:
            base_name, extension = name_parts
            extension = '.' + extension
        else:
            base_name = filename
            extension = ''

        counter = 1
        while True:
            new_path = directory / f"{base_name}_{counter}{extension}"
            if not self._is_taken(new_path):
                return new_path
            counter += 1
