"""
Модуль выполнения операции копирования или перемещения.

Обходит исходный каталог, отбирает файлы по шаблону, определяет дату
каждого файла, вычисляет путь назначения и выполняет копирование или
перемещение с разрешением коллизий имен. Ошибка с отдельным файлом
не прерывает обработку остальных.
"""

import errno
import os
import shutil
import tempfile
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Set

try:
    from .config_loader import LoggingConfig
    from .date_source import DateSourceError, resolve_date
    from .logger import FileByDateLogger
    from .options import Command, Configuration
    from .path_planner import PathPlanner, PathPlanningError
except ImportError:
    from config_loader import LoggingConfig
    from date_source import DateSourceError, resolve_date
    from logger import FileByDateLogger
    from options import Command, Configuration
    from path_planner import PathPlanner, PathPlanningError


class FileOperationError(Exception):
    """Исключение для ошибок операций с файлами."""
    pass


class Outcome(Enum):
    """Результат обработки одного файла."""
    COPIED = "copied"
    MOVED = "moved"
    SKIPPED = "skipped"
    COLLISION_RENAMED = "collision-renamed"
    FAILED = "failed"


@dataclass(frozen=True)
class OperationResult:
    """Результат обработки одного файла."""
    source: Path
    destination: Optional[Path]
    outcome: Outcome
    error: Optional[str] = None
    dry_run: bool = False

    def describe(self) -> str:
        """Возвращает однострочное описание результата."""
        if self.outcome is Outcome.FAILED:
            return f"FAILED {self.source}: {self.error}"
        if self.outcome is Outcome.SKIPPED and self.error:
            return f"SKIPPED {self.source}: {self.error}"
        if self.outcome is Outcome.SKIPPED:
            return f"DRY-RUN {self.source} → {self.destination}"
        if self.outcome is Outcome.COLLISION_RENAMED:
            return f"RENAMED {self.source} → {self.destination}"
        return f"{self.outcome.name} {self.source} → {self.destination}"


class RunSummary:
    """Класс для хранения итогов запуска."""

    def __init__(self):
        self.total_files = 0
        self.copied = 0
        self.moved = 0
        self.skipped = 0
        self.failed = 0
        self.renamed = 0
        self.cancelled = False
        self.run_error: Optional[str] = None
        self.start_time = None
        self.end_time = None
        self.errors = []

    def add_error(self, file_path: Path, error: str):
        """Добавляет ошибку в список."""
        self.errors.append({
            'file': str(file_path),
            'error': error,
            'timestamp': datetime.now()
        })

    def record(self, result: OperationResult, command: Command) -> None:
        """Учитывает результат обработки файла."""
        if result.outcome is Outcome.FAILED:
            self.failed += 1
            self.add_error(result.source, result.error)
        elif result.outcome is Outcome.SKIPPED:
            self.skipped += 1
        else:
            if result.outcome is Outcome.COLLISION_RENAMED:
                self.renamed += 1
            if command is Command.COPY:
                self.copied += 1
            else:
                self.moved += 1

    @property
    def processed_files(self) -> int:
        return self.copied + self.moved + self.skipped + self.failed

    @property
    def succeeded(self) -> bool:
        return self.failed == 0 and self.run_error is None

    def get_duration(self) -> Optional[float]:
        """Возвращает продолжительность запуска в секундах."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def to_dict(self) -> Dict:
        """Преобразует итоги в словарь."""
        return {
            'total_files': self.total_files,
            'processed_files': self.processed_files,
            'copied': self.copied,
            'moved': self.moved,
            'skipped': self.skipped,
            'failed': self.failed,
            'renamed': self.renamed,
            'cancelled': self.cancelled,
            'run_error': self.run_error,
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'duration_seconds': self.get_duration(),
            'error_count': len(self.errors)
        }


ResultCallback = Callable[[OperationResult], None]


class Operation:
    """Основной класс для копирования или перемещения файлов по датам."""

    def __init__(self, config: Configuration, logger: FileByDateLogger):
        """
        Инициализация операции.

        Args:
            config: Проверенная конфигурация запуска
            logger: Логгер для записи операций
        """
        self.config = config
        self.logger = logger
        self.planner = PathPlanner(config)
        self.summary = RunSummary()
        self._cancel_event = threading.Event()

    def cancel(self) -> None:
        """Запрашивает остановку; текущий файл будет обработан до конца."""
        self._cancel_event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def _walk(self, directory: Path, visited: Set[str]) -> Iterator[Path]:
        """
        Обходит каталог и возвращает подходящие файлы.

        Args:
            directory: Каталог для обхода
            visited: Реальные пути уже пройденных каталогов

        Yields:
            Path: Путь к подходящему файлу
        """
        try:
            with os.scandir(directory) as iterator:
                entries = sorted(iterator, key=lambda e: e.name)
        except OSError as e:
            self.logger.log_warning(f"Каталог пропущен {directory}: {e}")
            return

        subdirectories = []
        for entry in entries:
            try:
                is_link = entry.is_symlink()
                if is_link and not self.config.follow_links:
                    continue

                if entry.is_dir(follow_symlinks=True):
                    subdirectories.append(Path(entry.path))
                elif entry.is_file(follow_symlinks=True):
                    if self.config.matcher.matches(entry.name):
                        yield Path(entry.path)
            except OSError as e:
                self.logger.log_warning(f"Запись пропущена {entry.path}: {e}")

        if not self.config.recursive:
            return

        for subdirectory in subdirectories:
            real_path = os.path.realpath(subdirectory)
            if real_path in visited:
                continue
            visited.add(real_path)
            yield from self._walk(subdirectory, visited)

    def collect_files(self) -> List[Path]:
        """
        Собирает список подходящих файлов до начала обработки.

        Returns:
            List[Path]: Файлы в детерминированном порядке
        """
        source_dir = Path(self.config.source_dir)
        # Каталог назначения внутри исходного не обходим
        visited = {os.path.realpath(source_dir), os.path.realpath(self.config.dest_dir)}
        return list(self._walk(source_dir, visited))

    def execute(self, on_result: Optional[ResultCallback] = None) -> RunSummary:
        """
        Выполняет операцию над всеми подходящими файлами.

        Args:
            on_result: Функция, вызываемая с результатом каждого файла

        Returns:
            RunSummary: Итоги запуска
        """
        config = self.config
        summary = self.summary
        summary.start_time = datetime.now()

        self.logger.log_run_start(config.command.name, config.source_dir, config.dest_dir, config.dry_run)

        if not Path(config.source_dir).is_dir():
            summary.run_error = f"source directory vanished: {config.source_dir}"
            self.logger.log_critical_error(summary.run_error)
            summary.end_time = datetime.now()
            return summary

        files = self.collect_files()
        summary.total_files = len(files)
        self.logger.log_files_found(len(files), config.source_dir)

        for source in files:
            if self.is_cancelled:
                summary.cancelled = True
                self.logger.log_warning("Операция прервана")
                break

            result = self._process_file(source)
            summary.record(result, config.command)

            if result.outcome is Outcome.FAILED:
                self.logger.log_file_error(source, result.error)
            else:
                self.logger.log_file_result(result.describe())

            if on_result is not None:
                on_result(result)

        summary.end_time = datetime.now()
        self.logger.log_run_end(summary.copied, summary.moved, summary.skipped, summary.failed)
        return summary

    def _process_file(self, source: Path) -> OperationResult:
        """
        Обрабатывает один файл.

        Args:
            source: Исходный файл

        Returns:
            OperationResult: Результат обработки
        """
        config = self.config

        try:
            dt = resolve_date(source, config.date_source, config.tz)
            planned = self.planner.plan(source, dt)
            in_place = os.path.exists(planned) and os.path.samefile(source, planned)
        except (DateSourceError, PathPlanningError, OSError) as e:
            return OperationResult(source, None, Outcome.FAILED, str(e), config.dry_run)
        except Exception as e:
            return OperationResult(source, None, Outcome.FAILED, f"{type(e).__name__}: {e}", config.dry_run)

        if in_place:
            return OperationResult(source, planned, Outcome.SKIPPED, "already at destination", config.dry_run)

        if config.dry_run:
            target, _ = self.planner.reserve(planned)
            return OperationResult(source, target, Outcome.SKIPPED, None, True)

        target = None
        try:
            self.planner.ensure_directory(planned.parent)
            target, renamed = self.planner.reserve(planned)

            if config.command is Command.COPY:
                self._copy_file(source, target)
                outcome = Outcome.COPIED
            else:
                self._move_file(source, target)
                outcome = Outcome.MOVED

            if renamed:
                outcome = Outcome.COLLISION_RENAMED

            return OperationResult(source, target, outcome)

        except (OSError, FileOperationError) as e:
            if target is not None:
                self.planner.release(target)
            return OperationResult(source, target or planned, Outcome.FAILED, str(e))
        except Exception as e:
            if target is not None:
                self.planner.release(target)
            return OperationResult(source, target or planned, Outcome.FAILED, f"{type(e).__name__}: {e}")

    def _copy_file(self, source: Path, target: Path) -> None:
        """
        Копирует файл через временный файл в каталоге назначения.

        Файл появляется под целевым именем только полностью записанным.

        Raises:
            FileOperationError: Если копирование не удалось
        """
        fd, temp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".part", dir=str(target.parent)
        )
        os.close(fd)

        try:
            shutil.copy2(str(source), temp_name)
            os.replace(temp_name, str(target))
        except OSError as e:
            try:
                os.unlink(temp_name)
            except FileNotFoundError:
                pass
            raise FileOperationError(f"Ошибка копирования {source} → {target}: {e}")

    def _move_file(self, source: Path, target: Path) -> None:
        """
        Перемещает файл.

        В пределах одной файловой системы используется переименование,
        между файловыми системами - копирование и удаление исходного файла.

        Raises:
            FileOperationError: Если перемещение не удалось
        """
        # Для ссылки переносится содержимое цели, а удаляется сама ссылка
        if not os.path.islink(source):
            try:
                os.rename(str(source), str(target))
                return
            except OSError as e:
                if e.errno != errno.EXDEV:
                    raise FileOperationError(f"Ошибка перемещения {source} → {target}: {e}")

        self._copy_file(source, target)
        try:
            os.unlink(str(source))
        except OSError as e:
            raise FileOperationError(f"Файл скопирован, но исходный не удален {source}: {e}")


def create_operation(config: Configuration, logger: FileByDateLogger) -> Operation:
    """
    Создает объект операции.

    Args:
        config: Проверенная конфигурация запуска
        logger: Логгер

    Returns:
        Operation: Объект операции
    """
    return Operation(config, logger)


def execute(config: Configuration, on_result: Optional[ResultCallback] = None,
            logger: Optional[FileByDateLogger] = None) -> RunSummary:
    """
    Удобная функция для выполнения операции.

    Args:
        config: Проверенная конфигурация запуска
        on_result: Функция, вызываемая с результатом каждого файла
        logger: Логгер (по умолчанию - консольный с настройками по умолчанию)

    Returns:
        RunSummary: Итоги запуска
    """
    if logger is None:
        logger = FileByDateLogger(LoggingConfig())

    return create_operation(config, logger).execute(on_result)
