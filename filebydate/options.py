"""
Модуль для валидации параметров запуска.

Принимает "сырые" значения параметров (флаги, строки, позиционные аргументы)
и превращает их в неизменяемую конфигурацию. Все проверки выполняются
независимо, поэтому за один проход собираются все ошибки сразу.
"""

import os
from dataclasses import dataclass, field
from datetime import tzinfo
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

try:
    from .date_pattern import DatePattern, DatePatternError
    from .date_source import DateSource, get_timezone
    from .file_matcher import FileMatcher, GlobPatternError
except ImportError:
    from date_pattern import DatePattern, DatePatternError
    from date_source import DateSource, get_timezone
    from file_matcher import FileMatcher, GlobPatternError


class Command(Enum):
    """Операция над файлами."""
    COPY = "copy"
    MOVE = "move"


@dataclass
class RawOptions:
    """Параметры запуска в том виде, в котором их передал интерфейс."""
    copy: bool = False
    move: bool = False
    date_source: Optional[str] = None
    date_pattern: Optional[str] = None
    file_pattern: Optional[str] = None
    args: List[str] = field(default_factory=list)
    dry_run: bool = False
    follow_links: bool = False
    recursive: bool = False


@dataclass(frozen=True)
class Configuration:
    """Проверенная конфигурация одного запуска."""
    command: Command
    date_source: DateSource
    date_pattern: str
    file_pattern: Optional[str]
    source_dir: Path
    dest_dir: Path
    matcher: FileMatcher
    formatter: DatePattern
    dry_run: bool = False
    follow_links: bool = False
    recursive: bool = False
    timezone: str = 'utc'

    @property
    def tz(self) -> Optional[tzinfo]:
        return get_timezone(self.timezone)

    def describe(self) -> str:
        """Возвращает многострочное описание конфигурации."""
        return "\n".join([
            "Configuration {",
            f" Command={self.command.name}",
            "",
            f" DateSource={self.date_source.name}",
            f" DatePattern={self.date_pattern}",
            f" FilePattern={self.file_pattern or '*'}",
            f" TimeZone={self.timezone}",
            "",
            f" DryRun={self.dry_run}",
            f" Links={self.follow_links}",
            f" Recursive={self.recursive}",
            "",
            f" Source={self.source_dir}",
            f" Dest={self.dest_dir}",
            "}",
        ])


@dataclass
class ValidationResult:
    """Результат валидации: конфигурация или список ошибок."""
    config: Optional[Configuration] = None
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, message: str) -> None:
        self.errors.append(message)


def split_source_argument(source: str,
                          file_pattern: Optional[str] = None) -> Tuple[Optional[Path], Optional[str]]:
    """
    Разбирает первый позиционный аргумент.

    Если аргумент указывает на существующий каталог, он становится исходным
    каталогом, а шаблон файлов остается прежним. Иначе последний сегмент пути
    считается шаблоном файлов, а родительский каталог - исходным.
    Пустой аргумент не означает текущий каталог: исходный каталог в этом
    случае не определен (None).

    Args:
        source: Первый позиционный аргумент
        file_pattern: Шаблон файлов, заданный отдельно

    Returns:
        Tuple[Optional[Path], Optional[str]]: (исходный каталог, шаблон файлов)
    """
    if not source:
        return None, file_pattern

    if os.path.isdir(source):
        return Path(source), file_pattern

    head, tail = os.path.split(source)
    return Path(head or os.curdir), tail


def validate_options(raw: RawOptions, timezone: str = 'utc') -> ValidationResult:
    """
    Проверяет параметры запуска и собирает конфигурацию.

    Все правила проверяются независимо друг от друга. Исключения для
    некорректного ввода не выбрасываются: ошибки возвращаются списком.

    Args:
        raw: Параметры запуска
        timezone: Часовой пояс для дат ("utc" или "local")

    Returns:
        ValidationResult: Конфигурация или список ошибок
    """
    result = ValidationResult()

    command = None
    if raw.copy == raw.move:
        result.add_error("pick one operation of copy/move")
    else:
        command = Command.COPY if raw.copy else Command.MOVE

    file_pattern = raw.file_pattern
    source_dir = None
    dest_dir = None
    args_valid = len(raw.args) == 2
    if args_valid:
        source_dir, file_pattern = split_source_argument(raw.args[0], file_pattern)
        dest_dir = Path(raw.args[1]) if raw.args[1] else None

    matcher = None
    try:
        matcher = FileMatcher.compile(file_pattern)
    except GlobPatternError:
        result.add_error(f"invalid file pattern: {file_pattern}")

    formatter = None
    try:
        formatter = DatePattern.compile(raw.date_pattern)
    except DatePatternError:
        result.add_error(f"invalid date pattern: {raw.date_pattern}")

    date_source = None
    try:
        date_source = DateSource.parse(raw.date_source)
    except ValueError:
        result.add_error(f"invalid date source: {raw.date_source}")

    if not args_valid:
        result.add_error("invalid arg count")
    else:
        if source_dir is None or not source_dir.is_dir():
            result.add_error(f"invalid source directory: {source_dir or raw.args[0]}")
        if dest_dir is None or not dest_dir.is_dir():
            result.add_error(f"invalid dest directory: {dest_dir or raw.args[1]}")

    if result.is_valid:
        result.config = Configuration(
            command=command,
            date_source=date_source,
            date_pattern=raw.date_pattern,
            file_pattern=file_pattern or None,
            source_dir=source_dir,
            dest_dir=dest_dir,
            matcher=matcher,
            formatter=formatter,
            dry_run=raw.dry_run,
            follow_links=raw.follow_links,
            recursive=raw.recursive,
            timezone=timezone,
        )

    return result
