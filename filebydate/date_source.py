"""
Модуль для получения даты файла.

Дата берется из метаданных файловой системы (время изменения или создания)
либо из EXIF-тегов изображения.
"""

import os
import struct
from datetime import datetime, timezone, tzinfo
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError


class DateSourceError(Exception):
    """Исключение для случая, когда дату файла получить невозможно."""
    pass


# Теги EXIF с датой, в порядке предпочтения
EXIF_IFD_POINTER = 0x8769
EXIF_DATE_TIME_ORIGINAL = 0x9003
EXIF_DATE_TIME_DIGITIZED = 0x9004
EXIF_DATE_TIME = 0x0132

EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"


class DateSource(Enum):
    """Источник даты файла."""
    FILE_CREATED = "file_created"
    FILE_MODIFIED = "file_modified"
    EXIF_ORIGINAL = "exif_original"

    @classmethod
    def parse(cls, text: Optional[str]) -> 'DateSource':
        """
        Находит источник даты по имени без учета регистра.

        Args:
            text: Имя источника (например, "file_modified" или "EXIF-ORIGINAL")

        Returns:
            DateSource: Источник даты

        Raises:
            ValueError: Если имя неизвестно
        """
        if text is None:
            raise ValueError("Источник даты не задан")

        key = text.strip().upper().replace('-', '_')
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Неизвестный источник даты: {text}")


def get_timezone(name: str) -> Optional[tzinfo]:
    """
    Возвращает часовой пояс для имени из настроек ("utc" или "local").

    Для локального пояса возвращается None: смещение зависит от летнего
    времени на дату файла и вычисляется для каждого файла отдельно.
    """
    if name.lower() == 'local':
        return None
    return timezone.utc


def _creation_timestamp(stat: os.stat_result) -> float:
    birthtime = getattr(stat, 'st_birthtime', None)
    if birthtime is not None:
        return birthtime

    # На Windows st_ctime - время создания, на POSIX - время изменения inode
    if os.name == 'nt':
        return stat.st_ctime

    raise DateSourceError("Время создания файла недоступно на этой платформе")


def _read_exif_date(path: Path) -> datetime:
    """
    Читает дату съемки из EXIF.

    Args:
        path: Путь к изображению

    Returns:
        datetime: Дата без часового пояса

    Raises:
        DateSourceError: Если файл не является изображением или в нем нет даты
    """
    try:
        with Image.open(path) as img:
            exif = img.getexif()
            exif_ifd = exif.get_ifd(EXIF_IFD_POINTER)
            # Некоторые программы пишут теги дат в основной IFD
            candidates = [
                exif_ifd.get(EXIF_DATE_TIME_ORIGINAL),
                exif.get(EXIF_DATE_TIME_ORIGINAL),
                exif_ifd.get(EXIF_DATE_TIME_DIGITIZED),
                exif.get(EXIF_DATE_TIME_DIGITIZED),
                exif.get(EXIF_DATE_TIME),
            ]
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError,
            SyntaxError, ValueError, struct.error) as e:
        raise DateSourceError(f"Не удалось прочитать EXIF из {path}: {e}")

    for value in candidates:
        if not value:
            continue
        try:
            return datetime.strptime(str(value).strip('\x00 '), EXIF_DATE_FORMAT)
        except ValueError:
            continue

    raise DateSourceError(f"В EXIF нет даты съемки: {path}")


def resolve_date(path: Union[str, Path], source: DateSource,
                 tz: Optional[tzinfo] = timezone.utc) -> datetime:
    """
    Получает дату файла из выбранного источника.

    Args:
        path: Путь к файлу
        source: Источник даты
        tz: Часовой пояс результата (по умолчанию UTC, None - локальный)

    Returns:
        datetime: Дата с часовым поясом

    Raises:
        DateSourceError: Если дату получить невозможно
    """
    path = Path(path)

    if source is DateSource.EXIF_ORIGINAL:
        # EXIF хранит "настенное" время камеры, часовой пояс только приписываем
        naive = _read_exif_date(path)
        return naive.astimezone() if tz is None else naive.replace(tzinfo=tz)

    try:
        stat = path.stat()
    except OSError as e:
        raise DateSourceError(f"Не удалось прочитать метаданные {path}: {e}")

    if source is DateSource.FILE_MODIFIED:
        timestamp = stat.st_mtime
    elif source is DateSource.FILE_CREATED:
        timestamp = _creation_timestamp(stat)
    else:
        raise DateSourceError(f"Неподдерживаемый источник даты: {source}")

    if tz is None:
        return datetime.fromtimestamp(timestamp).astimezone()
    return datetime.fromtimestamp(timestamp, tz=tz)
