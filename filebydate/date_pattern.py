"""
Модуль для компиляции и применения шаблонов даты.

Шаблоны записываются в синтаксисе SimpleDateFormat (``yyyy/MM/dd``,
``'week' ww``, ``EEE`` и т.д.). Названия месяцев и дней недели выводятся
по фиксированной английской таблице, чтобы результат не зависел от локали.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Tuple


class DatePatternError(ValueError):
    """Исключение для синтаксически некорректного шаблона даты."""
    pass


MONTH_NAMES = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December'
]

DAY_NAMES = [
    'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday'
]

PATTERN_LETTERS = 'GyYMLwWDdFEuaHkKhmsSzZX'

# Токен: ('literal', текст, 0) или ('field', буква, количество повторов)
Token = Tuple[str, str, int]


def _tokenize(pattern: str) -> List[Token]:
    """
    Разбирает шаблон на литералы и поля даты.

    Args:
        pattern: Текст шаблона

    Returns:
        List[Token]: Список токенов

    Raises:
        DatePatternError: Если шаблон содержит недопустимую букву
            или незакрытую кавычку
    """
    tokens: List[Token] = []
    literal = []
    i = 0
    length = len(pattern)

    def flush_literal():
        if literal:
            tokens.append(('literal', ''.join(literal), 0))
            literal.clear()

    while i < length:
        char = pattern[i]

        if char == "'":
            # Две кавычки подряд - это сам символ кавычки
            if i + 1 < length and pattern[i + 1] == "'":
                literal.append("'")
                i += 2
                continue

            end = i + 1
            quoted = []
            while True:
                if end >= length:
                    raise DatePatternError(f"Незакрытая кавычка в шаблоне: {pattern}")
                if pattern[end] == "'":
                    if end + 1 < length and pattern[end + 1] == "'":
                        quoted.append("'")
                        end += 2
                        continue
                    break
                quoted.append(pattern[end])
                end += 1

            literal.append(''.join(quoted))
            i = end + 1
            continue

        if ('a' <= char <= 'z') or ('A' <= char <= 'Z'):
            if char not in PATTERN_LETTERS:
                raise DatePatternError(f"Недопустимый символ шаблона '{char}': {pattern}")

            count = 1
            while i + count < length and pattern[i + count] == char:
                count += 1

            if char == 'X' and count > 3:
                raise DatePatternError(f"Недопустимая длина поля X: {pattern}")

            flush_literal()
            tokens.append(('field', char, count))
            i += count
            continue

        literal.append(char)
        i += 1

    flush_literal()
    return tokens


def _number(value: int, count: int) -> str:
    return str(value).zfill(count)


def _text(names: List[str], index: int, count: int) -> str:
    name = names[index]
    return name if count >= 4 else name[:3]


def _offset(dt: datetime, separator: str) -> str:
    offset = dt.utcoffset()
    if offset is None:
        return f"+00{separator}00"

    total = int(offset.total_seconds()) // 60
    sign = '+' if total >= 0 else '-'
    hours, minutes = divmod(abs(total), 60)
    return f"{sign}{hours:02d}{separator}{minutes:02d}"


def _format_field(dt: datetime, letter: str, count: int) -> str:
    """Форматирует одно поле даты."""
    if letter == 'G':
        return 'AD'
    if letter == 'y':
        if count == 2:
            return _number(dt.year % 100, 2)
        return _number(dt.year, count)
    if letter == 'Y':
        week_year = dt.isocalendar()[0]
        if count == 2:
            return _number(week_year % 100, 2)
        return _number(week_year, count)
    if letter in ('M', 'L'):
        if count >= 3:
            return _text(MONTH_NAMES, dt.month - 1, count)
        return _number(dt.month, count)
    if letter == 'w':
        return _number(dt.isocalendar()[1], count)
    if letter == 'W':
        first_weekday = dt.replace(day=1).weekday()
        return _number((dt.day + first_weekday - 1) // 7 + 1, count)
    if letter == 'D':
        return _number(dt.timetuple().tm_yday, count)
    if letter == 'd':
        return _number(dt.day, count)
    if letter == 'F':
        return _number((dt.day - 1) // 7 + 1, count)
    if letter == 'E':
        return _text(DAY_NAMES, dt.weekday(), count)
    if letter == 'u':
        return _number(dt.isoweekday(), count)
    if letter == 'a':
        return 'AM' if dt.hour < 12 else 'PM'
    if letter == 'H':
        return _number(dt.hour, count)
    if letter == 'k':
        return _number(dt.hour or 24, count)
    if letter == 'K':
        return _number(dt.hour % 12, count)
    if letter == 'h':
        return _number(dt.hour % 12 or 12, count)
    if letter == 'm':
        return _number(dt.minute, count)
    if letter == 's':
        return _number(dt.second, count)
    if letter == 'S':
        return _number(dt.microsecond // 1000, count)
    if letter == 'z':
        return dt.tzname() or 'UTC'
    if letter == 'Z':
        return _offset(dt, '')
    if letter == 'X':
        if dt.utcoffset() is not None and dt.utcoffset().total_seconds() == 0:
            return 'Z'
        if count == 1:
            return _offset(dt, '')[:3]
        return _offset(dt, ':' if count == 3 else '')

    raise DatePatternError(f"Неподдерживаемое поле шаблона: {letter}")


@dataclass(frozen=True)
class DatePattern:
    """Скомпилированный шаблон даты."""
    pattern: str
    tokens: Tuple[Token, ...]

    @classmethod
    def compile(cls, pattern: str) -> 'DatePattern':
        """
        Компилирует текстовый шаблон даты.

        Args:
            pattern: Шаблон в синтаксисе SimpleDateFormat

        Returns:
            DatePattern: Скомпилированный шаблон

        Raises:
            DatePatternError: Если шаблон пустой или некорректный
        """
        if pattern is None or not pattern.strip():
            raise DatePatternError("Шаблон даты не задан")

        return cls(pattern=pattern, tokens=tuple(_tokenize(pattern)))

    def format(self, dt: datetime) -> str:
        """
        Форматирует дату по шаблону.

        Args:
            dt: Дата для форматирования

        Returns:
            str: Отформатированная строка
        """
        parts = []
        for kind, value, count in self.tokens:
            if kind == 'literal':
                parts.append(value)
            else:
                parts.append(_format_field(dt, value, count))
        return ''.join(parts)

    def __str__(self) -> str:
        return self.pattern
