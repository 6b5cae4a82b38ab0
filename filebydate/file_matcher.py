"""
Модуль для сопоставления имен файлов с glob-шаблоном.

Шаблон применяется к имени файла без каталога. Поддерживаются ``*``, ``?``,
классы символов ``[...]``, альтернативы ``{a,b}`` и экранирование ``\\``.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Pattern, Union


class GlobPatternError(ValueError):
    """Исключение для glob-шаблона, который невозможно скомпилировать."""
    pass


def _translate_class(pattern: str, start: int) -> tuple:
    """
    Переводит класс символов ``[...]`` в регулярное выражение.

    Args:
        pattern: Исходный шаблон
        start: Позиция открывающей скобки

    Returns:
        tuple: (фрагмент регулярного выражения, позиция после класса)
    """
    i = start + 1
    length = len(pattern)
    parts = []

    if i < length and pattern[i] in '!^':
        parts.append('^')
        i += 1

    first = True
    while i < length:
        char = pattern[i]
        if char == ']' and not first:
            return '[' + ''.join(parts) + ']', i + 1
        if char == '\\':
            if i + 1 >= length:
                break
            parts.append(re.escape(pattern[i + 1]))
            i += 2
        elif char == '-' and parts and parts[-1] != '^' and i + 1 < length and pattern[i + 1] != ']':
            parts.append('-')
            i += 1
        else:
            parts.append(re.escape(char))
            i += 1
        first = False

    raise GlobPatternError(f"Незакрытый класс символов: {pattern}")


def translate(pattern: str) -> str:
    """
    Переводит glob-шаблон в регулярное выражение.

    Args:
        pattern: Glob-шаблон

    Returns:
        str: Регулярное выражение

    Raises:
        GlobPatternError: Если шаблон некорректный
    """
    result = []
    i = 0
    length = len(pattern)
    in_group = False

    while i < length:
        char = pattern[i]

        if char == '\\':
            if i + 1 >= length:
                raise GlobPatternError(f"Экранирование в конце шаблона: {pattern}")
            result.append(re.escape(pattern[i + 1]))
            i += 2
            continue

        if char == '*':
            result.append('.*')
        elif char == '?':
            result.append('.')
        elif char == '[':
            fragment, i = _translate_class(pattern, i)
            result.append(fragment)
            continue
        elif char == '{':
            if in_group:
                raise GlobPatternError(f"Вложенные группы не поддерживаются: {pattern}")
            in_group = True
            result.append('(?:')
        elif char == '}' and in_group:
            in_group = False
            result.append(')')
        elif char == ',' and in_group:
            result.append('|')
        else:
            result.append(re.escape(char))
        i += 1

    if in_group:
        raise GlobPatternError(f"Незакрытая группа: {pattern}")

    return '(?s:' + ''.join(result) + r')\Z'


@dataclass(frozen=True)
class FileMatcher:
    """Предикат над именем файла, построенный из glob-шаблона."""
    pattern: Optional[str]
    regex: Optional[Pattern]

    @classmethod
    def compile(cls, pattern: Optional[str]) -> 'FileMatcher':
        """
        Компилирует glob-шаблон.

        Пустой шаблон или None означает "все файлы".

        Raises:
            GlobPatternError: Если шаблон некорректный
        """
        if not pattern:
            return cls(pattern=pattern, regex=None)

        try:
            regex = re.compile(translate(pattern))
        except re.error as e:
            raise GlobPatternError(f"Некорректный шаблон {pattern}: {e}")

        return cls(pattern=pattern, regex=regex)

    def matches(self, name: Union[str, Path]) -> bool:
        """Проверяет, подходит ли имя файла под шаблон."""
        if isinstance(name, Path):
            name = name.name
        if self.regex is None:
            return True
        return self.regex.match(name) is not None

    def __call__(self, name: Union[str, Path]) -> bool:
        return self.matches(name)
