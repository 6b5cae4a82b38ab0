"""
Модуль для загрузки и валидации настроек приложения.

Обеспечивает загрузку параметров из config/settings.ini: настройки
логирования, значения по умолчанию для параметров запуска и именованные
профили (сохраненные наборы параметров).
"""

import configparser
import os
from pathlib import Path
from typing import Dict, List, Optional
from dataclasses import dataclass, field

try:
    from .options import RawOptions
except ImportError:
    from options import RawOptions


DEFAULT_CONFIG_PATH = "config/settings.ini"
PROFILE_PREFIX = "profile:"

VALID_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
VALID_TIMEZONES = ['utc', 'local']
VALID_COMMANDS = ['copy', 'move']


@dataclass
class LoggingConfig:
    """Конфигурация логирования."""
    level: str = 'INFO'
    log_file: Optional[Path] = None
    max_log_size: int = 10
    backup_count: int = 5


@dataclass
class DefaultsConfig:
    """Значения по умолчанию для параметров запуска."""
    date_source: str = 'file_modified'
    date_pattern: str = 'yyyy/MM/dd'
    file_pattern: str = ''
    timezone: str = 'utc'


@dataclass
class Profile:
    """Именованный набор параметров запуска."""
    name: str
    command: Optional[str] = None
    date_source: Optional[str] = None
    date_pattern: Optional[str] = None
    file_pattern: Optional[str] = None
    source: Optional[str] = None
    dest: Optional[str] = None
    dry_run: bool = False
    follow_links: bool = False
    recursive: bool = False

    def to_raw_options(self, defaults: Optional[DefaultsConfig] = None) -> RawOptions:
        """
        Преобразует профиль в параметры запуска.

        Args:
            defaults: Значения по умолчанию для незаданных полей

        Returns:
            RawOptions: Параметры запуска
        """
        defaults = defaults or DefaultsConfig()
        args = [os.path.expanduser(a) for a in (self.source, self.dest) if a]

        return RawOptions(
            copy=self.command == 'copy',
            move=self.command == 'move',
            date_source=self.date_source or defaults.date_source,
            date_pattern=self.date_pattern or defaults.date_pattern,
            file_pattern=self.file_pattern if self.file_pattern is not None else (defaults.file_pattern or None),
            args=args,
            dry_run=self.dry_run,
            follow_links=self.follow_links,
            recursive=self.recursive,
        )


@dataclass
class Config:
    """Основная конфигурация приложения."""
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    profiles: Dict[str, Profile] = field(default_factory=dict)

    def get_profile(self, name: str) -> Profile:
        """
        Возвращает профиль по имени.

        Raises:
            KeyError: Если профиль не найден
        """
        if name not in self.profiles:
            raise KeyError(f"Профиль не найден: {name}")
        return self.profiles[name]

    def profile_names(self) -> List[str]:
        return sorted(self.profiles)


class ConfigLoader:
    """Класс для загрузки и валидации настроек."""

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH):
        """
        Инициализация загрузчика настроек.

        Args:
            config_path: Путь к файлу настроек
        """
        self.config_path = Path(config_path)
        self._config: Optional[Config] = None

    def load_config(self) -> Config:
        """
        Загружает настройки из файла.

        Returns:
            Config: Объект конфигурации

        Raises:
            FileNotFoundError: Если файл настроек не найден
            ValueError: Если настройки некорректны
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Файл конфигурации не найден: {self.config_path}")

        config_parser = configparser.ConfigParser(interpolation=None)

        try:
            config_parser.read(self.config_path, encoding='utf-8')

            self._config = Config(
                logging=self._load_logging_config(config_parser),
                defaults=self._load_defaults_config(config_parser),
                profiles=self._load_profiles(config_parser)
            )

            self._validate_config()

            return self._config

        except (configparser.Error, ValueError) as e:
            self._config = None
            raise ValueError(f"Ошибка загрузки конфигурации: {e}")

    def _load_logging_config(self, parser: configparser.ConfigParser) -> LoggingConfig:
        """Загружает конфигурацию логирования."""
        section = 'logging'

        if not parser.has_section(section):
            return LoggingConfig()

        log_file = parser.get(section, 'log_file', fallback='').strip()

        return LoggingConfig(
            level=parser.get(section, 'level', fallback='INFO'),
            log_file=Path(log_file) if log_file else None,
            max_log_size=parser.getint(section, 'max_log_size', fallback=10),
            backup_count=parser.getint(section, 'backup_count', fallback=5)
        )

    def _load_defaults_config(self, parser: configparser.ConfigParser) -> DefaultsConfig:
        """Загружает значения по умолчанию для параметров запуска."""
        section = 'defaults'
        defaults = DefaultsConfig()

        if not parser.has_section(section):
            return defaults

        return DefaultsConfig(
            date_source=parser.get(section, 'date_source', fallback=defaults.date_source),
            date_pattern=parser.get(section, 'date_pattern', fallback=defaults.date_pattern),
            file_pattern=parser.get(section, 'file_pattern', fallback=defaults.file_pattern),
            timezone=parser.get(section, 'timezone', fallback=defaults.timezone).lower()
        )

    def _load_profiles(self, parser: configparser.ConfigParser) -> Dict[str, Profile]:
        """Загружает профили из секций [profile:<имя>]."""
        profiles = {}

        for section in parser.sections():
            if not section.startswith(PROFILE_PREFIX):
                continue

            name = section[len(PROFILE_PREFIX):].strip()
            if not name:
                raise ValueError(f"Пустое имя профиля в секции [{section}]")

            command = parser.get(section, 'command', fallback=None)
            profiles[name] = Profile(
                name=name,
                command=command.strip().lower() if command else None,
                date_source=parser.get(section, 'date_source', fallback=None),
                date_pattern=parser.get(section, 'date_pattern', fallback=None),
                file_pattern=parser.get(section, 'file_pattern', fallback=None),
                source=parser.get(section, 'source', fallback=None),
                dest=parser.get(section, 'dest', fallback=None),
                dry_run=parser.getboolean(section, 'dry_run', fallback=False),
                follow_links=parser.getboolean(section, 'follow_links', fallback=False),
                recursive=parser.getboolean(section, 'recursive', fallback=False)
            )

        return profiles

    def _validate_config(self) -> None:
        """Валидирует загруженную конфигурацию."""
        if not self._config:
            raise ValueError("Конфигурация не загружена")

        # Проверка уровня логирования
        if self._config.logging.level.upper() not in VALID_LEVELS:
            raise ValueError(f"Некорректный уровень логирования: {self._config.logging.level}")

        if self._config.logging.max_log_size <= 0:
            raise ValueError("Размер файла лога должен быть больше 0")

        if self._config.logging.backup_count < 0:
            raise ValueError("Количество архивных логов не может быть отрицательным")

        if self._config.defaults.timezone not in VALID_TIMEZONES:
            raise ValueError(f"Некорректный часовой пояс: {self._config.defaults.timezone}")

        for profile in self._config.profiles.values():
            if profile.command is not None and profile.command not in VALID_COMMANDS:
                raise ValueError(f"Некорректная операция в профиле {profile.name}: {profile.command}")

    def get_config(self) -> Config:
        """
        Возвращает загруженную конфигурацию.

        Returns:
            Config: Объект конфигурации

        Raises:
            ValueError: Если конфигурация не загружена
        """
        if self._config is None:
            raise ValueError("Конфигурация не загружена. Вызовите load_config() сначала.")
        return self._config

    def reload_config(self) -> Config:
        """
        Перезагружает конфигурацию из файла.

        Returns:
            Config: Обновленный объект конфигурации
        """
        self._config = None
        return self.load_config()


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Config:
    """
    Удобная функция для быстрой загрузки конфигурации.

    Args:
        config_path: Путь к файлу конфигурации

    Returns:
        Config: Объект конфигурации
    """
    loader = ConfigLoader(config_path)
    return loader.load_config()
