"""
Тесты для модуля config_loader.py
"""

import pytest
import tempfile
import os
from pathlib import Path

from filebydate.config_loader import (
    Config,
    ConfigLoader,
    DefaultsConfig,
    LoggingConfig,
    Profile,
    load_config,
)
from filebydate.options import RawOptions


SAMPLE_CONFIG = """[logging]
level = DEBUG
log_file = logs/test.log
max_log_size = 2
backup_count = 3

[defaults]
date_source = exif_original
date_pattern = yyyy/MM
file_pattern = *.jpg
timezone = LOCAL

[profile:camera]
command = Move
date_source = exif_original
source = /media/card
dest = /photos
recursive = true
follow_links = yes

[profile:docs]
command = copy
date_pattern = yyyy
file_pattern =
source = /inbox
dest = /archive
dry_run = true
"""


@pytest.fixture
def write_config():
    """Создает временный файл конфигурации."""
    created = []

    def factory(content: str) -> str:
        with tempfile.NamedTemporaryFile(mode='w', suffix='.ini', delete=False, encoding='utf-8') as f:
            f.write(content)
            created.append(f.name)
            return f.name

    yield factory

    for name in created:
        os.unlink(name)


class TestConfigLoader:
    """Тесты для класса ConfigLoader."""

    def test_load_config_success(self, write_config):
        """Тест успешной загрузки конфигурации."""
        config = load_config(write_config(SAMPLE_CONFIG))

        assert config.logging.level == "DEBUG"
        assert config.logging.log_file == Path("logs/test.log")
        assert config.logging.max_log_size == 2
        assert config.logging.backup_count == 3

        assert config.defaults.date_source == "exif_original"
        assert config.defaults.date_pattern == "yyyy/MM"
        assert config.defaults.file_pattern == "*.jpg"
        assert config.defaults.timezone == "local"

        assert config.profile_names() == ["camera", "docs"]

        camera = config.get_profile("camera")
        assert camera.command == "move"
        assert camera.source == "/media/card"
        assert camera.recursive is True
        assert camera.follow_links is True
        assert camera.dry_run is False

    def test_empty_file_uses_defaults(self, write_config):
        """Тест файла без секций."""
        config = load_config(write_config(""))

        assert config.logging == LoggingConfig()
        assert config.defaults == DefaultsConfig()
        assert config.profiles == {}

    def test_empty_log_file_means_console_only(self, write_config):
        """Тест пустого пути к файлу лога."""
        config = load_config(write_config("[logging]\nlog_file =\n"))

        assert config.logging.log_file is None

    def test_config_file_not_found(self):
        """Тест ошибки при отсутствии файла конфигурации."""
        with pytest.raises(FileNotFoundError):
            load_config("nonexistent_config.ini")

    def test_invalid_log_level(self, write_config):
        """Тест валидации некорректного уровня логирования."""
        with pytest.raises(ValueError, match="Некорректный уровень логирования"):
            load_config(write_config("[logging]\nlevel = INVALID_LEVEL\n"))

    def test_invalid_log_size(self, write_config):
        """Тест валидации размера файла лога."""
        with pytest.raises(ValueError, match="Размер файла лога должен быть больше 0"):
            load_config(write_config("[logging]\nmax_log_size = 0\n"))

    def test_invalid_timezone(self, write_config):
        """Тест валидации часового пояса."""
        with pytest.raises(ValueError, match="Некорректный часовой пояс"):
            load_config(write_config("[defaults]\ntimezone = mars\n"))

    def test_invalid_profile_command(self, write_config):
        """Тест валидации операции в профиле."""
        with pytest.raises(ValueError, match="Некорректная операция в профиле bad"):
            load_config(write_config("[profile:bad]\ncommand = delete\n"))

    def test_malformed_file(self, write_config):
        """Тест синтаксически некорректного файла."""
        with pytest.raises(ValueError, match="Ошибка загрузки конфигурации"):
            load_config(write_config("no section header\n"))

    def test_reload_config(self, write_config):
        """Тест перезагрузки конфигурации."""
        loader = ConfigLoader(write_config(SAMPLE_CONFIG))
        config1 = loader.load_config()
        config2 = loader.reload_config()

        assert config1.defaults == config2.defaults
        assert config1.profile_names() == config2.profile_names()

    def test_get_config_without_load(self):
        """Тест получения конфигурации без предварительной загрузки."""
        loader = ConfigLoader()

        with pytest.raises(ValueError, match="Конфигурация не загружена"):
            loader.get_config()


class TestProfile:
    """Тесты для профилей."""

    def test_to_raw_options(self):
        """Тест преобразования профиля в параметры запуска."""
        profile = Profile(
            name="camera",
            command="move",
            date_source="exif_original",
            source="/media/card",
            dest="/photos",
            recursive=True,
        )
        defaults = DefaultsConfig(date_pattern="yyyy/MM", file_pattern="*.jpg")

        raw = profile.to_raw_options(defaults)

        assert raw == RawOptions(
            copy=False,
            move=True,
            date_source="exif_original",
            date_pattern="yyyy/MM",
            file_pattern="*.jpg",
            args=["/media/card", "/photos"],
            recursive=True,
        )

    def test_profile_empty_pattern_overrides_default(self):
        """Тест пустого шаблона файлов в профиле."""
        profile = Profile(name="docs", command="copy", file_pattern="", source="/a", dest="/b")

        raw = profile.to_raw_options(DefaultsConfig(file_pattern="*.jpg"))

        assert raw.file_pattern == ""
        assert raw.copy is True

    def test_expands_home_directory(self):
        """Тест раскрытия ~ в путях профиля."""
        profile = Profile(name="home", command="copy", source="~/in", dest="~/out")

        raw = profile.to_raw_options()

        assert raw.args == [os.path.expanduser("~/in"), os.path.expanduser("~/out")]

    def test_missing_profile(self):
        """Тест запроса несуществующего профиля."""
        with pytest.raises(KeyError):
            Config().get_profile("missing")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
