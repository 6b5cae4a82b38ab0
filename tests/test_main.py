"""
Тесты для модуля main.py
"""

import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from filebydate.config_loader import Config, DefaultsConfig, LoggingConfig, Profile
from filebydate.date_source import DateSourceError
from filebydate.main import FileByDateCLI, create_parser, main


@pytest.fixture
def temp_dir():
    """Создает временную директорию для тестов."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)

    logger = logging.getLogger('file_by_date')
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)


@pytest.fixture
def workspace(temp_dir):
    """Исходный каталог с файлами и пустой каталог назначения."""
    source = temp_dir / "source"
    dest = temp_dir / "dest"
    source.mkdir()
    dest.mkdir()

    stamp = datetime(2016, 4, 1, 12, 0, tzinfo=timezone.utc).timestamp()
    for name in ("a.jpg", "b.txt"):
        path = source / name
        path.write_text(name)
        os.utime(path, (stamp, stamp))

    return source, dest


@pytest.fixture
def config_file(temp_dir):
    """Создает файл настроек без файла лога."""
    def factory(extra: str = "") -> str:
        path = temp_dir / "settings.ini"
        path.write_text("[logging]\nlevel = INFO\nlog_file =\n\n" + extra, encoding='utf-8')
        return str(path)

    return factory


class TestCreateParser:
    """Тесты для парсера аргументов."""

    def test_parse_run_arguments(self):
        """Тест разбора аргументов запуска."""
        args = create_parser().parse_args([
            '--move', '--ds', 'exif_original', '--dp', 'yyyy/MM', '--fp', '*.jpg',
            '--dry-run', '--links', '--recursive', 'src', 'dst'
        ])

        assert args.move is True
        assert args.copy is False
        assert args.ds == 'exif_original'
        assert args.dp == 'yyyy/MM'
        assert args.fp == '*.jpg'
        assert args.dry_run is True
        assert args.links is True
        assert args.recursive is True
        assert args.args == ['src', 'dst']

    def test_defaults(self):
        """Тест значений по умолчанию."""
        args = create_parser().parse_args([])

        assert args.config == 'config/settings.ini'
        assert args.profile is None
        assert args.args == []
        assert args.ds is None


class TestFileByDateCLI:
    """Тесты для класса FileByDateCLI."""

    @pytest.fixture
    def mock_config(self):
        """Создает конфигурацию с профилем."""
        return Config(
            logging=LoggingConfig(level='INFO'),
            defaults=DefaultsConfig(date_source='file_created', date_pattern='yyyy', file_pattern='*.png'),
            profiles={
                'camera': Profile(
                    name='camera',
                    command='move',
                    date_source='exif_original',
                    source='/media/card',
                    dest='/photos',
                    recursive=True,
                )
            }
        )

    @patch('filebydate.main.load_config')
    @patch('filebydate.main.FileByDateLogger')
    def test_setup_success(self, mock_logger_class, mock_load_config, mock_config):
        """Тест успешной инициализации CLI."""
        mock_load_config.return_value = mock_config
        mock_logger_instance = Mock()
        mock_logger_class.return_value = mock_logger_instance

        cli = FileByDateCLI()
        result = cli.setup("test_config.ini")

        assert result is True
        assert cli.config == mock_config
        assert cli.logger == mock_logger_instance
        mock_load_config.assert_called_once_with("test_config.ini")
        mock_logger_class.assert_called_once_with(mock_config.logging)

    @patch('filebydate.main.load_config')
    def test_setup_failure(self, mock_load_config, capsys):
        """Тест ошибки инициализации CLI."""
        mock_load_config.side_effect = FileNotFoundError("Config not found")

        cli = FileByDateCLI()
        result = cli.setup("missing.ini")

        assert result is False
        assert "❌ Ошибка инициализации" in capsys.readouterr().out

    @patch('filebydate.main.load_config')
    @patch('filebydate.main.FileByDateLogger')
    def test_setup_verbose(self, mock_logger_class, mock_load_config, mock_config):
        """Тест отладочного уровня логирования."""
        mock_load_config.return_value = mock_config

        cli = FileByDateCLI()
        cli.setup("test_config.ini", verbose=True)

        assert cli.config.logging.level == 'DEBUG'

    def test_build_raw_options_from_defaults(self, mock_config):
        """Тест параметров из значений по умолчанию."""
        cli = FileByDateCLI()
        cli.config = mock_config
        args = create_parser().parse_args(['--copy', 'a', 'b'])

        raw = cli.build_raw_options(args)

        assert raw.copy is True
        assert raw.move is False
        assert raw.date_source == 'file_created'
        assert raw.date_pattern == 'yyyy'
        assert raw.file_pattern == '*.png'
        assert raw.args == ['a', 'b']

    def test_build_raw_options_cli_overrides_profile(self, mock_config):
        """Тест приоритета командной строки над профилем."""
        cli = FileByDateCLI()
        cli.config = mock_config
        args = create_parser().parse_args(['--profile', 'camera', '--dp', 'yyyy/MM/dd', '--dry-run'])

        raw = cli.build_raw_options(args)

        assert raw.move is True
        assert raw.copy is False
        assert raw.date_source == 'exif_original'
        assert raw.date_pattern == 'yyyy/MM/dd'
        assert raw.dry_run is True
        assert raw.recursive is True
        assert raw.args == ['/media/card', '/photos']

    def test_unknown_profile(self, mock_config, capsys):
        """Тест запуска несуществующего профиля."""
        cli = FileByDateCLI()
        cli.config = mock_config
        cli.logger = Mock()

        result = cli.cmd_run(create_parser().parse_args(['--profile', 'missing']))

        assert result == 1
        assert "❌" in capsys.readouterr().out

    def test_cmd_list_profiles(self, mock_config, capsys):
        """Тест вывода списка профилей."""
        cli = FileByDateCLI()
        cli.config = mock_config

        result = cli.cmd_list_profiles(Mock())

        assert result == 0
        output = capsys.readouterr().out
        assert "📋 Профили:" in output
        assert "camera: move /media/card → /photos" in output

    def test_cmd_list_profiles_empty(self, capsys):
        """Тест вывода при отсутствии профилей."""
        cli = FileByDateCLI()
        cli.config = Config()

        assert cli.cmd_list_profiles(Mock()) == 0
        assert "Профили не заданы" in capsys.readouterr().out


class TestMain:
    """Тесты для функции main."""

    def test_copy_end_to_end(self, workspace, config_file, capsys):
        """Тест копирования файлов по датам."""
        source, dest = workspace

        result = main([
            '--config', config_file(), '--copy', '--ds', 'file_modified',
            '--dp', 'yyyy/MM', str(source), str(dest)
        ])

        assert result == 0
        assert (dest / "2016" / "04" / "a.jpg").read_text() == "a.jpg"
        assert (dest / "2016" / "04" / "b.txt").read_text() == "b.txt"
        assert (source / "a.jpg").exists()
        assert "• Скопировано: 2" in capsys.readouterr().out

    def test_move_with_pattern_argument(self, workspace, config_file):
        """Тест перемещения с шаблоном в позиционном аргументе."""
        source, dest = workspace

        result = main([
            '--config', config_file(), '--move', '--ds', 'file_modified',
            '--dp', 'yyyyMMdd', str(source / "*.jpg"), str(dest)
        ])

        assert result == 0
        assert (dest / "20160401" / "a.jpg").exists()
        assert not (source / "a.jpg").exists()
        assert (source / "b.txt").exists()

    def test_dry_run_changes_nothing(self, workspace, config_file, capsys):
        """Тест пробного запуска."""
        source, dest = workspace

        result = main([
            '--config', config_file(), '--move', '--dry-run', '--verbose',
            '--ds', 'file_modified', '--dp', 'yyyy', str(source), str(dest)
        ])

        assert result == 0
        assert list(dest.iterdir()) == []
        assert (source / "a.jpg").exists()
        output = capsys.readouterr().out
        assert "Command=MOVE" in output
        assert "DRY-RUN" in output

    def test_validation_errors(self, workspace, config_file, capsys):
        """Тест некорректных параметров."""
        source, dest = workspace

        result = main([
            '--config', config_file(), '--copy', '--move', '--ds', 'bogus', str(source)
        ])

        assert result == 1
        output = capsys.readouterr().out
        assert "pick one operation of copy/move" in output
        assert "invalid date source: bogus" in output
        assert "invalid arg count" in output
        assert list(dest.iterdir()) == []

    def test_profile_run(self, workspace, config_file):
        """Тест запуска профиля из файла настроек."""
        source, dest = workspace
        path = config_file(
            "[profile:docs]\n"
            "command = copy\n"
            "date_source = file_modified\n"
            "date_pattern = yyyy\n"
            "file_pattern = *.txt\n"
            f"source = {source}\n"
            f"dest = {dest}\n"
        )

        result = main(['--config', path, '--profile', 'docs'])

        assert result == 0
        assert (dest / "2016" / "b.txt").exists()
        assert not (dest / "2016" / "a.jpg").exists()

    def test_list_profiles(self, config_file, capsys):
        """Тест вывода профилей из файла настроек."""
        path = config_file("[profile:docs]\ncommand = copy\nsource = /in\ndest = /out\n")

        result = main(['--config', path, '--list-profiles'])

        assert result == 0
        assert "docs: copy /in → /out" in capsys.readouterr().out

    def test_missing_config(self, temp_dir):
        """Тест явно указанного отсутствующего файла настроек."""
        assert main(['--config', str(temp_dir / "missing.ini"), '--copy', 'a', 'b']) == 1

    def test_failed_files_return_error_code(self, workspace, config_file):
        """Тест кода возврата при ошибках обработки файлов."""
        source, dest = workspace

        with patch('filebydate.operation.resolve_date', side_effect=DateSourceError("boom")):
            result = main([
                '--config', config_file(), '--copy', '--ds', 'file_modified',
                '--dp', 'yyyy', str(source), str(dest)
            ])

        assert result == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
