"""
Главный модуль CLI интерфейса для утилиты File By Date.

Собирает параметры запуска из командной строки, настроек и профилей,
проверяет их и выполняет копирование или перемещение файлов.
"""

import argparse
import signal
import sys
from pathlib import Path
from typing import List, Optional

try:
    from .config_loader import Config, DEFAULT_CONFIG_PATH, load_config
    from .logger import FileByDateLogger
    from .operation import Operation, OperationResult, Outcome, RunSummary, create_operation
    from .options import RawOptions, validate_options
except ImportError:
    from config_loader import Config, DEFAULT_CONFIG_PATH, load_config
    from logger import FileByDateLogger
    from operation import Operation, OperationResult, Outcome, RunSummary, create_operation
    from options import RawOptions, validate_options


class FileByDateCLI:
    """Класс для обработки команд CLI."""

    def __init__(self):
        self.config: Optional[Config] = None
        self.logger: Optional[FileByDateLogger] = None
        self.operation: Optional[Operation] = None

    def setup(self, config_path: str = DEFAULT_CONFIG_PATH, verbose: bool = False) -> bool:
        """
        Инициализирует CLI с настройками.

        Отсутствие файла настроек по умолчанию не является ошибкой:
        используются встроенные значения.

        Args:
            config_path: Путь к файлу настроек
            verbose: Включить отладочный вывод

        Returns:
            bool: True если инициализация успешна
        """
        try:
            if config_path == DEFAULT_CONFIG_PATH and not Path(config_path).exists():
                self.config = Config()
            else:
                self.config = load_config(config_path)

            if verbose:
                self.config.logging.level = 'DEBUG'

            self.logger = FileByDateLogger(self.config.logging)
            self.logger.log_system_info(f"Конфигурация загружена из: {config_path}")
            return True

        except (FileNotFoundError, ValueError) as e:
            print(f"❌ Ошибка инициализации: {e}")
            return False

    def build_raw_options(self, args: argparse.Namespace) -> RawOptions:
        """
        Собирает параметры запуска.

        Значения из командной строки имеют приоритет над профилем,
        профиль - над значениями по умолчанию из настроек.

        Args:
            args: Аргументы командной строки

        Returns:
            RawOptions: Параметры запуска

        Raises:
            KeyError: Если указанный профиль не найден
        """
        defaults = self.config.defaults

        if args.profile:
            raw = self.config.get_profile(args.profile).to_raw_options(defaults)
        else:
            raw = RawOptions(
                date_source=defaults.date_source,
                date_pattern=defaults.date_pattern,
                file_pattern=defaults.file_pattern or None,
            )

        if args.copy or args.move:
            raw.copy = args.copy
            raw.move = args.move
        if args.ds is not None:
            raw.date_source = args.ds
        if args.dp is not None:
            raw.date_pattern = args.dp
        if args.fp is not None:
            raw.file_pattern = args.fp
        if args.args:
            raw.args = list(args.args)

        raw.dry_run = raw.dry_run or args.dry_run
        raw.follow_links = raw.follow_links or args.links
        raw.recursive = raw.recursive or args.recursive

        return raw

    def cmd_list_profiles(self, args) -> int:
        """
        Команда просмотра профилей.

        Returns:
            int: Код возврата (0 - успех)
        """
        names = self.config.profile_names()
        if not names:
            print("ℹ️ Профили не заданы")
            return 0

        print("📋 Профили:")
        for name in names:
            profile = self.config.profiles[name]
            print(f"   • {name}: {profile.command or '?'} {profile.source or ''} → {profile.dest or ''}")
        return 0

    def cmd_run(self, args) -> int:
        """
        Команда копирования или перемещения файлов.

        Args:
            args: Аргументы командной строки

        Returns:
            int: Код возврата (0 - успех, 1 - ошибка)
        """
        try:
            raw = self.build_raw_options(args)
        except KeyError as e:
            print(f"❌ {e.args[0]}")
            return 1

        validation = validate_options(raw, timezone=self.config.defaults.timezone)
        if not validation.is_valid:
            self.logger.log_validation_errors(validation.errors)
            print("❌ Некорректные параметры:")
            for error in validation.errors:
                print(f"   • {error}")
            return 1

        if args.verbose:
            print(validation.config.describe())

        self.operation = create_operation(validation.config, self.logger)

        # Ctrl-C останавливает обработку между файлами
        def handle_interrupt(signum, frame):
            print("\n⚠️ Операция прерывается пользователем...")
            self.operation.cancel()

        previous_handler = signal.signal(signal.SIGINT, handle_interrupt)
        try:
            summary = self.operation.execute(self._print_result if args.verbose else None)
        finally:
            signal.signal(signal.SIGINT, previous_handler)

        self._print_summary(summary)
        return 0 if summary.succeeded else 1

    @staticmethod
    def _print_result(result: OperationResult) -> None:
        status = "❌" if result.outcome is Outcome.FAILED else "✅"
        print(f"{status} {result.describe()}")

    @staticmethod
    def _print_summary(summary: RunSummary) -> None:
        if summary.run_error:
            print(f"❌ {summary.run_error}")
            return

        print(f"\n✅ Обработка завершена!" if not summary.cancelled else "\n⚠️ Обработка прервана")
        print(f"📊 Статистика:")
        print(f"   • Найдено: {summary.total_files}")
        print(f"   • Скопировано: {summary.copied}")
        print(f"   • Перемещено: {summary.moved}")
        print(f"   • Пропущено: {summary.skipped}")
        print(f"   • Переименовано: {summary.renamed}")
        print(f"   • Ошибок: {summary.failed}")

        duration = summary.get_duration()
        if duration is not None:
            print(f"   • Продолжительность: {duration:.2f} сек")

        if summary.failed > 0:
            print(f"\n⚠️ Обнаружено {summary.failed} ошибок:")
            for error in summary.errors[:10]:  # Показываем первые 10 ошибок
                print(f"   • {error['file']}: {error['error']}")
            if len(summary.errors) > 10:
                print(f"   ... и еще {len(summary.errors) - 10} ошибок")


def create_parser() -> argparse.ArgumentParser:
    """
    Создает парсер аргументов командной строки.

    Returns:
        argparse.ArgumentParser: Настроенный парсер
    """
    parser = argparse.ArgumentParser(
        prog='filebydate',
        description="Копирование и перемещение файлов в структуру каталогов по датам",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры использования:

  # Копирование фотографий по месяцам
  filebydate --copy --ds file_modified --dp yyyy/MM photos/ sorted/

  # Перемещение только JPEG по дате съемки, рекурсивно
  filebydate --move --ds exif_original --dp yyyy/MM/dd --recursive "photos/*.jpg" sorted/

  # Пробный запуск без изменений на диске
  filebydate --copy --dp yyyy --dry-run photos/ sorted/

  # Запуск сохраненного профиля
  filebydate --profile camera
        """
    )

    parser.add_argument('--copy', action='store_true', help='Копировать файлы')
    parser.add_argument('--move', action='store_true', help='Перемещать файлы')
    parser.add_argument('--dp', metavar='PATTERN', help='Шаблон даты, например yyyy/MM/dd')
    parser.add_argument(
        '--ds',
        metavar='SOURCE',
        help='Источник даты: file_created, file_modified, exif_original'
    )
    parser.add_argument('--fp', metavar='GLOB', help='Шаблон имен файлов, например *.jpg')
    parser.add_argument('--dry-run', action='store_true', help='Пробный запуск без изменений')
    parser.add_argument('--links', action='store_true', help='Следовать символическим ссылкам')
    parser.add_argument('--recursive', action='store_true', help='Обходить подкаталоги')
    parser.add_argument(
        'args',
        nargs='*',
        metavar='PATH',
        help='Исходный каталог (или каталог/шаблон) и каталог назначения'
    )

    parser.add_argument(
        '--config',
        default=DEFAULT_CONFIG_PATH,
        help=f'Путь к файлу настроек (по умолчанию: {DEFAULT_CONFIG_PATH})'
    )
    parser.add_argument('--profile', help='Имя профиля из файла настроек')
    parser.add_argument('--list-profiles', action='store_true', help='Показать профили')
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Подробный вывод'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Главная функция CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    cli = FileByDateCLI()

    if not cli.setup(args.config, args.verbose):
        return 1

    try:
        if args.list_profiles:
            return cli.cmd_list_profiles(args)
        return cli.cmd_run(args)

    except KeyboardInterrupt:
        print("\n⚠️ Операция прервана пользователем")
        return 1
    except Exception as e:
        print(f"❌ Неожиданная ошибка: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
