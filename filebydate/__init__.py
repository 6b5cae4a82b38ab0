"""
File By Date

Утилита для копирования и перемещения файлов в структуру каталогов по датам
(дата изменения, создания или EXIF) по заданному шаблону даты.
"""

__version__ = "1.0.0"
__author__ = "File By Date Team"
__description__ = "Utility for copying or moving files into a date-based directory tree"
