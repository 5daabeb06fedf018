"""
errors — типизированные ошибки файловой системы поверх хранилища объектов.

Принцип:
- ошибки "не того вида" наследуют встроенные исключения Python
  (FileNotFoundError, IsADirectoryError, ...), поэтому привычный
  `except FileNotFoundError` продолжает работать
- ошибки транспорта/сервиса (boto3, botocore, OSError локального хранилища)
  НЕ оборачиваются и пробрасываются как есть
- PartialRenameError — отдельный тип: копия уже создана, удаление не прошло
"""

from __future__ import annotations

import errno
import os


class FsError(Exception):
    """Базовый класс всех ошибок bucketfs."""


class NotFoundError(FsError, FileNotFoundError):
    """Путь не соответствует ни объекту, ни каталогу."""

    def __init__(self, path: str, message: str = "key not found"):
        super().__init__(errno.ENOENT, message, path)


class AlreadyExistsError(FsError, FileExistsError):
    """Цель create/mkdir конфликтует с существующим файлом или каталогом."""

    def __init__(self, path: str, message: str = "object already exists"):
        super().__init__(errno.EEXIST, message, path)


class IsDirectoryError(FsError, IsADirectoryError):
    """Файловая операция вызвана на каталоге."""

    def __init__(self, path: str, message: str = "object is a directory"):
        super().__init__(errno.EISDIR, message, path)


class NotDirectoryError(FsError, NotADirectoryError):
    """Операция над каталогом вызвана на файле."""

    def __init__(self, path: str, message: str = "object is not a directory"):
        super().__init__(errno.ENOTDIR, message, path)


class DirectoryNotEmptyError(FsError, OSError):
    def __init__(self, path: str, message: str = os.strerror(errno.ENOTEMPTY)):
        super().__init__(errno.ENOTEMPTY, message, path)


class InvalidOperationError(FsError, ValueError):
    """Недопустимый вызов: seek за границы, чтение из handle на запись и т.п."""


class StoreTimeoutError(FsError, TimeoutError):
    """Вызов хранилища не уложился в таймаут."""


class PipeClosedError(FsError, BrokenPipeError):
    """Противоположный конец канала уже закрыт."""

    def __init__(self, message: str = "pipe is closed"):
        super().__init__(errno.EPIPE, message)


class PartialRenameError(FsError):
    """
    Копия по новому пути создана, но удалить старый ключ не удалось.

    Объект остаётся по обоим путям; вызывающий код решает, повторить ли удаление.
    Исходная ошибка доступна через __cause__.
    """

    def __init__(self, src: str, dst: str):
        super().__init__(f"rename {src!r} -> {dst!r}: copied, but source was not deleted")
        self.src = src
        self.dst = dst
