"""
listing — содержимое каталога.

Правила:
- каталога нет -> [] (не ошибка); путь — файл -> NotDirectoryError
- первым всегда идёт "." (сам каталог)
- common prefixes дают подкаталоги, объекты — файлы
- маркер каталога и пустые имена не показываются
- имя, которое есть и как каталог, и как файл, показывается каталогом
- остальное сортируется по имени

Любая ошибка страницы (включая таймаут) прерывает листинг целиком:
частичный результат не возвращается.
"""

from __future__ import annotations

import logging

from bucketfs.base.filestore.config import FsConfig
from bucketfs.base.filestore.errors import NotDirectoryError
from bucketfs.base.filestore.metadata import resolve
from bucketfs.base.filestore.paths import DELIMITER, base_name, normalize, with_prefix
from bucketfs.base.filestore.types import FileInfo
from bucketfs.base.objstore.base import ObjectStore
from bucketfs.base.utils.timeouts import call_with_timeout

logger = logging.getLogger(__name__)


def list_directory(
    store: ObjectStore,
    config: FsConfig,
    path: str,
    *,
    timeout: float | None = None,
) -> list[FileInfo]:
    """Возвращает записи каталога path: "." и отсортированные дочерние записи."""
    path = normalize(path)
    key = with_prefix(config.prefix, path)

    if path:
        info = resolve(store, key, base_name(path), timeout=timeout)
        if info is None:
            return []
        if not info.is_dir:
            raise NotDirectoryError(path)

    scope = key + DELIMITER if key else ""
    dirs: dict[str, FileInfo] = {}
    files: dict[str, FileInfo] = {}

    token: str | None = None
    pages = 0
    while True:
        page = call_with_timeout(store.list_objects, scope, DELIMITER, token, timeout=timeout)
        pages += 1

        for p in page.prefixes:
            name = p[len(scope):].rstrip(DELIMITER)
            if name and name not in dirs:
                dirs[name] = FileInfo.directory(name)

        for obj in page.objects:
            name = obj.key[len(scope):]
            if not name or name == config.marker:
                continue
            files[name] = FileInfo.file(name, obj.size, obj.mtime)

        if not page.truncated:
            break
        token = page.next_token

    logger.debug("list %r: %s dirs, %s files, %s pages", path, len(dirs), len(files), pages)

    for name in dirs:
        files.pop(name, None)
    entries = sorted([*dirs.values(), *files.values()], key=lambda e: e.name)
    return [FileInfo.directory("."), *entries]
