"""
BucketFs — файловая система поверх плоского хранилища объектов.

Модель:
- путь -> ключ: prefix + нормализованный путь
- каталог — производное понятие: есть ключи под "путь/" (хотя бы маркер)
- пустой каталог держится маркером "<путь>/<marker>" (по умолчанию .keep)
- метаданные не кэшируются: каждый stat/list идёт в хранилище

Поведение операций:
- mkdir существующего каталога — успех без изменений
- remove отсутствующего пути — успех; remove каталога — IsDirectoryError
- rename = copy + delete; если delete упал после copy — PartialRenameError,
  объект остаётся по обоим путям
- каждый синхронный вызов хранилища ограничен config.timeout (если задан);
  потоковые передачи handle'ов таймаутом не ограничиваются
"""

from __future__ import annotations

import io
import logging
from typing import Any, Callable

from bucketfs.base.filestore.base import FileStore
from bucketfs.base.filestore.config import FsConfig
from bucketfs.base.filestore.errors import (
    AlreadyExistsError,
    DirectoryNotEmptyError,
    InvalidOperationError,
    IsDirectoryError,
    NotDirectoryError,
    NotFoundError,
    PartialRenameError,
)
from bucketfs.base.filestore.file import READ, WRITE, BucketDirectory, BucketFile
from bucketfs.base.filestore.listing import list_directory
from bucketfs.base.filestore.metadata import resolve
from bucketfs.base.filestore.paths import DELIMITER, base_name, normalize, parents, with_prefix
from bucketfs.base.filestore.types import FileInfo
from bucketfs.base.objstore.base import ObjectStore
from bucketfs.base.utils.timeouts import call_with_timeout

logger = logging.getLogger(__name__)

ROOT_NAME = "/"


class BucketFs(FileStore):
    """Иерархическая файловая система в бакете."""

    def __init__(self, store: ObjectStore, config: FsConfig | None = None):
        self._store = store
        self._config = config or FsConfig()

    def __repr__(self) -> str:
        return f"<BucketFs store={type(self._store).__name__} prefix={self._config.prefix!r}>"

    @property
    def store(self) -> ObjectStore:
        return self._store

    @property
    def config(self) -> FsConfig:
        return self._config

    # --- внутреннее ---

    def _call(self, fn: Callable[..., Any], *args, **kwargs) -> Any:
        return call_with_timeout(fn, *args, timeout=self._config.timeout, **kwargs)

    def _resolve(self, path: str) -> tuple[str, str, FileInfo | None]:
        """(нормализованный путь, ключ, FileInfo или None)."""
        path = normalize(path)
        key = with_prefix(self._config.prefix, path)
        if not path:
            return path, key, FileInfo.directory(ROOT_NAME)
        return path, key, resolve(self._store, key, base_name(path), timeout=self._config.timeout)

    # --- Handle'ы ---

    def open(self, path: str) -> BucketFile | BucketDirectory:
        path, key, info = self._resolve(path)
        if info is None:
            raise NotFoundError(path)
        if info.is_dir:
            return BucketDirectory(self, path, info)
        return BucketFile(self._store, key, path, info, READ, self._config)

    def create(self, path: str) -> BucketFile:
        path, key, info = self._resolve(path)
        if not path or (info is not None and info.is_dir):
            raise AlreadyExistsError(path or ROOT_NAME, "path is an existing directory")
        return BucketFile(self._store, key, path, FileInfo.file(base_name(path), 0), WRITE, self._config)

    # --- Метаданные и каталоги ---

    def stat(self, path: str) -> FileInfo:
        path, _, info = self._resolve(path)
        if info is None:
            raise NotFoundError(path)
        return info

    def list(self, path: str) -> list[FileInfo]:
        return list_directory(self._store, self._config, path, timeout=self._config.timeout)

    def listdir(self, path: str) -> list[str]:
        return [e.name for e in self.list(path) if e.name != "."]

    def mkdir(self, path: str) -> FileInfo:
        """Создаёт каталог загрузкой маркера.

        При StoreTimeoutError загрузка маркера может всё же завершиться в фоне:
        перед повтором стоит проверить stat(path).
        """
        path, _, info = self._resolve(path)
        if info is not None:
            if info.is_dir:
                return info
            raise AlreadyExistsError(path)

        marker_key = with_prefix(self._config.prefix, path, self._config.marker)
        self._call(self._store.put_object, marker_key, io.BytesIO(b""))
        logger.debug("mkdir %r (marker %s)", path, marker_key)
        return FileInfo.directory(base_name(path))

    def makedirs(self, path: str) -> FileInfo:
        info = FileInfo.directory(ROOT_NAME)
        for p in [*parents(path), normalize(path)]:
            if p:
                info = self.mkdir(p)
        return info

    def remove(self, path: str) -> None:
        path, key, info = self._resolve(path)
        if info is None:
            return
        if info.is_dir:
            raise IsDirectoryError(path or ROOT_NAME)
        self._call(self._store.delete_object, key)

    def rmdir(self, path: str) -> None:
        path, key, info = self._resolve(path)
        if not path:
            raise InvalidOperationError("cannot remove the root directory")
        if info is None:
            raise NotFoundError(path)
        if not info.is_dir:
            raise NotDirectoryError(path)

        entries = self.list(path)
        if len(entries) > 1:
            raise DirectoryNotEmptyError(path)
        # каталог держится маркером или объектом-папкой "key/" (консоли S3 создают такие)
        self._call(self._store.delete_object, with_prefix(key, self._config.marker))
        self._call(self._store.delete_object, key + DELIMITER)
        logger.debug("rmdir %r", path)

    def _file_endpoints(self, src: str, dst: str) -> tuple[str, str, str, str]:
        src_path, src_key, src_info = self._resolve(src)
        if src_info is None:
            raise NotFoundError(src_path)
        if src_info.is_dir:
            raise IsDirectoryError(src_path or ROOT_NAME)

        dst_path, dst_key, dst_info = self._resolve(dst)
        if dst_info is not None and dst_info.is_dir:
            raise IsDirectoryError(dst_path or ROOT_NAME)
        return src_path, src_key, dst_path, dst_key

    def rename(self, src: str, dst: str) -> None:
        """Переименовывает файл: copy, затем delete источника.

        При StoreTimeoutError брошенный вызов copy или delete может завершиться
        позже, поэтому перед повтором стоит проверить stat(src) и stat(dst).
        """
        src_path, src_key, dst_path, dst_key = self._file_endpoints(src, dst)
        if src_key == dst_key:
            return

        self._call(self._store.copy_object, src_key, dst_key)
        try:
            self._call(self._store.delete_object, src_key)
        except Exception as e:
            logger.warning("rename %r -> %r: copied, but source was not deleted: %r", src_path, dst_path, e)
            raise PartialRenameError(src_path, dst_path) from e

    def copy(self, src: str, dst: str) -> None:
        """Копирует файл на стороне хранилища. После StoreTimeoutError копия может появиться позже."""
        _, src_key, _, dst_key = self._file_endpoints(src, dst)
        if src_key == dst_key:
            return
        self._call(self._store.copy_object, src_key, dst_key)
