"""
file — открытые handle'ы bucketfs.

BucketFile (io.RawIOBase):
- режим "r": последовательное чтение, read_at, seek; данные идут через ReadBridge
- режим "w": write / write_at; данные идут через WriteBridge
- close() в режиме "w" ждёт фиксации объекта и пробрасывает ошибку загрузки
- выход из with по исключению и сборка мусора незакрытого handle'а
  обрывают загрузку: объект не появляется в хранилище

BucketDirectory:
- handle каталога: list() работает, чтение/запись -> IsDirectoryError

Машина состояний handle'а: открыт на чтение | открыт на запись -> закрыт.
Конкурентные вызовы на одном handle'е не поддерживаются; для параллельного
чтения открывайте независимые handle'ы.
"""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING

from bucketfs.base.filestore.bridge import ReadBridge, WriteBridge
from bucketfs.base.filestore.config import FsConfig
from bucketfs.base.filestore.errors import InvalidOperationError, IsDirectoryError
from bucketfs.base.filestore.types import FileInfo
from bucketfs.base.objstore.base import ObjectStore

if TYPE_CHECKING:
    from bucketfs.base.filestore.bucket import BucketFs

logger = logging.getLogger(__name__)

READ = "r"
WRITE = "w"


class BucketFile(io.RawIOBase):
    """Handle файла в хранилище объектов."""

    def __init__(
        self,
        store: ObjectStore,
        key: str,
        path: str,
        info: FileInfo,
        mode: str,
        config: FsConfig,
    ):
        super().__init__()
        if mode not in (READ, WRITE):
            raise InvalidOperationError(f"unsupported mode {mode!r}")
        self._mode = mode
        self._store = store
        self._key = key
        self._path = path
        self._info = info
        self._config = config
        self._pos = 0
        self._reader: ReadBridge | None = None
        self._writer: WriteBridge | None = None

        if mode == WRITE:
            self._writer = WriteBridge(
                store,
                key,
                part_size=config.part_size,
                scratch_dir=config.scratch_dir,
            )

    def __repr__(self) -> str:
        return f"<BucketFile path={self._path!r} mode={self._mode!r}>"

    @property
    def path(self) -> str:
        return self._path

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def info(self) -> FileInfo:
        """Метаданные handle'а; в режиме "w" заполняются после успешного close()."""
        return self._info

    # --- io.RawIOBase ---

    def readable(self) -> bool:
        return self._mode == READ

    def writable(self) -> bool:
        return self._mode == WRITE

    def seekable(self) -> bool:
        return self._mode == READ

    def tell(self) -> int:
        self._ensure_open()
        if self._writer is not None:
            return self._writer.written
        return self._pos

    def readinto(self, b) -> int:
        self._ensure_open()
        self._ensure_mode(READ, "read")
        if self._pos >= self._info.size:
            return 0
        if self._reader is None:
            self._reader = ReadBridge(
                self._store,
                self._key,
                self._pos,
                self._info.size,
                part_size=self._config.part_size,
                scratch_dir=self._config.scratch_dir,
            )
        n = self._reader.readinto(b)
        self._pos += n
        return n

    def read_at(self, size: int, offset: int) -> bytes:
        """Читает size байт с offset (меньше — только на EOF).

        offset, отличный от текущей позиции, работает как seek + read.
        """
        self._ensure_open()
        self._ensure_mode(READ, "read_at")
        if offset != self._pos:
            self.seek(offset)
        chunks: list[bytes] = []
        remaining = size
        while remaining > 0:
            chunk = self.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._ensure_open()
        self._ensure_mode(READ, "seek")
        if whence == io.SEEK_SET:
            target = offset
        elif whence == io.SEEK_CUR:
            target = self._pos + offset
        elif whence == io.SEEK_END:
            target = self._info.size + offset
        else:
            raise InvalidOperationError(f"invalid whence: {whence}")

        if target < 0 or target > self._info.size:
            raise InvalidOperationError(
                f"seek to {target} outside [0, {self._info.size}] for {self._path!r}"
            )
        if target != self._pos:
            # новая позиция = новый ranged fetch при следующем чтении
            self._drop_reader()
            self._pos = target
        return self._pos

    def write(self, b) -> int:
        self._ensure_open()
        self._ensure_mode(WRITE, "write")
        return self._writer.write(b)

    def write_at(self, data, offset: int) -> int:
        """Пишет data по offset; offset должен совпадать с tell(), иначе InvalidOperationError."""
        self._ensure_open()
        self._ensure_mode(WRITE, "write_at")
        return self._writer.write_at(data, offset)

    def close(self) -> None:
        if self.closed:
            return
        try:
            if self._writer is not None:
                self._writer.close()
                self._info = FileInfo.file(self._info.name, self._writer.written)
                logger.debug("committed %r (%s bytes)", self._path, self._info.size)
        finally:
            self._writer = None
            self._drop_reader()
            super().close()

    def abort(self) -> None:
        """Закрывает handle без фиксации записи."""
        if self.closed:
            return
        try:
            if self._writer is not None:
                self._writer.abort(wait=True)
        finally:
            self._writer = None
            self._drop_reader()
            super().close()

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None and self._mode == WRITE:
            self.abort()
        else:
            self.close()
        return False

    def __del__(self):
        # незакрытая запись не должна фиксироваться при сборке мусора
        if getattr(self, "_writer", None) is not None:
            self._writer.abort()
            self._writer = None
        if getattr(self, "_reader", None) is not None:
            self._drop_reader()

    # --- внутреннее ---

    def _ensure_open(self) -> None:
        if self.closed:
            raise ValueError("I/O operation on closed file.")

    def _ensure_mode(self, mode: str, op: str) -> None:
        if self._mode != mode:
            raise InvalidOperationError(f"{op} on handle opened in mode {self._mode!r}: {self._path!r}")

    def _drop_reader(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None


class BucketDirectory:
    """Handle каталога: можно перечислить содержимое, нельзя читать и писать."""

    def __init__(self, fs: "BucketFs", path: str, info: FileInfo):
        self._fs = fs
        self._path = path
        self._info = info
        self._closed = False

    def __repr__(self) -> str:
        return f"<BucketDirectory path={self._path!r}>"

    @property
    def path(self) -> str:
        return self._path

    @property
    def info(self) -> FileInfo:
        return self._info

    @property
    def closed(self) -> bool:
        return self._closed

    def list(self) -> list[FileInfo]:
        if self._closed:
            raise ValueError("I/O operation on closed directory.")
        return self._fs.list(self._path)

    def read(self, size: int = -1) -> bytes:
        raise IsDirectoryError(self._path)

    def readinto(self, b) -> int:
        raise IsDirectoryError(self._path)

    def write(self, b) -> int:
        raise IsDirectoryError(self._path)

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> "BucketDirectory":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
