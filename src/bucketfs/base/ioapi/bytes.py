"""
bytes — двоичные потоки поверх FileStore.

База для csv/txt и собственных экспортеров:
- open_read / open_write — потоковые handle'ы, объект целиком в памяти не держится
- upload / download — перенос между локальным потоком и хранилищем кусками
- read_range — кусок объекта с заданного смещения (один ranged fetch)
- read_bytes / write_bytes — только для небольших объектов
"""

from __future__ import annotations

from typing import BinaryIO

from bucketfs.base.filestore.base import FileStore
from bucketfs.base.runtime import get_filestore

COPY_CHUNK = 1024 * 1024


def _fs(store: FileStore | None) -> FileStore:
    return store or get_filestore()


def open_read(path: str, store: FileStore | None = None, offset: int = 0) -> BinaryIO:
    """Открывает файл на чтение; offset > 0 — сразу встать на позицию без лишнего fetch."""
    f = _fs(store).open_read(path)
    if offset:
        try:
            f.seek(offset)
        except BaseException:
            f.close()
            raise
    return f


def open_write(path: str, store: FileStore | None = None) -> BinaryIO:
    """Handle записи: объект появляется в хранилище только после close()."""
    return _fs(store).open_write(path)


def upload(src: BinaryIO, path: str, store: FileStore | None = None, chunk_size: int = COPY_CHUNK) -> int:
    """Копирует поток src в файл path. Возвращает число записанных байт."""
    total = 0
    with open_write(path, store=store) as f:
        while True:
            chunk = src.read(chunk_size)
            if not chunk:
                break
            f.write(chunk)
            total += len(chunk)
    return total


def download(path: str, dst: BinaryIO, store: FileStore | None = None, chunk_size: int = COPY_CHUNK) -> int:
    total = 0
    with open_read(path, store=store) as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            dst.write(chunk)
            total += len(chunk)
    return total


def read_range(path: str, offset: int, size: int, store: FileStore | None = None) -> bytes:
    """size байт начиная с offset; меньше — только если файл кончился раньше."""
    with open_read(path, store=store, offset=offset) as f:
        return f.read(size)


def read_bytes(path: str, store: FileStore | None = None) -> bytes:
    return _fs(store).read_bytes(path)


def write_bytes(path: str, data: bytes, store: FileStore | None = None) -> None:
    _fs(store).write_bytes(path, data)
