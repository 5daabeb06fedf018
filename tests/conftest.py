from __future__ import annotations

import collections
import io
import time

import pytest

from bucketfs.base.filestore import BucketFs, FsConfig
from bucketfs.base.objstore import LocalObjectStore


class _FailingBody:
    """Тело ответа, которое обрывается после limit байт."""

    def __init__(self, f, limit: int):
        self._f = f
        self._left = limit

    def read(self, n: int = -1) -> bytes:
        if self._left <= 0:
            raise ConnectionError("connection reset by peer")
        chunk = self._f.read(min(n, self._left) if n >= 0 else self._left)
        self._left -= len(chunk)
        return chunk

    def close(self) -> None:
        self._f.close()


class RecordingStore(LocalObjectStore):
    """LocalObjectStore со счётчиком вызовов, задержками и внедрением ошибок."""

    def __init__(self, root: str):
        super().__init__(root)
        self.calls: collections.Counter = collections.Counter()
        self.faults: dict[str, BaseException] = {}
        self.delays: dict[str, float] = {}
        self.fail_after: int | None = None

    def _enter(self, op: str) -> None:
        self.calls[op] += 1
        delay = self.delays.get(op)
        if delay:
            time.sleep(delay)
        exc = self.faults.get(op)
        if exc is not None:
            raise exc

    def head_object(self, key):
        self._enter("head_object")
        return super().head_object(key)

    def list_objects(self, prefix, delimiter="", token=None, max_keys=None):
        self._enter("list_objects")
        return super().list_objects(prefix, delimiter, token, max_keys)

    def get_object(self, key, offset=0):
        self._enter("get_object")
        body = super().get_object(key, offset)
        if self.fail_after is not None:
            return _FailingBody(body, self.fail_after)
        return body

    def put_object(self, key, body, part_size=None):
        self._enter("put_object")
        return super().put_object(key, body, part_size)

    def delete_object(self, key):
        self._enter("delete_object")
        return super().delete_object(key)

    def copy_object(self, src, dst):
        self._enter("copy_object")
        return super().copy_object(src, dst)


@pytest.fixture
def store(tmp_path) -> RecordingStore:
    return RecordingStore(str(tmp_path / "bucket"))


@pytest.fixture
def config(tmp_path) -> FsConfig:
    return FsConfig(scratch_dir=str(tmp_path / "scratch"))


@pytest.fixture
def fs(store, config) -> BucketFs:
    return BucketFs(store, config)


@pytest.fixture
def put(store):
    """Кладёт объект в хранилище в обход файловой системы."""

    def _put(key: str, data: bytes = b"") -> None:
        store.put_object(key, io.BytesIO(data))

    return _put
