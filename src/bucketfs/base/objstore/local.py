"""
LocalObjectStore — реализация ObjectStore в локальном каталоге.

Используется вне облака: для разработки, тестов и CLI без бакета.

Раскладка на диске:
- <root>/objects/<ключ в percent-encoding> — один плоский файл на объект,
  поэтому представим любой набор ключей (и "a", и "a/b" одновременно)
- <root>/staging/ — незавершённые загрузки; в objects/ файл попадает
  атомарным os.replace только после чтения body до EOF

Листинг повторяет семантику S3 ListObjectsV2:
- ключи в лексикографическом порядке
- delimiter сворачивает ключи в common prefixes
- max_keys считает и объекты, и prefixes; токен — последний выданный элемент

Замечание:
- длина ключа ограничена длиной имени файла ОС (обычно 255 байт после кодирования)
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO, Iterator
from urllib.parse import quote, unquote

from bucketfs.base.objstore.base import ListPage, ObjectInfo, ObjectStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_KEYS = 1000
_COPY_CHUNK = 1024 * 1024


class LocalObjectStore(ObjectStore):
    """Хранилище объектов в локальном каталоге."""

    def __init__(self, root: str):
        self._root = Path(root).expanduser().resolve()
        self._objects = self._root / "objects"
        self._staging = self._root / "staging"
        self._objects.mkdir(parents=True, exist_ok=True)
        self._staging.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def _abs(self, key: str) -> Path:
        return self._objects / quote(key, safe="")

    def _keys(self) -> Iterator[str]:
        return iter(sorted(unquote(p.name) for p in self._objects.iterdir() if p.is_file()))

    def _info(self, key: str, p: Path) -> ObjectInfo:
        st = p.stat()
        return ObjectInfo(key=key, size=int(st.st_size), mtime=float(st.st_mtime))

    def _publish(self, key: str, fill) -> None:
        """Пишет объект во временный файл staging/ и атомарно публикует его."""
        fd, tmp = tempfile.mkstemp(dir=self._staging, prefix="upload_")
        try:
            with os.fdopen(fd, "wb") as f:
                fill(f)
            os.replace(tmp, self._abs(key))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    # --- ObjectStore ---

    def head_object(self, key: str) -> ObjectInfo | None:
        p = self._abs(key)
        if not key or not p.is_file():
            return None
        return self._info(key, p)

    def list_objects(
        self,
        prefix: str,
        delimiter: str = "",
        token: str | None = None,
        max_keys: int | None = None,
    ) -> ListPage:
        limit = max_keys or DEFAULT_MAX_KEYS
        prefixes: list[str] = []
        objects: list[ObjectInfo] = []
        last: str | None = None

        for key in self._keys():
            if not key.startswith(prefix):
                continue

            item = key
            if delimiter:
                rest = key[len(prefix):]
                idx = rest.find(delimiter)
                if idx >= 0:
                    item = prefix + rest[: idx + len(delimiter)]

            # уже выдано на прошлых страницах или свернуто в тот же prefix
            if (token is not None and item <= token) or item == last:
                continue

            if len(prefixes) + len(objects) >= limit:
                return ListPage(prefixes=prefixes, objects=objects, next_token=last)

            if item != key:
                prefixes.append(item)
            else:
                objects.append(self._info(key, self._abs(key)))
            last = item

        return ListPage(prefixes=prefixes, objects=objects, next_token=None)

    def get_object(self, key: str, offset: int = 0) -> BinaryIO:
        f = self._abs(key).open("rb")
        if offset > 0:
            f.seek(offset)
        return f

    def put_object(self, key: str, body: BinaryIO, part_size: int | None = None) -> None:
        logger.debug("put_object key=%s", key)
        self._publish(key, lambda f: shutil.copyfileobj(body, f, part_size or _COPY_CHUNK))

    def delete_object(self, key: str) -> None:
        self._abs(key).unlink(missing_ok=True)

    def copy_object(self, src: str, dst: str) -> None:
        src_p = self._abs(src)

        def _fill(f: BinaryIO) -> None:
            with src_p.open("rb") as r:
                shutil.copyfileobj(r, f, _COPY_CHUNK)

        self._publish(dst, _fill)
