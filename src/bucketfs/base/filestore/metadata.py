"""
metadata — определение "файл / каталог / нет" по одному листингу.

Один запрос list_objects(prefix=key, delimiter="/", max_keys=1):
- первый элемент == key + "/"  -> каталог
- первый элемент == key        -> файл (size/mtime из листинга)
- иначе                        -> None

Ключ key всегда сортируется раньше key + "/", поэтому при наличии и объекта,
и префикса сообщается объект.

Соседние ключи вида key.txt / key-x сортируются между key и key + "/"
и могут занять единственное место в ответе. Если страница обрезана,
делается второй запрос ровно по key + "/".
"""

from __future__ import annotations

from bucketfs.base.filestore.paths import DELIMITER
from bucketfs.base.filestore.types import FileInfo
from bucketfs.base.objstore.base import ListPage, ObjectStore
from bucketfs.base.utils.timeouts import call_with_timeout


def _first(page: ListPage) -> tuple[str, object] | None:
    items = [(p, None) for p in page.prefixes] + [(o.key, o) for o in page.objects]
    if not items:
        return None
    return min(items, key=lambda it: it[0])


def resolve(store: ObjectStore, key: str, name: str, *, timeout: float | None = None) -> FileInfo | None:
    """Возвращает FileInfo для key или None, если нет ни объекта, ни каталога."""
    if not key:
        return FileInfo.directory(name)

    page = call_with_timeout(store.list_objects, key, DELIMITER, max_keys=1, timeout=timeout)
    first = _first(page)
    if first is not None:
        item, obj = first
        if item == key + DELIMITER:
            return FileInfo.directory(name)
        if item == key and obj is not None:
            return FileInfo.file(name, obj.size, obj.mtime)

    # key + "/" уже был бы первым, если бы существовал
    if not page.truncated or (first is not None and first[0] > key + DELIMITER):
        return None

    page = call_with_timeout(store.list_objects, key + DELIMITER, DELIMITER, max_keys=1, timeout=timeout)
    if page.prefixes or page.objects:
        return FileInfo.directory(name)
    return None
