"""
ObjectStore — интерфейс плоского хранилища объектов (ключ -> байты).

Хранилище понимает только целые объекты и листинг по префиксу.
Каталоги, stat и потоковый I/O строятся выше, в bucketfs.base.filestore.

Контракт:
- head_object / list_objects / delete_object / copy_object — синхронные вызовы
- get_object возвращает поток с read(n) и close()
- put_object читает body до EOF; объект виден только после успешного завершения
- delete_object идемпотентен: удаление отсутствующего ключа не ошибка
- ошибки транспорта/сервиса пробрасываются без обёрток
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, Protocol


@dataclass(frozen=True, slots=True)
class ObjectInfo:
    """Метаданные одного объекта."""
    key: str
    size: int
    mtime: float | None = None


@dataclass(frozen=True)
class ListPage:
    """
    Одна страница листинга.

    prefixes — common prefixes (с завершающим разделителем),
    objects — объекты страницы, next_token — токен продолжения или None.
    """
    prefixes: list[str] = field(default_factory=list)
    objects: list[ObjectInfo] = field(default_factory=list)
    next_token: str | None = None

    @property
    def truncated(self) -> bool:
        return self.next_token is not None


class ObjectStore(Protocol):
    """Плоское хранилище объектов."""

    def head_object(self, key: str) -> ObjectInfo | None:
        """Метаданные объекта или None, если ключа нет."""
        ...

    def list_objects(
        self,
        prefix: str,
        delimiter: str = "",
        token: str | None = None,
        max_keys: int | None = None,
    ) -> ListPage:
        """Одна страница листинга по префиксу (S3 ListObjectsV2)."""
        ...

    def get_object(self, key: str, offset: int = 0) -> BinaryIO:
        """Поток содержимого объекта начиная с offset (ranged fetch)."""
        ...

    def put_object(self, key: str, body: BinaryIO, part_size: int | None = None) -> None:
        """Загружает body до EOF под ключ key (multipart при необходимости)."""
        ...

    def delete_object(self, key: str) -> None:
        """Удаляет объект."""
        ...

    def copy_object(self, src: str, dst: str) -> None:
        """Копирует объект внутри хранилища."""
        ...
