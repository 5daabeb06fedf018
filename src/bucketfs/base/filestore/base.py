"""
FileStore — интерфейс иерархической файловой системы.

Принцип:
- FileStore отвечает за операции с путями/файлами/каталогами
- pandas и прочие форматы живут выше (в ioapi)

Пути:
- "/"-разделённые, относительно корня файловой системы
- "", "." и "/" — корень (всегда каталог)

Важно:
- exists/is_file/is_dir, read_bytes/write_bytes, open_read/open_write и walk
  имеют дефолтные реализации поверх базовых методов
"""

from __future__ import annotations

import io
from typing import Any, BinaryIO, Iterator, Protocol, Tuple

from bucketfs.base.filestore.errors import IsDirectoryError, NotFoundError
from bucketfs.base.filestore.types import FileInfo


class FileStore(Protocol):
    """Иерархическая файловая система."""

    # --- Handle'ы ---

    def open(self, path: str) -> Any:
        """Открывает файл на чтение или каталог (handle с list())."""
        ...

    def create(self, path: str) -> Any:
        """Создаёт файл: handle на запись, объект виден после close()."""
        ...

    # --- Метаданные и каталоги ---

    def stat(self, path: str) -> FileInfo:
        """Возвращает метаданные файла/каталога."""
        ...

    def list(self, path: str) -> list[FileInfo]:
        """Записи каталога: "." и отсортированные дочерние записи."""
        ...

    def listdir(self, path: str) -> list[str]:
        """Имена (без путей) внутри каталога."""
        ...

    def mkdir(self, path: str) -> FileInfo:
        """Создаёт каталог; существующий каталог — не ошибка."""
        ...

    def makedirs(self, path: str) -> FileInfo:
        """Создаёт каталог вместе со всеми родителями."""
        ...

    def remove(self, path: str) -> None:
        """Удаляет файл; отсутствующий путь — не ошибка."""
        ...

    def rmdir(self, path: str) -> None:
        """Удаляет пустой каталог."""
        ...

    def rename(self, src: str, dst: str) -> None:
        """Переименовывает файл (копия + удаление, не атомарно)."""
        ...

    def copy(self, src: str, dst: str) -> None:
        """Копирует файл."""
        ...

    # --- Дефолтные "удобные" методы ---

    def exists(self, path: str) -> bool:
        try:
            self.stat(path)
        except NotFoundError:
            return False
        return True

    def is_file(self, path: str) -> bool:
        try:
            return self.stat(path).is_file
        except NotFoundError:
            return False

    def is_dir(self, path: str) -> bool:
        try:
            return self.stat(path).is_dir
        except NotFoundError:
            return False

    def open_read(self, path: str) -> BinaryIO:
        """Открывает буферизованный поток чтения файла."""
        f = self.open(path)
        if not isinstance(f, io.RawIOBase):
            f.close()
            raise IsDirectoryError(path)
        return io.BufferedReader(f)

    def open_write(self, path: str) -> BinaryIO:
        """Открывает поток записи файла.

        Поток не буферизуется: выход из with по исключению должен оборвать
        загрузку, а буфер поверх handle'а зафиксировал бы объект при закрытии.
        """
        return self.create(path)

    def read_bytes(self, path: str) -> bytes:
        """Читает файл целиком (байтами)."""
        with self.open(path) as f:
            return f.read()

    def write_bytes(self, path: str, data: bytes) -> None:
        """Пишет файл целиком (байтами)."""
        with self.create(path) as f:
            f.write(data)

    def walk(self, top: str) -> Iterator[Tuple[str, list[str], list[str]]]:
        """Рекурсивный обход каталога сверху вниз (аналог os.walk).

        Возвращает:
        - dirpath: путь каталога
        - dirnames: имена подкаталогов
        - filenames: имена файлов

        Тип записи берётся из list(), без отдельного stat на каждое имя.
        """

        def _join(parent: str, name: str) -> str:
            p = parent.strip("/")
            if not p or p == ".":
                return name
            return f"{p}/{name}"

        stack: list[str] = [top]

        while stack:
            dirpath = stack.pop()
            dirnames: list[str] = []
            filenames: list[str] = []

            for entry in self.list(dirpath):
                if entry.name == ".":
                    continue
                if entry.is_dir:
                    dirnames.append(entry.name)
                else:
                    filenames.append(entry.name)

            yield dirpath, dirnames, filenames

            for d in reversed(dirnames):
                stack.append(_join(dirpath, d))
