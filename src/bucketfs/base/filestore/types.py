"""
types — метаданные файлов и каталогов bucketfs.

Назначение:
- один тип записи для файла и каталога (каталог — вычисляемый вариант, а не отдельная структура)
- FileInfo создаётся заново при каждом stat/list, не кэшируется и не меняется

Принцип:
- у каталога size всегда 0, mtime синтезируется в момент наблюдения
  (у хранилища нет метаданных каталогов)
- у файла size/mtime берутся из метаданных объекта; нет mtime — берётся "сейчас"
"""

from __future__ import annotations

import stat
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone

DIR_MODE = stat.S_IFDIR | 0o755
FILE_MODE = stat.S_IFREG | 0o644


@dataclass(frozen=True, slots=True)
class FileInfo:
    """Метаданные файла/каталога."""

    name: str
    is_dir: bool = False
    size: int = 0
    mtime: float = field(default_factory=time.time)

    @classmethod
    def directory(cls, name: str) -> "FileInfo":
        return cls(name=name, is_dir=True)

    @classmethod
    def file(cls, name: str, size: int, mtime: float | None = None) -> "FileInfo":
        return cls(name=name, is_dir=False, size=int(size), mtime=time.time() if mtime is None else float(mtime))

    @property
    def is_file(self) -> bool:
        return not self.is_dir

    @property
    def mode(self) -> int:
        return DIR_MODE if self.is_dir else FILE_MODE

    @property
    def modified(self) -> datetime:
        return datetime.fromtimestamp(self.mtime, tz=timezone.utc)
