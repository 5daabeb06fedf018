"""
config — настройки одного экземпляра BucketFs.

Важно:
- конфиг создаётся один раз на экземпляр и не меняется (frozen)
- некорректные значения молча заменяются дефолтом:
  part_size не больше минимума -> минимум, пустой marker -> ".keep",
  timeout <= 0 -> без ограничения
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from bucketfs.base.filestore.paths import DELIMITER

MIN_PART_SIZE = 5 * 1024 * 1024
DEFAULT_MARKER = ".keep"


@dataclass(frozen=True)
class FsConfig:
    """
    Настройки файловой системы.
    """
    prefix: str = ""
    timeout: float | None = None  # секунды на один вызов хранилища
    part_size: int = MIN_PART_SIZE  # размер части multipart и буфер канала
    scratch_dir: str | None = None  # где создаются временные файлы каналов
    marker: str = DEFAULT_MARKER

    def __post_init__(self) -> None:
        object.__setattr__(self, "prefix", (self.prefix or "").strip(DELIMITER))
        if self.timeout is not None and self.timeout <= 0:
            object.__setattr__(self, "timeout", None)
        if not self.part_size or self.part_size <= MIN_PART_SIZE:
            object.__setattr__(self, "part_size", MIN_PART_SIZE)
        if not self.marker:
            object.__setattr__(self, "marker", DEFAULT_MARKER)

    @classmethod
    def from_env(cls, prefix: str = "BUCKETFS_") -> "FsConfig":
        """Собирает конфиг из переменных окружения (BUCKETFS_PREFIX, BUCKETFS_TIMEOUT, ...)."""

        def _get(name: str) -> str | None:
            v = os.getenv(f"{prefix}{name}")
            if v is None or not v.strip():
                return None
            return v.strip()

        timeout = _get("TIMEOUT")
        part_size = _get("PART_SIZE")
        return cls(
            prefix=_get("PREFIX") or "",
            timeout=float(timeout) if timeout else None,
            part_size=int(part_size) if part_size else MIN_PART_SIZE,
            scratch_dir=_get("SCRATCH_DIR"),
            marker=_get("MARKER") or DEFAULT_MARKER,
        )
