"""
tmp — временные файлы для буферов каналов.

Файл создаётся уже отвязанным от каталога (на POSIX), поэтому место на диске
освобождается при закрытии или падении процесса, без ручной уборки.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import BinaryIO


def scratch_file(scratch_dir: str | None = None) -> BinaryIO:
    """Открывает анонимный временный файл в scratch_dir (None — системный temp)."""
    if scratch_dir:
        Path(scratch_dir).expanduser().mkdir(parents=True, exist_ok=True)
        scratch_dir = str(Path(scratch_dir).expanduser())
    return tempfile.TemporaryFile(prefix="bucketfs_pipe_", dir=scratch_dir)
