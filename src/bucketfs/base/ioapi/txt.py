"""
txt — текстовые файлы поверх FileStore.

Текст декодируется/кодируется на лету через io.TextIOWrapper над handle'ами,
поэтому iter_lines и write_lines годятся и для больших выгрузок (логи, .txt).

Примечание:
- кодировка по умолчанию utf-8; другую (cp1251 и т.п.) можно передать явно
- битые байты заменяются (errors="replace"), чтение не падает на чужой кодировке
"""

from __future__ import annotations

import io
from typing import Iterable, Iterator

from bucketfs.base.filestore.base import FileStore
from bucketfs.base.ioapi.bytes import open_read, open_write


def read_text(path: str, encoding: str = "utf-8", store: FileStore | None = None) -> str:
    """Читает текстовый файл целиком; переводы строк сохраняются как есть."""
    with open_read(path, store=store) as f:
        with io.TextIOWrapper(f, encoding=encoding, errors="replace", newline="") as text:
            return text.read()


def iter_lines(path: str, encoding: str = "utf-8", store: FileStore | None = None) -> Iterator[str]:
    """Строки файла без символов перевода строки (\\n, \\r\\n, \\r)."""
    with open_read(path, store=store) as f:
        with io.TextIOWrapper(f, encoding=encoding, errors="replace") as text:
            for line in text:
                yield line.rstrip("\n")


def write_text(path: str, text: str, encoding: str = "utf-8", store: FileStore | None = None) -> None:
    write_lines(path, [str(text)], encoding=encoding, store=store, newline="")


def write_lines(
    path: str,
    lines: Iterable[str],
    encoding: str = "utf-8",
    store: FileStore | None = None,
    newline: str = "\n",
) -> None:
    """Пишет строки потоком, добавляя newline после каждой."""
    with open_write(path, store=store) as f:
        out = io.TextIOWrapper(f, encoding=encoding, errors="replace", newline="", write_through=True)
        for line in lines:
            out.write(line)
            out.write(newline)
        out.flush()
        # detach: handle закрывает with, на выходе фиксируется объект
        out.detach()
