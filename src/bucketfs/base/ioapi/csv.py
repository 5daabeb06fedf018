"""
csv — чтение/запись CSV в DataFrame поверх FileStore.

Данные идут потоком через handle'ы: большой CSV не собирается в памяти целиком.
"""

from __future__ import annotations

import io

import pandas as pd

from bucketfs.base.filestore.base import FileStore
from bucketfs.base.ioapi.bytes import open_read, open_write


def read_df(path: str, store: FileStore | None = None, encoding: str = "utf-8", **kwargs) -> pd.DataFrame:
    with open_read(path, store=store) as f:
        return pd.read_csv(f, encoding=encoding, encoding_errors="replace", **kwargs)


def write_df(path: str, df: pd.DataFrame, store: FileStore | None = None, encoding: str = "utf-8", **kwargs) -> None:
    with open_write(path, store=store) as f:
        text = io.TextIOWrapper(f, encoding=encoding, newline="", write_through=True)
        df.to_csv(text, index=False, **kwargs)
        # detach, чтобы обёртка не закрыла handle; фиксация при выходе из with
        text.detach()
