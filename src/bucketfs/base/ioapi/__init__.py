"""
ioapi — единый API чтения/записи форматов поверх FileStore.

Рекомендованный импорт:
    from bucketfs.base import ioapi as ia
"""

from bucketfs.base.ioapi import bytes, csv, txt

__all__ = [
    "bytes",
    "csv",
    "txt",
]
