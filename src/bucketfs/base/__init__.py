"""
base — нейтральный слой инфраструктуры.

Назначение:
- выбрать хранилище объектов (S3 или локальное) через runtime
- дать файловую систему поверх хранилища (filestore)
- дать единый API чтения/записи форматов (ioapi)
"""

from bucketfs.base import runtime  # noqa: F401
