"""
S3ObjectStore — реализация ObjectStore поверх boto3.

Особенности:
- "нет ключа" определяется по коду ClientError (404 / NoSuchKey / NotFound)
- остальные ошибки botocore пробрасываются без изменений
- загрузка идёт через upload_fileobj без собственных потоков boto3:
  части размера part_size читаются из потока по одной, память ограничена частью
- copy_object — одно серверное копирование (объекты до 5 GiB)
"""

from __future__ import annotations

import logging
from typing import Any, BinaryIO

from boto3.s3.transfer import TransferConfig
from botocore.exceptions import ClientError

from bucketfs.base.objstore.base import ListPage, ObjectInfo, ObjectStore

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset(["404", "NoSuchKey", "NotFound"])


def is_not_found(exc: Exception) -> bool:
    """True, если ошибка boto3 означает отсутствие ключа."""
    if not isinstance(exc, ClientError):
        return False
    code = exc.response.get("Error", {}).get("Code", "")
    return str(code) in _NOT_FOUND_CODES


def _timestamp(value: Any) -> float | None:
    # LastModified приходит как datetime
    if value is None:
        return None
    return value.timestamp()


class S3ObjectStore(ObjectStore):
    """Хранилище объектов в бакете S3 (или совместимом сервисе)."""

    def __init__(self, client: Any, bucket: str):
        self._client = client
        self._bucket = bucket

    @property
    def bucket(self) -> str:
        return self._bucket

    def head_object(self, key: str) -> ObjectInfo | None:
        try:
            resp = self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            if is_not_found(e):
                return None
            raise
        return ObjectInfo(
            key=key,
            size=int(resp.get("ContentLength", 0)),
            mtime=_timestamp(resp.get("LastModified")),
        )

    def list_objects(
        self,
        prefix: str,
        delimiter: str = "",
        token: str | None = None,
        max_keys: int | None = None,
    ) -> ListPage:
        kwargs: dict[str, Any] = {"Bucket": self._bucket, "Prefix": prefix}
        if delimiter:
            kwargs["Delimiter"] = delimiter
        if token:
            kwargs["ContinuationToken"] = token
        if max_keys:
            kwargs["MaxKeys"] = max_keys

        resp = self._client.list_objects_v2(**kwargs)

        prefixes = [p["Prefix"] for p in resp.get("CommonPrefixes", []) if p.get("Prefix")]
        objects = [
            ObjectInfo(key=c["Key"], size=int(c.get("Size", 0)), mtime=_timestamp(c.get("LastModified")))
            for c in resp.get("Contents", [])
            if c.get("Key")
        ]
        next_token = resp.get("NextContinuationToken") if resp.get("IsTruncated") else None
        return ListPage(prefixes=prefixes, objects=objects, next_token=next_token)

    def get_object(self, key: str, offset: int = 0) -> BinaryIO:
        kwargs: dict[str, Any] = {"Bucket": self._bucket, "Key": key}
        if offset > 0:
            kwargs["Range"] = f"bytes={offset}-"
        logger.debug("get_object key=%s range=%s", key, kwargs.get("Range"))
        return self._client.get_object(**kwargs)["Body"]

    def put_object(self, key: str, body: BinaryIO, part_size: int | None = None) -> None:
        config = TransferConfig(use_threads=False, max_concurrency=1)
        if part_size:
            config = TransferConfig(
                multipart_threshold=part_size,
                multipart_chunksize=part_size,
                use_threads=False,
                max_concurrency=1,
            )
        logger.debug("put_object key=%s part_size=%s", key, part_size)
        self._client.upload_fileobj(body, self._bucket, key, Config=config)

    def delete_object(self, key: str) -> None:
        self._client.delete_object(Bucket=self._bucket, Key=key)

    def copy_object(self, src: str, dst: str) -> None:
        self._client.copy_object(
            Bucket=self._bucket,
            Key=dst,
            CopySource={"Bucket": self._bucket, "Key": src},
        )
