"""
runtime — единственная точка, где определяется:
- какое хранилище объектов стоит за файловой системой (S3 или локальный каталог)
- с какими настройками (FsConfig) создаётся BucketFs

Выбор:
- BUCKETFS_BUCKET задан -> S3ObjectStore (boto3), опционально
  BUCKETFS_ENDPOINT_URL (S3-совместимые сервисы) и BUCKETFS_REGION
- иначе -> LocalObjectStore(BUCKETFS_LOCAL_ROOT или ./.bucketfs)

Доменный код не должен создавать клиентов boto3 напрямую.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import boto3
from botocore.config import Config

from bucketfs.base.filestore import BucketFs, FileStore, FsConfig
from bucketfs.base.objstore import LocalObjectStore, ObjectStore, S3ObjectStore

logger = logging.getLogger(__name__)

ENV_PREFIX = "BUCKETFS_"
DEFAULT_LOCAL_ROOT = ".bucketfs"


@dataclass(frozen=True)
class Providers:
    filestore: FileStore
    objstore: ObjectStore
    config: FsConfig
    source: str  # "s3" | "local"


_PROVIDERS: Providers | None = None


def _env(name: str) -> str | None:
    v = os.getenv(f"{ENV_PREFIX}{name}")
    if v is None or not v.strip():
        return None
    return v.strip()


def _client_config(config: FsConfig) -> Config:
    """Конфиг botocore: таймауты соединения/чтения следуют FsConfig.timeout."""
    if config.timeout is None:
        return Config(retries={"mode": "standard"})
    return Config(
        connect_timeout=config.timeout,
        read_timeout=config.timeout,
        retries={"mode": "standard"},
    )


def _build_s3_providers(bucket: str, config: FsConfig) -> Providers:
    client = boto3.client(
        "s3",
        endpoint_url=_env("ENDPOINT_URL"),
        region_name=_env("REGION"),
        config=_client_config(config),
    )
    store = S3ObjectStore(client, bucket)
    return Providers(filestore=BucketFs(store, config), objstore=store, config=config, source="s3")


def _build_local_providers(config: FsConfig) -> Providers:
    """Локальное хранилище (вне облака)."""
    root = _env("LOCAL_ROOT") or DEFAULT_LOCAL_ROOT
    store = LocalObjectStore(root)
    return Providers(filestore=BucketFs(store, config), objstore=store, config=config, source="local")


def get_providers(force_reload: bool = False) -> Providers:
    """Возвращает активные провайдеры. Кэшируется на время процесса."""
    global _PROVIDERS
    if _PROVIDERS is not None and not force_reload:
        return _PROVIDERS

    config = FsConfig.from_env(prefix=ENV_PREFIX)
    bucket = _env("BUCKET")
    if bucket:
        _PROVIDERS = _build_s3_providers(bucket, config)
        logger.info("Providers loaded from s3 (bucket=%s, prefix=%r)", bucket, config.prefix)
    else:
        _PROVIDERS = _build_local_providers(config)
        logger.info("Providers loaded from local (root=%s)", _PROVIDERS.objstore.root)
    return _PROVIDERS


def get_filestore() -> FileStore:
    return get_providers().filestore


def get_objstore() -> ObjectStore:
    return get_providers().objstore
