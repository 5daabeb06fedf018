from bucketfs.base.filestore.base import FileStore
from bucketfs.base.filestore.bucket import BucketFs
from bucketfs.base.filestore.config import FsConfig
from bucketfs.base.filestore.errors import (
    AlreadyExistsError,
    DirectoryNotEmptyError,
    FsError,
    InvalidOperationError,
    IsDirectoryError,
    NotDirectoryError,
    NotFoundError,
    PartialRenameError,
    PipeClosedError,
    StoreTimeoutError,
)
from bucketfs.base.filestore.file import BucketDirectory, BucketFile
from bucketfs.base.filestore.types import FileInfo

__all__ = [
    "FileStore",
    "BucketFs",
    "BucketFile",
    "BucketDirectory",
    "FsConfig",
    "FileInfo",
    "FsError",
    "NotFoundError",
    "AlreadyExistsError",
    "IsDirectoryError",
    "NotDirectoryError",
    "DirectoryNotEmptyError",
    "InvalidOperationError",
    "StoreTimeoutError",
    "PipeClosedError",
    "PartialRenameError",
]
