from bucketfs.base.objstore.base import ListPage, ObjectInfo, ObjectStore
from bucketfs.base.objstore.local import LocalObjectStore
from bucketfs.base.objstore.s3 import S3ObjectStore

__all__ = ["ObjectStore", "ObjectInfo", "ListPage", "LocalObjectStore", "S3ObjectStore"]
