"""
Object store adapters for raw document bytes.

Exports:
  - ObjectStore: Abstract read interface
  - S3ObjectStore: boto3-backed store for s3:// URIs
  - LocalObjectStore: Filesystem store for file:// and relative paths
  - get_object_store(): Factory dispatching on settings
"""

from ragengine.boundary.object_store.object_store import (
    LocalObjectStore,
    ObjectStore,
    RoutingObjectStore,
    S3ObjectStore,
    get_object_store,
)

__all__ = [
    "ObjectStore",
    "S3ObjectStore",
    "LocalObjectStore",
    "RoutingObjectStore",
    "get_object_store",
]
