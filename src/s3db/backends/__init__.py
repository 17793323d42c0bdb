"""s3db storage backends.

Backends:
- S3Backend: AWS S3 via boto3 (production)
- InMemoryBackend: process-local dict (dev/test)
"""

from s3db.backends.base import MAX_PAGE_SIZE, StorageBackend
from s3db.backends.memory import InMemoryBackend
from s3db.backends.s3 import S3Backend

__all__ = [
    "MAX_PAGE_SIZE",
    "StorageBackend",
    "InMemoryBackend",
    "S3Backend",
]
