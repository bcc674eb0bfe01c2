from .local import LocalFileStorage
from .s3 import MAX_DELETE_BATCH_SIZE, S3FileStorage

__all__ = ["LocalFileStorage", "S3FileStorage", "MAX_DELETE_BATCH_SIZE"]
