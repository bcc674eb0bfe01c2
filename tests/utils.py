"""
Test utilities for file storage tests.

Provides an in-memory stand-in for a boto3 S3 client which honours the
parts of the S3 API the backend depends on: ListObjectsV2 pagination,
the DeleteObjects batch limit and bucket creation errors.
"""

import io
from typing import Any, Dict, List, Optional, Set

from botocore.exceptions import ClientError


def makeClientError(code: str, operation: str, message: str = "") -> ClientError:
    """Create a botocore ClientError with the given S3 error code."""
    return ClientError({"Error": {"Code": code, "Message": message or code}}, operation)


class FakeS3Client:
    """
    In-memory S3 client.

    Args:
        pageSize: Maximum keys per ListObjectsV2 response (S3 default is 1000)
        maxDeleteBatch: Maximum keys per DeleteObjects request (S3 limit is 1000)
        existingBuckets: Buckets which already exist
        ownedBuckets: Buckets which already exist and are owned by the caller
    """

    def __init__(
        self,
        pageSize: int = 1000,
        maxDeleteBatch: int = 1000,
        existingBuckets: Optional[Set[str]] = None,
        ownedBuckets: Optional[Set[str]] = None,
    ):
        self.pageSize = pageSize
        self.maxDeleteBatch = maxDeleteBatch
        self.existingBuckets = set(existingBuckets or set())
        self.ownedBuckets = set(ownedBuckets or set())
        self.objects: Dict[str, Dict[str, bytes]] = {}
        self.listCalls: List[Dict[str, Any]] = []
        self.deleteBatchSizes: List[int] = []
        self.createBucketCalls: List[Dict[str, Any]] = []

    def _bucket(self, name: str) -> Dict[str, bytes]:
        return self.objects.setdefault(name, {})

    def put_object(self, Bucket: str, Key: str, Body: bytes, **kwargs) -> Dict[str, Any]:
        self._bucket(Bucket)[Key] = bytes(Body)
        return {}

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        bucket = self._bucket(Bucket)
        if Key not in bucket:
            raise makeClientError("NoSuchKey", "GetObject", "The specified key does not exist.")
        return {"Body": io.BytesIO(bucket[Key])}

    def delete_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        # S3 does not report a missing key on delete
        self._bucket(Bucket).pop(Key, None)
        return {}

    def copy_object(self, CopySource: str, Bucket: str, Key: str) -> Dict[str, Any]:
        sourceBucket, _, sourceKey = CopySource.partition("/")
        source = self._bucket(sourceBucket)
        if sourceKey not in source:
            raise makeClientError("NoSuchKey", "CopyObject", "The specified key does not exist.")
        self._bucket(Bucket)[Key] = source[sourceKey]
        return {}

    def list_objects_v2(self, Bucket: str, Prefix: str = "", ContinuationToken: Optional[str] = None):
        self.listCalls.append({"Bucket": Bucket, "Prefix": Prefix, "ContinuationToken": ContinuationToken})
        keys = sorted(k for k in self._bucket(Bucket) if k.startswith(Prefix))
        start = int(ContinuationToken) if ContinuationToken else 0
        page = keys[start : start + self.pageSize]

        response: Dict[str, Any] = {"KeyCount": len(page), "IsTruncated": start + self.pageSize < len(keys)}
        if page:
            response["Contents"] = [{"Key": k, "Size": len(self._bucket(Bucket)[k])} for k in page]
        if response["IsTruncated"]:
            response["NextContinuationToken"] = str(start + self.pageSize)
        return response

    def delete_objects(self, Bucket: str, Delete: Dict[str, Any]) -> Dict[str, Any]:
        objects = Delete.get("Objects", [])
        if not objects or len(objects) > self.maxDeleteBatch:
            raise makeClientError("MalformedXML", "DeleteObjects")
        self.deleteBatchSizes.append(len(objects))
        bucket = self._bucket(Bucket)
        for obj in objects:
            bucket.pop(obj["Key"], None)
        return {}

    def create_bucket(self, Bucket: str, **kwargs) -> Dict[str, Any]:
        self.createBucketCalls.append({"Bucket": Bucket, **kwargs})
        if Bucket in self.ownedBuckets:
            raise makeClientError("BucketAlreadyOwnedByYou", "CreateBucket")
        if Bucket in self.existingBuckets:
            raise makeClientError("BucketAlreadyExists", "CreateBucket")
        self.ownedBuckets.add(Bucket)
        self._bucket(Bucket)
        return {}
