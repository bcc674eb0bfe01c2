"""
S3 file storage backend implementation

This module maps file storage operations onto keys of a single bucket in AWS S3
or an S3-compatible service (e.g., LocalStack, MinIO). Object stores have no
directories, so directory operations are emulated:

- readDir lists every key under a prefix, following continuation tokens
- removeDirAll deletes every listed key in batches of at most 1000 keys
- createDirAll creates the bucket itself
"""

import logging
from typing import Any, Dict, List, Tuple

from botocore.exceptions import BotoCoreError, ClientError
from botocore.exceptions import ConnectionError as BotoConnectionError
from botocore.exceptions import HTTPClientError

from ..contract import AbstractFileStorage
from ..exceptions import (
    StorageBatchDeleteError,
    StorageNotFoundError,
    StorageOperationError,
    StoragePermissionError,
    StorageTransientError,
)
from ..utils import batched, validatePath

logger = logging.getLogger(__name__)

# S3 DeleteObjects accepts at most 1000 keys per request
MAX_DELETE_BATCH_SIZE = 1000

# S3 rejects an explicit location constraint for this region
DEFAULT_S3_REGION = "us-east-1"

NOT_FOUND_CODES = frozenset({"NoSuchKey", "NoSuchBucket", "NotFound", "404"})
PERMISSION_CODES = frozenset({"AccessDenied", "AllAccessDisabled", "InvalidAccessKeyId", "SignatureDoesNotMatch", "403"})
TRANSIENT_CODES = frozenset(
    {
        "SlowDown",
        "Throttling",
        "ThrottlingException",
        "RequestTimeout",
        "RequestTimeTooSkewed",
        "InternalError",
        "ServiceUnavailable",
        "500",
        "502",
        "503",
        "504",
    }
)
BUCKET_EXISTS_CODES = frozenset({"BucketAlreadyExists", "BucketAlreadyOwnedByYou"})


def getErrorCode(error: ClientError) -> str:
    """Get the S3 error code of a ClientError, empty string if absent."""
    return str(error.response.get("Error", {}).get("Code", ""))


def wrapS3Error(error: Exception, message: str) -> StorageOperationError:
    """
    Convert a boto3/botocore error into the storage operation error hierarchy.

    Args:
        error: The original exception
        message: Description of the failed operation

    Returns:
        StorageNotFoundError, StoragePermissionError, StorageTransientError
        or StorageOperationError
    """
    fullMessage = f"{message}: {error}"
    if isinstance(error, ClientError):
        code = getErrorCode(error)
        if code in NOT_FOUND_CODES:
            return StorageNotFoundError(fullMessage, originalError=error)
        if code in PERMISSION_CODES:
            return StoragePermissionError(fullMessage, originalError=error)
        if code in TRANSIENT_CODES:
            return StorageTransientError(fullMessage, originalError=error)
    elif isinstance(error, (BotoConnectionError, HTTPClientError)):
        return StorageTransientError(fullMessage, originalError=error)
    return StorageOperationError(fullMessage, originalError=error)


class S3FileStorage(AbstractFileStorage):
    """
    S3-based file storage backend using boto3.

    Paths are used verbatim as object keys. All keys live in one bucket.

    Behaviour differences from the local backend:
    - write() creates a missing object
    - createFile() is a no-op, it does not create an empty object
    - removeFile() succeeds for a missing key (S3 DeleteObject semantics)
    - createDirAll() creates the bucket, whatever the path
    - readDir() returns full keys under the prefix, not only direct children

    Both readFile() and write() hold the whole object in memory.

    Args:
        client: boto3 S3 client
        bucket: Bucket name
        region: Region name, used as the bucket location constraint
        validatePaths: Reject keys with traversal sequences
    """

    def __init__(self, client: Any, bucket: str, region: str, validatePaths: bool = False):
        self.client = client
        self.bucket = bucket
        self.region = region
        self.validatePaths = validatePaths

    @property
    def backendName(self) -> str:
        return "s3"

    def _pathToKey(self, path: str) -> str:
        if self.validatePaths:
            validatePath(path)
        return path

    def _dirToPrefix(self, path: str) -> str:
        # Empty prefix addresses the whole bucket
        if self.validatePaths and path:
            validatePath(path)
        return path

    def readFile(self, path: str) -> bytes:
        key = self._pathToKey(path)
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            data = response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            raise wrapS3Error(e, f"Failed to get object '{key}' from bucket '{self.bucket}'")
        logger.debug(f"Read {len(data)} bytes from s3://{self.bucket}/{key}")
        return data

    def write(self, path: str, data: bytes) -> None:
        """Upload the whole buffer as the object body in a single PUT."""
        key = self._pathToKey(path)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType="application/octet-stream",
            )
        except (ClientError, BotoCoreError) as e:
            raise wrapS3Error(e, f"Failed to put object '{key}' to bucket '{self.bucket}'")
        logger.debug(f"Wrote {len(data)} bytes to s3://{self.bucket}/{key}")

    def createFile(self, path: str) -> None:
        """No-op: objects do not need to be pre-created before write()."""
        key = self._pathToKey(path)
        logger.debug(f"createFile is a no-op for s3://{self.bucket}/{key}")

    def removeFile(self, path: str) -> None:
        """Delete the object. A missing key is not reported as an error."""
        key = self._pathToKey(path)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise wrapS3Error(e, f"Failed to delete object '{key}' from bucket '{self.bucket}'")
        logger.debug(f"Removed s3://{self.bucket}/{key}")

    def copy(self, sourcePath: str, targetPath: str) -> None:
        """Server-side copy within the bucket."""
        sourceKey = self._pathToKey(sourcePath)
        targetKey = self._pathToKey(targetPath)
        try:
            self.client.copy_object(
                CopySource=f"{self.bucket}/{sourceKey}",
                Bucket=self.bucket,
                Key=targetKey,
            )
        except (ClientError, BotoCoreError) as e:
            raise wrapS3Error(e, f"Failed to copy object '{sourceKey}' to '{targetKey}' in bucket '{self.bucket}'")
        logger.debug(f"Copied s3://{self.bucket}/{sourceKey} to s3://{self.bucket}/{targetKey}")

    def readDir(self, path: str) -> List[str]:
        """
        List every key starting with the path.

        A single ListObjectsV2 response holds at most one page of keys, so
        continuation tokens are followed until the listing is exhausted.
        """
        prefix = self._dirToPrefix(path)
        listParams: Dict[str, Any] = {"Bucket": self.bucket, "Prefix": prefix}
        keys: List[str] = []
        pages = 0

        try:
            while True:
                response = self.client.list_objects_v2(**listParams)
                pages += 1
                keys.extend(obj["Key"] for obj in response.get("Contents", []))

                if not response.get("IsTruncated"):
                    break
                token = response.get("NextContinuationToken")
                if not token:
                    raise StorageOperationError(
                        f"Truncated listing of prefix '{prefix}' in bucket '{self.bucket}' has no continuation token"
                    )
                listParams["ContinuationToken"] = token
        except (ClientError, BotoCoreError) as e:
            raise wrapS3Error(e, f"Failed to list objects with prefix '{prefix}' in bucket '{self.bucket}'")

        logger.debug(f"Listed {len(keys)} keys with prefix '{prefix}' in {pages} page(s)")
        return keys

    def createDirAll(self, path: str) -> None:
        """
        Create the bucket.

        There are no directories in S3, so "directory" creation is approximated
        at the coarsest granularity: the path does not matter. An already
        existing bucket is success.
        """
        createParams: Dict[str, Any] = {"Bucket": self.bucket}
        if self.region and self.region != DEFAULT_S3_REGION:
            createParams["CreateBucketConfiguration"] = {"LocationConstraint": self.region}

        try:
            self.client.create_bucket(**createParams)
            logger.info(f"Created bucket '{self.bucket}' in region '{self.region}' for path '{path}', dood!")
        except ClientError as e:
            if getErrorCode(e) in BUCKET_EXISTS_CODES:
                logger.debug(f"Bucket '{self.bucket}' already exists")
                return
            raise wrapS3Error(e, f"Failed to create bucket '{self.bucket}'")
        except BotoCoreError as e:
            raise wrapS3Error(e, f"Failed to create bucket '{self.bucket}'")

    def removeDirAll(self, path: str) -> None:
        """
        Delete every key under the prefix.

        The listing is exhaustive, then keys are deleted in batches of at most
        MAX_DELETE_BATCH_SIZE. A failing batch does not stop the following ones;
        if any key was not deleted a StorageBatchDeleteError is raised at the end
        with the deleted and failed keys.
        """
        keys = self.readDir(path)
        if not keys:
            logger.debug(f"No keys with prefix '{path}' in bucket '{self.bucket}', nothing to remove")
            return

        deletedKeys: List[str] = []
        failedKeys: List[Tuple[str, str]] = []
        firstError: Exception | None = None

        for batch in batched(keys, MAX_DELETE_BATCH_SIZE):
            try:
                response = self.client.delete_objects(
                    Bucket=self.bucket,
                    Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
                )
            except (ClientError, BotoCoreError) as e:
                firstError = firstError or e
                failedKeys.extend((key, str(e)) for key in batch)
                continue

            # Quiet mode only reports failures
            batchErrors = {
                err.get("Key", ""): err.get("Message", err.get("Code", "")) for err in response.get("Errors", [])
            }
            for key in batch:
                if key in batchErrors:
                    failedKeys.append((key, batchErrors[key]))
                else:
                    deletedKeys.append(key)

        if failedKeys:
            raise StorageBatchDeleteError(
                f"Failed to delete {len(failedKeys)} of {len(keys)} objects with prefix '{path}' "
                f"from bucket '{self.bucket}'",
                deletedKeys=deletedKeys,
                failedKeys=failedKeys,
                originalError=firstError,
            )

        logger.debug(f"Removed {len(deletedKeys)} keys with prefix '{path}' from bucket '{self.bucket}'")
