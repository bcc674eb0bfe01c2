"""
Tests for storage builders and backend selection, dood!

This module tests that builders validate settings, construct the right
backend and hand it back typed as AbstractFileStorage.
"""

from unittest.mock import Mock, patch

import pytest
from botocore.exceptions import EndpointConnectionError

from filestorage.backends.local import LocalFileStorage
from filestorage.backends.s3 import S3FileStorage
from filestorage.builder import (
    Builder,
    LocalFileStorageBuilder,
    S3FileStorageBuilder,
    StorageType,
    buildStorage,
    buildStorageFromConfig,
)
from filestorage.config.settings import LocalConfig, S3Config
from filestorage.contract import AbstractFileStorage
from filestorage.exceptions import StorageBuildError
from tests.utils import makeClientError

STORAGE_ENV_VARS = ["ROOT_PATH", "BUCKET", "REGION", "ENDPOINT", "AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY"]


@pytest.fixture(autouse=True)
def cleanEnv(monkeypatch):
    """Remove storage environment variables, dood!"""
    for name in STORAGE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mockBoto3Client():
    """Patch boto3.client used by the builder, dood!"""
    with patch("filestorage.builder.boto3.client") as mockClientFactory:
        mockClientFactory.return_value = Mock()
        yield mockClientFactory


class TestStorageType:
    """Test backend kind parsing, dood!"""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("local", StorageType.LOCAL),
            ("fs", StorageType.LOCAL),
            ("LOCAL", StorageType.LOCAL),
            ("object-store", StorageType.OBJECT_STORE),
            ("s3", StorageType.OBJECT_STORE),
            (StorageType.OBJECT_STORE, StorageType.OBJECT_STORE),
        ],
    )
    def testFromStr(self, value, expected):
        assert StorageType.fromStr(value) is expected

    def testUnknownTypeRaisesBuildError(self):
        with pytest.raises(StorageBuildError, match="Unknown storage type: ftp"):
            StorageType.fromStr("ftp")


class TestLocalFileStorageBuilder:
    """Test LocalFileStorageBuilder, dood!"""

    def testBuild(self, tmp_path):
        """Test building a local backend on an existing directory"""
        storage = LocalFileStorageBuilder.withConfig(LocalConfig(rootPath=str(tmp_path))).build()

        assert isinstance(storage, LocalFileStorage)
        assert storage.rootPath == str(tmp_path)

    def testBuildWithEmptyRoot(self):
        """Test that empty root is accepted"""
        storage = LocalFileStorageBuilder.withConfig(LocalConfig()).build()

        assert isinstance(storage, AbstractFileStorage)

    def testBuildWithMissingRootSucceeds(self, tmp_path):
        """Test that a missing root is accepted, failures surface on operations"""
        storage = LocalFileStorageBuilder.withConfig(LocalConfig(rootPath=str(tmp_path / "later"))).build()

        assert isinstance(storage, LocalFileStorage)

    def testBuildWithFileAsRootFails(self, tmp_path):
        """Test that a regular file as root raises StorageBuildError"""
        rootFile = tmp_path / "file.txt"
        rootFile.write_text("test")

        with pytest.raises(StorageBuildError, match="is not a directory"):
            LocalFileStorageBuilder.withConfig(LocalConfig(rootPath=str(rootFile))).build()

    def testValidatePathsPassedThrough(self, tmp_path):
        storage = LocalFileStorageBuilder.withConfig(LocalConfig(rootPath=str(tmp_path), validatePaths=True)).build()

        assert storage.validatePaths is True


class TestS3FileStorageBuilder:
    """Test S3FileStorageBuilder, dood!"""

    def testBuild(self, mockBoto3Client):
        """Test building with default settings"""
        storage = S3FileStorageBuilder.withConfig(S3Config()).build()

        assert isinstance(storage, S3FileStorage)
        assert storage.bucket == "file-storage-bucket"
        assert storage.region == "us-west-2"
        assert storage.client is mockBoto3Client.return_value

        mockBoto3Client.assert_called_once()
        args, kwargs = mockBoto3Client.call_args
        assert args == ("s3",)
        assert kwargs["endpoint_url"] == "http://localhost:4566"
        assert kwargs["region_name"] == "us-west-2"
        assert kwargs["aws_access_key_id"] is None
        assert kwargs["aws_secret_access_key"] is None
        assert kwargs["config"].s3 == {"addressing_style": "path"}

    def testBuildWithCredentials(self, mockBoto3Client):
        """Test that explicit credentials are passed to boto3"""
        config = S3Config(keyId="key-id", keySecret="key-secret")

        S3FileStorageBuilder.withConfig(config).build()

        kwargs = mockBoto3Client.call_args.kwargs
        assert kwargs["aws_access_key_id"] == "key-id"
        assert kwargs["aws_secret_access_key"] == "key-secret"

    def testEmptyBucketFails(self, mockBoto3Client):
        with pytest.raises(StorageBuildError, match="S3 bucket is not specified"):
            S3FileStorageBuilder.withConfig(S3Config(bucket="")).build()

        mockBoto3Client.assert_not_called()

    def testEmptyRegionFails(self, mockBoto3Client):
        with pytest.raises(StorageBuildError, match="region not found"):
            S3FileStorageBuilder.withConfig(S3Config(region="")).build()

    @pytest.mark.parametrize("endpoint", ["us-west-2", "localhost:4566", "ftp://host"])
    def testInvalidEndpointFails(self, mockBoto3Client, endpoint):
        """Test that endpoint must be an http(s) URL"""
        with pytest.raises(StorageBuildError, match="Invalid S3 endpoint URL"):
            S3FileStorageBuilder.withConfig(S3Config(endpoint=endpoint)).build()

    def testEmptyEndpointUsesDefaultAwsEndpoint(self, mockBoto3Client):
        """Test that empty endpoint leaves endpoint selection to boto3"""
        storage = S3FileStorageBuilder.withConfig(S3Config(endpoint="", region="eu-west-1")).build()

        assert isinstance(storage, S3FileStorage)
        kwargs = mockBoto3Client.call_args.kwargs
        assert kwargs["endpoint_url"] is None
        assert kwargs["region_name"] == "eu-west-1"

    def testBuilderBaseIsAbstract(self):
        """Test that the base builder cannot be instantiated"""
        with pytest.raises(TypeError):
            Builder(LocalConfig())  # type: ignore[abstract]

    def testClientCreationFailure(self, mockBoto3Client):
        """Test that boto3 client failure raises StorageBuildError"""
        mockBoto3Client.side_effect = ValueError("Invalid endpoint")

        with pytest.raises(StorageBuildError, match="Failed to initialize S3 client"):
            S3FileStorageBuilder.withConfig(S3Config()).build()

    def testConnectionCheckSkippedByDefault(self, mockBoto3Client):
        S3FileStorageBuilder.withConfig(S3Config()).build()

        mockBoto3Client.return_value.head_bucket.assert_not_called()

    def testConnectionCheckSuccess(self, mockBoto3Client):
        S3FileStorageBuilder.withConfig(S3Config(checkConnection=True)).build()

        mockBoto3Client.return_value.head_bucket.assert_called_once_with(Bucket="file-storage-bucket")

    def testConnectionCheckMissingBucketAccepted(self, mockBoto3Client):
        """Test that a missing bucket does not fail the build"""
        mockBoto3Client.return_value.head_bucket.side_effect = makeClientError("404", "HeadBucket")

        storage = S3FileStorageBuilder.withConfig(S3Config(checkConnection=True)).build()

        assert isinstance(storage, S3FileStorage)

    def testConnectionCheckForbiddenFails(self, mockBoto3Client):
        mockBoto3Client.return_value.head_bucket.side_effect = makeClientError("403", "HeadBucket")

        with pytest.raises(StorageBuildError, match="Failed to access bucket"):
            S3FileStorageBuilder.withConfig(S3Config(checkConnection=True)).build()

    def testConnectionCheckUnreachableFails(self, mockBoto3Client):
        mockBoto3Client.return_value.head_bucket.side_effect = EndpointConnectionError(
            endpoint_url="http://localhost:4566"
        )

        with pytest.raises(StorageBuildError, match="is unreachable"):
            S3FileStorageBuilder.withConfig(S3Config(checkConnection=True)).build()


class TestBuildStorage:
    """Test the backend selector, dood!"""

    def testBuildLocalFromEnv(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ROOT_PATH", str(tmp_path))

        storage = buildStorage("local")

        assert isinstance(storage, LocalFileStorage)
        assert storage.rootPath == str(tmp_path)

    def testBuildLocalFromConfigFile(self, tmp_path):
        configFile = tmp_path / "config.toml"
        configFile.write_text(f'[storage.local]\nroot-path = "{tmp_path}"\n')

        storage = buildStorage(StorageType.LOCAL, str(configFile))

        assert storage.rootPath == str(tmp_path)

    def testBuildObjectStore(self, mockBoto3Client, monkeypatch):
        monkeypatch.setenv("BUCKET", "env-bucket")

        storage = buildStorage("object-store")

        assert isinstance(storage, S3FileStorage)
        assert storage.bucket == "env-bucket"

    def testBuildUnknownTypeFails(self):
        with pytest.raises(StorageBuildError):
            buildStorage("ftp")


class TestBuildStorageFromConfig:
    """Test building from a ConfigManager, dood!"""

    def testBuildLocal(self, tmp_path):
        configManager = Mock()
        configManager.getStorageConfig.return_value = {"type": "fs"}
        configManager.getLocalConfig.return_value = {"root-path": str(tmp_path)}

        storage = buildStorageFromConfig(configManager)

        assert isinstance(storage, LocalFileStorage)

    def testBuildS3(self, mockBoto3Client):
        configManager = Mock()
        configManager.getStorageConfig.return_value = {"type": "s3"}
        configManager.getS3Config.return_value = {"bucket": "cfg-bucket", "region": "eu-west-1"}

        storage = buildStorageFromConfig(configManager)

        assert isinstance(storage, S3FileStorage)
        assert storage.bucket == "cfg-bucket"
        assert storage.region == "eu-west-1"

    def testMissingTypeFails(self):
        configManager = Mock()
        configManager.getStorageConfig.return_value = {}

        with pytest.raises(StorageBuildError, match="Storage type is not specified"):
            buildStorageFromConfig(configManager)
