"""S3 (and S3-compatible) object storage handles.

    S3 has no directories, only keys. A directory here is a key prefix ending
    in a slash: `s3://bucket/data/` covers every key starting with `data/`.
    Creating a directory writes a zero-length marker object at the prefix, and
    deleting one removes every object under the prefix. A directory also
    exists if objects exist below it without a marker.
"""
import functools
import re
import tempfile
import typing as t
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import (
    BotoCoreError, ClientError, ConnectTimeoutError, EndpointConnectionError, NoCredentialsError, ReadTimeoutError
)
from treestore.exc import (
    StorageError, NotFoundError, AlreadyExistsError, BackendUnavailableError, UnsupportedPathError
)
from .base import BaseFile, BaseDirectory, AccessType
from .log import StorageLog
from . import paths


DEFAULT_SPOOL_SIZE = 8388608

_DELETE_BATCH_SIZE = 1000

_URL_PATTERN = re.compile(r"^([a-z0-9+.\-]+://)([^/]*)/?(.*)$", re.IGNORECASE)

_NOT_FOUND_CODES = ("404", "NoSuchKey", "NoSuchBucket", "NotFound")
_EXISTS_CODES = ("BucketAlreadyExists", "BucketAlreadyOwnedByYou")
_ACCESS_CODES = ("403", "AccessDenied", "InvalidAccessKeyId", "SignatureDoesNotMatch", "ExpiredToken")
_TRANSIENT_CODES = ("500", "503", "InternalError", "ServiceUnavailable", "SlowDown", "RequestTimeout")


def _error_code(ex: ClientError) -> str:
    return str(ex.response.get("Error", {}).get("Code", ""))


def wrap_s3_errors(cb):
    """Converts boto3/botocore errors into StorageErrors with recoverable set properly."""

    @functools.wraps(cb)
    def _inner(*args, **kwargs):
        try:
            return cb(*args, **kwargs)
        except ClientError as ex:
            code = _error_code(ex)
            if code in _NOT_FOUND_CODES:
                raise NotFoundError(f"S3: Resource not found: {str(ex)}", 2004) from ex
            elif code in _EXISTS_CODES:
                raise AlreadyExistsError(f"S3: Resource already exists: {str(ex)}", 2005) from ex
            elif code in _ACCESS_CODES:
                raise StorageError(f"S3: Access denied: {str(ex)}", 2003, True) from ex
            elif code in _TRANSIENT_CODES:
                raise StorageError(f"S3: Service error: {str(ex)}", 2006, True) from ex
            raise StorageError(f"S3: {ex.__class__.__name__}: {str(ex)}", 2000) from ex
        except (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError) as ex:
            raise StorageError(f"S3: Connection error: {ex.__class__.__name__}: {str(ex)}", 2001, True) from ex
        except NoCredentialsError as ex:
            raise BackendUnavailableError(f"S3: No credentials available: {str(ex)}", 2007) from ex
        except S3UploadFailedError as ex:
            raise StorageError(f"S3: Upload failed: {str(ex)}", 2008, True) from ex
        except BotoCoreError as ex:
            raise StorageError(f"S3: {ex.__class__.__name__}: {str(ex)}", 2000) from ex

    return _inner


def parse_s3_url(full_name: str) -> tuple[str, str, str]:
    """Split an S3 URL into (root, bucket, key)."""
    match = _URL_PATTERN.match(full_name)
    if match is None or paths.scheme(full_name) not in paths.OBJECT_STORE_SCHEMES:
        raise UnsupportedPathError(f"Not an object storage URL: [{full_name}]")
    if not match.group(2):
        raise UnsupportedPathError(f"Missing bucket name: [{full_name}]")
    return match.group(1), match.group(2), match.group(3)


class S3WriteStream:
    """Write-only stream that uploads to S3 when it is closed.

        Content is spooled locally (in memory, then on disk once it grows
        past spool_size) and nothing reaches S3 until close().
    """

    def __init__(self, client, bucket: str, key: str, spool_size: int = DEFAULT_SPOOL_SIZE):
        self._client = client
        self._bucket = bucket
        self._key = key
        self._buffer = tempfile.SpooledTemporaryFile(max_size=spool_size)
        self._closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def readable(self) -> bool:
        return False

    def writable(self) -> bool:
        return True

    def write(self, data: bytes) -> int:
        return self._buffer.write(data)

    def flush(self):
        self._buffer.flush()

    @wrap_s3_errors
    def close(self):
        if self._closed:
            return
        self._closed = True
        try:
            self._buffer.seek(0)
            self._client.upload_fileobj(self._buffer, self._bucket, self._key)
        finally:
            self._buffer.close()


class _S3Entry:

    def _init_location(self, client, full_name: str):
        self._client = client
        self._root, self._bucket, self._key = parse_s3_url(full_name)

    @property
    def client(self):
        if self._client is None:
            raise BackendUnavailableError(f"No S3 client configured for [{self}]")
        return self._client

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def key(self) -> str:
        return self._key

    def _url(self, key: str) -> str:
        return f"{self._root}{self._bucket}/{key}"


class S3Directory(_S3Entry, BaseDirectory):
    """Pseudo-directory made from an S3 key prefix."""

    def __init__(self, client, full_name: str, log: t.Optional[StorageLog] = None):
        if not full_name.endswith("/"):
            full_name += "/"
        super().__init__(full_name, log)
        self._init_location(client, full_name)
        if self._key == "":
            self._name = self._bucket
            self._parent = None
        else:
            trimmed = full_name[:-1]
            last_slash = trimmed.rfind("/")
            self._name = trimmed[last_slash + 1:]
            self._parent = trimmed[:last_slash + 1]

    @wrap_s3_errors
    def exists(self) -> bool:
        if self._key == "":
            try:
                self.client.head_bucket(Bucket=self._bucket)
                return True
            except ClientError as ex:
                if _error_code(ex) in _NOT_FOUND_CODES:
                    return False
                raise
        response = self.client.list_objects_v2(Bucket=self._bucket, Prefix=self._key, MaxKeys=1)
        return response.get("KeyCount", 0) > 0

    @wrap_s3_errors
    def _create(self):
        if self._key == "":
            args = {"Bucket": self._bucket}
            region = self.client.meta.region_name
            if region and region != "us-east-1":
                args["CreateBucketConfiguration"] = {"LocationConstraint": region}
            self.client.create_bucket(**args)
        else:
            self.client.put_object(Bucket=self._bucket, Key=self._key, Body=b"")

    @wrap_s3_errors
    def _delete(self, recurse: bool):
        # S3 has no recursive delete; every key under the prefix is removed
        client = self.client
        paginator = client.get_paginator("list_objects_v2")
        keys = []
        for page in paginator.paginate(Bucket=self._bucket, Prefix=self._key):
            keys.extend(obj["Key"] for obj in page.get("Contents", []))
        for i in range(0, len(keys), _DELETE_BATCH_SIZE):
            objects = [{"Key": key} for key in keys[i:i + _DELETE_BATCH_SIZE]]
            response = client.delete_objects(Bucket=self._bucket, Delete={"Objects": objects, "Quiet": True})
            errors = response.get("Errors", [])
            if errors:
                raise StorageError(f"S3: Could not delete [{self._url(errors[0]['Key'])}]: {errors[0].get('Message')}", 2009)

    @wrap_s3_errors
    def _list_children(self) -> tuple[list[str], list[str]]:
        dir_keys = []
        file_keys = []
        paginator = self.client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self._bucket, Prefix=self._key, Delimiter="/"):
            for prefix in page.get("CommonPrefixes", []):
                relative = prefix["Prefix"][len(self._key):]
                if relative.count("/") == 1 and relative.endswith("/") and relative != "/":
                    dir_keys.append(prefix["Prefix"])
            for obj in page.get("Contents", []):
                relative = obj["Key"][len(self._key):]
                if relative and "/" not in relative:
                    file_keys.append(obj["Key"])
        return dir_keys, file_keys

    def get_directories(self) -> list[BaseDirectory]:
        dir_keys, _ = self._list_children()
        return [S3Directory(self._client, self._url(key), self.log) for key in dir_keys]

    def get_files(self) -> list[BaseFile]:
        _, file_keys = self._list_children()
        return [S3File(self._client, self._url(key), self.log) for key in file_keys]

    def create_file(self, full_name: str) -> BaseFile:
        return S3File(self._client, full_name, self.log)

    def create_directory(self, full_name: str) -> BaseDirectory:
        return S3Directory(self._client, full_name, self.log)

    def path_combine(self, *paths_: t.Optional[str]) -> str:
        return paths.path_combine("/", *paths_)


class S3File(_S3Entry, BaseFile):
    """Single S3 object."""

    def __init__(self, client, full_name: str, log: t.Optional[StorageLog] = None):
        if full_name.endswith("/"):
            raise UnsupportedPathError(f"Object storage file names cannot end with a slash: [{full_name}]")
        super().__init__(full_name, log)
        self._init_location(client, full_name)
        if self._key == "":
            raise UnsupportedPathError(f"Missing object key: [{full_name}]")
        self._name = full_name[full_name.rfind("/") + 1:]

    @wrap_s3_errors
    def exists(self) -> bool:
        try:
            self.client.head_object(Bucket=self._bucket, Key=self._key)
            return True
        except ClientError as ex:
            if _error_code(ex) in _NOT_FOUND_CODES:
                return False
            raise

    @wrap_s3_errors
    def _create(self):
        # the empty object makes the file visible before the write stream is committed
        self.client.put_object(Bucket=self._bucket, Key=self._key, Body=b"")
        return S3WriteStream(self.client, self._bucket, self._key)

    @wrap_s3_errors
    def _delete(self):
        if self.exists():
            self.client.delete_object(Bucket=self._bucket, Key=self._key)

    @wrap_s3_errors
    def _open_stream(self, access: AccessType):
        if access == AccessType.READ:
            return self.client.get_object(Bucket=self._bucket, Key=self._key)["Body"]
        return S3WriteStream(self.client, self._bucket, self._key)

    @wrap_s3_errors
    def _close_stream(self, stream):
        stream.close()

    def create_file(self, full_name: str) -> BaseFile:
        return S3File(self._client, full_name, self.log)

    def create_directory(self, full_name: str) -> BaseDirectory:
        return S3Directory(self._client, full_name, self.log)
