from autoinject import injector
from treestore.exc import UnsupportedPathError
from treestore.storage.base import BaseDirectory, BaseFile, StorageEntry
from treestore.storage.clients import StorageClients
from treestore.storage.local import LocalDirectory, LocalFile
from treestore.storage.log import StorageLog
from treestore.storage.paths import PathType, classify
from treestore.storage.s3 import S3Directory, S3File
import typing as t
import pathlib


@injector.injectable_global
class StorageController:
    """Controller class that identifies the correct handle for a given string.

        s3://BUCKET/KEY/ -> S3Directory
        s3://BUCKET/KEY -> S3File
        \\\\SERVER\\SHARE\\PATH\\ or //SERVER/SHARE/PATH/ -> LocalDirectory (network share)
        (path-like, or file://)/ -> LocalDirectory
        (path-like, or file://) -> LocalFile

        Anything else (an unknown URL scheme, an empty path) is rejected with
        UnsupportedPathError.
    """

    clients: StorageClients = None

    @injector.construct
    def __init__(self, log: t.Optional[StorageLog] = None):
        self.log = log or StorageLog()

    def classify(self, path: t.Union[str, pathlib.Path]) -> PathType:
        # pathlib paths carry no trailing separator, so ask the file system
        if isinstance(path, pathlib.Path):
            return PathType.LOCAL_DIRECTORY if path.is_dir() else PathType.LOCAL_FILE
        return classify(path)

    def get_entry(self, path: t.Union[str, pathlib.Path]) -> StorageEntry:
        """Build a file or directory handle, depending on the trailing separator."""
        path_type = self.classify(path)
        if path_type.is_directory():
            return self.get_directory(path)
        return self.get_file(path)

    def get_file(self, path: t.Union[str, pathlib.Path]) -> BaseFile:
        """Build an appropriate file handle for the given path."""
        if isinstance(path, pathlib.Path):
            return LocalFile(path.resolve(), self.log)
        path_type = classify(path)
        if path_type == PathType.OBJECT_FILE:
            return S3File(self.clients.s3, path, self.log)
        elif path_type in (PathType.LOCAL_FILE, PathType.NETWORK_FILE):
            return LocalFile(path, self.log)
        elif path_type.is_directory():
            raise UnsupportedPathError(f"Path [{path}] is a directory, not a file")
        raise UnsupportedPathError(f"Path [{path}] is not a known file type")

    def get_directory(self, path: t.Union[str, pathlib.Path]) -> BaseDirectory:
        """Build an appropriate directory handle for the given path."""
        if isinstance(path, pathlib.Path):
            return LocalDirectory(path.resolve(), self.log)
        path_type = classify(path)
        if path_type == PathType.OBJECT_DIRECTORY:
            return S3Directory(self.clients.s3, path, self.log)
        elif path_type in (PathType.LOCAL_DIRECTORY, PathType.NETWORK_DIRECTORY):
            return LocalDirectory(path, self.log)
        elif path_type.is_file():
            raise UnsupportedPathError(f"Path [{path}] is a file, not a directory")
        raise UnsupportedPathError(f"Path [{path}] is not a known directory type")

    def create_file(self, path: str, overwrite: bool = True) -> BaseFile:
        """Create a file and close the stream that creating it opened."""
        file = self.get_file(path)
        file.create(overwrite)
        file.close_stream()
        return file

    def create_directory(self, path: str, fail_if_exists: bool = False) -> BaseDirectory:
        return self.get_directory(path).create(fail_if_exists)

    def delete(self, path: str, recurse: bool = True, stop_on_error: bool = True, verbose: bool = True):
        entry = self.get_entry(path)
        if isinstance(entry, BaseDirectory):
            entry.delete(recurse, stop_on_error, verbose)
        else:
            entry.delete(stop_on_error, verbose)

    def exists(self, path: str) -> bool:
        return self.get_entry(path).exists()
