"""Local file and directory handles"""
import errno
import functools
import os
import pathlib
import shutil
import typing as t
from treestore.exc import StorageError, NotFoundError, AlreadyExistsError, NotEmptyError
from .base import BaseFile, BaseDirectory, AccessType
from .log import StorageLog
from . import paths


def local_file_error_wrap(cb):
    """Converts typical local file-system errors into StorageErrors with recoverable set properly."""

    @functools.wraps(cb)
    def _inner(*args, **kwargs):
        try:
            return cb(*args, **kwargs)
        except FileNotFoundError as ex:
            raise NotFoundError(f"Local file not found: {ex.filename}") from ex
        except FileExistsError as ex:
            raise AlreadyExistsError(f"Local file already exists: {ex.filename}") from ex
        except PermissionError as ex:
            raise StorageError(f"Access to local file denied: {ex.filename}", 1003, True) from ex
        except IsADirectoryError as ex:
            raise StorageError(f"Local file is a directory: {ex.filename}", 1004) from ex
        except NotADirectoryError as ex:
            raise StorageError(f"Local directory is not a directory: {ex.filename}", 1005) from ex
        except OSError as ex:
            if ex.errno == errno.ENOTEMPTY:
                raise NotEmptyError(f"Local directory is not empty: {ex.filename}") from ex
            raise StorageError(f"Exception processing local file: {ex.__class__.__name__}: {str(ex)}", 1010) from ex

    return _inner


def _local_path(full_name: t.Union[str, pathlib.Path]) -> str:
    return os.path.abspath(os.path.expanduser(paths.strip_file_scheme(str(full_name))))


class LocalDirectory(BaseDirectory):
    """Directory on a local disk or an accessible network share."""

    def __init__(self, full_name: t.Union[str, pathlib.Path], log: t.Optional[StorageLog] = None):
        path = _local_path(full_name)
        super().__init__(path if path.endswith(os.sep) else path + os.sep, log)
        self._path = pathlib.Path(path)
        self._name = self._path.name
        parent = self._path.parent
        self._parent = None if parent == self._path else str(parent).rstrip(os.sep) + os.sep
        self._root = self._path.anchor or None

    @property
    def path(self) -> pathlib.Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_dir()

    @local_file_error_wrap
    def _create(self):
        self._path.mkdir(parents=True, exist_ok=True)

    @local_file_error_wrap
    def _delete(self, recurse: bool):
        if recurse:
            shutil.rmtree(self._path)
        else:
            self._path.rmdir()

    def create_file(self, full_name: str) -> BaseFile:
        return LocalFile(full_name, self.log)

    def create_directory(self, full_name: str) -> BaseDirectory:
        return LocalDirectory(full_name, self.log)

    @local_file_error_wrap
    def get_directories(self) -> list[BaseDirectory]:
        return [LocalDirectory(str(p) + os.sep, self.log) for p in self._path.iterdir() if p.is_dir()]

    @local_file_error_wrap
    def get_files(self) -> list[BaseFile]:
        return [LocalFile(p, self.log) for p in self._path.iterdir() if not p.is_dir()]

    def path_combine(self, *paths_: t.Optional[str]) -> str:
        return paths.path_combine(os.sep, *paths_)


class LocalFile(BaseFile):
    """File on a local disk or an accessible network share."""

    def __init__(self, full_name: t.Union[str, pathlib.Path], log: t.Optional[StorageLog] = None):
        path = _local_path(full_name)
        super().__init__(path, log)
        self._path = pathlib.Path(path)
        self._name = self._path.name

    @property
    def path(self) -> pathlib.Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    @local_file_error_wrap
    def _create(self):
        return open(self._path, "wb")

    @local_file_error_wrap
    def _delete(self):
        self._path.unlink(True)

    @local_file_error_wrap
    def _open_stream(self, access: AccessType):
        return open(self._path, "rb" if access == AccessType.READ else "wb")

    @local_file_error_wrap
    def _close_stream(self, stream):
        stream.close()

    def create_file(self, full_name: str) -> BaseFile:
        return LocalFile(full_name, self.log)

    def create_directory(self, full_name: str) -> BaseDirectory:
        return LocalDirectory(full_name, self.log)
