from __future__ import annotations
import contextlib
import enum
import re
import typing as t
from treestore.exc import StorageError, AlreadyExistsError, NotEmptyError
from .log import StorageLog
from . import tree


DEFAULT_CHUNK_SIZE = 4194304

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class AccessType(enum.Enum):
    """Mode a file stream is opened in."""

    READ = "read"
    WRITE = "write"


def read_in_chunks(readable, buffer_size: int = DEFAULT_CHUNK_SIZE) -> t.Iterable[bytes]:
    """Read in chunks from a readable object until it is exhausted."""
    x = readable.read(buffer_size)
    while x:
        yield x
        x = readable.read(buffer_size)


class StorageEntry:
    """Handle to a file or directory on some backend.

        Handles are cheap to build and do no I/O on construction; they may
        point at something that does not exist yet. The full name is parsed
        once when the handle is built and cannot be changed afterwards; build a
        new handle to point somewhere else.
    """

    def __init__(self, full_name: str, log: t.Optional[StorageLog] = None):
        self._full_name = full_name
        self._name: t.Optional[str] = None
        self._log = log or StorageLog()

    @property
    def full_name(self) -> str:
        return self._full_name

    @property
    def name(self) -> t.Optional[str]:
        return self._name

    @property
    def log(self) -> StorageLog:
        return self._log

    def __str__(self):
        return self._full_name

    def __repr__(self):
        return f"{self.__class__.__name__}({self._full_name!r})"

    def __eq__(self, other):
        return type(self) is type(other) and self._full_name == other.full_name

    def __hash__(self):
        return hash((self.__class__.__name__, self._full_name))

    def exists(self) -> bool:
        """Check if the entry exists on the backend."""
        raise NotImplementedError

    def create_file(self, full_name: str) -> BaseFile:
        """Build a file handle on the same backend (no I/O)."""
        raise NotImplementedError

    def create_directory(self, full_name: str) -> BaseDirectory:
        """Build a directory handle on the same backend (no I/O)."""
        raise NotImplementedError


class BaseDirectory(StorageEntry):

    def __init__(self, full_name: str, log: t.Optional[StorageLog] = None):
        super().__init__(full_name, log)
        self._parent: t.Optional[str] = None
        self._root: t.Optional[str] = None

    @property
    def parent(self) -> t.Optional[str]:
        """Full name of the containing directory."""
        return self._parent

    @property
    def root(self) -> t.Optional[str]:
        return self._root

    def create(self, fail_if_exists: bool = False, verbose: bool = True) -> BaseDirectory:
        """Create the directory, if it doesn't exist."""
        if self.exists():
            if fail_if_exists:
                message = f"Directory [{self.full_name}] already exists"
                self.log.error(message)
                raise AlreadyExistsError(message)
            return self
        try:
            self._create()
        except StorageError as ex:
            self.log.error(f"Error creating directory [{self.full_name}]: {ex}")
            raise
        if verbose:
            self.log.info(f"Directory [{self.full_name}] was created")
        return self

    def _create(self):
        raise NotImplementedError

    def delete(self, recurse: bool = True, stop_on_error: bool = True, verbose: bool = True):
        """Remove the directory, if it exists.

            Without recurse, a directory that still has children is left alone
            and NotEmptyError is raised (or only logged, if stop_on_error is
            off).
        """
        try:
            if self.exists():
                if not recurse and not self.is_empty():
                    raise NotEmptyError(f"Directory [{self.full_name}] is not empty")
                self._delete(recurse)
                if verbose:
                    self.log.info(f"Directory [{self.full_name}] was deleted")
        except StorageError as ex:
            self.log.error(f"Error deleting directory [{self.full_name}]: {ex}")
            if stop_on_error:
                raise

    def _delete(self, recurse: bool):
        raise NotImplementedError

    def get_directories(self) -> list[BaseDirectory]:
        """Immediate child directories."""
        raise NotImplementedError

    def get_files(self) -> list[BaseFile]:
        """Immediate child files."""
        raise NotImplementedError

    def path_combine(self, *paths: t.Optional[str]) -> str:
        """Join path segments using this backend's separator."""
        raise NotImplementedError

    def is_empty(self) -> bool:
        return tree.is_empty(self)

    def copy_to(self,
                target: BaseDirectory,
                recurse: bool = True,
                overwrite: bool = True,
                stop_on_error: bool = True,
                verbose: bool = True):
        """Copy the contents of this directory into another directory (on any backend)."""
        tree.copy_directory(self, target, recurse, overwrite, stop_on_error, verbose)

    def move_to(self,
                target: BaseDirectory,
                overwrite: bool = True,
                stop_on_error: bool = True,
                verbose: bool = True):
        """Move the contents of this directory into another one; this directory is kept."""
        tree.move_directory(self, target, overwrite, stop_on_error, verbose)

    def clear(self, stop_on_error: bool = True, verbose: bool = True):
        """Remove all files and subdirectories."""
        tree.clear_directory(self, stop_on_error, verbose)

    def purge(self, stop_on_error: bool = True, verbose: bool = True):
        self.clear(stop_on_error, verbose)

    def walk(self, recursive: bool = True) -> t.Iterable[BaseFile]:
        return tree.walk(self, recursive)

    def search(self, pattern: t.Optional[str], recursive: bool = True) -> t.Iterable[BaseFile]:
        return tree.search(self, pattern, recursive)

    def object_counts(self) -> tuple[int, int]:
        return tree.object_counts(self)


class BaseFile(StorageEntry):
    """File handle.

        A file handle owns at most one open stream. Opening when a stream is
        already open returns that stream; use reset_stream() to get a fresh
        stream in a specific mode. Streams are never closed implicitly, so
        whoever opens one must close it (or use the handle as a context
        manager).
    """

    def __init__(self, full_name: str, log: t.Optional[StorageLog] = None):
        super().__init__(full_name, log)
        self._stream = None
        self._access: t.Optional[AccessType] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close_stream()

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    @property
    def access(self) -> t.Optional[AccessType]:
        """Mode of the currently open stream, if any."""
        return self._access

    def create(self, overwrite: bool = True, verbose: bool = True) -> BaseFile:
        """Create (or truncate) the file.

            The write stream used to create the file is left open.
        """
        if not overwrite and self.exists():
            message = f"File [{self.full_name}] already exists"
            self.log.error(message)
            raise AlreadyExistsError(message)
        self.close_stream()
        try:
            self._stream = self._create()
            self._access = AccessType.WRITE
        except StorageError as ex:
            self.log.error(f"Error creating file [{self.full_name}]: {ex}")
            raise
        if verbose:
            self.log.info(f"File [{self.full_name}] was created")
        return self

    def _create(self):
        """Create the file and return an open write stream."""
        raise NotImplementedError

    def delete(self, stop_on_error: bool = True, verbose: bool = True):
        """Remove the file, if it exists."""
        try:
            self.close_stream()
            self._delete()
            if verbose:
                self.log.info(f"File [{self.full_name}] was deleted")
        except StorageError as ex:
            self.log.error(f"Error deleting file [{self.full_name}]: {ex}")
            if stop_on_error:
                raise

    def _delete(self):
        raise NotImplementedError

    def open_stream(self, access: AccessType = AccessType.READ):
        """Open a stream, or return the one that is already open."""
        if self._stream is not None:
            self.log.debug(f"File stream [{self.full_name}] is already open")
            return self._stream
        self._stream = self._open_stream(access)
        self._access = access
        self.log.debug(f"File stream [{self.full_name}] has been opened ({access.value})")
        return self._stream

    def _open_stream(self, access: AccessType):
        raise NotImplementedError

    def close_stream(self):
        """Close the open stream, if there is one."""
        if self._stream is None:
            return
        stream = self._stream
        self._stream = None
        self._access = None
        self._close_stream(stream)
        self.log.debug(f"File stream [{self.full_name}] has been closed")

    def _close_stream(self, stream):
        stream.close()

    def reset_stream(self, access: AccessType):
        """Close any open stream and open a new one in the given mode."""
        self.close_stream()
        return self.open_stream(access)

    @contextlib.contextmanager
    def _scoped_stream(self, access: AccessType):
        stream = self.reset_stream(access)
        try:
            yield stream
        finally:
            self.close_stream()

    def read_all_bytes(self, buffer_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
        buffer = bytearray()
        with self._scoped_stream(AccessType.READ) as stream:
            for chunk in read_in_chunks(stream, buffer_size):
                buffer.extend(chunk)
        return bytes(buffer)

    def read_all_text(self, encoding: str = "utf-8") -> str:
        return self.read_all_bytes().decode(encoding)

    def read_all_lines(self, encoding: str = "utf-8") -> list[str]:
        """Read the file as lines, breaking only on \\n, \\r and \\r\\n."""
        text = self.read_all_text(encoding)
        if text == "":
            return []
        lines = _LINE_BREAK.split(text)
        if lines[-1] == "":
            lines.pop()
        return lines

    def write_all_bytes(self, data: bytes):
        with self._scoped_stream(AccessType.WRITE) as stream:
            stream.write(data)
            stream.flush()

    def write_all_text(self, text: str, encoding: str = "utf-8"):
        self.write_all_bytes(text.encode(encoding))

    def write_all_lines(self, lines: t.Iterable[str], encoding: str = "utf-8"):
        self.write_all_text("".join(f"{line}\n" for line in lines), encoding)

    def _resolve_target(self, target: t.Union[BaseFile, BaseDirectory]) -> BaseFile:
        if isinstance(target, BaseDirectory):
            return target.create_file(target.path_combine(target.full_name, self.name))
        return target

    def _copy_to_file(self, target: BaseFile, overwrite: bool):
        if target == self:
            raise StorageError(f"Cannot copy file [{self.full_name}] onto itself", 1011)
        if not overwrite and target.exists():
            raise AlreadyExistsError(f"File [{target.full_name}] already exists")
        try:
            source = self.reset_stream(AccessType.READ)
            dest = target.reset_stream(AccessType.WRITE)
            for chunk in read_in_chunks(source):
                dest.write(chunk)
        finally:
            try:
                self.close_stream()
            finally:
                target.close_stream()

    def copy_to(self,
                target: t.Union[BaseFile, BaseDirectory],
                overwrite: bool = True,
                stop_on_error: bool = True,
                verbose: bool = True):
        """Copy this file to another file, or into a directory, on any backend."""
        target = self._resolve_target(target)
        try:
            self._copy_to_file(target, overwrite)
            if verbose:
                self.log.info(f"Copied file [{self.full_name}] to [{target.full_name}]")
        except Exception as ex:
            self.log.error(f"Error copying file [{self.full_name}] to [{target.full_name}]: {ex}")
            if stop_on_error:
                raise

    def move_to(self,
                target: t.Union[BaseFile, BaseDirectory],
                overwrite: bool = True,
                stop_on_error: bool = True,
                verbose: bool = True):
        """Copy this file to the target, then delete it.

            If the copy fails, this file is left where it is.
        """
        target = self._resolve_target(target)
        try:
            self._copy_to_file(target, overwrite)
            self.delete(stop_on_error=True, verbose=False)
            if verbose:
                self.log.info(f"Moved file [{self.full_name}] to [{target.full_name}]")
        except Exception as ex:
            self.log.error(f"Error moving file [{self.full_name}] to [{target.full_name}]: {ex}")
            if stop_on_error:
                raise
