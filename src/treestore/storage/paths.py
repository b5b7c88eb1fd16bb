"""Classification of path strings into backend and entry kinds.

    The trailing separator is the only thing that distinguishes a directory
    from a file: `s3://bucket/data/` is a directory and `s3://bucket/data` is a
    file, regardless of what exists on the backend.
"""
import enum
import os
import re
import typing as t


OBJECT_STORE_SCHEMES = ("s3",)

_SCHEME_PATTERN = re.compile(r"^([a-z][a-z0-9+.\-]*)://", re.IGNORECASE)


class PathType(enum.Enum):
    """Backend family and entry kind of a path."""

    UNKNOWN = "unknown"
    LOCAL_FILE = "local_file"
    LOCAL_DIRECTORY = "local_directory"
    NETWORK_FILE = "network_file"
    NETWORK_DIRECTORY = "network_directory"
    OBJECT_FILE = "object_file"
    OBJECT_DIRECTORY = "object_directory"

    def is_directory(self) -> bool:
        return self in (PathType.LOCAL_DIRECTORY, PathType.NETWORK_DIRECTORY, PathType.OBJECT_DIRECTORY)

    def is_file(self) -> bool:
        return self in (PathType.LOCAL_FILE, PathType.NETWORK_FILE, PathType.OBJECT_FILE)

    def is_object_store(self) -> bool:
        return self in (PathType.OBJECT_FILE, PathType.OBJECT_DIRECTORY)


def separators() -> tuple[str, ...]:
    """Characters accepted as a trailing directory separator."""
    if os.sep == "/":
        return "/",
    return "/", os.sep


def is_directory(path: t.Optional[str]) -> bool:
    """Check if the path denotes a directory (i.e. ends in a separator)."""
    if not path:
        return False
    return path.endswith(separators())


def is_file(path: t.Optional[str]) -> bool:
    return not is_directory(path)


def scheme(path: t.Optional[str]) -> t.Optional[str]:
    """Lower-cased URL scheme of the path, or None for plain paths."""
    if not path:
        return None
    match = _SCHEME_PATTERN.match(path)
    if match is None:
        return None
    return match.group(1).lower()


def is_network_path(path: str) -> bool:
    """UNC shares, written either as \\\\server\\share or //server/share."""
    return path.startswith("\\\\") or (path.startswith("//") and not path.startswith("///"))


def strip_file_scheme(path: str) -> str:
    if scheme(path) == "file":
        return path[7:]
    return path


def classify(path: t.Optional[str]) -> PathType:
    """Determine which backend and which kind of entry a path refers to."""
    if not path:
        return PathType.UNKNOWN
    url_scheme = scheme(path)
    as_dir = is_directory(path)
    if url_scheme is not None and url_scheme != "file":
        if url_scheme in OBJECT_STORE_SCHEMES:
            return PathType.OBJECT_DIRECTORY if as_dir else PathType.OBJECT_FILE
        return PathType.UNKNOWN
    path = strip_file_scheme(path)
    if not path:
        return PathType.UNKNOWN
    if is_network_path(path):
        return PathType.NETWORK_DIRECTORY if as_dir else PathType.NETWORK_FILE
    return PathType.LOCAL_DIRECTORY if as_dir else PathType.LOCAL_FILE


def path_combine(separator: str, *paths: t.Optional[str]) -> str:
    """Join path segments with exactly one separator between them.

        The result ends with a separator only if the last segment does, so
        `path_combine("/", "s3://b/root/", "child/", "leaf")` is a file and
        `path_combine("/", "s3://b/root/", "child/", "leaf/")` a directory.
        None and empty segments are skipped. Only separators are trimmed;
        names are otherwise kept exactly as given, whitespace included.
    """
    seps = "".join(set(separators()) | {separator})
    pieces = [p for p in paths if p]
    result = []
    for idx, piece in enumerate(pieces):
        if idx > 0:
            piece = piece.lstrip(seps)
            if piece == "":
                continue
        if idx < len(pieces) - 1 and not piece.endswith(tuple(seps)):
            piece += separator
        result.append(piece)
    return "".join(result)
