"""
    Provides a single file/directory interface over local disks, network shares
    and S3-compatible object storage.

    In general, one should use the StorageController to get a handle to a file
    or directory. The handle knows how to perform the basic operations (exists,
    create, delete, list, open a stream) on its own backend, and the tree
    operations (copy_to, move_to, clear, is_empty) are written once on top of
    those so that they work between any two backends, e.g. copying a local
    directory into S3.

    One key note: a name like

    s3://bucket/hello-world

    is ambiguous - is it a directory or a file? Object storage has no real
    directories and local paths without an extension can be either, so this
    component adopts a strict convention: directories end with a separator
    (e.g. s3://bucket/directory/ or /tmp/directory/) and files do not. The
    convention applies to every backend, local ones included, and handles
    never make a backend call to decide what kind of entry a path is.

    Use path_combine() on a directory to build child paths; it keeps exactly
    one separator between segments and only keeps a trailing separator if the
    last segment had one.
"""
from .base import AccessType, BaseDirectory, BaseFile, StorageEntry
from .clients import StorageClients
from .core import StorageController
from .local import LocalDirectory, LocalFile
from .log import StorageLog
from .paths import PathType, classify
from .s3 import S3Directory, S3File
