"""Tree operations shared by every backend.

    Nothing in here knows which backend it is working on; everything goes
    through the directory and file contract (exists, get_directories,
    get_files, create_directory, create_file, path_combine, create, delete,
    copy_to, move_to). This is what allows a local directory to be copied into
    S3 and back again.

    Each child is handled independently. A failure is always logged, and is
    only re-raised (abandoning the remaining siblings) when stop_on_error is
    set. There is no ordering guarantee between siblings.
"""
from __future__ import annotations
import fnmatch
import typing as t
from treestore.exc import NotFoundError

if t.TYPE_CHECKING:
    from .base import BaseDirectory, BaseFile


def _check_source(source: BaseDirectory, stop_on_error: bool) -> bool:
    if source.exists():
        return True
    message = f"Directory [{source.full_name}] does not exist"
    source.log.error(message)
    if stop_on_error:
        raise NotFoundError(message)
    return False


def _target_directory(target: BaseDirectory, child: BaseDirectory, verbose: bool) -> BaseDirectory:
    target_child = target.create_directory(target.path_combine(target.full_name, f"{child.name}/"))
    target_child.create(verbose=verbose)
    return target_child


def _target_file(target: BaseDirectory, child: BaseFile) -> BaseFile:
    return target.create_file(target.path_combine(target.full_name, child.name))


def copy_directory(source: BaseDirectory,
                   target: BaseDirectory,
                   recurse: bool = True,
                   overwrite: bool = True,
                   stop_on_error: bool = True,
                   verbose: bool = True):
    """Copy the contents of source into target.

        Without recurse, the immediate child directories are still created in
        the target (empty) but their contents are not copied.
    """
    if not _check_source(source, stop_on_error):
        return
    for child in source.get_directories():
        try:
            target_child = _target_directory(target, child, verbose)
            if recurse:
                copy_directory(child, target_child, True, overwrite, stop_on_error, verbose)
        except Exception as ex:
            source.log.error(f"Error copying directory [{child.full_name}] to [{target.full_name}]: {ex}")
            if stop_on_error:
                raise
    for file in source.get_files():
        try:
            file.copy_to(_target_file(target, file), overwrite=overwrite, stop_on_error=stop_on_error, verbose=verbose)
        except Exception as ex:
            source.log.error(f"Error copying file [{file.full_name}] to [{target.full_name}]: {ex}")
            if stop_on_error:
                raise
    if verbose:
        source.log.info(f"Copied directory [{source.full_name}] to [{target.full_name}]")


def move_directory(source: BaseDirectory,
                   target: BaseDirectory,
                   overwrite: bool = True,
                   stop_on_error: bool = True,
                   verbose: bool = True):
    """Move the contents of source into target, leaving source itself in place.

        Each child directory is moved and then deleted non-recursively. If part
        of a child could not be moved (and the error was swallowed because
        stop_on_error is off), the non-recursive delete refuses with
        NotEmptyError and the leftovers stay in the source.
    """
    if not _check_source(source, stop_on_error):
        return
    for child in source.get_directories():
        try:
            target_child = _target_directory(target, child, verbose)
            move_directory(child, target_child, overwrite, stop_on_error, verbose)
            child.delete(recurse=False, stop_on_error=stop_on_error, verbose=False)
        except Exception as ex:
            source.log.error(f"Error moving directory [{child.full_name}] to [{target.full_name}]: {ex}")
            if stop_on_error:
                raise
    for file in source.get_files():
        try:
            file.move_to(_target_file(target, file), overwrite=overwrite, stop_on_error=stop_on_error, verbose=verbose)
        except Exception as ex:
            source.log.error(f"Error moving file [{file.full_name}] to [{target.full_name}]: {ex}")
            if stop_on_error:
                raise
    if verbose:
        source.log.info(f"Moved directory [{source.full_name}] to [{target.full_name}]")


def clear_directory(directory: BaseDirectory, stop_on_error: bool = True, verbose: bool = True):
    """Delete every child of the directory but keep the directory."""
    if not _check_source(directory, stop_on_error):
        return
    for child in directory.get_directories():
        child.delete(recurse=True, stop_on_error=stop_on_error, verbose=verbose)
    for file in directory.get_files():
        file.delete(stop_on_error=stop_on_error, verbose=verbose)


def is_empty(directory: BaseDirectory) -> bool:
    return len(directory.get_directories()) == 0 and len(directory.get_files()) == 0


def walk(directory: BaseDirectory, recursive: bool = True) -> t.Iterable[BaseFile]:
    """Find all files, optionally recursively."""
    work = [directory]
    while work:
        d = work.pop()
        yield from d.get_files()
        if recursive:
            work.extend(d.get_directories())


def search(directory: BaseDirectory, pattern: t.Optional[str], recursive: bool = True) -> t.Iterable[BaseFile]:
    """Find all files whose name matches the given pattern."""
    for file in walk(directory, recursive):
        if pattern is None or fnmatch.fnmatch(file.name, pattern):
            yield file


def object_counts(directory: BaseDirectory) -> tuple[int, int]:
    """Count (directories, files) in the whole tree below the directory."""
    dir_count = 0
    file_count = 0
    work = [directory]
    while work:
        d = work.pop()
        children = d.get_directories()
        dir_count += len(children)
        file_count += len(d.get_files())
        work.extend(children)
    return dir_count, file_count
