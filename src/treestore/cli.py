import functools
import click
import zirconium as zr
import zrlog
from autoinject import injector
from treestore.exc import TreeStoreError
from treestore.storage import BaseDirectory, StorageController, StorageLog


def _echo(label, message):
    click.echo(f"{label}: {message}" if label else message, err=True)


@injector.inject
def _controller(config: zr.ApplicationConfig = None) -> StorageController:
    return StorageController(log=StorageLog(config.as_str(("treestore", "log_label"), default=None), _echo))


def _report_errors(cb):

    @functools.wraps(cb)
    def _inner(*args, **kwargs):
        try:
            return cb(*args, **kwargs)
        except TreeStoreError as ex:
            raise click.ClickException(f"{ex.__class__.__name__}: {str(ex)}") from ex

    return _inner


@click.group
def main():
    zrlog.init_logging()


@main.command
@click.argument("path")
@_report_errors
def ls(path):
    directory = _controller().get_directory(path)
    for child in directory.get_directories():
        click.echo(child.full_name)
    for file in directory.get_files():
        click.echo(file.full_name)


@main.command
@click.argument("path")
@click.option("--fail-if-exists", is_flag=True, default=False)
@_report_errors
def mkdir(path, fail_if_exists):
    _controller().create_directory(path, fail_if_exists)


@main.command
@click.argument("path")
@click.option("--no-overwrite", is_flag=True, default=False)
@_report_errors
def touch(path, no_overwrite):
    _controller().create_file(path, not no_overwrite)


@main.command
@click.argument("path")
@click.option("--no-recurse", is_flag=True, default=False)
@click.option("--keep-going", is_flag=True, default=False)
@_report_errors
def rm(path, no_recurse, keep_going):
    _controller().delete(path, recurse=not no_recurse, stop_on_error=not keep_going)


@main.command
@click.argument("source")
@click.argument("target")
@click.option("--no-recurse", is_flag=True, default=False)
@click.option("--no-overwrite", is_flag=True, default=False)
@click.option("--keep-going", is_flag=True, default=False)
@_report_errors
def cp(source, target, no_recurse, no_overwrite, keep_going):
    storage = _controller()
    src = storage.get_entry(source)
    if isinstance(src, BaseDirectory):
        dest = storage.get_directory(target).create()
        src.copy_to(dest, recurse=not no_recurse, overwrite=not no_overwrite, stop_on_error=not keep_going)
    else:
        src.copy_to(storage.get_entry(target), overwrite=not no_overwrite, stop_on_error=not keep_going)


@main.command
@click.argument("source")
@click.argument("target")
@click.option("--no-overwrite", is_flag=True, default=False)
@click.option("--keep-going", is_flag=True, default=False)
@_report_errors
def mv(source, target, no_overwrite, keep_going):
    storage = _controller()
    src = storage.get_entry(source)
    if isinstance(src, BaseDirectory):
        dest = storage.get_directory(target).create()
        src.move_to(dest, overwrite=not no_overwrite, stop_on_error=not keep_going)
        # anything that failed to move is still in the source, so only remove it if empty
        src.delete(recurse=False, stop_on_error=not keep_going, verbose=False)
    else:
        src.move_to(storage.get_entry(target), overwrite=not no_overwrite, stop_on_error=not keep_going)


@main.command
@click.argument("path")
@click.option("--keep-going", is_flag=True, default=False)
@_report_errors
def purge(path, keep_going):
    _controller().get_directory(path).purge(stop_on_error=not keep_going)


@main.command
@click.argument("path")
@_report_errors
def exists(path):
    found = _controller().exists(path)
    click.echo("true" if found else "false")
    if not found:
        raise click.exceptions.Exit(1)


@main.command
@click.argument("path")
@_report_errors
def cat(path):
    content = _controller().get_file(path).read_all_bytes()
    click.echo(content, nl=False)
