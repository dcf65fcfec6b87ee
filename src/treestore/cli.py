"""
Command-line front-end.

Dispatches subcommands to ObjectStoreEngine and reports store errors
on stderr with a non-zero exit status.
"""

import functools
import logging
import sys

import click

from . import __version__
from .config import StoreConfig
from .engine import ObjectStoreEngine
from .errors import ObjectStoreError
from .model.tree import FileMode

logger = logging.getLogger(__name__)


def handle_store_errors(func):
    """Turn ObjectStoreError into an error line and exit status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ObjectStoreError as e:
            logger.debug("Command failed", exc_info=True)
            click.echo(f"error: {e}", err=True)
            sys.exit(1)

    return wrapper


@click.group()
@click.option("--store-dir", envvar="TREESTORE_DIR", default=None,
              help="Name of the metadata directory (default: .git)")
@click.option("--work-tree", envvar="TREESTORE_WORK_TREE", default=".",
              type=click.Path(file_okay=False), help="Repository root")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(version=__version__, prog_name="treestore")
@click.pass_context
def cli(ctx, store_dir, work_tree, verbose):
    """Content-addressed blob and tree object store."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    ctx.ensure_object(dict)
    ctx.obj["work_tree"] = work_tree
    ctx.obj["store_dir"] = store_dir


def _engine(ctx) -> ObjectStoreEngine:
    try:
        config = StoreConfig.from_env(
            work_tree=ctx.obj["work_tree"], store_dir_name=ctx.obj["store_dir"]
        )
    except ObjectStoreError as e:
        raise click.UsageError(str(e))
    return ObjectStoreEngine(config)


@cli.command()
@click.pass_context
@handle_store_errors
def init(ctx):
    """Create the metadata directory, objects/, refs/ and HEAD."""
    engine = _engine(ctx)
    engine.initialize()
    click.echo(f"Initialized store in {engine.layout.store_root}")


@cli.command("hash-object")
@click.option("-w", "write", is_flag=True, help="Write the object into the store")
@click.argument("path", type=click.Path())
@click.pass_context
@handle_store_errors
def hash_object(ctx, write, path):
    """Compute the blob id of PATH, optionally storing it."""
    click.echo(_engine(ctx).hash_file(path, write=write).hex)


@cli.command("cat-file")
@click.option("-p", "mode", flag_value="pretty", help="Print the payload")
@click.option("-t", "mode", flag_value="type", help="Print the object kind")
@click.option("-s", "mode", flag_value="size", help="Print the payload size")
@click.argument("object_id")
@click.pass_context
@handle_store_errors
def cat_file(ctx, mode, object_id):
    """Print an object's payload, kind or size."""
    if mode is None:
        raise click.UsageError("One of -p, -t or -s is required")

    engine = _engine(ctx)
    if mode == "type":
        click.echo(engine.object_type(object_id))
    elif mode == "size":
        click.echo(engine.object_size(object_id))
    elif engine.object_type(object_id) == "tree":
        _print_entries(engine.list_tree(object_id), name_only=False)
    else:
        click.echo(engine.cat_object(object_id), nl=False)


@cli.command("ls-tree")
@click.option("--name-only", is_flag=True, help="List names only")
@click.argument("object_id")
@click.pass_context
@handle_store_errors
def ls_tree(ctx, name_only, object_id):
    """List the entries of a tree."""
    _print_entries(_engine(ctx).list_tree(object_id), name_only)


@cli.command("write-tree")
@click.argument("directory", required=False, type=click.Path())
@click.pass_context
@handle_store_errors
def write_tree(ctx, directory):
    """Snapshot DIRECTORY (default: the work tree) and print its tree id."""
    click.echo(_engine(ctx).write_tree(directory).hex)


@cli.command()
@click.argument("object_id")
@click.pass_context
@handle_store_errors
def verify(ctx, object_id):
    """Re-hash an object; for trees, check everything they reference."""
    engine = _engine(ctx)
    engine.verify_object(object_id)
    if engine.object_type(object_id) == "tree":
        result = engine.verify_tree(object_id)
        if not result["valid"]:
            for message in result["errors"]:
                click.echo(message, err=True)
            sys.exit(1)
    click.echo("ok")


def _print_entries(entries, name_only: bool) -> None:
    for entry in entries:
        if name_only:
            click.echo(entry.display_name)
        else:
            # Directory mode is padded for display only.
            mode = entry.mode.text.rjust(6, "0")
            kind = entry.mode.object_kind
            click.echo(f"{mode} {kind} {entry.target.hex}\t{entry.display_name}")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
