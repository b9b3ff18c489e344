"""kvlet CLI"""

import logging
import sys
from functools import wraps
from pathlib import Path

import click

from . import __version__
from .errors import KvletError
from .repository import Repository
from .store import REPO_DIR, repository

logger = logging.getLogger("kvlet")


def configure_logging(debug: bool) -> None:
    """Send ``kvlet`` log records to stdout, verbosely when debugging."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    if not logger.hasHandlers():
        logger.addHandler(handler)


class RawArgsCommand(click.Command):
    """Command that keeps its unparsed arguments, ``--`` included."""

    def parse_args(self, ctx, args):
        ctx.meta["kvlet.raw_args"] = list(args)
        return super().parse_args(ctx, args)


def _repo_paths(ctx) -> tuple[Path, Path]:
    work_tree = Path(ctx.obj["work_tree"])
    repo_dir = ctx.obj["repo_dir"]
    return work_tree, Path(repo_dir) if repo_dir else work_tree / REPO_DIR


def _open(ctx) -> Repository:
    work_tree, repo_dir = _repo_paths(ctx)
    return repository("disk", path=repo_dir, work_tree=work_tree)


def handles_errors(fn):
    """Print a KvletError's message and exit with status 1."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except KvletError as e:
            logger.debug("%s: %s", type(e).__name__, e)
            click.echo(e.message)
            sys.exit(1)

    return wrapper


@click.group()
@click.version_option(__version__, prog_name="kvlet")
@click.option(
    "--work-tree",
    type=click.Path(file_okay=False),
    default=".",
    envvar="KVLET_WORK_TREE",
    help="Directory holding the working files.",
)
@click.option(
    "--repo-dir",
    type=click.Path(file_okay=False),
    default=None,
    envvar="KVLET_DIR",
    help=f"Repository directory (default: <work tree>/{REPO_DIR}).",
)
@click.option("--debug/--no-debug", default=False, help="Enable debug mode")
@click.pass_context
def cli(ctx, work_tree: str, repo_dir: str | None, debug: bool):
    """A tiny version-control system."""
    configure_logging(debug)
    ctx.ensure_object(dict)
    ctx.obj["work_tree"] = work_tree
    ctx.obj["repo_dir"] = repo_dir


@cli.command()
@click.pass_context
@handles_errors
def init(ctx):
    """Create a new repository in the work tree."""
    work_tree, repo_dir = _repo_paths(ctx)
    repository("disk", path=repo_dir, work_tree=work_tree, init=True)


@cli.command()
@click.argument("path")
@click.pass_context
@handles_errors
def add(ctx, path: str):
    """Stage a file for the next commit."""
    _open(ctx).add(path)


@cli.command()
@click.argument("message", required=False, default="")
@click.pass_context
@handles_errors
def commit(ctx, message: str):
    """Record the staged changes."""
    _open(ctx).commit(message)


@cli.command(name="rm")
@click.argument("path")
@click.pass_context
@handles_errors
def rm(ctx, path: str):
    """Unstage a file, or stage its removal if tracked."""
    _open(ctx).remove(path)


@cli.command(cls=RawArgsCommand)
@click.argument("operands", nargs=-1)
@click.pass_context
@handles_errors
def checkout(ctx, operands):
    """Check out a branch, or a file from HEAD or another commit.

    \b
    kvlet checkout BRANCH
    kvlet checkout -- FILE
    kvlet checkout COMMIT -- FILE
    """
    raw = ctx.meta["kvlet.raw_args"]
    if len(raw) == 1 and raw[0] != "--":
        _open(ctx).checkout(raw[0])
    elif len(raw) == 2 and raw[0] == "--":
        _open(ctx).checkout_file(raw[1])
    elif len(raw) == 3 and raw[1] == "--":
        _open(ctx).checkout_file(raw[2], raw[0])
    else:
        click.echo("Incorrect operands.")
        sys.exit(1)


@cli.command()
@click.pass_context
@handles_errors
def log(ctx):
    """Show the current branch's history."""
    for entry in _open(ctx).log():
        click.echo(entry.render())


@cli.command(name="global-log")
@click.pass_context
@handles_errors
def global_log(ctx):
    """Show every commit ever made."""
    for entry in _open(ctx).global_log():
        click.echo(entry.render())


@cli.command()
@click.argument("message")
@click.pass_context
@handles_errors
def find(ctx, message: str):
    """Print the ids of all commits with the given message."""
    found = _open(ctx).find(message)
    if not found:
        click.echo("Found no commit with that message.")
        sys.exit(1)
    for commit_id in found:
        click.echo(commit_id)


@cli.command()
@click.pass_context
@handles_errors
def status(ctx):
    """Show branches, staged files and working-tree changes."""
    click.echo(_open(ctx).status().render())


@cli.command()
@click.argument("name")
@click.pass_context
@handles_errors
def branch(ctx, name: str):
    """Create a branch at the current commit."""
    _open(ctx).branch(name)


@cli.command(name="rm-branch")
@click.argument("name")
@click.pass_context
@handles_errors
def rm_branch(ctx, name: str):
    """Delete a branch pointer."""
    _open(ctx).remove_branch(name)


@cli.command()
@click.argument("commit_id")
@click.pass_context
@handles_errors
def reset(ctx, commit_id: str):
    """Check out a commit and move the current branch to it."""
    _open(ctx).reset(commit_id)


@cli.command()
@click.argument("name")
@click.pass_context
@handles_errors
def merge(ctx, name: str):
    """Merge a branch into the current branch."""
    result = _open(ctx).merge(name)
    if result.strategy == "fast_forward":
        click.echo("Current branch fast-forwarded.")
    elif result.strategy == "ancestor":
        click.echo("Given branch is an ancestor of the current branch.")
    elif result.has_conflicts:
        click.echo("Encountered a merge conflict.")


if __name__ == "__main__":
    cli()
