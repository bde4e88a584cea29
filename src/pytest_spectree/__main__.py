"""CLI utilities for inspecting spec modules.

The commands load spec modules, build and resolve their trees, and print
what pytest would collect, without executing any leaf.
"""

from pathlib import Path
from typing import TYPE_CHECKING

from click import ClickException, argument, echo, group, option
from click import Path as PathParam
from yaml import dump

from pytest_spectree.core import SpecLoader, SpecTree
from pytest_spectree.errors import SpecError
from pytest_spectree.settings import SpectreeSettings

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Any

SpecFilepath = PathParam(
    exists=True,
    dir_okay=False,
    readable=True,
    path_type=Path,
)


def _build(filepath: Path, settings: SpectreeSettings) -> SpecTree:
    """Load a spec module and build its resolved tree.

    Raises:
        ClickException: If the module cannot be loaded or built.
    """
    try:
        return SpecTree.build(
            SpecLoader().load(filepath),
            separator=settings.separator,
            strict=settings.strict,
        )
    except SpecError as error:
        raise ClickException(f'{error.with_filename(f'{filepath}')}') from error


def _settings(separator: str | None, relaxed: bool) -> SpectreeSettings:
    """Resolve settings from the environment and command-line options."""
    return SpectreeSettings().override(
        separator=separator,
        strict=False if relaxed else None,
    )


def build_options(command: 'Callable[..., Any]') -> 'Callable[..., Any]':
    """Attach the options shared by tree building commands."""
    command = argument(
        'files',
        type=SpecFilepath,
        nargs=-1,
        required=True,
    )(command)
    command = option(
        '-s', '--separator',
        default=None,
        help='Separator inserted between labels of resolved paths.',
    )(command)
    return option(
        '--relaxed',
        is_flag=True,
        default=False,
        help='Skip malformed tables with a warning instead of failing.',
    )(command)


@group(help='Command-line utilities for pytest-spectree spec modules.')
def cli() -> None:
    """Root CLI group for pytest-spectree tools."""
    return None


@cli.command(
    name='list',
    help='Print the resolved path of every leaf, in declaration order.',
)
@build_options
def list_leaves(files: tuple[Path, ...], separator: str | None, relaxed: bool) -> None:
    """Print resolved leaf paths."""
    settings = _settings(separator, relaxed)

    for filepath in files:
        tree = _build(filepath, settings)
        for leaf in tree.all_leaves():
            line = f'{filepath}::{tree.name(leaf)}'
            if reason := tree.skip_reason(leaf):
                line += f' ({reason})'
            echo(line)


@cli.command(
    name='count',
    help='Print the number of leaves of every spec module.',
)
@build_options
def count_leaves(files: tuple[Path, ...], separator: str | None, relaxed: bool) -> None:
    """Print leaf counts."""
    settings = _settings(separator, relaxed)

    for filepath in files:
        echo(f'{filepath}: {_build(filepath, settings).count()}')


@cli.command(
    name='dump',
    help='Print the expanded tree of every spec module as YAML.',
)
@build_options
def dump_tree(files: tuple[Path, ...], separator: str | None, relaxed: bool) -> None:
    """Print expanded trees."""
    settings = _settings(separator, relaxed)

    content = {
        f'{filepath}': _build(filepath, settings).to_data()
        for filepath in files
    }

    echo(dump(content, indent=2, sort_keys=False, allow_unicode=True), nl=False)


if __name__ == '__main__':
    cli()
