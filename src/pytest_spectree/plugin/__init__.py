"""Pytest plugin collecting BDD-style spec modules.

This module integrates `pytest-spectree` with pytest by:
- registering custom command-line options;
- resolving shared settings from the environment and options;
- collecting spec modules as pytest test items, one per leaf.

Python files matching the configured pattern (by default `spec_*.py` or
`*_spec.py`) are collected with `SpecModule`.
"""

from typing import TYPE_CHECKING

from .spec import SpecModule

if TYPE_CHECKING:
    from pathlib import Path

if TYPE_CHECKING:
    from _pytest.config import Config
    from _pytest.config.argparsing import Parser
    from _pytest.nodes import Node


def pytest_addoption(parser: 'Parser') -> None:
    """Register pytest command-line options for pytest-spectree.

    Args:
        parser: Pytest argument parser.
    """
    parser.addoption(
        '--spectree-separator',
        action='store',
        dest='spectree_separator',
        default=None,
        help=(
            'Separator inserted between labels of resolved paths, '
            'which name the collected test items.'
        ),
    )
    parser.addoption(
        '--spectree-relaxed',
        action='store_true',
        dest='spectree_relaxed',
        default=False,
        help=(
            'Disable strict spec building. Malformed tables are reported '
            'as warnings and left out instead of failing collection.'
        ),
    )


def pytest_configure(config: 'Config') -> None:
    """Configure pytest-spectree integration.

    This hook resolves settings and attaches them to the pytest
    configuration object as `config.spectree_settings`.

    Args:
        config: Pytest configuration object.
    """
    from pytest_spectree.settings import SpectreeSettings  # noqa: PLC0415

    config.spectree_settings = SpectreeSettings().override(  # type: ignore[attr-defined]
        separator=config.getoption('spectree_separator', default=None),
        strict=False if config.getoption('spectree_relaxed', default=False) else None,
    )


def pytest_collect_file(parent: 'Node', file_path: 'Path') -> SpecModule | None:
    """Collect spec modules.

    Args:
        parent: Parent pytest collection node.
        file_path: Path to the file being considered.

    Returns:
        A `SpecModule` collector if the file matches the spec pattern,
        otherwise ``None``.
    """
    if parent.config.spectree_settings.matches(file_path.name):  # type: ignore[attr-defined]
        return SpecModule.from_parent(
            parent,
            path=file_path,
        )

    return None
