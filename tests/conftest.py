"""Tests configurations and fixtures."""

from typing import TYPE_CHECKING

import pytest

from pytest_spectree.core import NameResolver, TreeBuilder

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

#: Separator used by tests to keep rendered paths readable.
SEPARATOR = ' / '


@pytest.fixture
def builder() -> TreeBuilder:
    """Provide a relaxed tree builder collecting errors."""
    return TreeBuilder()


@pytest.fixture
def strict_builder() -> TreeBuilder:
    """Provide a strict tree builder raising the first error."""
    return TreeBuilder(strict=True)


@pytest.fixture
def resolver() -> NameResolver:
    """Provide a name resolver using the test separator."""
    return NameResolver(SEPARATOR)


@pytest.fixture
def spec_file(tmp_path: 'Path') -> 'Callable[[str, str], Path]':
    """Provide a factory writing spec modules into a temporary directory.

    Returns:
        A callable accepting a file name and the module source, and
        returning the path of the written file.
    """
    def write(name: str, content: str) -> 'Path':
        path = tmp_path / name
        path.write_text(content, encoding='utf-8')
        return path

    return write
