"""Pytest integration for spec modules.

This module defines a custom pytest file collector that imports a spec
module, builds and resolves its declaration tree, and emits one
`SpecCase` per leaf, named by the leaf's resolved path.

Pending leaves, and leaves outside an effective focus, are collected as
skipped items so they stay visible in reports.
"""

from typing import TYPE_CHECKING

import pytest

from pytest_spectree.core import SpecLoader, SpecTree
from pytest_spectree.errors import SpecError

from .case import SpecCase

if TYPE_CHECKING:
    from collections.abc import Iterable


class SpecModule(pytest.File):
    """Pytest file collector for spec modules."""

    __test__ = False

    def collect(self) -> 'Iterable[SpecCase]':
        """Collect pytest test cases from a spec module.

        Returns:
            Iterable of `SpecCase` instances for pytest execution.

        Raises:
            SpecError: If the module cannot be loaded, or if a table is
                malformed and specs are built in strict mode.
        """
        tree = self.build_tree()

        for leaf in tree.all_leaves():
            item = SpecCase.from_parent(
                self,
                name=tree.name(leaf),
                leaf=leaf,
            )
            if reason := tree.skip_reason(leaf):
                item.add_marker(pytest.mark.skip(reason=reason))
            yield item

    def build_tree(self) -> SpecTree:
        """Load the module declarations and build the resolved tree."""
        settings = self.config.spectree_settings  # type: ignore[attr-defined]

        try:
            declarations = SpecLoader().load(self.path)
            return SpecTree.build(
                declarations,
                separator=settings.separator,
                strict=settings.strict,
            )

        except SpecError as error:
            raise error.with_filename(f'{self.path}')
