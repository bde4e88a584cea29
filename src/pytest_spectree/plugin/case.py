"""Runtime layer executing expanded leaves.

A `SpecCase` wraps one resolved leaf: running it invokes the leaf body
with its bound arguments. Assertion failures propagate as is for pytest
reporting; other exceptions are wrapped with the leaf location.
"""

from typing import TYPE_CHECKING

import pytest

from pytest_spectree.errors import SpecRuntimeError

if TYPE_CHECKING:
    from typing import Any

if TYPE_CHECKING:
    from _pytest._code.code import ExceptionInfo, TerminalRepr

if TYPE_CHECKING:
    from pytest_spectree.core import LeafNode


class SpecCase(pytest.Item):
    """Pytest item executing a single expanded leaf."""

    __test__ = False

    def __init__(self, *, leaf: 'LeafNode', **kwargs: 'Any') -> None:
        """Initialize a pytest test case backed by a leaf.

        Args:
            leaf: Resolved leaf node.
            **kwargs: Keyword pytest.Item arguments.
        """
        super().__init__(**kwargs)

        self.leaf = leaf

    def runtest(self) -> None:
        """Execute the leaf body with its bound arguments.

        Raises:
            AssertionError: Propagated as-is for pytest handling.
            SpecRuntimeError: Wrapped runtime exception with leaf context.
        """
        try:
            self.leaf()

        except AssertionError:
            raise

        except Exception as base:
            raise SpecRuntimeError.from_leaf(
                self.leaf.path or (self.leaf.label,),
                self.leaf.arguments,
                message=f'{base!r}',
                filename=f'{self.path}',
            ) from base

    def repr_failure(self, excinfo: 'ExceptionInfo[BaseException]',
                     **kwargs: 'Any') -> 'str | TerminalRepr':
        """Represent runtime errors with their formatted context."""
        if isinstance(excinfo.value, SpecRuntimeError):
            return f'{excinfo.value}'

        return super().repr_failure(excinfo, **kwargs)

    def reportinfo(self) -> tuple['Any', int, str]:
        """Report the spec module and the resolved name of the leaf.

        Skip reports require a line number; leaves have none of their
        own, so the module start is reported.
        """
        return self.path, 0, self.name
