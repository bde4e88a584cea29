"""Name resolution.

Annotates every node with its resolved path (labels from the top level
down to the node) and its address (child indexes along the same chain).
"""

from typing import TYPE_CHECKING

from .nodes import ContainerNode

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .nodes import Node


class NameResolver:
    """Resolver of node paths.

    Resolution is pure and idempotent: paths are always recomputed from
    labels, so resolving an already resolved tree yields identical paths.
    Empty labels are kept as empty segments and duplicate paths are
    allowed.
    """

    def __init__(self, separator: str) -> None:
        """Initialize the resolver.

        Args:
            separator: String inserted between segments of rendered names.

        Raises:
            TypeError: If the separator is not a string.
        """
        if not isinstance(separator, str):
            raise TypeError(f'Separator must be a string, not {type(separator).__name__}')

        self.separator = separator

    def resolve(self, nodes: 'Iterable[Node]') -> tuple['Node', ...]:
        """Resolve top level nodes and all their descendants.

        Args:
            nodes: Top level nodes.

        Returns:
            Annotated copies of the nodes.
        """
        return tuple(
            self.resolve_node(node, (), (index,))
            for index, node in enumerate(nodes)
        )

    def resolve_node(self, node: 'Node', parent: tuple[str, ...],
                     address: tuple[int, ...]) -> 'Node':
        """Resolve one node below a parent path."""
        path = (*parent, node.label)
        updates: dict[str, object] = {'path': path, 'address': address}

        if isinstance(node, ContainerNode):
            updates['children'] = tuple(
                self.resolve_node(child, path, (*address, index))
                for index, child in enumerate(node.children)
            )

        return node.model_copy(update=updates)

    def join(self, path: 'Iterable[str]') -> str:
        """Render a path as a single name."""
        return self.separator.join(path)

    def name(self, node: 'Node') -> str:
        """Render the resolved path of a node.

        Raises:
            ValueError: If the node is not resolved.
        """
        if node.path is None:
            raise ValueError(f'Node {node.label!r} is not resolved')

        return self.join(node.path)
