"""Read-only traversal of resolved trees.

`SpecTree` is the contract exposed to execution and reporting
collaborators. All traversals are lazy generators created on each call,
so they are restartable and share no iteration state.
"""

from typing import TYPE_CHECKING, Any

from pytest_spectree.values import sanitize

from .builder import TreeBuilder
from .nodes import ContainerNode, LeafNode
from .resolver import NameResolver

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from typing import Self

    from pytest_spectree.errors import SpecError

    from .nodes import Node

#: Leaf with its ancestors, outermost first.
type Walk = tuple[LeafNode, tuple[ContainerNode, ...]]

PENDING_REASON = 'pending'
UNFOCUSED_REASON = 'not focused'


class SpecTree:
    """Resolved tree of nodes with traversal queries.

    Nodes are resolved on construction, so a tree is always annotated
    with paths and addresses regardless of what it was given.
    """

    def __init__(self, nodes: 'Iterable[Node]', *, separator: str,
                 errors: 'Iterable[SpecError]' = ()) -> None:
        """Initialize the tree.

        Args:
            nodes: Top level nodes.
            separator: Separator used to render resolved paths.
            errors: Errors collected while building the nodes.
        """
        self.resolver = NameResolver(separator)
        self.roots = self.resolver.resolve(nodes)
        self.errors = tuple(errors)

        self._focus = frozenset(self._collect_focus(self.roots))

    @classmethod
    def build(cls, declarations: 'Iterable[object]', *,
              separator: str, strict: bool = False) -> 'Self':
        """Build, expand and resolve a declaration sequence.

        Args:
            declarations: Top level declarations.
            separator: Separator used to render resolved paths.
            strict: Whether to raise on the first build error.

        Returns:
            Resolved tree.

        Raises:
            StructuralError: On the first build error in strict mode.
        """
        result = TreeBuilder(strict=strict).build(declarations)

        return cls(result.nodes, separator=separator, errors=result.errors)

    @property
    def separator(self) -> str:
        """Separator used to render resolved paths."""
        return self.resolver.separator

    def name(self, node: 'Node') -> str:
        """Render the resolved path of a node."""
        return self.resolver.name(node)

    def walk(self) -> 'Iterator[Walk]':
        """Yield every leaf with its ancestors, in declaration order."""
        for root in self.roots:
            yield from self._walk(root, ())

    def _walk(self, node: 'Node', ancestors: tuple[ContainerNode, ...]) -> 'Iterator[Walk]':
        if isinstance(node, LeafNode):
            yield node, ancestors
            return

        for child in node.children:
            yield from self._walk(child, (*ancestors, node))

    def all_leaves(self) -> 'Iterator[LeafNode]':
        """Yield every leaf in declaration order."""
        for leaf, _ in self.walk():
            yield leaf

    def count(self) -> int:
        """Return the total number of leaves."""
        return sum(1 for _ in self.all_leaves())

    def filter_by_ancestor_label(self, label: str) -> 'Iterator[LeafNode]':
        """Yield leaves having an ancestor with the given label.

        Ancestors are direct or transitive containers; the leaf's own
        label is not considered.

        Args:
            label: Ancestor label to look for.
        """
        for leaf, ancestors in self.walk():
            if any(ancestor.label == label for ancestor in ancestors):
                yield leaf

    @property
    def has_focus(self) -> bool:
        """Whether any node of the tree is focused."""
        return bool(self._focus)

    def is_focused(self, leaf: LeafNode) -> bool:
        """Whether a leaf is under an effective focus.

        A focused node loses its focus when one of its descendants is
        focused, so only the innermost focused nodes count.
        """
        address = leaf.address or ()

        return any(
            address[:depth] in self._focus
            for depth in range(1, len(address) + 1)
        )

    def skip_reason(self, leaf: LeafNode) -> str | None:
        """Return why a leaf should not run, or `None` if it should."""
        if leaf.pending:
            return PENDING_REASON

        if self.has_focus and not self.is_focused(leaf):
            return UNFOCUSED_REASON

        return None

    def _collect_focus(self, nodes: 'Iterable[Node]') -> 'Iterator[tuple[int, ...]]':
        for node in nodes:
            nested = ()
            if isinstance(node, ContainerNode):
                nested = tuple(self._collect_focus(node.children))
            if nested:
                yield from nested
            elif node.focus and node.address is not None:
                yield node.address

    def to_data(self) -> list[dict[str, Any]]:
        """Export the tree as plain data, for serialization."""
        return [self._node_data(node) for node in self.roots]

    def _node_data(self, node: 'Node') -> dict[str, Any]:
        data: dict[str, Any] = {node.kind: node.label}

        if node.arguments:
            data['arguments'] = sanitize(list(node.arguments))
        if node.focus:
            data['focus'] = True
        if node.pending:
            data['pending'] = True

        if isinstance(node, ContainerNode):
            data['children'] = [self._node_data(child) for child in node.children]

        return data
