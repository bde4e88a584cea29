"""Expanded declaration model.

Nodes are the output of the tree builder: containers and leaves only,
tables having been replaced by their expansion. Nodes are immutable;
name resolution produces annotated copies instead of mutating them.

Equality is structural: two nodes are equal when they have the same kind,
the same label and equal children in the same order.
"""

from abc import abstractmethod
from functools import partial
from typing import TYPE_CHECKING, Annotated, Any, Literal

from pydantic import Field

from pytest_spectree.models import SchemaModel
from pytest_spectree.names import Label  # noqa: TC001
from pytest_spectree.schema import Body  # noqa: TC001

if TYPE_CHECKING:
    from collections.abc import Callable

#: Structural fingerprint of a node: kind, label and children shapes.
type Shape = tuple[str, str, tuple['Shape', ...]]


class BaseNode(SchemaModel):
    """Common fields and structural queries of nodes."""

    label: Label = Field(
        title='Node label',
    )

    arguments: tuple[Any, ...] = Field(
        default=(),
        title='Bound arguments',
        description=(
            'Entry arguments the node was instantiated with. '
            'Empty for nodes not produced by a table entry.'
        ),
    )

    focus: bool = Field(
        default=False,
        title='Own focus marker',
    )

    pending: bool = Field(
        default=False,
        title='Effective pending marker',
        description='True when the node or any ancestor is pending.',
    )

    path: tuple[str, ...] | None = Field(
        default=None,
        title='Resolved path',
        description='Labels from the top level down to this node.',
    )

    address: tuple[int, ...] | None = Field(
        default=None,
        title='Node address',
        description='Child indexes from the top level down to this node.',
    )

    @property
    def is_leaf(self) -> bool:
        """Whether the node is a leaf."""
        return False

    @property
    def child_count(self) -> int:
        """Number of direct children."""
        return 0

    def child_at(self, index: int) -> 'Node':
        """Return the direct child at a position.

        Raises:
            IndexError: If the node has no child at this position.
        """
        raise IndexError(f'{self.label!r} has no child at {index}')

    @property
    def is_resolved(self) -> bool:
        """Whether name resolution annotated this node."""
        return self.path is not None

    @property
    @abstractmethod
    def shape(self) -> Shape:
        """Structural fingerprint used for equality."""
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        """Compare nodes structurally."""
        if not isinstance(other, BaseNode):
            return NotImplemented

        return self.shape == other.shape

    def __hash__(self) -> int:
        """Hash consistent with structural equality."""
        return hash(self.shape)


class ContainerNode(BaseNode):
    """Node grouping children under a label. Never executable."""

    #: Node kind discriminator.
    kind: Literal['container'] = 'container'

    children: tuple['Node', ...] = Field(
        default=(),
        title='Children',
        description='Child nodes in declaration order.',
    )

    @property
    def child_count(self) -> int:
        """Number of direct children."""
        return len(self.children)

    def child_at(self, index: int) -> 'Node':
        """Return the direct child at a position.

        Raises:
            IndexError: If the container has no child at this position.
        """
        return self.children[index]

    @property
    def shape(self) -> Shape:
        """Structural fingerprint used for equality."""
        return (
            self.kind,
            self.label,
            tuple(child.shape for child in self.children),
        )


class LeafNode(BaseNode):
    """Node representing one executable unit of work."""

    #: Node kind discriminator.
    kind: Literal['leaf'] = 'leaf'

    body: Body | None = Field(
        default=None,
        title='Leaf body',
        description='Opaque unit of work; `None` for pending leaves.',
    )

    @property
    def is_leaf(self) -> bool:
        """Whether the node is a leaf."""
        return True

    @property
    def shape(self) -> Shape:
        """Structural fingerprint used for equality."""
        return self.kind, self.label, ()

    @property
    def bound(self) -> 'Callable[[], Any] | None':
        """Body partially applied to the bound arguments."""
        if self.body is None:
            return None

        return partial(self.body, *self.arguments)

    def __call__(self) -> Any:  # noqa: ANN401
        """Invoke the body with the bound arguments.

        Raises:
            RuntimeError: If the leaf has no body.
        """
        if self.body is None:
            raise RuntimeError(f'Leaf {self.label!r} has no body')

        return self.body(*self.arguments)


Node = Annotated[
    ContainerNode | LeafNode,
    Field(discriminator='kind'),
]

ContainerNode.model_rebuild()
