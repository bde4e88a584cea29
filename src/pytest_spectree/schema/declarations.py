"""Raw declaration models.

Declarations are the declarative shape of a spec module: containers with
a body of nested declarations, leaves with an opaque body, and tables
pairing an opaque unit of work with parameterized entries.

The set of kinds is closed. Every declaration carries a `kind` literal
used as a discriminator, so consumers handle the variants exhaustively.
"""

from collections.abc import Callable
from typing import Annotated, Any, Literal

from pydantic import Field

from pytest_spectree.models import SchemaModel
from pytest_spectree.names import Label  # noqa: TC001

#: Opaque unit of work. Never inspected beyond its call signature.
type Body = Callable[..., Any]

#: Entry description: a literal label, or a callable rendering one from
#: the entry arguments.
type Description = str | Callable[..., Any]


class MarkersMixin(SchemaModel):
    """Mixin providing focus and pending markers.

    Markers do not change the shape of the tree. They are consumed by
    execution collaborators to decide which leaves run.
    """

    focus: bool = Field(
        default=False,
        title='Focus marker',
        description=(
            'Marks the declaration as focused. When a tree contains focused '
            'declarations, only leaves under an effective focus run.'
        ),
    )

    pending: bool = Field(
        default=False,
        title='Pending marker',
        description=(
            'Marks the declaration as pending. Pending is inherited by '
            'every node declared below.'
        ),
    )


class ContainerDeclaration(MarkersMixin, SchemaModel):
    """Container block (`describe`, `context` or `when`).

    The three container spellings are behaviourally identical; they only
    differ in the label conventions of spec authors.
    """

    #: Declaration kind discriminator.
    kind: Literal['container'] = 'container'

    label: Label = Field(
        title='Container label',
    )

    body: tuple['Declaration', ...] = Field(
        default=(),
        title='Container body',
        description='Nested declarations in declaration order.',
    )


class LeafDeclaration(MarkersMixin, SchemaModel):
    """Leaf block (`it` or `specify`).

    A leaf without a body is pending.
    """

    #: Declaration kind discriminator.
    kind: Literal['leaf'] = 'leaf'

    label: Label = Field(
        title='Leaf label',
    )

    body: Body | None = Field(
        default=None,
        title='Leaf body',
        description='Opaque unit of work executed by collaborators.',
    )


class EntryDeclaration(MarkersMixin, SchemaModel):
    """One parameterized row of a table."""

    description: Description | None = Field(
        default=None,
        title='Entry description',
        description=(
            'Label of the node generated for this entry. When omitted, '
            'the description is derived from the table or the arguments.'
        ),
    )

    arguments: tuple[Any, ...] = Field(
        default=(),
        title='Entry arguments',
        description='Literal values passed to the table unit of work.',
    )


class TableDeclaration(MarkersMixin, SchemaModel):
    """Table construct (`describe_table` or `describe_table_subtree`).

    In subtree mode the unit of work returns the declarations of one
    entry's subtree; otherwise it is the body of one leaf per entry.
    """

    #: Declaration kind discriminator.
    kind: Literal['table'] = 'table'

    label: Label = Field(
        title='Table label',
    )

    unit_of_work: Body = Field(
        title='Unit of work',
        description='Opaque callable instantiated once per entry.',
    )

    arity: int | None = Field(
        default=None,
        ge=0,
        title='Unit of work arity',
        description=(
            'Number of parameters accepted by the unit of work. '
            'Inferred from its signature when omitted.'
        ),
    )

    subtree: bool = Field(
        default=False,
        title='Subtree mode',
        description='Generate one container per entry instead of one leaf.',
    )

    entries: tuple[EntryDeclaration, ...] = Field(
        default=(),
        title='Table entries',
    )

    entry_description: Description | None = Field(
        default=None,
        title='Entry description template',
        description=(
            'Template (`str.format` syntax) or callable used to describe '
            'entries declared without a description.'
        ),
    )


Declaration = Annotated[
    ContainerDeclaration | LeafDeclaration | TableDeclaration,
    Field(discriminator='kind'),
]

DECLARATIONS = (ContainerDeclaration, LeafDeclaration, TableDeclaration)

ContainerDeclaration.model_rebuild()
