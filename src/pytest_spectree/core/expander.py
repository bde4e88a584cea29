"""Table expansion.

This module converts table declarations into concrete nodes:

- `describe_table` yields one leaf per entry, spliced in place of the
  table (the table contributes no container of its own);
- `describe_table_subtree` yields one container per entry, whose children
  are declared by calling the unit of work with the entry arguments.

Expansion is fail-fast: any arity or structural violation aborts the
whole table before a single node of it reaches the tree.
"""

from collections.abc import Iterable, Mapping
from inspect import Parameter, signature
from typing import TYPE_CHECKING, Any, NamedTuple

from pytest_spectree.errors import ArityMismatchError, SpecError, StructuralError
from pytest_spectree.models import SchemaModel
from pytest_spectree.names import ARGUMENTS_SEPARATOR, ENTRY_PREFIX
from pytest_spectree.schema import DECLARATIONS
from pytest_spectree.values import render, sanitize

from .nodes import ContainerNode, LeafNode

if TYPE_CHECKING:
    from pytest_spectree.schema import Declaration, EntryDeclaration, TableDeclaration

    from .builder import TreeBuilder
    from .nodes import Node

POSITIONAL = (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)


class Binding(SchemaModel):
    """Environment threaded through one build pass.

    The top level build starts from an empty binding. Every subtree entry
    derives a fresh binding, so entries never share state.
    """

    #: Arguments of the entry whose subtree is being built.
    arguments: tuple[Any, ...] = ()
    #: Inherited pending marker.
    pending: bool = False
    #: Label of the table whose entry is being built.
    table: str | None = None
    #: Index of the entry being built.
    entry_num: int | None = None

    def enter(self, table: 'TableDeclaration', entry_num: int,
              entry: 'EntryDeclaration') -> 'Binding':
        """Derive the binding of one subtree entry."""
        return Binding(
            arguments=entry.arguments,
            pending=self.pending or table.pending or entry.pending,
            table=table.label,
            entry_num=entry_num,
        )

    def nest(self, pending: bool) -> 'Binding':
        """Derive the binding of a nested container body."""
        if not pending or self.pending:
            return self

        return self.model_copy(update={'pending': True})


class Arity(NamedTuple):
    """Accepted argument count range of a unit of work."""

    minimum: int
    #: Upper bound, `None` when the unit accepts variable arguments.
    maximum: int | None

    @property
    def variadic(self) -> bool:
        """Whether the upper bound is open."""
        return self.maximum is None

    def accepts(self, count: int) -> bool:
        """Check whether an argument count is accepted."""
        if count < self.minimum:
            return False

        return self.maximum is None or count <= self.maximum

    def __str__(self) -> str:
        """Human-readable arity."""
        if self.maximum is None:
            return f'at least {self.minimum}'

        if self.minimum == self.maximum:
            return f'exactly {self.minimum}'

        return f'{self.minimum} to {self.maximum}'


def infer_arity(unit_of_work: Any) -> Arity:  # noqa: ANN401
    """Infer the arity of a unit of work from its signature.

    Positional parameters without defaults are required, those with
    defaults are optional; `*args` opens the upper bound. Callables
    without an introspectable signature accept any argument count.

    Args:
        unit_of_work: Callable to inspect.

    Returns:
        Accepted argument count range.
    """
    try:
        parameters = signature(unit_of_work).parameters.values()
    except (TypeError, ValueError):
        return Arity(0, None)

    required = total = 0
    variadic = False

    for parameter in parameters:
        if parameter.kind in POSITIONAL:
            total += 1
            if parameter.default is Parameter.empty:
                required += 1
        elif parameter.kind is Parameter.VAR_POSITIONAL:
            variadic = True

    return Arity(required, None if variadic else total)


def entry_element(entry: 'EntryDeclaration') -> dict[str, Any]:
    """Build a snippet-friendly view of an entry for error reporting."""
    description = entry.description
    if description is not None and not isinstance(description, str):
        description = f'{description!r}'

    return {
        'description': description,
        'arguments': sanitize(list(entry.arguments)),
    }


class TableExpander:
    """Expander of table declarations into nodes.

    The expander re-enters its tree builder to build the subtree declared
    by each entry of a subtree table.
    """

    def __init__(self, builder: 'TreeBuilder') -> None:
        """Initialize the expander.

        Args:
            builder: Tree builder used for subtree re-entry.
        """
        self.builder = builder

    def expand(self, table: 'TableDeclaration', binding: Binding,
               issues: list['SpecError']) -> tuple['Node', ...]:
        """Expand a table into nodes, in entry order.

        Issues reported by nested tables of subtree entries are merged
        into `issues` only if the table itself expands successfully.

        Args:
            table: Table declaration.
            binding: Binding of the table position.
            issues: Collected build issues.

        Returns:
            One leaf per entry, or one container per entry in subtree mode.

        Raises:
            ArityMismatchError: If an entry does not match the arity.
            StructuralError: If the table is otherwise malformed.
        """
        self.check_arity(table)

        focused = any(entry.focus for entry in table.entries)

        if not table.subtree:
            return tuple(
                self.expand_leaf(table, entry_num, entry, binding, focused=focused)
                for entry_num, entry in enumerate(table.entries)
            )

        nested: list[SpecError] = []
        nodes = tuple(
            self.expand_subtree(table, entry_num, entry, binding, nested, focused=focused)
            for entry_num, entry in enumerate(table.entries)
        )
        issues.extend(nested)

        return nodes

    def check_arity(self, table: 'TableDeclaration') -> Arity:
        """Check every entry against the unit-of-work arity.

        Args:
            table: Table declaration.

        Returns:
            Arity the entries were checked against.

        Raises:
            ArityMismatchError: If an entry does not match the arity.
            StructuralError: If a variadic unit of work receives entries
                with heterogeneous argument counts.
        """
        if table.arity is not None:
            arity = Arity(table.arity, table.arity)
        else:
            arity = infer_arity(table.unit_of_work)

        for entry_num, entry in enumerate(table.entries):
            if not arity.accepts(len(entry.arguments)):
                raise ArityMismatchError(
                    table.label,
                    entry_num,
                    expected=f'{arity}',
                    actual=len(entry.arguments),
                    element=entry_element(entry),
                )

        if arity.variadic and table.entries:
            expected = len(table.entries[0].arguments)
            for entry_num, entry in enumerate(table.entries):
                if len(entry.arguments) != expected:
                    raise StructuralError(
                        f'Entries have heterogeneous arity: expected {expected} '
                        f'argument(s), got {len(entry.arguments)}',
                        table=table.label,
                        entry_num=entry_num,
                        element=entry_element(entry),
                    )

        return arity

    def describe(self, table: 'TableDeclaration', entry_num: int,
                 entry: 'EntryDeclaration') -> str:
        """Resolve the label of the node generated for an entry.

        The entry description wins; otherwise the table entry description
        template or callable is applied to the arguments; otherwise the
        label is derived from the rendered arguments.

        Raises:
            StructuralError: If the description cannot be rendered.
        """
        description = entry.description
        if description is None:
            description = table.entry_description

        try:
            if description is None:
                return ENTRY_PREFIX + ARGUMENTS_SEPARATOR.join(
                    render(argument)
                    for argument in entry.arguments
                )
            if isinstance(description, str):
                if entry.description is not None:
                    return description
                return description.format(*entry.arguments)
            return f'{description(*entry.arguments)}'

        except Exception as base:
            raise StructuralError(
                f'Failed to describe entry: {base!r}',
                table=table.label,
                entry_num=entry_num,
                element=entry_element(entry),
                error=base,
            ) from base

    def expand_leaf(self, table: 'TableDeclaration', entry_num: int,
                    entry: 'EntryDeclaration', binding: Binding, *,
                    focused: bool = False) -> LeafNode:
        """Produce the leaf of one entry of a plain table."""
        return LeafNode(
            label=self.describe(table, entry_num, entry),
            body=table.unit_of_work,
            arguments=entry.arguments,
            focus=entry.focus if focused else table.focus,
            pending=binding.pending or table.pending or entry.pending,
        )

    def expand_subtree(self, table: 'TableDeclaration', entry_num: int,  # noqa: PLR0913
                       entry: 'EntryDeclaration', binding: Binding,
                       issues: list['SpecError'], *,
                       focused: bool = False) -> ContainerNode:
        """Produce the container of one entry of a subtree table."""
        label = self.describe(table, entry_num, entry)

        scope = binding.enter(table, entry_num, entry)
        declarations = self.declare(table, scope, entry)

        return ContainerNode(
            label=label,
            children=self.builder.build_nodes(declarations, scope, issues),
            arguments=entry.arguments,
            focus=entry.focus if focused else table.focus,
            pending=scope.pending,
        )

    def declare(self, table: 'TableDeclaration', scope: Binding,
                entry: 'EntryDeclaration') -> tuple['Declaration', ...]:
        """Invoke a subtree unit of work with the bound arguments.

        The unit of work may return a single declaration, an iterable of
        declarations (generators included), or `None` for an empty subtree.

        Raises:
            StructuralError: If the invocation or the iteration of its
                result fails, or if it yields anything other than
                declarations.
        """
        declarations: tuple[Any, ...] | None = None

        try:
            value = table.unit_of_work(*scope.arguments)
            if value is None:
                return ()
            if isinstance(value, DECLARATIONS):
                return (value,)
            if isinstance(value, Iterable) and not isinstance(value, (str, bytes, Mapping)):
                declarations = tuple(value)

        except SpecError as base:
            raise StructuralError(
                f'Failed to declare subtree: {base.message}',
                table=table.label,
                entry_num=scope.entry_num,
                element=entry_element(entry),
                error=base,
            ) from base

        except Exception as base:
            raise StructuralError(
                f'Failed to declare subtree: {base!r}',
                table=table.label,
                entry_num=scope.entry_num,
                element=entry_element(entry),
                error=base,
            ) from base

        if declarations is not None and all(
            isinstance(item, DECLARATIONS)
            for item in declarations
        ):
            return declarations

        raise StructuralError(
            f'Subtree unit of work returned {type(value).__name__!r} instead of declarations',
            table=table.label,
            entry_num=scope.entry_num,
            element=entry_element(entry),
        )
