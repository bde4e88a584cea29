"""Spec authoring DSL.

Functions in this module build declaration models. They are meant to be
called at module level of spec modules:

    addition = describe_table(
        'Addition',
        lambda a, b, expected: check(a + b == expected),
        entry('1 + 1 = 2', 1, 1, 2),
        entry('2 + 3 = 5', 2, 3, 5),
    )

Nothing is executed at declaration time, except that subtree tables call
their unit of work later, while the tree is being built.
"""

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from pytest_spectree.errors import StructuralError
from pytest_spectree.schema import (
    ContainerDeclaration,
    EntryDeclaration,
    LeafDeclaration,
    TableDeclaration,
)

if TYPE_CHECKING:
    from pydantic import BaseModel

if TYPE_CHECKING:
    from pytest_spectree.schema import Body, Declaration, Description

__all__ = (
    'context',
    'describe',
    'describe_table',
    'describe_table_subtree',
    'entry',
    'it',
    'specify',
    'when',
)


def _validate[T: 'BaseModel'](model: type[T], data: dict[str, Any]) -> T:
    """Validate declaration data, converting failures to structural errors.

    Raises:
        StructuralError: If the declaration is malformed.
    """
    try:
        return model.model_validate(data)
    except ValidationError as base:
        raise StructuralError.from_pydantic_error(base, data={
            key: value
            for key, value in data.items()
            if key in {'label', 'description', 'arguments', 'arity'}
        }) from base


def describe(label: str, *body: 'Declaration',
             focus: bool = False, pending: bool = False) -> ContainerDeclaration:
    """Declare a container grouping nested declarations.

    Args:
        label: Container label.
        *body: Nested declarations in order.
        focus: Focus marker.
        pending: Pending marker.

    Returns:
        Container declaration.
    """
    return _validate(ContainerDeclaration, {
        'label': label,
        'body': body,
        'focus': focus,
        'pending': pending,
    })


#: Alias of `describe` conventionally used for circumstances.
context = describe

#: Alias of `describe` conventionally used for events.
when = describe


def it(label: str, body: 'Body | None' = None, *,
       focus: bool = False, pending: bool = False) -> LeafDeclaration:
    """Declare a leaf.

    Args:
        label: Leaf label.
        body: Opaque unit of work; a leaf without body is pending.
        focus: Focus marker.
        pending: Pending marker.

    Returns:
        Leaf declaration.
    """
    return _validate(LeafDeclaration, {
        'label': label,
        'body': body,
        'focus': focus,
        'pending': pending,
    })


#: Alias of `it` for labels that do not read as a sentence.
specify = it


def entry(description: 'Description | None', *arguments: Any,  # noqa: ANN401
          focus: bool = False, pending: bool = False) -> EntryDeclaration:
    """Declare one table row.

    Args:
        description: Row label, a callable producing it from the
            arguments, or `None` to derive it.
        *arguments: Literal values passed to the unit of work.
        focus: Focus marker.
        pending: Pending marker.

    Returns:
        Entry declaration.
    """
    return _validate(EntryDeclaration, {
        'description': description,
        'arguments': arguments,
        'focus': focus,
        'pending': pending,
    })


def describe_table(label: str, unit_of_work: 'Body', *entries: EntryDeclaration,
                   arity: int | None = None,
                   entry_description: 'Description | None' = None,
                   focus: bool = False, pending: bool = False) -> TableDeclaration:
    """Declare a table producing one leaf per entry.

    Args:
        label: Table label.
        unit_of_work: Leaf body receiving the entry arguments.
        *entries: Table rows.
        arity: Explicit number of parameters of the unit of work.
        entry_description: Template or callable describing rows
            declared without a description.
        focus: Focus marker.
        pending: Pending marker.

    Returns:
        Table declaration.
    """
    return _validate(TableDeclaration, {
        'label': label,
        'unit_of_work': unit_of_work,
        'entries': entries,
        'arity': arity,
        'subtree': False,
        'entry_description': entry_description,
        'focus': focus,
        'pending': pending,
    })


def describe_table_subtree(label: str, unit_of_work: 'Body', *entries: EntryDeclaration,
                           arity: int | None = None,
                           entry_description: 'Description | None' = None,
                           focus: bool = False, pending: bool = False) -> TableDeclaration:
    """Declare a table producing one subtree per entry.

    The unit of work receives the entry arguments and returns the
    declarations of that entry's subtree.

    Args:
        label: Table label.
        unit_of_work: Callable returning a declaration or an iterable
            of declarations.
        *entries: Table rows.
        arity: Explicit number of parameters of the unit of work.
        entry_description: Template or callable describing rows
            declared without a description.
        focus: Focus marker.
        pending: Pending marker.

    Returns:
        Table declaration.
    """
    return _validate(TableDeclaration, {
        'label': label,
        'unit_of_work': unit_of_work,
        'entries': entries,
        'arity': arity,
        'subtree': True,
        'entry_description': entry_description,
        'focus': focus,
        'pending': pending,
    })
