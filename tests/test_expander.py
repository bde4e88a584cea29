"""Tests for table expansion."""

from functools import partial
from re import search
from typing import TYPE_CHECKING, Any

import pytest

from pytest_spectree.core import Arity, ContainerNode, LeafNode, infer_arity
from pytest_spectree.dsl import describe, describe_table, describe_table_subtree, entry, it
from pytest_spectree.errors import ArityMismatchError, StructuralError
from tests.examples import subtrees, tables

if TYPE_CHECKING:
    from pytest_mock import MockerFixture

    from pytest_spectree.core import TreeBuilder


def add(a: int, b: int, expected: int) -> None:
    """Three-parameter unit of work."""
    assert a + b == expected


def test_table_leaves(builder: 'TreeBuilder') -> None:
    """Expand a table into one leaf per entry, in entry order."""
    result = builder.build(tables.math_operations.body[:1])

    assert result.ok
    assert [node.label for node in result.nodes] == [
        '1 + 1 = 2',
        '2 + 3 = 5',
        'negative numbers',
    ]
    assert [node.arguments for node in result.nodes] == [
        (1, 1, 2),
        (2, 3, 5),
        (-1, -2, -3),
    ]
    assert all(isinstance(node, LeafNode) for node in result.nodes)
    assert all(node.body is tables.add for node in result.nodes)


def test_table_splices_leaves(builder: 'TreeBuilder') -> None:
    """Splice table leaves in place of the table declaration."""
    result = builder.build([
        it('before', add),
        describe_table('Table', add, entry('a', 1, 1, 2), entry('b', 2, 2, 4)),
        it('after', add),
    ])

    assert [node.label for node in result.nodes] == ['before', 'a', 'b', 'after']


def test_table_leaves_invoke_unit(builder: 'TreeBuilder', mocker: 'MockerFixture') -> None:
    """Bind every leaf to its own entry arguments."""
    unit = mocker.Mock()

    result = builder.build([describe_table(
        'Table',
        unit,
        entry('first', 'a', 1),
        entry('second', 'b', 2),
        arity=2,
    )])

    for node in result.nodes:
        node()

    assert unit.call_args_list == [mocker.call('a', 1), mocker.call('b', 2)]


def test_subtree_containers(builder: 'TreeBuilder') -> None:
    """Expand a subtree table into one container per entry."""
    result = builder.build([subtrees.math_operations])

    assert result.ok
    assert [node.label for node in result.nodes] == [
        'small numbers',
        'large numbers',
        'negative numbers',
    ]

    for node in result.nodes:
        assert isinstance(node, ContainerNode)
        assert [child.label for child in node.children] == [
            'adds correctly',
            'subtracts correctly',
        ]

    assert sum(node.child_count for node in result.nodes) == 6
    assert result.nodes[1].arguments == (100, 200, 300)


def test_subtree_leaves_capture_entry(builder: 'TreeBuilder') -> None:
    """Run subtree leaves against the arguments of their own entry."""
    seen: list[tuple[Any, ...]] = []

    def unit(*values: Any) -> Any:  # noqa: ANN401
        return it('records', partial(seen.append, values))

    result = builder.build([describe_table_subtree(
        'Table',
        unit,
        entry('first', 1),
        entry('second', 2),
    )])

    for node in result.nodes:
        node.child_at(0)()

    assert seen == [(1,), (2,)]


def test_subtree_entries_are_independent(builder: 'TreeBuilder') -> None:
    """Never share nodes between entries, even with colliding labels."""
    result = builder.build([describe_table_subtree(
        'Table',
        lambda value: [it('same', lambda: None)],
        entry('x', 1),
        entry('x', 2),
    )])

    first, second = result.nodes

    assert first == second
    assert first is not second
    assert first.child_at(0) is not second.child_at(0)


@pytest.mark.parametrize('returned, expect_count', (
    pytest.param(None, 0, id='none'),
    pytest.param((), 0, id='empty'),
    pytest.param(it('single', lambda: None), 1, id='single'),
    pytest.param((it('a', lambda: None), describe('b')), 2, id='iterable'),
))
def test_subtree_declarations(builder: 'TreeBuilder', returned: Any, expect_count: int) -> None:
    """Accept none, one or many declarations from a subtree unit of work."""
    result = builder.build([describe_table_subtree(
        'Table',
        lambda: returned,
        entry('only'),
    )])

    assert result.ok
    assert result.nodes[0].child_count == expect_count


def test_subtree_nested_containers(builder: 'TreeBuilder') -> None:
    """Build nested containers and tables declared by a subtree."""
    def unit(limit: int) -> Any:  # noqa: ANN401
        return describe(
            'inner',
            describe_table(
                'values',
                lambda value: None,
                *(entry(f'value {value}', value) for value in range(limit)),
            ),
        )

    result = builder.build([describe_table_subtree(
        'Table',
        unit,
        entry('two', 2),
        entry('three', 3),
    )])

    assert [node.child_at(0).child_count for node in result.nodes] == [2, 3]


def test_arity_mismatch(builder: 'TreeBuilder') -> None:
    """Report arity mismatch and produce no leaf for the table."""
    with pytest.warns(UserWarning):
        result = builder.build([describe_table(
            'Addition',
            add,
            entry('1 + 1 = 2', 1, 1, 2),
            entry('too short', 1, 2),
        )])

    assert result.nodes == ()

    error, = result.errors

    assert isinstance(error, ArityMismatchError)
    assert error.table == 'Addition'
    assert error.entry_num == 1
    assert error.expected == 'exactly 3'
    assert error.actual == 2


def test_arity_mismatch_strict(strict_builder: 'TreeBuilder') -> None:
    """Raise arity mismatch in strict mode."""
    with pytest.raises(ArityMismatchError, match=r'supplies 2 argument\(s\), unit of work expects exactly 3'):
        strict_builder.build([describe_table('Addition', add, entry('short', 1, 2))])


def test_explicit_arity(builder: 'TreeBuilder') -> None:
    """Prefer the explicit arity over the inferred one."""
    with pytest.warns(UserWarning):
        result = builder.build([describe_table(
            'Table',
            lambda *values: None,
            entry('ok', 1, 2),
            entry('long', 1, 2, 3),
            arity=2,
        )])

    error, = result.errors

    assert isinstance(error, ArityMismatchError)
    assert error.entry_num == 1


def test_heterogeneous_variadic_entries(builder: 'TreeBuilder') -> None:
    """Reject heterogeneous entries of a variadic unit of work."""
    with pytest.warns(UserWarning):
        result = builder.build([describe_table(
            'Table',
            lambda *values: None,
            entry('one', 1),
            entry('two', 1, 2),
        )])

    error, = result.errors

    assert type(error) is StructuralError
    assert error.entry_num == 1
    assert 'heterogeneous' in error.message
    assert result.nodes == ()


def test_empty_table(builder: 'TreeBuilder') -> None:
    """Expand a table without entries to nothing."""
    result = builder.build([describe_table('Table', add)])

    assert result.ok
    assert result.nodes == ()


def optional(a: int, b: int = 0) -> None:
    """Unit of work with an optional parameter."""


def variadic(a: int, *rest: int, flag: bool = False) -> None:
    """Unit of work with variable arguments."""


@pytest.mark.parametrize('unit, expected', (
    pytest.param(add, Arity(3, 3), id='fixed'),
    pytest.param(optional, Arity(1, 2), id='optional'),
    pytest.param(variadic, Arity(1, None), id='variadic'),
    pytest.param(lambda: None, Arity(0, 0), id='no parameters'),
    pytest.param(partial(add, 1), Arity(2, 2), id='partial'),
))
def test_infer_arity(unit: Any, expected: Arity) -> None:  # noqa: ANN401
    """Infer arity from unit-of-work signatures."""
    assert infer_arity(unit) == expected


@pytest.mark.parametrize('arity, expected', (
    pytest.param(Arity(3, 3), 'exactly 3', id='exact'),
    pytest.param(Arity(1, 2), '1 to 2', id='range'),
    pytest.param(Arity(1, None), 'at least 1', id='open'),
))
def test_arity_string(arity: Arity, expected: str) -> None:
    """Render arity for error messages."""
    assert f'{arity}' == expected


@pytest.mark.parametrize('row, entry_description, expected', (
    pytest.param(entry('given', 1, 'a'), None, 'given', id='explicit'),
    pytest.param(entry(None, 1, 'a'), None, 'Entry: 1, a', id='derived'),
    pytest.param(entry(None, 1, 'a'), '{} then {}', '1 then a', id='template'),
    pytest.param(entry('given', 1, 'a'), '{} then {}', 'given', id='explicit over template'),
    pytest.param(entry(None, 1, 'a'), lambda n, s: s * n, 'a', id='table callable'),
    pytest.param(entry(lambda n, s: f'{s}{n}', 1, 'a'), None, 'a1', id='entry callable'),
))
def test_entry_descriptions(builder: 'TreeBuilder', row: Any,  # noqa: ANN401
                            entry_description: Any, expected: str) -> None:  # noqa: ANN401
    """Resolve entry descriptions."""
    result = builder.build([describe_table(
        'Table',
        lambda number, text: None,
        row,
        entry_description=entry_description,
    )])

    assert [node.label for node in result.nodes] == [expected]


def test_entry_description_failure(builder: 'TreeBuilder') -> None:
    """Report descriptions that cannot be rendered."""
    with pytest.warns(UserWarning):
        result = builder.build([describe_table(
            'Table',
            lambda number: None,
            entry(None, 1),
            entry_description='{} and {}',
        )])

    error, = result.errors

    assert 'Failed to describe entry' in error.message
    assert error.entry_num == 0


@pytest.mark.parametrize('unit, message', (
    pytest.param(lambda: 42, r"returned 'int' instead of declarations", id='wrong type'),
    pytest.param(lambda: [it('ok', lambda: None), 'x'], r"returned 'list'", id='wrong item'),
    pytest.param(lambda: 1 / 0, r'ZeroDivisionError', id='raises'),
    pytest.param(lambda: describe(1), r'Invalid ContainerDeclaration', id='invalid nested'),
))
def test_subtree_failures(builder: 'TreeBuilder', unit: Any, message: str) -> None:  # noqa: ANN401
    """Fail the whole subtree table when an entry cannot be declared."""
    with pytest.warns(UserWarning):
        result = builder.build([describe_table_subtree(
            'Table',
            unit,
            entry('first'),
        )])

    error, = result.errors

    assert type(error) is StructuralError
    assert error.table == 'Table'
    assert error.entry_num == 0
    assert result.nodes == ()
    assert search(message, str(error))


def test_subtree_failure_is_fail_fast(builder: 'TreeBuilder') -> None:
    """Produce no container when a later entry fails."""
    def unit(value: int) -> Any:  # noqa: ANN401
        if value > 1:
            raise ValueError(value)
        return it('fine', lambda: None)

    with pytest.warns(UserWarning):
        result = builder.build([describe_table_subtree(
            'Table',
            unit,
            entry('first', 1),
            entry('second', 2),
        )])

    assert result.nodes == ()
    assert result.errors[0].entry_num == 1


def test_generator_subtree(builder: 'TreeBuilder') -> None:
    """Declare subtrees yielded by a generator unit of work."""
    def unit(value: int) -> Any:  # noqa: ANN401
        yield it(f'first {value}', lambda: None)
        yield it(f'second {value}', lambda: None)

    result = builder.build([describe_table_subtree('Gen', unit, entry('one', 1))])

    root, = result.nodes

    assert result.ok
    assert [child.label for child in root.children] == ['first 1', 'second 1']


@pytest.mark.parametrize('failure, error_type, message', (
    pytest.param(lambda value: ValueError(value), ValueError, r'ValueError\(2\)', id='exception'),
    pytest.param(None, StructuralError, r'Invalid ContainerDeclaration', id='invalid declaration'),
))
def test_generator_subtree_failure(builder: 'TreeBuilder', failure: Any,  # noqa: ANN401
                                   error_type: type, message: str) -> None:
    """Report failures raised while iterating a generator unit of work."""
    def unit(value: int) -> Any:  # noqa: ANN401
        yield it('fine', lambda: None)
        if value > 1:
            if failure is None:
                yield describe(value)
            raise failure(value)

    with pytest.warns(UserWarning):
        result = builder.build([describe_table_subtree(
            'Gen',
            unit,
            entry('first', 1),
            entry('second', 2),
        )])

    error, = result.errors

    assert result.nodes == ()
    assert type(error) is StructuralError
    assert error.table == 'Gen'
    assert error.entry_num == 1
    assert isinstance(error.__cause__, error_type)
    assert search(message, str(error))


def test_nested_table_error_is_local(builder: 'TreeBuilder') -> None:
    """Keep subtree containers when only a nested table is malformed."""
    def unit(value: int) -> Any:  # noqa: ANN401
        return [
            it('fine', lambda: None),
            describe_table('nested', add, entry('short', value)),
        ]

    with pytest.warns(UserWarning):
        result = builder.build([describe_table_subtree(
            'Table',
            unit,
            entry('first', 1),
            entry('second', 2),
        )])

    assert [node.child_count for node in result.nodes] == [1, 1]
    assert [error.table for error in result.errors] == ['nested', 'nested']


def test_markers_propagation(builder: 'TreeBuilder') -> None:
    """Propagate table and entry markers to generated nodes."""
    result = builder.build([
        describe_table(
            'Pending table',
            lambda: None,
            entry('a'),
            pending=True,
        ),
        describe_table(
            'Focused table',
            lambda: None,
            entry('b'),
            entry('c'),
            focus=True,
        ),
        describe_table(
            'Focused entry',
            lambda: None,
            entry('d'),
            entry('e', focus=True),
            focus=True,
        ),
        describe_table_subtree(
            'Pending entry',
            lambda: it('leaf', lambda: None),
            entry('f', pending=True),
            entry('g'),
        ),
    ])

    a, b, c, d, e, f, g = result.nodes

    assert a.pending
    assert b.focus and c.focus
    assert not d.focus and e.focus
    assert f.pending and f.child_at(0).pending
    assert not g.pending and not g.child_at(0).pending
