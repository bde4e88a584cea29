"""Nested containers three levels deep.

The `when` block sits between two `context` blocks; all three container
spellings behave identically.
"""

from pytest_spectree.dsl import context, describe, it, when


def _check(condition: bool) -> None:
    assert condition


nested_structures = describe(
    'Nested Structures',
    context(
        'outer context',
        it('test in outer', lambda: _check(True)),
        when(
            'something happens',
            it('test in when', lambda: _check(1 == 1)),
            context(
                'inner context',
                it('test in inner', lambda: _check('test' == 'test')),
            ),
        ),
    ),
)
