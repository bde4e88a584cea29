"""Literal value types used by table entries.

Entry arguments are literal values supplied by the spec author. The engine
never evaluates them, but it renders them into generated entry descriptions
and error snippets, so this module also defines how values are displayed.
"""

from collections.abc import Mapping, Sequence
from datetime import date, datetime, timedelta
from typing import Any

#: Scalars are atomic literal values that can be rendered as is.
type Scalar = date | datetime | timedelta | str | bytes | int | float | bool

#: A literal value, possibly nested in sequences or mappings.
type Value = Scalar | Sequence['Value'] | Mapping[str, 'Value'] | None

#: Any argument received from a spec module before inspection.
type RuntimeValue = Any

MAPPINGS = (dict,)
SCALARS = (date, datetime, timedelta, str, bytes, int, float, bool)
SEQUENCES = (list, tuple, set, frozenset)

OPAQUE_VALUE = '<runtime object>'


def sanitize(value: RuntimeValue) -> Value:
    """Recursively replace non-literal values with a placeholder.

    Used before serializing entry arguments into error snippets to avoid
    leaking opaque runtime objects.

    Args:
        value: Arbitrary value to sanitize.

    Returns:
        A literal representation of the value.
    """
    if value is None or isinstance(value, SCALARS):
        return value

    if isinstance(value, MAPPINGS):
        return {
            f'{key}': sanitize(item)
            for key, item in value.items()
        }

    if isinstance(value, SEQUENCES):
        return [sanitize(item) for item in value]

    return OPAQUE_VALUE


def render(value: RuntimeValue) -> str:
    """Render a value for use inside a generated description.

    Strings are rendered without quotes, everything else with `repr`.

    Args:
        value: Value to render.

    Returns:
        Human-readable representation.
    """
    if isinstance(value, str):
        return value

    return repr(value)
