"""Label and separator primitive types.

Labels are the free-form strings supplied by spec authors to containers,
leaves, tables and entries. They are deliberately unrestricted: empty and
duplicated labels are valid and are carried into resolved paths as is.
"""

from typing import Annotated

from pydantic import Field

#: Prefix of descriptions generated for entries declared without one.
ENTRY_PREFIX = 'Entry: '

#: Separator between rendered arguments in generated descriptions.
ARGUMENTS_SEPARATOR = ', '


Label = Annotated[
    str, Field(
        title='Label',
        description=(
            'Human-readable text of a declaration. '
            'Labels may be empty and may repeat among siblings; '
            'they form the segments of resolved paths.'
        ),
        examples=[
            'Math Operations',
            'adds correctly',
        ],
    ),
]

Separator = Annotated[
    str, Field(
        title='Path separator',
        description=(
            'String inserted between label segments when a resolved '
            'path is rendered as a single name.'
        ),
        examples=[
            ' ',
            ' / ',
        ],
    ),
]
