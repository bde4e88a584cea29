"""Core exception hierarchy.

This module defines base error and warning types used across the library
to report malformed declarations, table arity violations, spec module
loading issues and runtime failures in a structured and extensible way.
"""

from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import dump

from pytest_spectree.values import sanitize

if TYPE_CHECKING:
    from typing import Self

if TYPE_CHECKING:
    from pydantic import ValidationError

SNIPPET_ELLIPSIS = f' ...{linesep}'
SNIPPET_INDENT = 2

FORMAT_FILENAME = '<spec module>'
FORMAT_INDENT = 4


class ErrorContext(TypedDict, total=False):
    """Container describing contextual information for error formatting.

    All fields are optional; the formatter adapts output based on
    provided values.
    """

    #: Name of the spec module file where the error occurred.
    filename: str | None

    #: Label of the table being expanded.
    table: str | None
    #: Index of the offending entry within its table.
    entry_num: int | None

    #: Resolved path of the leaf being executed.
    path: tuple[str, ...] | None

    #: Underlying exception that triggered formatting.
    error: Exception | None

    #: Declarative element associated with the error.
    element: Any


class ErrorFormatter:
    """Utility class for formatting spectree errors.

    Produces human-readable messages with optional location metadata
    and a YAML snippet of the offending element.
    """

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Format an error message using contextual information.

        Args:
            message: Base human-readable error message.
            context: Optional error context with location and data.

        Returns:
            A fully formatted error message suitable for display.
        """
        if not context:
            return message

        message += linesep
        message += cls.get_location_string(context, indent=FORMAT_INDENT)
        message += cls.get_snippet_string(context, indent=FORMAT_INDENT * 2)

        return message

    @classmethod
    def get_location_string(cls, context: ErrorContext, *,
                            indent: str | int | None = None) -> str:
        """Format location information.

        Args:
            context: Error context containing location metadata.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted location string including filename, table,
            entry number and leaf path when available.
        """
        indent = cls._ensure_indent(indent)

        filename = context.get('filename')
        if not filename:
            filename = FORMAT_FILENAME

        message = f'{indent}in "{filename}"{linesep}'

        if (table := context.get('table')) is not None:
            message += f'{indent}on table {table!r}'
            if (entry_num := context.get('entry_num')) is not None:
                entry_num += 1
                message += f', entry {entry_num}'
            message += linesep

        if path := context.get('path'):
            message += f'{indent}at {' > '.join(repr(label) for label in path)}'
            message += linesep

        return message

    @classmethod
    def get_snippet_string(cls, context: ErrorContext, *,
                           indent: str | int | None = None) -> str:
        """Generate a formatted YAML snippet of the offending element.

        Args:
            context: Error context containing element data.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted multi-line snippet string, or an empty string
            if no element is available.
        """
        indent = cls._ensure_indent(indent)

        if (element := context.get('element')) is None:
            return ''

        snippet = f'{indent}{SNIPPET_ELLIPSIS}'
        snippet += cls._make_yaml(element, indent)
        snippet += linesep

        return snippet

    @classmethod
    def _make_yaml(cls, value: Any, indent: str = '') -> str:  # noqa: ANN401
        """Serialize a sanitized value to a YAML-formatted string.

        Args:
            value: Arbitrary value to serialize.
            indent: Optional indentation prefix.

        Returns:
            A YAML-formatted string representation of the value.
        """
        data = dump(
            sanitize(value),
            indent=SNIPPET_INDENT,
            sort_keys=False,
            allow_unicode=True,
        )

        return cls._make_indent(data, indent)

    @staticmethod
    def _make_indent(value: str, indent: str) -> str:
        """Apply indentation to a multi-line string.

        Empty or whitespace-only lines are omitted.
        """
        if not indent:
            return value

        return linesep.join(
            f'{indent}{line}'
            for line in value.splitlines()
            if line.strip()
        )

    @staticmethod
    def _ensure_indent(indent: str | int | None = None) -> str:
        """Normalize indentation given as string or number of spaces."""
        if isinstance(indent, int) and indent > 0:
            return ' ' * indent

        if isinstance(indent, str):
            return indent

        return ''


class SpecWarning(UserWarning):
    """Warning emitted for non-fatal build issues.

    Used in relaxed mode, when a malformed table is skipped instead of
    failing the whole build.
    """


class SpecError(Exception, ErrorFormatter):
    """Base exception for all pytest-spectree errors.

    Every error is recoverable by the caller: a failing table or module
    never corrupts state shared with other builds.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context containing optional location and data.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String representation."""
        return self.format(self.message, self.context)

    def with_filename(self, filename: str) -> 'Self':
        """Attach a source filename to the error context.

        Args:
            filename: Spec module file name.

        Returns:
            The same error, for chaining.
        """
        self.context = ErrorContext({**(self.context or {}), 'filename': filename})

        return self


class StructuralError(SpecError):
    """Error raised for malformed declaration sequences.

    Examples are tables whose entries disagree on argument count, or
    subtree bodies that fail to declare a valid subtree. Construction of
    the offending subtree stops; sibling subtrees are unaffected.
    """

    def __init__(self, message: str, *,
                 table: str | None = None,
                 entry_num: int | None = None,
                 element: Any = None,  # noqa: ANN401
                 error: Exception | None = None) -> None:
        """Initialize a structural error.

        Args:
            message: Human-readable error description.
            table: Label of the table being expanded, if any.
            entry_num: Index of the offending entry, if any.
            element: Offending declarative element.
            error: Underlying exception.
        """
        self.table = table
        self.entry_num = entry_num

        context = ErrorContext()
        if table is not None:
            context['table'] = table
        if entry_num is not None:
            context['entry_num'] = entry_num
        if element is not None:
            context['element'] = element
        if error is not None:
            context['error'] = error

        super().__init__(message, context=context or None)

    @classmethod
    def from_pydantic_error(cls, error: 'ValidationError', *,
                            data: Any = None) -> 'Self':  # noqa: ANN401
        """Create a structural error from a Pydantic validation failure.

        The first reported issue becomes the message; its location is
        appended so the offending field can be found.

        Args:
            error: ValidationError raised while validating a declaration.
            data: Raw declaration data.

        Returns:
            StructuralError representing the validation failure.
        """
        message = f'Invalid {error.title} declaration'

        for item in error.errors(include_url=False, include_input=False):
            location = '.'.join(f'{key}' for key in item['loc'])
            details = (item.get('msg') or '').strip()
            if location:
                details = f'{location}: {details}'
            if details:
                message += f'{linesep}{' ' * FORMAT_INDENT}{details}'
            break

        return cls(message, element=data, error=error)


class ArityMismatchError(StructuralError):
    """Error raised when an entry does not match its unit-of-work arity.

    Expansion of the table stops before any node is produced.
    """

    def __init__(self, table: str, entry_num: int, *,
                 expected: str, actual: int,
                 element: Any = None) -> None:  # noqa: ANN401
        """Initialize an arity mismatch error.

        Args:
            table: Label of the table.
            entry_num: Index of the offending entry.
            expected: Human-readable expected arity.
            actual: Number of arguments supplied by the entry.
            element: Offending entry data.
        """
        self.expected = expected
        self.actual = actual

        super().__init__(
            f'Entry supplies {actual} argument(s), unit of work expects {expected}',
            table=table,
            entry_num=entry_num,
            element=element,
        )


class SpecLoadError(SpecError):
    """Error raised when a spec module cannot be imported or inspected."""

    @classmethod
    def from_exception(cls, filename: str, error: Exception) -> 'Self':
        """Create a load error wrapping an import failure.

        Args:
            filename: Spec module file name.
            error: Exception raised while importing.

        Returns:
            SpecLoadError with the failure details.
        """
        message = 'Failed to load spec module'
        message += f'{linesep}{' ' * FORMAT_INDENT}{error!r}'

        return cls(message, context=ErrorContext(filename=filename, error=error))


class SpecRuntimeError(SpecError):
    """Error raised when a leaf body fails with a non-assertion error."""

    @classmethod
    def from_leaf(cls, path: tuple[str, ...], arguments: tuple[Any, ...], *,
                  message: str | None = None,
                  filename: str | None = None) -> 'Self':
        """Create a runtime error for a failing leaf.

        Args:
            path: Resolved path of the leaf.
            arguments: Arguments bound to the leaf body.
            message: An optional custom message.
            filename: An optional filename of source.

        Returns:
            SpecRuntimeError describing the failure.
        """
        error_context = ErrorContext(filename=filename, path=path)
        if arguments:
            error_context['element'] = {'arguments': list(arguments)}

        error_message = 'Runtime error'
        if message:
            error_message += f'{linesep}{' ' * FORMAT_INDENT}{message}'

        return cls(error_message, context=error_context)
