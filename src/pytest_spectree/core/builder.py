"""Tree construction from declaration sequences.

The builder walks declarations in order and assembles nodes: containers
recurse into their body, leaves are copied over, and tables are delegated
to the `TableExpander` whose result is spliced in place of the table.

Build errors are local. A malformed table contributes no node while its
siblings still build; errors are collected into the build result, or
raised immediately in strict mode.
"""

from typing import TYPE_CHECKING
from warnings import warn

from pydantic import Field

from pytest_spectree.errors import SpecError, SpecWarning, StructuralError
from pytest_spectree.models import SchemaModel
from pytest_spectree.schema import ContainerDeclaration, LeafDeclaration, TableDeclaration

from .expander import Binding, TableExpander
from .nodes import ContainerNode, LeafNode, Node

if TYPE_CHECKING:
    from collections.abc import Iterable


class BuildResult(SchemaModel):
    """Nodes produced by a build, alongside the errors it collected."""

    nodes: tuple[Node, ...] = Field(
        default=(),
        title='Top level nodes',
    )

    errors: tuple[SpecError, ...] = Field(
        default=(),
        title='Build errors',
        description='Errors of subtrees excluded from the nodes.',
    )

    @property
    def ok(self) -> bool:
        """Whether the build completed without errors."""
        return not self.errors


class TreeBuilder:
    """Builder of node trees from declaration sequences.

    Attributes:
        strict_mode: If True, the first build error is raised. If False,
            errors are collected, emitted as warnings, and the offending
            subtrees are left out.
    """

    def __init__(self, strict: bool = False) -> None:
        """Initialize the builder.

        Args:
            strict: Whether to raise on the first build error.
        """
        self.strict_mode = strict
        self.expander = TableExpander(self)

    def build(self, declarations: 'Iterable[object]',
              binding: Binding | None = None) -> BuildResult:
        """Build nodes from a declaration sequence.

        Args:
            declarations: Declarations in order.
            binding: Initial environment, empty by default.

        Returns:
            Build result holding the nodes and the collected errors.

        Raises:
            StructuralError: On the first build error in strict mode.
        """
        issues: list[SpecError] = []

        nodes = self.build_nodes(declarations, binding or Binding(), issues)

        for issue in issues:
            warn(str(issue), category=SpecWarning, stacklevel=2)

        return BuildResult(nodes=nodes, errors=tuple(issues))

    def build_nodes(self, declarations: 'Iterable[object]', binding: Binding,
                    issues: list[SpecError]) -> tuple[Node, ...]:
        """Build the nodes of one declaration sequence.

        Args:
            declarations: Declarations in order.
            binding: Environment of the sequence.
            issues: Collected build issues.

        Returns:
            Nodes in declaration order, tables spliced in place.
        """
        nodes: list[Node] = []

        for position, declaration in enumerate(declarations):
            match declaration:
                case ContainerDeclaration():
                    nodes.append(self.build_container(declaration, binding, issues))
                case LeafDeclaration():
                    nodes.append(self.build_leaf(declaration, binding))
                case TableDeclaration():
                    nodes.extend(self.build_table(declaration, binding, issues))
                case _:
                    if error := self.emit_issue(StructuralError(
                        f'Unsupported declaration {type(declaration).__name__!r} '
                        f'at position {position}',
                    ), issues):
                        raise error

        return tuple(nodes)

    def build_container(self, declaration: ContainerDeclaration, binding: Binding,
                        issues: list[SpecError]) -> ContainerNode:
        """Build a container and, recursively, its body."""
        scope = binding.nest(declaration.pending)

        return ContainerNode(
            label=declaration.label,
            children=self.build_nodes(declaration.body, scope, issues),
            focus=declaration.focus,
            pending=scope.pending,
        )

    def build_leaf(self, declaration: LeafDeclaration, binding: Binding) -> LeafNode:
        """Build a leaf; leaves without a body are pending."""
        return LeafNode(
            label=declaration.label,
            body=declaration.body,
            focus=declaration.focus,
            pending=binding.pending or declaration.pending or declaration.body is None,
        )

    def build_table(self, declaration: TableDeclaration, binding: Binding,
                    issues: list[SpecError]) -> tuple[Node, ...]:
        """Expand a table, leaving it out entirely when it is malformed."""
        try:
            return self.expander.expand(declaration, binding, issues)

        except StructuralError as base:
            if error := self.emit_issue(base, issues):
                raise error

        return ()

    def emit_issue(self, error: SpecError, issues: list[SpecError]) -> SpecError | None:
        """Record a build issue or return it to be raised.

        Args:
            error: Build error.
            issues: Collected build issues.

        Returns:
            The error on strict mode, otherwise `None` after recording it.
        """
        if self.strict_mode:
            return error

        issues.append(error)

        return None
