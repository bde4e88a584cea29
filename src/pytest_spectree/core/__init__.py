"""Spec discovery and expansion engine.

This package turns declaration sequences into resolved node trees.

It provides:
- the expanded declaration model (containers and leaves);
- table expansion into leaves or per-entry subtrees;
- a recursive tree builder with local, recoverable errors;
- name resolution and read-only traversal.

The primary public entry point is `SpecTree.build`, which builds, expands
and resolves a declaration sequence in one call.
"""

from .builder import BuildResult, TreeBuilder
from .expander import Arity, Binding, TableExpander, infer_arity
from .loader import SpecLoader
from .nodes import ContainerNode, LeafNode, Node
from .resolver import NameResolver
from .tree import SpecTree

__all__ = (
    'Arity',
    'Binding',
    'BuildResult',
    'ContainerNode',
    'LeafNode',
    'NameResolver',
    'Node',
    'SpecLoader',
    'SpecTree',
    'TableExpander',
    'TreeBuilder',
    'infer_arity',
)
