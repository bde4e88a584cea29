"""Declarative schema of spec modules.

Defines immutable Pydantic models describing containers, leaves, tables
and entries as written by spec authors, before any expansion.
"""

from .declarations import (
    DECLARATIONS,
    Body,
    ContainerDeclaration,
    Declaration,
    Description,
    EntryDeclaration,
    LeafDeclaration,
    TableDeclaration,
)

__all__ = (
    'DECLARATIONS',
    'Body',
    'ContainerDeclaration',
    'Declaration',
    'Description',
    'EntryDeclaration',
    'LeafDeclaration',
    'TableDeclaration',
)
