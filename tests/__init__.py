"""Test suite for the pytest-spectree package.

This package contains unit and integration tests validating the
declaration DSL, table expansion, tree building, name resolution,
traversal, pytest integration and command-line utilities.
"""
