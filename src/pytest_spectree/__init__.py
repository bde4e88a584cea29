"""Static discovery and expansion of BDD-style spec declarations.

The `pytest_spectree` package turns nested `describe`/`context`/`when`/`it`
declarations and table constructs (`describe_table`,
`describe_table_subtree`) into a concrete, named tree of test cases
without executing any test body.

Key features:
- declarative DSL producing immutable, validated declaration models;
- table expansion into leaves or per-entry subtrees;
- deterministic resolved paths for every node;
- lazy, restartable traversal consumed by pytest and the CLI.
"""
