"""Spec module loading.

Spec modules are plain Python files declaring specs at module level with
the `pytest_spectree.dsl` functions. The loader imports such a file under
a private module name and returns its top level declarations:

- the `__specs__` sequence, when the module defines one;
- otherwise every module global holding a declaration, in definition order.
"""

from hashlib import sha1
from importlib.util import module_from_spec, spec_from_file_location
from sys import modules
from typing import TYPE_CHECKING

from pytest_spectree.errors import SpecError, SpecLoadError
from pytest_spectree.schema import DECLARATIONS, ContainerDeclaration

if TYPE_CHECKING:
    from pathlib import Path
    from types import ModuleType

    from pytest_spectree.schema import Declaration

SPECS_ATTRIBUTE = '__specs__'
MODULE_PREFIX = '_spectree_'


class SpecLoader:
    """Loader of declarations from spec module files."""

    @staticmethod
    def module_name(path: 'Path') -> str:
        """Build a private, path-unique module name for a spec file."""
        digest = sha1(f'{path.resolve()}'.encode(), usedforsecurity=False).hexdigest()

        return f'{MODULE_PREFIX}{path.stem}_{digest[:8]}'

    def load_module(self, path: 'Path') -> 'ModuleType':
        """Import a spec module from a file.

        Args:
            path: Spec module file.

        Returns:
            Imported module.

        Raises:
            SpecError: If the module declares malformed specs.
            SpecLoadError: If the module cannot be imported.
        """
        name = self.module_name(path)
        spec = spec_from_file_location(name, path)
        if spec is None or spec.loader is None:
            raise SpecLoadError('Not an importable spec module').with_filename(f'{path}')

        module = module_from_spec(spec)
        modules[name] = module

        try:
            spec.loader.exec_module(module)

        except SpecError as base:
            modules.pop(name, None)
            raise base.with_filename(f'{path}')

        except Exception as base:
            modules.pop(name, None)
            raise SpecLoadError.from_exception(f'{path}', base) from base

        return module

    def collect(self, module: 'ModuleType') -> tuple['Declaration', ...]:
        """Collect the top level declarations of a module.

        Args:
            module: Imported spec module.

        Returns:
            Declarations in order.

        Raises:
            SpecLoadError: If `__specs__` holds anything but declarations.
        """
        filename = getattr(module, '__file__', None) or module.__name__

        specs = getattr(module, SPECS_ATTRIBUTE, None)
        if specs is None:
            return self.collect_globals(module)

        if isinstance(specs, DECLARATIONS):
            return (specs,)

        try:
            declarations = tuple(specs)
        except TypeError as base:
            raise SpecLoadError(
                f'{SPECS_ATTRIBUTE} must be a sequence of declarations',
            ).with_filename(filename) from base

        for position, value in enumerate(declarations):
            if not isinstance(value, DECLARATIONS):
                raise SpecLoadError(
                    f'{SPECS_ATTRIBUTE} item {position} is {type(value).__name__!r}, '
                    'not a declaration',
                ).with_filename(filename)

        return declarations

    @staticmethod
    def collect_globals(module: 'ModuleType') -> tuple['Declaration', ...]:
        """Collect declarations bound to module globals.

        Declarations nested in another collected declaration, and values
        bound to several names, are collected once at their outermost
        position.
        """
        candidates: dict[int, Declaration] = {}
        for name, value in vars(module).items():
            if not name.startswith('__') and isinstance(value, DECLARATIONS):
                candidates.setdefault(id(value), value)

        nested: set[int] = set()
        pending = [
            child
            for value in candidates.values()
            if isinstance(value, ContainerDeclaration)
            for child in value.body
        ]
        while pending:
            child = pending.pop()
            nested.add(id(child))
            if isinstance(child, ContainerDeclaration):
                pending.extend(child.body)

        return tuple(
            value
            for key, value in candidates.items()
            if key not in nested
        )

    def load(self, path: 'Path') -> tuple['Declaration', ...]:
        """Import a spec module and collect its declarations.

        Args:
            path: Spec module file.

        Returns:
            Top level declarations in order.

        Raises:
            SpecError: If the module cannot be loaded or is malformed.
        """
        return self.collect(self.load_module(path))
