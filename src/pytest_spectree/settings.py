"""Runtime configuration.

Settings are resolved from `SPECTREE_*` environment variables and may be
overridden by pytest or CLI options.
"""

from re import compile as regexp
from typing import Any, Self

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from pytest_spectree.models import SettingsModel
from pytest_spectree.names import Separator  # noqa: TC001

#: File names collected as spec modules by default.
DEFAULT_FILE_PATTERN = r'^(spec_.+|.+_spec)\.py$'


class SpectreeSettings(SettingsModel):
    """Settings controlling tree building and collection."""

    model_config = SettingsConfigDict(
        env_prefix='SPECTREE_',
        frozen=True,
        extra='ignore',
    )

    separator: Separator = Field(
        default=' ',
        title='Path separator',
        description='Separator used to render resolved paths as names.',
    )

    strict: bool = Field(
        default=True,
        title='Strict mode',
        description=(
            'Raise on the first build error. When disabled, malformed '
            'tables are reported as warnings and skipped.'
        ),
    )

    file_pattern: str = Field(
        default=DEFAULT_FILE_PATTERN,
        title='Spec file pattern',
        description='Regular expression matching spec module file names.',
    )

    @field_validator('file_pattern')
    @classmethod
    def check_file_pattern(cls, value: str) -> str:
        """Ensure the file pattern is a valid regular expression.

        Raises:
            ValueError: If the pattern does not compile.
        """
        try:
            regexp(value)
        except Exception as base:
            raise ValueError(f'Invalid file pattern {value!r}') from base

        return value

    def override(self, **options: Any) -> Self:  # noqa: ANN401
        """Return a copy with explicitly provided options applied.

        Options set to `None` are ignored, so unset command-line flags keep
        values resolved from the environment.

        Args:
            **options: Candidate overrides.

        Returns:
            Updated settings.
        """
        updates = {
            name: value
            for name, value in options.items()
            if value is not None
        }
        if not updates:
            return self

        return self.model_validate({**self.model_dump(), **updates})

    def matches(self, filename: str) -> bool:
        """Check whether a file name should be collected as a spec module."""
        return regexp(self.file_pattern).match(filename) is not None
