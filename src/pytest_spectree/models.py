"""Base Pydantic models for declarations, nodes and settings.

This module defines the foundational model classes used by all spectree
structures. It enforces immutability and strict schema validation so that
declaration trees are deterministic and free of silent typos.
"""

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchemaModel(BaseModel):
    """Base immutable model for declarations and nodes.

    Design principles enforced by this model:
        - Immutability: declarations and nodes cannot be modified after
          creation. Resolution builds new instances instead.
        - Strict schema validation: unknown or extra fields are rejected.

    Opaque bodies are plain callables, hence arbitrary types are allowed.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    Unknown environment variables are ignored so that the surrounding
    environment may contain unrelated values.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )
