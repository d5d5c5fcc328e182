"""Base model configuration for validated configuration objects."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base model with standard configuration.

    Instances are immutable and reject unknown keys, so typos in a config
    file surface as validation errors instead of being silently ignored.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")
