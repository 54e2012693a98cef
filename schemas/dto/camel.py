"""Base model for DTOs whose JSON keys are camelCase."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase on input, emits camelCase by alias."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)
