"""Shared base for caller-supplied argument models"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    """Accepts snake_case and camelCase keys; unknown keys are rejected"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")
