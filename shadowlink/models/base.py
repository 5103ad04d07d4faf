"""Base models for profile serialization."""

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel


class CamelCaseModel(BaseModel):
    """Base model using camelCase JSON serialization for stored records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
