"""Base model class for all public models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class PublicModel(BaseModel):
    """Base model for records handed to the serving layer.

    Fields are snake_case in Python and camelCase on the wire
    (``model_dump(by_alias=True)``).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )
