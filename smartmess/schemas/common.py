from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts camelCase or snake_case input; dumps camelCase with ``by_alias``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)
