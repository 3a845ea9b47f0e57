from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """Базовая модель API: поля в JSON передаются в camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
