import re
from typing import Any
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

MAX_TEXT_LENGTH = 1000


def sanitize_input(value: Any) -> Any:
    """Strip markup characters and quotes from free text and cap its length"""
    if isinstance(value, str):
        value = re.sub(r"[<>]", "", value.strip())
        value = re.sub(r"['\"]", "", value)
        return value[:MAX_TEXT_LENGTH]
    return value


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys while keeping snake_case attributes"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MessageResponse(BaseModel):
    message: str
