from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# HH:MM, 24h
TIME_OF_DAY = r"^([01]\d|2[0-3]):[0-5]\d$"


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CountOut(CamelModel):
    count: int


class SuccessOut(CamelModel):
    success: bool = True


class MessageOut(CamelModel):
    message: str


def time_of_day(default=None):
    return Field(default=default, pattern=TIME_OF_DAY)
