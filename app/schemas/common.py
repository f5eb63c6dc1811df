# app/schemas/common.py
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Accept and emit camelCase keys (`meetingLink`), while still accepting
    snake_case on input. Also readable straight from ORM rows.
    """

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
