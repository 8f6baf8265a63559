# backoffice/schemas/common.py
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """
    Base for API payloads: snake_case in Python, camelCase on the wire.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(CamelModel):
    """
    Confirmation payload for operations that only report an outcome.
    """

    message: str


class PageMeta(CamelModel):
    size: int
    number: int
    total_elements: int
    total_pages: int


class Page(CamelModel, Generic[T]):
    """
    One page of a sorted listing plus paging metadata.
    """

    content: list[T]
    page: PageMeta
