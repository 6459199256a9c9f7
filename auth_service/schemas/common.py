"""
schemas/common.py
-----------------
Shared pydantic building blocks.

Wire format is camelCase (firstName, tenantId, currentPage); Python
attributes stay snake_case. populate_by_name lets services and tests
build models with either spelling.
"""

from typing import Generic, List, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class IdResponse(CamelModel):
    id: int


class Page(CamelModel, Generic[T]):
    current_page: int
    per_page: int
    total: int
    data: List[T]


def normalize_email(value):
    """Trim and lower-case before format validation runs."""
    if isinstance(value, str):
        return value.strip().lower()
    return value


def strip_text(value):
    if isinstance(value, str):
        return value.strip()
    return value
