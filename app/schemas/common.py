from typing import Optional, List, Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Model serialized with camelCase keys; accepts either spelling on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: Optional[List[FieldError]] = None
    error: Optional[str] = None


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool


class DataResponse(BaseModel, Generic[DataT]):
    success: bool = True
    data: DataT


class MessageDataResponse(BaseModel, Generic[DataT]):
    success: bool = True
    message: str
    data: DataT


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ListResponse(BaseModel, Generic[DataT]):
    success: bool = True
    data: List[DataT]
    pagination: Pagination


class OptionItem(BaseModel):
    value: str
    label: str
