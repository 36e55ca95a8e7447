from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Envelope(ApiModel, Generic[T]):
    data: T


class UserRef(ApiModel):
    id: int
    nickname: str = ""
