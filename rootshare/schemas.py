from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .errors import ErrorKind


class MkdirRequest(BaseModel):
    path: str = '/'
    name: str = Field(min_length=1, max_length=4096)


class DeleteRequest(BaseModel):
    path: str = Field(min_length=1, max_length=4096)


class MoveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_path: str = Field(alias='oldPath', min_length=1, max_length=4096)
    new_path: str = Field(alias='newPath', min_length=1, max_length=4096)


class FileEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    name: str
    is_directory: bool
    size: int
    updated_at: datetime


class UploadFailureOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: Optional[str]
    kind: ErrorKind
    message: str


class UploadResult(BaseModel):
    stored: list[str]
    failed: list[UploadFailureOut] = Field(default_factory=list)


class ApiResponse(BaseModel):
    ok: bool
    message: str
    data: Optional[Any] = None
