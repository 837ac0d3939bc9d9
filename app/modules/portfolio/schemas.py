from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime
from urllib.parse import urlparse


def _check_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Invalid image URL")
    return value


class PortfolioCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1)
    description: Optional[str] = None
    image_url: str
    order_index: int = 0
    visible: bool = True

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("image_url")
    @classmethod
    def image_url_is_url(cls, v: str) -> str:
        return _check_url(v)


class PortfolioUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None
    order_index: Optional[int] = None
    visible: Optional[bool] = None

    @field_validator("image_url")
    @classmethod
    def image_url_is_url(cls, v: Optional[str]) -> Optional[str]:
        return _check_url(v)


class PortfolioListQuery(BaseModel):
    model_config = ConfigDict(extra="forbid")

    include_hidden: bool = False


class PortfolioResponse(BaseModel):
    id: str
    title: str
    image_url: str
    description: Optional[str] = None
    order_index: int = 0
    visible: bool = True
    created_at: datetime

    class Config:
        from_attributes = True


class PortfolioUploadResponse(BaseModel):
    file_path: str
    storage_bucket: str
    public_url: str


class PortfolioStatsResponse(BaseModel):
    total: int
    visible: int
    hidden: int
    recent_uploads: int


class DeleteResponse(BaseModel):
    success: bool = True
    blob_removed: Optional[bool] = None
