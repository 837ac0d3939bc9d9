from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, Literal
from datetime import datetime

MediaType = Literal["image", "video"]


class MediaCreate(BaseModel):
    """Metadata for a blob the caller has already uploaded."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1)
    description: Optional[str] = None
    file_name: str = Field(min_length=1)
    file_path: str = Field(min_length=1)
    file_size: Optional[int] = Field(default=None, ge=0)
    mime_type: Optional[str] = None
    media_type: MediaType
    storage_bucket: str = Field(min_length=1)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v


class MediaUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None

    @model_validator(mode="after")
    def require_some_field(self):
        if not self.title and "description" not in self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self


class MediaListQuery(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Optional[MediaType] = None
    limit: int = Field(default=50, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class MediaResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    file_name: str
    file_path: str
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    media_type: MediaType
    storage_bucket: str
    uploaded_by: str
    public_url: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MediaUploadResponse(BaseModel):
    file_name: str
    file_path: str
    file_size: int
    mime_type: str
    media_type: MediaType
    storage_bucket: str
    public_url: str


class MediaStatsResponse(BaseModel):
    images: int
    videos: int
    total: int
    total_size: str
    recent_uploads: int


class DeleteResponse(BaseModel):
    success: bool = True
    blob_removed: Optional[bool] = None
