from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Literal
from datetime import datetime

Role = Literal["admin", "viewer"]
Status = Literal["active", "suspended"]
SortField = Literal["created_at", "last_login", "name", "email"]
SortOrder = Literal["asc", "desc"]


class Profile(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    role: Role = "viewer"
    status: Status = "active"
    last_login: Optional[datetime] = None
    profile_image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserListQuery(BaseModel):
    model_config = ConfigDict(extra="forbid")

    search: Optional[str] = None
    role: Optional[Role] = None
    status: Optional[Status] = None
    sort_by: SortField = "created_at"
    sort_order: SortOrder = "desc"
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class UserListResponse(BaseModel):
    users: List[Profile]
    total: int


class RoleUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    role: Role


class StatusUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: Status


class BulkDeleteRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_ids: List[str] = Field(min_length=1)


class BulkDeleteResponse(BaseModel):
    success: bool = True
    deleted: int
    deleted_ids: List[str]


class ProfileMutationResponse(BaseModel):
    success: bool = True
    user: Profile


class ProfileUpdate(BaseModel):
    """Self-service fields only; role and status are rejected as unknown fields."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=50)
    profile_image_url: Optional[str] = None
