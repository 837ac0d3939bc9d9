from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from app.core.dependencies import RequestContext, get_request_context
from app.modules.media.schemas import (
    MediaCreate, MediaUpdate, MediaListQuery, MediaResponse, MediaType,
    MediaUploadResponse, MediaStatsResponse, DeleteResponse
)
from app.modules.media.service import MediaService
from typing import Annotated, List

router = APIRouter(prefix="/media", tags=["media"])


def get_media_service(ctx: RequestContext = Depends(get_request_context)) -> MediaService:
    return MediaService(ctx)


@router.get("", response_model=List[MediaResponse])
async def list_media(
    query: Annotated[MediaListQuery, Query()],
    service: MediaService = Depends(get_media_service)
):
    """Public media library listing, newest first"""
    return service.list_media(query)


@router.get("/stats", response_model=MediaStatsResponse)
async def media_stats(service: MediaService = Depends(get_media_service)):
    return service.get_stats()


@router.post("/upload", response_model=MediaUploadResponse, status_code=201)
async def upload_media(
    file: UploadFile = File(...),
    media_type: MediaType = Form(...),
    service: MediaService = Depends(get_media_service)
):
    """
    Upload an image or video blob. The response carries the storage path and
    metadata to send to POST /media to register the item.
    """
    content = await file.read()
    return service.upload_media(media_type, file.filename, content, file.content_type)


@router.post("", response_model=MediaResponse, status_code=201)
async def create_media(
    media_data: MediaCreate,
    service: MediaService = Depends(get_media_service)
):
    """Register an already uploaded blob as a media item"""
    return service.create_media(media_data)


@router.patch("/{media_id}", response_model=MediaResponse)
async def update_media(
    media_id: str,
    media_data: MediaUpdate,
    service: MediaService = Depends(get_media_service)
):
    return service.update_media(media_id, media_data)


@router.delete("/{media_id}", response_model=DeleteResponse)
async def delete_media(
    media_id: str,
    service: MediaService = Depends(get_media_service)
):
    """Delete media item; blob removal is attempted first and never blocks the row delete"""
    return service.delete_media(media_id)
