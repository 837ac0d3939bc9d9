from app.config.settings import settings
from app.core.audit import AuditRecorder
from app.core.dependencies import RequestContext, require_admin
from app.core.exceptions import NotFound, StoreFailure, ValidationError
from app.core.storage import StorageBridge, object_path
from app.core.timestamps import parse_timestamp, start_of_month
from app.modules.media.schemas import (
    MediaCreate, MediaUpdate, MediaListQuery, MediaResponse,
    MediaUploadResponse, MediaStatsResponse, DeleteResponse
)
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

MEDIA_TABLE = "media_items"


class MediaService:
    def __init__(self, ctx: RequestContext, storage: Optional[StorageBridge] = None):
        self.ctx = ctx
        self.audit = AuditRecorder(ctx.db)
        self.storage = storage or StorageBridge(ctx.db)

    def _to_response(self, row: Dict[str, Any]) -> MediaResponse:
        item = MediaResponse(**row)
        item.public_url = self.storage.public_url(item.storage_bucket, item.file_path)
        return item

    def _fetch(self, media_id: str) -> Dict[str, Any]:
        try:
            result = self.ctx.db.table(MEDIA_TABLE)\
                .select("*")\
                .eq("id", media_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.error("Error fetching media item %s: %s", media_id, e)
            raise StoreFailure(f"Failed to fetch media item: {e}")
        if not result or not result.data:
            raise NotFound("Media item not found")
        return result.data

    def upload_media(self, media_type: str, filename: Optional[str], content: bytes,
                     content_type: Optional[str]) -> MediaUploadResponse:
        """Store a blob under the caller's namespace ahead of create_media."""
        actor = require_admin(self.ctx)
        if not content:
            raise ValidationError("Uploaded file is empty")
        if len(content) > settings.max_upload_bytes:
            raise ValidationError(f"File exceeds maximum size of {settings.max_upload_bytes} bytes")
        content_type = content_type or "application/octet-stream"
        family = content_type.split("/", 1)[0]
        if family in ("image", "video") and family != media_type:
            raise ValidationError(f"Content type {content_type} does not match media type {media_type}")

        bucket = settings.bucket_for_media_type(media_type)
        path = object_path(actor.id, filename, content_type)
        public_url = self.storage.upload(bucket, path, content, content_type)
        return MediaUploadResponse(
            file_name=filename or path.rsplit("/", 1)[-1],
            file_path=path,
            file_size=len(content),
            mime_type=content_type,
            media_type=media_type,
            storage_bucket=bucket,
            public_url=public_url,
        )

    def create_media(self, data: MediaCreate) -> MediaResponse:
        actor = require_admin(self.ctx)
        logger.info("Creating media item: %s", data.title)
        try:
            existing = self.ctx.db.table(MEDIA_TABLE)\
                .select("id")\
                .eq("storage_bucket", data.storage_bucket)\
                .eq("file_path", data.file_path)\
                .execute()
            if existing.data:
                raise ValidationError("A media item already references this file path")

            result = self.ctx.db.table(MEDIA_TABLE).insert({
                "title": data.title,
                "description": data.description or None,
                "file_name": data.file_name,
                "file_path": data.file_path,
                "file_size": data.file_size,
                "mime_type": data.mime_type,
                "media_type": data.media_type,
                "storage_bucket": data.storage_bucket,
                "uploaded_by": actor.id,
                "usage_locations": [],
            }).execute()
            if not result.data:
                raise StoreFailure("Failed to create media item")
        except HTTPException:
            raise
        except Exception as e:
            logger.error("Error creating media item: %s", e)
            raise StoreFailure(f"Failed to create media item: {e}")

        row = result.data[0]
        logger.info("Created media item: %s", row["id"])
        self.audit.record(MEDIA_TABLE, "media_created", actor.id, row["id"],
                          {"title": data.title, "media_type": data.media_type, "file_path": data.file_path})
        return self._to_response(row)

    def update_media(self, media_id: str, data: MediaUpdate) -> MediaResponse:
        """Partial update of title/description. Returns the stored row untouched when nothing changes."""
        actor = require_admin(self.ctx)
        existing = self._fetch(media_id)

        updates: Dict[str, Any] = {}
        if data.title is not None:
            title = data.title.strip()
            if not title:
                raise ValidationError("Title is required")
            if title != existing.get("title"):
                updates["title"] = title
        if "description" in data.model_fields_set:
            description = (data.description or "").strip() or None
            if description != existing.get("description"):
                updates["description"] = description

        if not updates:
            logger.info("Media update %s: no changes detected", media_id)
            return self._to_response(existing)

        updates["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.ctx.db.table(MEDIA_TABLE)\
                .update(updates)\
                .eq("id", media_id)\
                .execute()
        except Exception as e:
            logger.error("Error updating media item %s: %s", media_id, e)
            raise StoreFailure(f"Failed to update media item: {e}")
        if not result.data:
            raise NotFound("Media item not found")

        changed = {k: v for k, v in updates.items() if k != "updated_at"}
        self.audit.record(MEDIA_TABLE, "media_updated", actor.id, media_id, changed)
        return self._to_response(result.data[0])

    def delete_media(self, media_id: str) -> DeleteResponse:
        """Remove the blob first (best effort), then the row."""
        actor = require_admin(self.ctx)
        item = self._fetch(media_id)

        blob_removed = self.storage.remove(item["storage_bucket"], item["file_path"])
        if not blob_removed:
            logger.warning("Media delete %s: blob %s/%s was not removed, deleting row anyway",
                           media_id, item["storage_bucket"], item["file_path"])

        try:
            self.ctx.db.table(MEDIA_TABLE).delete().eq("id", media_id).execute()
        except Exception as e:
            logger.error("Error deleting media item %s: %s", media_id, e)
            raise StoreFailure(f"Failed to delete media item: {e}")

        logger.info("Deleted media item: %s", media_id)
        self.audit.record(MEDIA_TABLE, "media_deleted", actor.id, media_id,
                          {"file_path": item["file_path"], "storage_bucket": item["storage_bucket"],
                           "blob_removed": blob_removed})
        return DeleteResponse(blob_removed=blob_removed)

    def list_media(self, query: MediaListQuery) -> List[MediaResponse]:
        """Public listing, newest first."""
        try:
            q = self.ctx.store.table(MEDIA_TABLE).select("*")
            if query.type:
                q = q.eq("media_type", query.type)
            result = q.order("created_at", desc=True)\
                .order("id")\
                .range(query.offset, query.offset + query.limit - 1)\
                .execute()
        except Exception as e:
            logger.error("Error fetching media items: %s", e)
            raise StoreFailure(f"Failed to fetch media items: {e}")
        return [self._to_response(row) for row in result.data or []]

    def get_stats(self) -> MediaStatsResponse:
        try:
            result = self.ctx.store.table(MEDIA_TABLE)\
                .select("media_type, file_size, created_at")\
                .execute()
        except Exception as e:
            logger.error("Error fetching media statistics: %s", e)
            raise StoreFailure(f"Failed to fetch media statistics: {e}")

        rows = result.data or []
        images = sum(1 for r in rows if r.get("media_type") == "image")
        videos = sum(1 for r in rows if r.get("media_type") == "video")
        total_bytes = sum(r.get("file_size") or 0 for r in rows)
        month_start = start_of_month()
        recent = 0
        for r in rows:
            created = parse_timestamp(r.get("created_at"))
            if created and created >= month_start:
                recent += 1
        return MediaStatsResponse(
            images=images,
            videos=videos,
            total=images + videos,
            total_size=f"{total_bytes / (1024 * 1024):.2f} MB",
            recent_uploads=recent,
        )
