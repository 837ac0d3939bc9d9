from app.config.settings import settings
from app.core.audit import AuditRecorder
from app.core.dependencies import RequestContext, require_admin
from app.core.exceptions import NotFound, StoreFailure, ValidationError
from app.core.storage import StorageBridge, object_path, path_from_public_url
from app.core.timestamps import parse_timestamp, start_of_month
from app.modules.portfolio.schemas import (
    PortfolioCreate, PortfolioUpdate, PortfolioListQuery, PortfolioResponse,
    PortfolioUploadResponse, PortfolioStatsResponse, DeleteResponse
)
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

PORTFOLIO_TABLE = "portfolio"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def display_order(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """order_index ascending, ties broken by created_at descending (newest first)."""
    newest_first = sorted(rows, key=lambda r: parse_timestamp(r.get("created_at")) or _EPOCH, reverse=True)
    return sorted(newest_first, key=lambda r: r.get("order_index") or 0)


class PortfolioService:
    def __init__(self, ctx: RequestContext, storage: Optional[StorageBridge] = None):
        self.ctx = ctx
        self.audit = AuditRecorder(ctx.db)
        self.storage = storage or StorageBridge(ctx.db)

    def _fetch(self, item_id: str) -> Dict[str, Any]:
        try:
            result = self.ctx.db.table(PORTFOLIO_TABLE)\
                .select("*")\
                .eq("id", item_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.error("Error fetching portfolio item %s: %s", item_id, e)
            raise StoreFailure(f"Failed to fetch portfolio item: {e}")
        if not result or not result.data:
            raise NotFound("Portfolio item not found")
        return result.data

    def list_items(self, query: PortfolioListQuery) -> List[PortfolioResponse]:
        """Visible items for everyone; hidden ones too only when an admin asks for them."""
        show_hidden = query.include_hidden and self.ctx.is_admin
        client = self.ctx.db if self.ctx.is_admin else self.ctx.store
        try:
            q = client.table(PORTFOLIO_TABLE).select("*")
            if not show_hidden:
                q = q.eq("visible", True)
            result = q.order("order_index").execute()
        except Exception as e:
            logger.error("Error fetching portfolio items: %s", e)
            raise StoreFailure(f"Failed to fetch portfolio items: {e}")
        rows = display_order(result.data or [])
        logger.debug("Portfolio list returned %d items (hidden included: %s)", len(rows), show_hidden)
        return [PortfolioResponse(**row) for row in rows]

    def upload_image(self, filename: Optional[str], content: bytes, content_type: Optional[str]) -> PortfolioUploadResponse:
        actor = require_admin(self.ctx)
        if not content:
            raise ValidationError("Uploaded file is empty")
        if len(content) > settings.max_upload_bytes:
            raise ValidationError(f"File exceeds maximum size of {settings.max_upload_bytes} bytes")
        content_type = content_type or "image/jpeg"
        if not content_type.startswith("image/"):
            raise ValidationError("Portfolio uploads must be images")
        bucket = settings.portfolio_bucket
        path = object_path(actor.id, filename, content_type)
        public_url = self.storage.upload(bucket, path, content, content_type)
        return PortfolioUploadResponse(file_path=path, storage_bucket=bucket, public_url=public_url)

    def create_item(self, data: PortfolioCreate) -> PortfolioResponse:
        actor = require_admin(self.ctx)
        logger.info("Creating portfolio item: %s", data.title)
        try:
            result = self.ctx.db.table(PORTFOLIO_TABLE).insert({
                "title": data.title,
                "description": data.description or None,
                "image_url": data.image_url,
                "order_index": data.order_index,
                "visible": data.visible,
            }).execute()
        except Exception as e:
            logger.error("Error creating portfolio item: %s", e)
            raise StoreFailure(f"Failed to create portfolio item: {e}")
        if not result.data:
            raise StoreFailure("Failed to create portfolio item")
        row = result.data[0]
        self.audit.record(PORTFOLIO_TABLE, "portfolio_created", actor.id, row["id"],
                          {"title": data.title, "visible": data.visible, "order_index": data.order_index})
        return PortfolioResponse(**row)

    def update_item(self, item_id: str, data: PortfolioUpdate) -> PortfolioResponse:
        actor = require_admin(self.ctx)
        existing = self._fetch(item_id)
        updates = data.model_dump(exclude_unset=True)
        if "title" in updates:
            if updates["title"] is None or not updates["title"].strip():
                raise ValidationError("Title is required")
            updates["title"] = updates["title"].strip()
        for field in ("image_url", "order_index", "visible"):
            if field in updates and updates[field] is None:
                raise ValidationError(f"{field} cannot be null")
        if not updates:
            return PortfolioResponse(**existing)
        try:
            result = self.ctx.db.table(PORTFOLIO_TABLE)\
                .update(updates)\
                .eq("id", item_id)\
                .execute()
        except Exception as e:
            logger.error("Error updating portfolio item %s: %s", item_id, e)
            raise StoreFailure(f"Failed to update portfolio item: {e}")
        if not result.data:
            raise NotFound("Portfolio item not found")
        self.audit.record(PORTFOLIO_TABLE, "portfolio_updated", actor.id, item_id, updates)
        return PortfolioResponse(**result.data[0])

    def delete_item(self, item_id: str) -> DeleteResponse:
        """Delete portfolio row; the image blob is removed first only if it lives in the portfolio bucket."""
        actor = require_admin(self.ctx)
        item = self._fetch(item_id)

        blob_removed = None
        file_path = path_from_public_url(item.get("image_url"), settings.portfolio_bucket)
        if file_path:
            blob_removed = self.storage.remove(settings.portfolio_bucket, file_path)

        try:
            self.ctx.db.table(PORTFOLIO_TABLE).delete().eq("id", item_id).execute()
        except Exception as e:
            logger.error("Error deleting portfolio item %s: %s", item_id, e)
            raise StoreFailure(f"Failed to delete portfolio item: {e}")
        logger.info("Deleted portfolio item: %s", item_id)
        self.audit.record(PORTFOLIO_TABLE, "portfolio_deleted", actor.id, item_id,
                          {"image_url": item.get("image_url"), "blob_removed": blob_removed})
        return DeleteResponse(blob_removed=blob_removed)

    def get_stats(self) -> PortfolioStatsResponse:
        require_admin(self.ctx)
        try:
            result = self.ctx.db.table(PORTFOLIO_TABLE).select("created_at, visible").execute()
        except Exception as e:
            logger.error("Error fetching portfolio statistics: %s", e)
            raise StoreFailure(f"Failed to fetch portfolio statistics: {e}")
        rows = result.data or []
        visible = sum(1 for r in rows if r.get("visible"))
        month_start = start_of_month()
        recent = 0
        for r in rows:
            created = parse_timestamp(r.get("created_at"))
            if created and created >= month_start:
                recent += 1
        return PortfolioStatsResponse(total=len(rows), visible=visible, hidden=len(rows) - visible,
                                      recent_uploads=recent)
