from app.core.audit import AuditRecorder
from app.core.dependencies import RequestContext, require_admin, require_profile, PROFILES_TABLE
from app.core.exceptions import NotFound, StoreFailure, ValidationError
from app.modules.users.schemas import (
    Profile, UserListQuery, UserListResponse, RoleUpdate, StatusUpdate,
    BulkDeleteRequest, BulkDeleteResponse, ProfileMutationResponse, ProfileUpdate
)
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def _search_pattern(term: str) -> str:
    # PostgREST or-filters are comma/paren separated
    cleaned = "".join(ch for ch in term if ch not in ",()").strip()
    return f"name.ilike.%{cleaned}%,email.ilike.%{cleaned}%,phone.ilike.%{cleaned}%"


class UserService:
    def __init__(self, ctx: RequestContext):
        self.ctx = ctx
        self.audit = AuditRecorder(ctx.db)

    def list_users(self, query: UserListQuery) -> UserListResponse:
        """Filtered, sorted, paginated profile listing with the unpaginated total."""
        require_admin(self.ctx)
        try:
            q = self.ctx.db.table(PROFILES_TABLE).select("*", count="exact")
            if query.search and query.search.strip():
                q = q.or_(_search_pattern(query.search))
            if query.role:
                q = q.eq("role", query.role)
            if query.status:
                q = q.eq("status", query.status)
            q = q.order(query.sort_by, desc=query.sort_order == "desc")
            if query.sort_by != "created_at":
                q = q.order("created_at", desc=True)
            result = q.range(query.offset, query.offset + query.limit - 1).execute()
            return UserListResponse(
                users=[Profile(**u) for u in result.data or []],
                total=result.count or 0,
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error("Error fetching users: %s", e)
            raise StoreFailure(f"Failed to fetch users: {e}")

    def get_user(self, user_id: str) -> Profile:
        require_admin(self.ctx)
        try:
            result = self.ctx.db.table(PROFILES_TABLE)\
                .select("*")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                raise NotFound("User not found")
            return Profile(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            logger.error("Error fetching user %s: %s", user_id, e)
            raise StoreFailure(f"Failed to fetch user: {e}")

    def _update_profile(self, user_id: str, updates: dict, what: str) -> Profile:
        try:
            result = self.ctx.db.table(PROFILES_TABLE)\
                .update(updates)\
                .eq("id", user_id)\
                .execute()
        except Exception as e:
            logger.error("Error updating user %s: %s", what, e)
            raise StoreFailure(f"Failed to update user {what}: {e}")
        if not result.data:
            raise NotFound("User not found")
        return Profile(**result.data[0])

    def update_role(self, user_id: str, body: RoleUpdate) -> ProfileMutationResponse:
        actor = require_admin(self.ctx)
        user = self._update_profile(user_id, {"role": body.role}, "role")
        self.audit.record(PROFILES_TABLE, "role_change", actor.id, user_id, {"new_role": body.role})
        return ProfileMutationResponse(user=user)

    def update_status(self, user_id: str, body: StatusUpdate) -> ProfileMutationResponse:
        actor = require_admin(self.ctx)
        user = self._update_profile(user_id, {"status": body.status}, "status")
        self.audit.record(PROFILES_TABLE, "status_change", actor.id, user_id, {"new_status": body.status})
        return ProfileMutationResponse(user=user)

    def delete_user(self, user_id: str) -> None:
        actor = require_admin(self.ctx)
        if user_id == actor.id:
            raise ValidationError("Cannot delete your own account")
        try:
            result = self.ctx.db.table(PROFILES_TABLE)\
                .delete()\
                .eq("id", user_id)\
                .execute()
        except Exception as e:
            logger.error("Error deleting user %s: %s", user_id, e)
            raise StoreFailure(f"Failed to delete user: {e}")
        if not result.data:
            raise NotFound("User not found")
        logger.info("User %s deleted by %s", user_id, actor.id)
        self.audit.record(PROFILES_TABLE, "user_deleted", actor.id, user_id, {})

    def bulk_delete(self, body: BulkDeleteRequest) -> BulkDeleteResponse:
        actor = require_admin(self.ctx)
        targets = [uid for uid in dict.fromkeys(body.user_ids) if uid != actor.id]
        if not targets:
            raise ValidationError("No valid users to delete")
        try:
            result = self.ctx.db.table(PROFILES_TABLE)\
                .delete()\
                .in_("id", targets)\
                .execute()
        except Exception as e:
            logger.error("Error bulk deleting users: %s", e)
            raise StoreFailure(f"Failed to bulk delete users: {e}")
        removed = {row["id"] for row in result.data or []}
        deleted_ids = [uid for uid in targets if uid in removed]
        logger.info("Bulk delete by %s removed %d of %d users", actor.id, len(deleted_ids), len(targets))
        if deleted_ids:
            self.audit.record(PROFILES_TABLE, "bulk_user_deleted", actor.id, None, {"deleted_ids": deleted_ids})
        return BulkDeleteResponse(deleted=len(deleted_ids), deleted_ids=deleted_ids)

    def get_me(self) -> Profile:
        return require_profile(self.ctx)

    def update_me(self, body: ProfileUpdate) -> Profile:
        """Self-service profile update through the caller's own (RLS-scoped) client."""
        profile = require_profile(self.ctx)
        updates = body.model_dump(exclude_unset=True)
        if not updates:
            return profile
        updates["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.ctx.store.table(PROFILES_TABLE)\
                .update(updates)\
                .eq("id", profile.id)\
                .execute()
        except Exception as e:
            logger.error("Error updating own profile %s: %s", profile.id, e)
            raise StoreFailure(f"Failed to update profile: {e}")
        if not result.data:
            raise NotFound("Profile not found")
        return Profile(**result.data[0])
