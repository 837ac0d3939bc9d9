"""Append-only audit trail for privileged mutations."""

from supabase import Client
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

AUDIT_TABLE = "audit_logs"


class AuditRecorder:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def record(
        self,
        table_name: str,
        action: str,
        actor_id: Optional[str],
        row_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Insert one audit row. Failures are logged and reported as False, never raised."""
        try:
            self.supabase.table(AUDIT_TABLE).insert({
                "table_name": table_name,
                "action": action,
                "performed_by": actor_id,
                "row_id": row_id,
                "payload": payload if payload is not None else {},
            }).execute()
            logger.info("Audit: %s on %s (row=%s) by %s", action, table_name, row_id, actor_id)
            return True
        except Exception as e:
            logger.error("Failed to write audit entry %s on %s (row=%s): %s", action, table_name, row_id, e)
            return False
