from app.core.dependencies import RequestContext
from app.modules.dashboard.schemas import DashboardStatsResponse
from typing import Dict, Optional, Tuple
import asyncio
import logging

logger = logging.getLogger(__name__)

# stat name -> (table, optional (column, value) filter)
COUNT_SOURCES: Dict[str, Tuple[str, Optional[Tuple[str, object]]]] = {
    "users": ("profiles", None),
    "locations": ("locations", None),
    "workshops": ("workshops", None),
    "portfolio": ("portfolio", None),
    "videos": ("bts_videos", None),
    "coupons": ("coupons", None),
    "comments": ("location_comments", ("hidden", False)),
}


class DashboardService:
    def __init__(self, ctx: RequestContext):
        self.ctx = ctx

    def _count(self, table: str, where: Optional[Tuple[str, object]] = None) -> int:
        """Exact row count via a head request. Missing tables or failures count as zero."""
        try:
            q = self.ctx.store.table(table).select("id", count="exact", head=True)
            if where:
                q = q.eq(where[0], where[1])
            result = q.execute()
            return result.count or 0
        except Exception as e:
            logger.warning("Count on %s failed, reporting 0: %s", table, e)
            return 0

    async def get_stats(self) -> DashboardStatsResponse:
        names = list(COUNT_SOURCES)
        counts = await asyncio.gather(*[
            asyncio.to_thread(self._count, *COUNT_SOURCES[name]) for name in names
        ])
        return DashboardStatsResponse(**dict(zip(names, counts)))
