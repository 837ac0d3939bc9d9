from pydantic import BaseModel


class DashboardStatsResponse(BaseModel):
    users: int = 0
    locations: int = 0
    workshops: int = 0
    portfolio: int = 0
    videos: int = 0
    coupons: int = 0
    comments: int = 0
