from fastapi import APIRouter, Depends, File, Query, UploadFile
from app.core.dependencies import RequestContext, get_request_context
from app.modules.portfolio.schemas import (
    PortfolioCreate, PortfolioUpdate, PortfolioListQuery, PortfolioResponse,
    PortfolioUploadResponse, PortfolioStatsResponse, DeleteResponse
)
from app.modules.portfolio.service import PortfolioService
from typing import Annotated, List

router = APIRouter(prefix="/portfolio", tags=["portfolio"])


def get_portfolio_service(ctx: RequestContext = Depends(get_request_context)) -> PortfolioService:
    return PortfolioService(ctx)


@router.get("", response_model=List[PortfolioResponse])
async def list_portfolio(
    query: Annotated[PortfolioListQuery, Query()],
    service: PortfolioService = Depends(get_portfolio_service)
):
    """Gallery in display order. include_hidden is honored for admins only."""
    return service.list_items(query)


@router.get("/stats", response_model=PortfolioStatsResponse)
async def portfolio_stats(service: PortfolioService = Depends(get_portfolio_service)):
    return service.get_stats()


@router.post("/upload", response_model=PortfolioUploadResponse, status_code=201)
async def upload_portfolio_image(
    file: UploadFile = File(...),
    service: PortfolioService = Depends(get_portfolio_service)
):
    """Upload an image to the portfolio bucket; use the returned public_url as image_url"""
    content = await file.read()
    return service.upload_image(file.filename, content, file.content_type)


@router.post("", response_model=PortfolioResponse, status_code=201)
async def create_portfolio_item(
    item_data: PortfolioCreate,
    service: PortfolioService = Depends(get_portfolio_service)
):
    return service.create_item(item_data)


@router.patch("/{item_id}", response_model=PortfolioResponse)
async def update_portfolio_item(
    item_id: str,
    item_data: PortfolioUpdate,
    service: PortfolioService = Depends(get_portfolio_service)
):
    return service.update_item(item_id, item_data)


@router.delete("/{item_id}", response_model=DeleteResponse)
async def delete_portfolio_item(
    item_id: str,
    service: PortfolioService = Depends(get_portfolio_service)
):
    return service.delete_item(item_id)
