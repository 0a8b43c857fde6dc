from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from bizboost.core.deps import get_directory
from bizboost.schemas.deals import DealCreate, DealListResponse, DealResponse, DealUpdate
from bizboost.services.directory import Directory

router = APIRouter(tags=["deals"])


@router.get("/deals/active", response_model=DealListResponse)
def list_active_deals(directory: Directory = Depends(get_directory)) -> DealListResponse:
    items = directory.get_active_deals()
    return DealListResponse(items=items, total=len(items))


@router.get("/businesses/{business_id}/deals", response_model=DealListResponse)
def list_business_deals(
    business_id: str,
    directory: Directory = Depends(get_directory),
    active: bool = Query(default=False),
) -> DealListResponse:
    if active:
        items = directory.get_active_deals(business_id)
    else:
        items = directory.get_deals_by_business(business_id)
    return DealListResponse(items=items, total=len(items))


@router.post("/businesses/{business_id}/deals", response_model=DealResponse, status_code=201)
def create_deal(
    business_id: str,
    payload: DealCreate,
    directory: Directory = Depends(get_directory),
) -> DealResponse:
    return directory.create_deal(business_id, **payload.model_dump())


@router.patch("/deals/{deal_id}", response_model=DealResponse)
def update_deal(deal_id: str, payload: DealUpdate, directory: Directory = Depends(get_directory)) -> DealResponse:
    return directory.set_deal_active(deal_id, payload.is_active)
