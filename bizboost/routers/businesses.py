from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query

from bizboost.core.deps import get_directory
from bizboost.schemas.businesses import BusinessCreate, BusinessListResponse, BusinessResponse
from bizboost.services.directory import Directory

router = APIRouter(prefix="/businesses", tags=["businesses"])


@router.get("", response_model=BusinessListResponse)
def list_businesses(
    directory: Directory = Depends(get_directory),
    q: str | None = Query(default=None, max_length=200),
    category: str | None = Query(default=None, max_length=100),
    sort: Literal["rating", "reviews", "name"] = Query(default="rating"),
) -> BusinessListResponse:
    if q and q.strip():
        items = directory.search_businesses(q, category=category, sort=sort)
    else:
        items = directory.get_all_businesses(category=category, sort=sort)
    return BusinessListResponse(items=items, total=len(items))


@router.get("/categories", response_model=list[str])
def list_categories(directory: Directory = Depends(get_directory)) -> list[str]:
    return directory.get_categories()


@router.post("", response_model=BusinessResponse, status_code=201)
def create_business(payload: BusinessCreate, directory: Directory = Depends(get_directory)) -> BusinessResponse:
    return directory.create_business(**payload.model_dump())


@router.get("/{business_id}", response_model=BusinessResponse)
def get_business(business_id: str, directory: Directory = Depends(get_directory)) -> BusinessResponse:
    return directory.get_business_by_id(business_id)
