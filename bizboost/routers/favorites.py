from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from bizboost.core.deps import get_current_user_id, get_directory
from bizboost.schemas.businesses import BusinessListResponse
from bizboost.schemas.favorites import FavoriteResponse, FavoriteStatusResponse
from bizboost.services.directory import Directory

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("", response_model=BusinessListResponse)
def list_favorites(
    user_id: str = Depends(get_current_user_id),
    directory: Directory = Depends(get_directory),
) -> BusinessListResponse:
    items = directory.get_favorites_by_user(user_id)
    return BusinessListResponse(items=items, total=len(items))


@router.get("/{business_id}", response_model=FavoriteStatusResponse)
def favorite_status(
    business_id: str,
    user_id: str = Depends(get_current_user_id),
    directory: Directory = Depends(get_directory),
) -> FavoriteStatusResponse:
    return FavoriteStatusResponse(business_id=business_id, is_favorite=directory.is_favorite(user_id, business_id))


@router.put("/{business_id}", response_model=FavoriteResponse)
def add_favorite(
    business_id: str,
    user_id: str = Depends(get_current_user_id),
    directory: Directory = Depends(get_directory),
) -> FavoriteResponse:
    return directory.add_favorite(user_id, business_id)


@router.delete("/{business_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_favorite(
    business_id: str,
    user_id: str = Depends(get_current_user_id),
    directory: Directory = Depends(get_directory),
) -> Response:
    directory.remove_favorite(user_id, business_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
