from __future__ import annotations

from fastapi import APIRouter, Depends

from bizboost.core.deps import get_directory
from bizboost.schemas.users import LocalUserResponse
from bizboost.services.directory import Directory

router = APIRouter(tags=["users"])


@router.get("/me", response_model=LocalUserResponse)
def me(directory: Directory = Depends(get_directory)) -> LocalUserResponse:
    return directory.get_local_user()
