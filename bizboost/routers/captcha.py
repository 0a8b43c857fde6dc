from __future__ import annotations

from fastapi import APIRouter, Depends

from bizboost.core.deps import get_directory
from bizboost.schemas.captcha import CaptchaRequest, CaptchaResponse
from bizboost.services.directory import Directory

router = APIRouter(prefix="/captcha", tags=["captcha"])


@router.post("", response_model=CaptchaResponse, status_code=201)
def generate_captcha(
    payload: CaptchaRequest | None = None,
    directory: Directory = Depends(get_directory),
) -> CaptchaResponse:
    session_id = payload.session_id if payload else None
    return directory.generate_captcha(session_id)
