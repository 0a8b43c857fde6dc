from __future__ import annotations

from fastapi import Header, Request

from bizboost.services.directory import Directory


def get_directory(request: Request) -> Directory:
    return request.app.state.directory


def get_current_user_id(request: Request, x_user_id: str | None = Header(default=None)) -> str:
    """Single local identity; the desktop shell may pass X-User-Id explicitly."""
    user_id = (x_user_id or "").strip()
    if user_id:
        return user_id
    return request.app.state.directory.settings.local_user_id
