from __future__ import annotations

from fastapi import Header, HTTPException, status


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Identity of the caller, set by the upstream auth gateway after token validation."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user identity",
        )
    return x_user_id.strip()
