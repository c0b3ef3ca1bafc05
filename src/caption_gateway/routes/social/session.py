from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from caption_gateway.dependencies import get_auth_storage
from caption_gateway.social_auth import SocialAuthStorage, SocialPlatform, platform_display_name

from .schema import AuthStatusResponse

router = APIRouter(prefix="/api/social", tags=["social"])


@router.get("/{platform}/status", response_model=AuthStatusResponse)
async def auth_status(
    platform: SocialPlatform,
    state: Annotated[str, Query(min_length=1, description="Client key used when the account was connected")],
    storage: Annotated[SocialAuthStorage, Depends(get_auth_storage)],
) -> AuthStatusResponse:
    return AuthStatusResponse(
        platform=platform,
        displayName=platform_display_name(platform),
        isAuthenticated=storage.is_authenticated(state, platform),
    )


@router.delete("/{platform}/auth", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    platform: SocialPlatform,
    state: Annotated[str, Query(min_length=1, description="Client key used when the account was connected")],
    storage: Annotated[SocialAuthStorage, Depends(get_auth_storage)],
) -> None:
    """Forget the stored connection for this platform."""
    storage.remove(state, platform)


@router.delete("/auth", status_code=status.HTTP_204_NO_CONTENT)
async def logout_all(
    state: Annotated[str, Query(min_length=1, description="Client key used when the accounts were connected")],
    storage: Annotated[SocialAuthStorage, Depends(get_auth_storage)],
) -> None:
    """Forget every stored connection for this client."""
    storage.clear(state)
