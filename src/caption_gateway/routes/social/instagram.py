from __future__ import annotations

from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse

from caption_gateway.config import GatewayConfig
from caption_gateway.dependencies import get_auth_storage, get_config, get_http_client
from caption_gateway.log_config import logger, mask_token
from caption_gateway.social_auth import SocialAuthRecord, SocialAuthStorage

from .schema import InstagramAuthResponse, InstagramPostRequest, PostResponse
from .utils import PlatformAPIError, build_authorize_url, ensure_success

router = APIRouter(prefix="/api/social/instagram", tags=["social"])

INSTAGRAM_AUTHORIZE_URL = "https://api.instagram.com/oauth/authorize"
INSTAGRAM_TOKEN_URL = "https://api.instagram.com/oauth/access_token"
INSTAGRAM_GRAPH_URL = "https://graph.instagram.com"
INSTAGRAM_SCOPES = "user_profile,user_media"


async def exchange_code(client: httpx.AsyncClient, config: GatewayConfig, code: str) -> InstagramAuthResponse:
    """Trade an authorization code for a long-lived Instagram token."""
    token_response = await client.post(
        INSTAGRAM_TOKEN_URL,
        data={
            "client_id": config.instagram.client_id,
            "client_secret": config.instagram.client_secret,
            "grant_type": "authorization_code",
            "redirect_uri": config.instagram.redirect_uri,
            "code": code,
        },
    )
    token_data = ensure_success(token_response, "Failed to exchange code for token")
    short_lived = token_data.get("access_token")
    if not short_lived:
        raise PlatformAPIError("Token response did not include an access token")

    long_lived_response = await client.get(
        f"{INSTAGRAM_GRAPH_URL}/access_token",
        params={
            "grant_type": "ig_exchange_token",
            "client_secret": config.instagram.client_secret,
            "access_token": short_lived,
        },
    )
    long_lived_data = ensure_success(long_lived_response, "Failed to exchange for long-lived token")
    access_token = long_lived_data.get("access_token")
    if not access_token:
        raise PlatformAPIError("Long-lived token response did not include an access token")

    user_id = token_data.get("user_id")
    return InstagramAuthResponse(
        success=True,
        access_token=access_token,
        user_id=str(user_id) if user_id is not None else None,
    )


@router.get("/auth", response_model=InstagramAuthResponse)
async def instagram_auth(
    config: Annotated[GatewayConfig, Depends(get_config)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    storage: Annotated[SocialAuthStorage, Depends(get_auth_storage)],
    code: Annotated[str | None, Query(description="Authorization code returned by Instagram")] = None,
    state: Annotated[str | None, Query(description="Opaque client key echoed back by Instagram")] = None,
) -> InstagramAuthResponse | RedirectResponse:
    """Start the Instagram OAuth flow, or finish it when a code is present."""
    if not code:
        url = build_authorize_url(
            INSTAGRAM_AUTHORIZE_URL,
            {
                "client_id": config.instagram.client_id,
                "redirect_uri": config.instagram.redirect_uri,
                "scope": INSTAGRAM_SCOPES,
                "response_type": "code",
                "state": state,
            },
        )
        return RedirectResponse(url=url)

    try:
        result = await exchange_code(client, config, code)
    except Exception as exc:
        logger.error("Instagram auth error: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication failed",
        ) from exc

    logger.info("Instagram authenticated user_id=%s token=%s", result.user_id, mask_token(result.access_token))
    if state:
        storage.set(
            state,
            SocialAuthRecord(platform="instagram", accessToken=result.access_token, userId=result.user_id),
        )
    return result


@router.post("/post", response_model=PostResponse)
async def instagram_post(
    request: InstagramPostRequest,
    config: Annotated[GatewayConfig, Depends(get_config)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> PostResponse:
    """Publish an image with a caption: create a media container, then publish it."""
    if not request.accessToken or not request.userId or not request.imageUrl or not request.caption:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")

    base = f"{INSTAGRAM_GRAPH_URL}/{config.graph_api_version}/{request.userId}"
    try:
        container_response = await client.post(
            f"{base}/media",
            json={
                "image_url": request.imageUrl,
                "caption": request.caption,
                "access_token": request.accessToken,
            },
        )
        container = ensure_success(container_response, "Failed to create media container")
        creation_id = container.get("id")
        if not creation_id:
            raise PlatformAPIError("Failed to create media container: missing container id")

        publish_response = await client.post(
            f"{base}/media_publish",
            json={"creation_id": creation_id, "access_token": request.accessToken},
        )
        published = ensure_success(publish_response, "Failed to publish media")
    except PlatformAPIError as exc:
        logger.error("Instagram posting error: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    except httpx.HTTPError as exc:
        logger.error("Instagram posting transport error: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to post to Instagram",
        ) from exc

    post_id = published.get("id")
    logger.info("Instagram post published user_id=%s post_id=%s", request.userId, post_id)
    return PostResponse(
        success=True,
        post_id=str(post_id) if post_id is not None else None,
        message="Posted to Instagram successfully!",
    )
