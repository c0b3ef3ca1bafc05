from __future__ import annotations

from typing import Annotated, Any

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse

from caption_gateway.config import GatewayConfig
from caption_gateway.dependencies import get_auth_storage, get_config, get_http_client
from caption_gateway.log_config import logger, mask_token
from caption_gateway.social_auth import FacebookPage, SocialAuthRecord, SocialAuthStorage

from .schema import FacebookAuthResponse, FacebookPostRequest, PostResponse
from .utils import PlatformAPIError, build_authorize_url, ensure_success

router = APIRouter(prefix="/api/social/facebook", tags=["social"])

FACEBOOK_DIALOG_URL = "https://www.facebook.com"
FACEBOOK_GRAPH_URL = "https://graph.facebook.com"
FACEBOOK_SCOPES = "pages_manage_posts,pages_read_engagement,publish_to_groups"


async def _fetch_pages(client: httpx.AsyncClient, config: GatewayConfig, access_token: str) -> list[FacebookPage]:
    """Pages the user manages; an empty list when the lookup fails."""
    try:
        response = await client.get(
            f"{FACEBOOK_GRAPH_URL}/{config.graph_api_version}/me/accounts",
            params={"access_token": access_token},
        )
        payload = ensure_success(response, "Failed to fetch pages")
    except (PlatformAPIError, httpx.HTTPError, ValueError) as exc:
        logger.warning("Facebook page lookup failed: %s", exc)
        return []

    pages: list[FacebookPage] = []
    for entry in payload.get("data") or []:
        if isinstance(entry, dict) and entry.get("id"):
            pages.append(FacebookPage.model_validate({**entry, "id": str(entry["id"])}))
    return pages


async def exchange_code(client: httpx.AsyncClient, config: GatewayConfig, code: str) -> FacebookAuthResponse:
    token_response = await client.get(
        f"{FACEBOOK_GRAPH_URL}/{config.graph_api_version}/oauth/access_token",
        params={
            "client_id": config.facebook.client_id,
            "redirect_uri": config.facebook.redirect_uri,
            "client_secret": config.facebook.client_secret,
            "code": code,
        },
    )
    token_data = ensure_success(token_response, "Failed to exchange code for token")
    access_token = token_data.get("access_token")
    if not access_token:
        raise PlatformAPIError("Token response did not include an access token")

    pages = await _fetch_pages(client, config, access_token)
    return FacebookAuthResponse(success=True, access_token=access_token, pages=pages)


@router.get("/auth", response_model=FacebookAuthResponse)
async def facebook_auth(
    config: Annotated[GatewayConfig, Depends(get_config)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    storage: Annotated[SocialAuthStorage, Depends(get_auth_storage)],
    code: Annotated[str | None, Query(description="Authorization code returned by Facebook")] = None,
    state: Annotated[str | None, Query(description="Opaque client key echoed back by Facebook")] = None,
) -> FacebookAuthResponse | RedirectResponse:
    """Start the Facebook OAuth flow, or finish it when a code is present."""
    if not code:
        url = build_authorize_url(
            f"{FACEBOOK_DIALOG_URL}/{config.graph_api_version}/dialog/oauth",
            {
                "client_id": config.facebook.client_id,
                "redirect_uri": config.facebook.redirect_uri,
                "scope": FACEBOOK_SCOPES,
                "response_type": "code",
                "state": state,
            },
        )
        return RedirectResponse(url=url)

    try:
        result = await exchange_code(client, config, code)
    except Exception as exc:
        logger.error("Facebook auth error: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication failed",
        ) from exc

    logger.info("Facebook authenticated pages=%d token=%s", len(result.pages), mask_token(result.access_token))
    if state:
        storage.set(
            state,
            SocialAuthRecord(platform="facebook", accessToken=result.access_token, pages=result.pages),
        )
    return result


@router.post("/post", response_model=PostResponse)
async def facebook_post(
    request: FacebookPostRequest,
    config: Annotated[GatewayConfig, Depends(get_config)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> PostResponse:
    """Post a photo to a managed page, or to the user's own profile."""
    if not request.accessToken or not request.caption:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")

    target = request.pageId if request.postToPage and request.pageId else "me"
    endpoint = f"{FACEBOOK_GRAPH_URL}/{config.graph_api_version}/{target}/photos"

    post_data: dict[str, Any] = {
        "access_token": request.accessToken,
        "caption": request.caption,
    }
    if request.imageUrl:
        post_data["url"] = request.imageUrl

    try:
        response = await client.post(endpoint, json=post_data)
        payload = ensure_success(response, "Failed to post to Facebook")
    except PlatformAPIError as exc:
        logger.error("Facebook posting error: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    except httpx.HTTPError as exc:
        logger.error("Facebook posting transport error: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to post to Facebook",
        ) from exc

    post_id = payload.get("id")
    logger.info("Facebook post published target=%s post_id=%s", target, post_id)
    return PostResponse(
        success=True,
        post_id=str(post_id) if post_id is not None else None,
        message="Posted to Facebook successfully!",
    )
