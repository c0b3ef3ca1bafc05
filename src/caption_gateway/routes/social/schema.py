from __future__ import annotations

from typing import List

from pydantic import BaseModel

from caption_gateway.social_auth import FacebookPage, SocialPlatform


class InstagramPostRequest(BaseModel):
    accessToken: str | None = None
    userId: str | None = None
    imageUrl: str | None = None
    caption: str | None = None


class FacebookPostRequest(BaseModel):
    accessToken: str | None = None
    pageId: str | None = None
    imageUrl: str | None = None
    caption: str | None = None
    postToPage: bool = False


class PostResponse(BaseModel):
    success: bool
    post_id: str | None = None
    message: str


class InstagramAuthResponse(BaseModel):
    success: bool
    access_token: str
    user_id: str | None = None


class FacebookAuthResponse(BaseModel):
    success: bool
    access_token: str
    pages: List[FacebookPage]


class AuthStatusResponse(BaseModel):
    platform: SocialPlatform
    displayName: str
    isAuthenticated: bool
