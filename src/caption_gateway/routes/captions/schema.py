from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel

Platform = Literal["Instagram", "Twitter", "Facebook", "LinkedIn"]

PLATFORMS: tuple[Platform, ...] = ("Instagram", "Twitter", "Facebook", "LinkedIn")
PLATFORM_KEYS: dict[Platform, str] = {platform: platform.lower() for platform in PLATFORMS}
_PLATFORMS_BY_KEY: dict[str, Platform] = {key: platform for platform, key in PLATFORM_KEYS.items()}


class GenerateCaptionsRequest(BaseModel):
    image: str | None = None
    context: str | None = None
    platforms: List[str] | None = None


class Caption(BaseModel):
    platform: Platform
    text: str


class GenerateCaptionsResponse(BaseModel):
    captions: List[Caption]


def normalize_platform(name: str) -> Platform | None:
    """Map a case-insensitive platform name to its canonical form."""
    return _PLATFORMS_BY_KEY.get(name.strip().lower())
