"""Storage of social platform OAuth results.

Records are kept behind a small key-value interface so the in-memory store can
be swapped for a persistent session store without touching the routes.
"""
from __future__ import annotations

from typing import Literal, Protocol

from pydantic import BaseModel, Field, ValidationError

from caption_gateway.log_config import logger

SocialPlatform = Literal["instagram", "facebook"]
SOCIAL_PLATFORMS: tuple[SocialPlatform, ...] = ("instagram", "facebook")

_DISPLAY_NAMES = {
    "instagram": "Instagram",
    "facebook": "Facebook",
    "twitter": "Twitter",
    "linkedin": "LinkedIn",
}


class FacebookPage(BaseModel):
    id: str
    name: str | None = None
    access_token: str | None = None


class SocialAuthRecord(BaseModel):
    platform: SocialPlatform
    accessToken: str
    userId: str | None = None
    pages: list[FacebookPage] = Field(default_factory=list)
    isAuthenticated: bool = True


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store; contents are lost on restart."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SocialAuthStorage:
    """One auth record per (owner, platform) pair under a namespaced key."""

    def __init__(self, store: KeyValueStore, namespace: str = "social_auth") -> None:
        self.store = store
        self.namespace = namespace

    def _key(self, owner: str, platform: str) -> str:
        return f"{self.namespace}_{platform}:{owner}"

    def set(self, owner: str, record: SocialAuthRecord) -> None:
        self.store.set(self._key(owner, record.platform), record.model_dump_json())

    def get(self, owner: str, platform: str) -> SocialAuthRecord | None:
        raw = self.store.get(self._key(owner, platform))
        if raw is None:
            return None
        try:
            return SocialAuthRecord.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding unreadable auth record platform=%s", platform)
            self.store.delete(self._key(owner, platform))
            return None

    def remove(self, owner: str, platform: str) -> None:
        self.store.delete(self._key(owner, platform))

    def clear(self, owner: str) -> None:
        for platform in SOCIAL_PLATFORMS:
            self.remove(owner, platform)

    def is_authenticated(self, owner: str, platform: str) -> bool:
        record = self.get(owner, platform)
        return bool(record and record.isAuthenticated and record.accessToken)


def platform_display_name(platform: str) -> str:
    return _DISPLAY_NAMES.get(platform.lower(), platform)
