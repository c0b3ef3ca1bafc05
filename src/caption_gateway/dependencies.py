from collections.abc import AsyncIterator

import httpx

from caption_gateway.config import GatewayConfig
from caption_gateway.llm import CaptionModel
from caption_gateway.social_auth import SocialAuthStorage

HTTP_TIMEOUT_SECONDS = 30.0

_config: GatewayConfig | None = None
_caption_model: CaptionModel | None = None
_auth_storage: SocialAuthStorage | None = None


def set_config(config: GatewayConfig) -> None:
    """Set the global config instance."""
    global _config  # noqa: PLW0603
    _config = config


def get_config() -> GatewayConfig:
    """Get the global config instance."""
    if _config is None:
        msg = "Config not initialized"
        raise RuntimeError(msg)
    return _config


def set_caption_model(model: CaptionModel | None) -> None:
    """Set the model used for caption generation (None when not configured)."""
    global _caption_model  # noqa: PLW0603
    _caption_model = model


def get_caption_model() -> CaptionModel | None:
    return _caption_model


def set_auth_storage(storage: SocialAuthStorage) -> None:
    global _auth_storage  # noqa: PLW0603
    _auth_storage = storage


def get_auth_storage() -> SocialAuthStorage:
    if _auth_storage is None:
        msg = "Auth storage not initialized"
        raise RuntimeError(msg)
    return _auth_storage


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """Per-request HTTP client for the social platform APIs."""
    async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS) as client:
        yield client
