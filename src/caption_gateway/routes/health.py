from typing import Annotated, Any

from fastapi import APIRouter, Depends

from caption_gateway import __version__
from caption_gateway.config import GatewayConfig
from caption_gateway.dependencies import get_caption_model, get_config
from caption_gateway.llm import CaptionModel

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(model: Annotated[CaptionModel | None, Depends(get_caption_model)]) -> dict[str, Any]:
    """Liveness probe; reports whether caption generation is configured."""
    return {"status": "ok", "version": __version__, "captionModelConfigured": model is not None}


@router.get("/api/config")
async def public_config(config: Annotated[GatewayConfig, Depends(get_config)]) -> dict[str, Any]:
    """Client-safe configuration for the web front end."""
    return config.public_view()
