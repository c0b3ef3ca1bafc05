"""Validation and model orchestration for caption generation."""
from __future__ import annotations

import asyncio
import base64
import binascii
from dataclasses import dataclass

from fastapi import HTTPException, status

from caption_gateway.config import GatewayConfig
from caption_gateway.llm import CaptionModel
from caption_gateway.log_config import logger

from .parser import build_captions, clean_text, fallback_captions, parse_json
from .prompt import build_prompt
from .schema import GenerateCaptionsRequest, GenerateCaptionsResponse, Platform, normalize_platform

GENERATION_FAILED_DETAIL = "Failed to generate captions"
INVALID_IMAGE_DETAIL = "Invalid image format"
IMAGE_TOO_LARGE_DETAIL = "Image exceeds maximum file size"


@dataclass(frozen=True)
class DecodedImage:
    mime_type: str
    data: bytes


def _estimated_size(payload: str) -> int:
    """Decoded byte length of a base64 payload, padded or not."""
    data_chars = len(payload.rstrip("="))
    return data_chars * 3 // 4


def decode_image_data_url(value: str, *, max_size: int | None = None) -> DecodedImage:
    """Split a ``data:image/...;base64,`` URL into its MIME type and bytes.

    With ``max_size``, payloads whose decoded length would exceed it are
    rejected before decoding.
    """
    if not value.startswith("data:image/") or "," not in value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_IMAGE_DETAIL)

    header, base64_payload = value.split(",", 1)
    mime_type = header[5:].split(";", 1)[0].strip().lower()
    payload = "".join(base64_payload.split())
    if not mime_type or not payload:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_IMAGE_DETAIL)

    if max_size is not None and _estimated_size(payload) > max_size:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=IMAGE_TOO_LARGE_DETAIL)

    # Browsers occasionally drop trailing padding.
    payload += "=" * (-len(payload) % 4)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_IMAGE_DETAIL) from exc
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_IMAGE_DETAIL)
    return DecodedImage(mime_type=mime_type, data=data)


def resolve_platforms(names: list[str]) -> list[Platform]:
    """Canonical platform names in request order, without duplicates."""
    resolved: list[Platform] = []
    for name in names:
        platform = normalize_platform(name)
        if platform is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unsupported platform: {name}")
        if platform not in resolved:
            resolved.append(platform)
    return resolved


def _check_upload_limits(image: DecodedImage, config: GatewayConfig) -> None:
    allowed = {mime.lower() for mime in config.allowed_file_types}
    if image.mime_type not in allowed:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unsupported image type")
    if len(image.data) > config.max_file_size:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=IMAGE_TOO_LARGE_DETAIL)


async def generate_captions(
    request: GenerateCaptionsRequest,
    *,
    model: CaptionModel | None,
    config: GatewayConfig,
) -> GenerateCaptionsResponse:
    if not config.gemini_api_key or model is None:
        logger.error("Caption generation requested but gemini_api_key is not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Caption generation is not configured",
        )
    if not request.image:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Image is required")
    if not request.platforms:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one platform must be selected",
        )
    platforms = resolve_platforms(request.platforms)
    image = decode_image_data_url(request.image, max_size=config.max_file_size)
    _check_upload_limits(image, config)

    prompt = build_prompt(request.context, platforms)
    logger.info(
        "captions.generate platforms=%s mime=%s image_bytes=%d context_len=%d",
        ",".join(platforms),
        image.mime_type,
        len(image.data),
        len(request.context or ""),
    )

    try:
        # The SDK call cannot be cancelled upstream; a late reply is dropped.
        text = await asyncio.wait_for(
            model.generate(prompt, image.data, image.mime_type),
            timeout=config.generation_timeout_seconds,
        )
    except asyncio.TimeoutError as exc:
        logger.error("Caption model call timed out after %.1fs", config.generation_timeout_seconds)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=GENERATION_FAILED_DETAIL,
        ) from exc

    cleaned = clean_text(text or "")
    parsed = parse_json(cleaned)
    if parsed is None:
        logger.error("Error parsing caption JSON, returning placeholders. Response text: %s", cleaned[:2000])
        return GenerateCaptionsResponse(captions=fallback_captions(platforms))

    captions = build_captions(parsed, platforms)
    if not captions:
        logger.error("Model response had no usable captions for %s: %s", ",".join(platforms), cleaned[:2000])
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=GENERATION_FAILED_DETAIL,
        )
    return GenerateCaptionsResponse(captions=captions)
