from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from caption_gateway.config import GatewayConfig
from caption_gateway.dependencies import get_caption_model, get_config
from caption_gateway.llm import CaptionModel
from caption_gateway.log_config import logger

from .schema import GenerateCaptionsRequest, GenerateCaptionsResponse
from .service import GENERATION_FAILED_DETAIL, generate_captions

router = APIRouter(prefix="/api", tags=["captions"])

NO_STORE_HEADERS = {"Cache-Control": "no-store, max-age=0"}


@router.post("/generate-captions", response_model=GenerateCaptionsResponse)
async def generate_captions_route(
    request: GenerateCaptionsRequest,
    model: CaptionModel | None = Depends(get_caption_model),
    config: GatewayConfig = Depends(get_config),
) -> JSONResponse:
    try:
        result = await generate_captions(request, model=model, config=config)
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("Error generating captions: %s", exc)
        raise HTTPException(status_code=500, detail=GENERATION_FAILED_DETAIL) from exc
    return JSONResponse(content=result.model_dump(), headers=NO_STORE_HEADERS)
