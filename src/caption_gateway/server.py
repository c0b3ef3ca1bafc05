from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from caption_gateway import __version__
from caption_gateway.config import GatewayConfig
from caption_gateway.dependencies import set_auth_storage, set_caption_model, set_config
from caption_gateway.llm import build_caption_model
from caption_gateway.log_config import logger
from caption_gateway.routes import health
from caption_gateway.routes.captions import router as captions_router
from caption_gateway.routes.social import facebook_router, instagram_router, session_router
from caption_gateway.social_auth import InMemoryKeyValueStore, SocialAuthStorage


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected request %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request"})


def create_app(config: GatewayConfig) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Gateway configuration

    Returns:
        Configured FastAPI application

    """
    set_config(config)
    for name in config.missing_credentials():
        logger.warning("Missing required setting %s; caption generation will fail until it is set", name)
    set_caption_model(build_caption_model(config))
    set_auth_storage(SocialAuthStorage(InMemoryKeyValueStore()))

    app = FastAPI(
        title="caption-gateway",
        description="AI-generated social media captions and direct publishing to Instagram and Facebook",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(health.router)
    app.include_router(captions_router)
    app.include_router(instagram_router)
    app.include_router(facebook_router)
    app.include_router(session_router)

    @app.get("/", include_in_schema=False)
    async def redirect_to_docs() -> RedirectResponse:
        """Redirect root requests to interactive API docs."""
        return RedirectResponse(url="/docs")

    return app
