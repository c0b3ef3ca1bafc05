import os
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_ALLOWED_FILE_TYPES = ["image/jpeg", "image/png", "image/gif", "image/webp"]


class OAuthClientConfig(BaseModel):
    """OAuth application credentials for a social platform."""

    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = ""


class GatewayConfig(BaseSettings):
    """Gateway configuration with support for YAML files and environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CAPTION_GATEWAY_",
        env_file=".env",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(default="0.0.0.0", description="Host to bind the server to")  # noqa: S104
    port: int = Field(default=8000, description="Port to bind the server to")
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["*"],
        description="Allowed CORS origins (comma-separated when given as a string)",
    )
    app_name: str = Field(default="AI Social Caption Assistant", description="Public application name")
    app_url: str = Field(default="http://localhost:3000", description="Public URL of the web front end")

    gemini_api_key: str | None = Field(default=None, description="Google AI Studio API key used for caption generation")
    model: str = Field(default="gemini-2.5-flash", description="Gemini model used for caption generation")
    system_instruction: str = Field(
        default="You are a social media content expert specializing in creating engaging captions.",
        description="System instruction sent with every caption request",
    )
    generation_timeout_seconds: float = Field(
        default=55.0,
        gt=0,
        description="Wall-clock budget for a single model call",
    )
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Model sampling temperature")
    top_p: float = Field(default=0.9, ge=0.0, le=1.0, description="Model nucleus sampling threshold")
    max_output_tokens: int = Field(default=1000, gt=0, description="Maximum tokens the model may return")

    max_file_size: int = Field(default=5 * 1024 * 1024, gt=0, description="Maximum decoded image size in bytes")
    allowed_file_types: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_FILE_TYPES),
        description="Image MIME types accepted for caption generation",
    )

    graph_api_version: str = Field(default="v18.0", description="Facebook/Instagram Graph API version")
    instagram: OAuthClientConfig = Field(default_factory=OAuthClientConfig)
    facebook: OAuthClientConfig = Field(default_factory=OAuthClientConfig)

    @field_validator("cors_origins", "allowed_file_types", mode="before")
    @classmethod
    def _split_comma_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    def missing_credentials(self) -> list[str]:
        """Names of required settings that are not configured."""
        missing: list[str] = []
        if not self.gemini_api_key:
            missing.append("gemini_api_key")
        return missing

    def public_view(self) -> dict[str, Any]:
        """Configuration values that are safe to expose to the browser."""
        return {
            "appName": self.app_name,
            "appUrl": self.app_url,
            "maxFileSize": self.max_file_size,
            "allowedFileTypes": list(self.allowed_file_types),
            "instagram": {"clientId": self.instagram.client_id},
            "facebook": {"appId": self.facebook.client_id},
        }


def load_config(config_path: str | None = None) -> GatewayConfig:
    """Load configuration from file and environment variables.

    Args:
        config_path: Optional path to YAML config file

    Returns:
        GatewayConfig instance with merged configuration

    """
    config_dict: dict[str, Any] = {}

    if config_path and Path(config_path).exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f)
            if yaml_config:
                config_dict = _resolve_env_vars(yaml_config)

    return GatewayConfig(**config_dict)


def _resolve_env_vars(config: Any) -> Any:
    """Recursively resolve environment variable references in config.

    Supports ${VAR_NAME} syntax in string values.
    """
    if isinstance(config, dict):
        return {key: _resolve_env_vars(value) for key, value in config.items()}
    if isinstance(config, list):
        return [_resolve_env_vars(item) for item in config]
    if isinstance(config, str) and config.startswith("${") and config.endswith("}"):
        env_var = config[2:-1]
        return os.getenv(env_var, config)
    return config
