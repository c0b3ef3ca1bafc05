"""Shared fixtures: an app wired to a fake caption model and stubbed platform APIs."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Iterator
from typing import Any
from urllib.parse import parse_qs

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from caption_gateway.config import GatewayConfig, OAuthClientConfig
from caption_gateway.dependencies import get_caption_model, get_http_client
from caption_gateway.server import create_app


class FakeCaptionModel:
    """Stands in for Gemini; records every call it receives."""

    def __init__(self) -> None:
        self.reply = ""
        self.error: Exception | None = None
        self.delay = 0.0
        self.calls: list[tuple[str, bytes, str]] = []

    async def generate(self, prompt: str, image: bytes, mime_type: str) -> str:
        self.calls.append((prompt, image, mime_type))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


class PlatformAPIStub:
    """Canned responses for Graph API calls, keyed by method and URL without query."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], httpx.Response | Exception] = {}

    def add(self, method: str, url: str, status_code: int = 200, json_body: Any = None) -> None:
        self._routes[(method.upper(), url)] = httpx.Response(
            status_code, json=json_body if json_body is not None else {}
        )

    def add_text(self, method: str, url: str, text: str, status_code: int = 200) -> None:
        self._routes[(method.upper(), url)] = httpx.Response(status_code, text=text)

    def fail(self, method: str, url: str, error: Exception) -> None:
        self._routes[(method.upper(), url)] = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        route = self._routes.get((request.method, url))
        if route is None:
            return httpx.Response(404, json={"error": {"message": f"no stub for {request.method} {url}"}})
        if isinstance(route, Exception):
            raise route
        return httpx.Response(route.status_code, headers=route.headers, content=route.content)

    def calls_to(self, url: str) -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if f"{request.url.scheme}://{request.url.host}{request.url.path}" == url
        ]

    @staticmethod
    def json_body(request: httpx.Request) -> dict[str, Any]:
        return json.loads(request.content)

    @staticmethod
    def form_body(request: httpx.Request) -> dict[str, str]:
        return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


@pytest.fixture
def config() -> GatewayConfig:
    return GatewayConfig(
        _env_file=None,
        gemini_api_key="test-api-key",
        generation_timeout_seconds=5.0,
        instagram=OAuthClientConfig(
            client_id="ig-client",
            client_secret="ig-secret",
            redirect_uri="https://app.example.com/api/social/instagram/auth",
        ),
        facebook=OAuthClientConfig(
            client_id="fb-app",
            client_secret="fb-secret",
            redirect_uri="https://app.example.com/api/social/facebook/auth",
        ),
    )


@pytest.fixture
def fake_model() -> FakeCaptionModel:
    return FakeCaptionModel()


@pytest.fixture
def platform_api() -> PlatformAPIStub:
    return PlatformAPIStub()


@pytest.fixture
def app(config: GatewayConfig, fake_model: FakeCaptionModel, platform_api: PlatformAPIStub) -> Iterator[FastAPI]:
    app = create_app(config)

    async def _http_client() -> AsyncIterator[httpx.AsyncClient]:
        async with httpx.AsyncClient(transport=httpx.MockTransport(platform_api.handler)) as client:
            yield client

    app.dependency_overrides[get_caption_model] = lambda: fake_model
    app.dependency_overrides[get_http_client] = _http_client
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
