import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from caption_gateway.config import GatewayConfig, load_config


def test_defaults_match_upload_and_sampling_limits() -> None:
    config = GatewayConfig(_env_file=None)

    assert config.max_file_size == 5 * 1024 * 1024
    assert config.allowed_file_types == ["image/jpeg", "image/png", "image/gif", "image/webp"]
    assert config.temperature == 0.7
    assert config.top_p == 0.9


def test_comma_separated_lists_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CAPTION_GATEWAY_ALLOWED_FILE_TYPES", "image/png, image/webp")
    monkeypatch.setenv("CAPTION_GATEWAY_INSTAGRAM__CLIENT_ID", "from-env")

    config = GatewayConfig(_env_file=None)

    assert config.allowed_file_types == ["image/png", "image/webp"]
    assert config.instagram.client_id == "from-env"


@pytest.mark.parametrize(
    "overrides",
    [{"temperature": 2.5}, {"top_p": 1.5}, {"max_file_size": 0}, {"generation_timeout_seconds": 0}],
)
def test_out_of_range_values_are_rejected(overrides: dict[str, float]) -> None:
    with pytest.raises(ValidationError):
        GatewayConfig(_env_file=None, **overrides)


def test_missing_credentials_lists_gemini_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CAPTION_GATEWAY_GEMINI_API_KEY", raising=False)

    assert GatewayConfig(_env_file=None).missing_credentials() == ["gemini_api_key"]
    assert GatewayConfig(_env_file=None, gemini_api_key="k").missing_credentials() == []


def test_load_config_resolves_env_references(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEST_GEMINI_KEY", "resolved-key")
    path = tmp_path / "config.yml"
    path.write_text(
        "gemini_api_key: ${TEST_GEMINI_KEY}\n"
        "model: gemini-2.5-pro\n"
        "facebook:\n"
        "  client_id: fb-from-yaml\n",
        encoding="utf-8",
    )

    config = load_config(str(path))

    assert config.gemini_api_key == "resolved-key"
    assert config.model == "gemini-2.5-pro"
    assert config.facebook.client_id == "fb-from-yaml"


def test_public_config_endpoint_hides_secrets(client: TestClient) -> None:
    response = client.get("/api/config")

    assert response.status_code == 200
    body = response.json()
    assert body["instagram"] == {"clientId": "ig-client"}
    assert body["facebook"] == {"appId": "fb-app"}
    assert "secret" not in response.text
    assert "test-api-key" not in response.text


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["captionModelConfigured"] is True
