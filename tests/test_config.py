from __future__ import annotations

from pathlib import Path

import pytest

from vektopay import ClientConfig, ClientParameters, ConfigError, load_client_config
from vektopay.core.environment import build_environment, load_env_file


def test_env_file_and_overrides_layering(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join(
            [
                "# comment",
                "export VEKTOPAY_API_KEY='file-key'",
                'VEKTOPAY_BASE_URL="https://file.example/"',
                "VEKTOPAY_POLL_INTERVAL_MS=1500",
                "not a pair",
            ]
        ),
        encoding="utf-8",
    )

    config = load_client_config(
        env_file=str(env_file),
        base={"VEKTOPAY_API_KEY": "process-key"},
        overrides={"VEKTOPAY_POLL_TIMEOUT_MS": "9000"},
    )

    assert config.api_key == "process-key"
    assert config.base_url == "https://file.example"
    assert config.poll_interval_ms == 1500
    assert config.poll_timeout_ms == 9000
    assert config.timeout_seconds == 30.0
    assert config.bearer_token is None


def test_keyword_parameters_win(tmp_path: Path) -> None:
    config = load_client_config(
        env_file=None,
        base={"VEKTOPAY_API_KEY": "env-key", "VEKTOPAY_BASE_URL": "https://env.example"},
        parameters=ClientParameters(bearer_token="dash"),
        api_key="kw-key",
        default_headers={"X-Tenant": "acme"},
    )

    assert config.api_key == "kw-key"
    assert config.bearer_token == "dash"
    assert config.has_bearer_token
    assert config.default_headers == {"X-Tenant": "acme"}


@pytest.mark.parametrize(
    "values",
    [
        {"VEKTOPAY_BASE_URL": "https://x"},
        {"VEKTOPAY_API_KEY": "k"},
        {"VEKTOPAY_API_KEY": "k", "VEKTOPAY_BASE_URL": "ftp://x"},
        {"VEKTOPAY_API_KEY": "k", "VEKTOPAY_BASE_URL": "https://x", "VEKTOPAY_TIMEOUT_SECONDS": "abc"},
        {"VEKTOPAY_API_KEY": "k", "VEKTOPAY_BASE_URL": "https://x", "VEKTOPAY_TIMEOUT_SECONDS": "0"},
        {"VEKTOPAY_API_KEY": "k", "VEKTOPAY_BASE_URL": "https://x", "VEKTOPAY_POLL_TIMEOUT_MS": "-1"},
        {"VEKTOPAY_API_KEY": "k", "VEKTOPAY_BASE_URL": "https://x", "VEKTOPAY_DEFAULT_HEADERS": "[1]"},
        {"VEKTOPAY_API_KEY": "k", "VEKTOPAY_BASE_URL": "https://x", "VEKTOPAY_DEFAULT_HEADERS": "{bad"},
    ],
)
def test_invalid_configuration(values) -> None:
    with pytest.raises(ConfigError) as excinfo:
        ClientConfig.from_mapping(values)

    assert excinfo.value.code == "invalid_config"


def test_default_headers_are_read_only() -> None:
    headers = {"X-Tenant": "acme"}
    config = ClientConfig(api_key="k", base_url="https://x", default_headers=headers)
    headers["x-api-key"] = "other"

    with pytest.raises(TypeError):
        config.default_headers["x-api-key"] = "other"  # type: ignore[index]

    assert dict(config.default_headers) == {"X-Tenant": "acme"}
    assert hash(config) == hash(ClientConfig(api_key="k", base_url="https://x"))


def test_unknown_parameter_is_rejected() -> None:
    from vektopay.core.config import _collect_parameter_overrides

    with pytest.raises(TypeError):
        _collect_parameter_overrides(None, {"api_secret": "x"})


def test_build_environment_skips_file_when_none(tmp_path: Path) -> None:
    environment = build_environment(env_file=None, base={"A": "1", "EMPTY": ""})

    assert environment.get("A") == "1"
    assert environment.get("EMPTY", "fallback") == "fallback"


def test_load_env_file_keeps_existing_keys(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("VEKTOPAY_API_KEY=file\nVEKTOPAY_BASE_URL=https://file\n", encoding="utf-8")
    target = {"VEKTOPAY_API_KEY": "existing"}

    merged = load_env_file(str(env_file), environ=target)

    assert merged == {"VEKTOPAY_API_KEY": "existing", "VEKTOPAY_BASE_URL": "https://file"}


def test_missing_env_file_is_ignored(tmp_path: Path) -> None:
    environment = build_environment(env_file=str(tmp_path / "absent.env"), base={})

    assert dict(environment.variables) == {}
