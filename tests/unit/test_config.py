"""Tests for endpoint configuration."""

import pytest

from tts_external_editor.client import ExternalEditorApi
from tts_external_editor.config import (
    DEFAULT_LISTEN_PORT,
    DEFAULT_SEND_PORT,
    ENV_HOST,
    ENV_LISTEN_PORT,
    ENV_SEND_PORT,
    EditorConfig,
)


@pytest.fixture
def clean_env(monkeypatch):
    for var in (ENV_HOST, ENV_SEND_PORT, ENV_LISTEN_PORT):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


class TestEditorConfig:
    """Test configuration defaults and environment overrides."""

    def test_defaults(self, clean_env):
        """Defaults match the ports Tabletop Simulator uses."""
        config = EditorConfig.from_env()

        assert config.host == "127.0.0.1"
        assert config.send_port == DEFAULT_SEND_PORT == 39999
        assert config.listen_port == DEFAULT_LISTEN_PORT == 39998

    def test_env_overrides(self, clean_env):
        clean_env.setenv(ENV_HOST, "192.168.1.20")
        clean_env.setenv(ENV_SEND_PORT, "40000")
        clean_env.setenv(ENV_LISTEN_PORT, "40001")

        config = EditorConfig.from_env()

        assert config.host == "192.168.1.20"
        assert config.send_port == 40000
        assert config.listen_port == 40001

    def test_invalid_port(self, clean_env):
        clean_env.setenv(ENV_SEND_PORT, "not-a-port")

        with pytest.raises(ValueError, match=ENV_SEND_PORT):
            EditorConfig.from_env()

    def test_with_overrides_ignores_none(self):
        config = EditorConfig().with_overrides(send_port=1234, host=None)

        assert config.send_port == 1234
        assert config.host == "127.0.0.1"


class TestClientConfig:
    """Test how the client resolves its configuration."""

    def test_client_uses_env(self, clean_env):
        clean_env.setenv(ENV_SEND_PORT, "41000")

        assert ExternalEditorApi().config.send_port == 41000

    def test_keyword_overrides(self, clean_env):
        api = ExternalEditorApi(send_port=5000, listen_port=0)

        assert api.config.send_port == 5000
        assert api.config.listen_port == 0

    def test_explicit_config(self, clean_env):
        clean_env.setenv(ENV_SEND_PORT, "41000")
        config = EditorConfig(send_port=42000)

        assert ExternalEditorApi(config).config.send_port == 42000

    def test_not_listening_until_listen(self, clean_env):
        assert ExternalEditorApi().port is None
