"""Unit tests for the landing-step access gate."""

from clonemaster.core.access import AccessProvider, ConfigAccessProvider
from clonemaster.core.config import CloneMasterConfig


def _config(temp_dir, api_key):
    return CloneMasterConfig(
        gemini_api_key=api_key,
        data_dir=temp_dir / "data",
        outputs_dir=temp_dir / "outputs",
        _env_file=None,
    )


def test_satisfies_protocol(test_config):
    assert isinstance(ConfigAccessProvider(test_config), AccessProvider)


def test_configured_key(temp_dir):
    provider = ConfigAccessProvider(_config(temp_dir, "configured"))

    assert provider.has_credential()
    assert provider.request_access()
    assert provider.api_key == "configured"


def test_no_key(test_config):
    provider = ConfigAccessProvider(test_config)

    assert not provider.has_credential()
    assert not provider.request_access(None)
    assert not provider.request_access("   ")


def test_interactive_key_wins(temp_dir):
    provider = ConfigAccessProvider(_config(temp_dir, "configured"))

    assert provider.request_access("  typed  ")
    assert provider.api_key == "typed"
    assert provider.has_credential()
