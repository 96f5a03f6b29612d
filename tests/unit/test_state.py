"""Unit tests for UI session management."""

from unittest.mock import Mock, patch

from clonemaster.core.controller import WizardController
from clonemaster.core.models import WizardStep
from clonemaster.ui.state import initialize_controller


class TestInitializeController:
    """Tests for initialize_controller function."""

    def test_existing_controller_returned_as_is(self):
        controller = Mock()

        assert initialize_controller(controller) is controller

    def test_none_creates_controller(self, test_config):
        """Test that passing None creates a controller from the global config."""
        with patch("clonemaster.ui.state.config", test_config):
            controller = initialize_controller(None)

        assert isinstance(controller, WizardController)
        assert controller.config is test_config

    def test_without_key_stays_on_landing(self, test_config):
        with patch("clonemaster.ui.state.config", test_config):
            controller = initialize_controller(None)

        assert controller.state.step is WizardStep.LANDING

    def test_configured_key_skips_landing(self, test_config):
        config_with_key = test_config.model_copy(update={"gemini_api_key": "configured"})

        with patch("clonemaster.ui.state.config", config_with_key):
            controller = initialize_controller(None)

        assert controller.state.step is WizardStep.CAPTURE_SUBJECT
