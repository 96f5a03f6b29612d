"""Session management for the Clone Master UI.

Each browser session owns one :class:`WizardController`, kept in a
``gr.State``. Controllers hold a lock and cannot be deep-copied, so the state
component starts as ``None`` and the controller is created on first use.
"""

import logging

from clonemaster.core.config import config
from clonemaster.core.controller import WizardController

logger = logging.getLogger(__name__)


def initialize_controller(controller: WizardController | None = None) -> WizardController:
    """Return the session's controller, creating it if needed.

    A new controller immediately checks for a configured credential, so users
    with an API key in the environment skip the landing page.

    Args:
        controller: Existing controller or None

    Returns:
        Ready WizardController
    """
    if controller is not None:
        return controller

    logger.info("Creating new wizard session")
    controller = WizardController(config)
    controller.check_access()
    return controller
