"""Clone Master - guided identity-swap ad creative generation."""

__version__ = "0.1.0"

from clonemaster.core.config import CloneMasterConfig, config
from clonemaster.core.controller import WizardController
from clonemaster.core.gateway import ModelGatewayBase, gateway_registry

# Import adapters to ensure they're registered
from clonemaster.core.adapters import GeminiGateway  # noqa: F401

__all__ = [
    "CloneMasterConfig",
    "config",
    "GeminiGateway",
    "ModelGatewayBase",
    "WizardController",
    "gateway_registry",
]
