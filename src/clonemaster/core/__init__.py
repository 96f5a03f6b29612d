"""Core functionality for Clone Master.

This package holds everything the wizard needs except the user interface:

- **WizardController**: single writer of a session's state
- **SessionState** and the wizard reducer: immutable snapshots and transitions
- **Prompt builder**: request construction for analysis and synthesis
- **Model gateways**: ``gateway_registry`` plus the Gemini implementation
- **CloneMasterConfig**: configuration using Pydantic Settings
- **config**: global configuration instance (loads from environment variables)

Architecture Overview
---------------------
1. **Configuration Layer** (config.py):
   - Environment-based configuration, CLONEMASTER_ prefix
   - Automatic directory creation

2. **Domain Layer** (models.py, wizard.py, validation.py, view.py):
   - Frozen dataclasses for session state and copy
   - Pure reducer keyed by action type
   - Step-entry preconditions and derived view-state

3. **Request Layer** (codec.py, prompt_builder.py):
   - Data-URL framing of images
   - Ordered request parts and the composed visual directive

4. **Gateway Layer** (gateway.py, adapters/):
   - Abstract gateway and registry
   - google-genai backed Gemini gateway

5. **Session Layer** (controller.py, persistence.py, access.py):
   - Single-flight dispatch, failure capture, reset
   - JSON-backed persistence of the subject image and product brief
   - Landing-step access gate

Usage Example
-------------
    from clonemaster.core import WizardController, config

    controller = WizardController(config)
    controller.check_access()
"""

# Import adapters to ensure they're registered
from clonemaster.core.adapters import GeminiGateway  # noqa: F401
from clonemaster.core.config import CloneMasterConfig, config
from clonemaster.core.controller import WizardController
from clonemaster.core.gateway import ModelGatewayBase, gateway_registry
from clonemaster.core.models import SessionState, WizardStep

__all__ = [
    "CloneMasterConfig",
    "config",
    "ModelGatewayBase",
    "gateway_registry",
    "SessionState",
    "WizardController",
    "WizardStep",
]
