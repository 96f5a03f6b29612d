"""Concrete model gateways.

Importing this package registers every bundled gateway with
``gateway_registry``.
"""

from clonemaster.core.adapters.gemini import GeminiGateway

__all__ = ["GeminiGateway"]
