"""Access gate for the landing step.

The wizard cannot do anything useful without a credential for the model
service. An access provider answers two questions: is a credential already
available, and can one be granted interactively. The default provider reads
the configured Gemini API key and accepts a key typed into the landing page.
"""

import logging
from typing import Protocol, runtime_checkable

from .config import CloneMasterConfig

logger = logging.getLogger(__name__)


@runtime_checkable
class AccessProvider(Protocol):
    """Anything that can check for or grant access to the model service."""

    def has_credential(self) -> bool: ...

    def request_access(self, credential: str | None = None) -> bool: ...


class ConfigAccessProvider:
    """Access provider backed by the application configuration.

    A key supplied through :meth:`request_access` takes precedence over the
    configured one and is handed to the gateway through :attr:`api_key`.
    """

    def __init__(self, config: CloneMasterConfig) -> None:
        self.config = config
        self._granted_key: str | None = None

    @property
    def api_key(self) -> str | None:
        return self._granted_key or self.config.gemini_api_key

    def has_credential(self) -> bool:
        return bool(self.api_key)

    def request_access(self, credential: str | None = None) -> bool:
        """Grant access with a user-supplied key, or with the configured one.

        Args:
            credential: API key entered on the landing page (optional)

        Returns:
            True if a usable credential is now available
        """
        if credential and credential.strip():
            self._granted_key = credential.strip()
            logger.info("Access granted with an interactively supplied API key")
            return True

        if self.config.gemini_api_key:
            logger.info("Access granted with the configured API key")
            return True

        logger.info("Access request refused: no API key supplied or configured")
        return False
