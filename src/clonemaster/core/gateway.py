"""Base classes and registry for model gateways.

A gateway turns the request objects built by
:mod:`clonemaster.core.prompt_builder` into calls to an external generative
service and maps the answers back into domain types. Gateways own no session
state and never retry; the wizard controller decides what a failure means.

Error Contract
--------------
- ``analyze`` returns a list of :class:`CopyVariant`. A response without a
  ``copyOptions`` array (or with empty text) is an empty list, not an error.
  Unparseable JSON and transport failures raise :class:`GatewayError`.
- ``synthesize`` returns the first inline image of the response. A call that
  succeeds without any image raises :class:`NoImageProduced`.

Usage Example
-------------
    >>> from clonemaster.core.gateway import gateway_registry
    >>> from clonemaster.core.config import config
    >>>
    >>> print(gateway_registry.list_available())
    ['Gemini']
    >>> gateway = gateway_registry.instantiate("Gemini", config)
    >>> variants = gateway.analyze(request)
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import CloneMasterConfig
from .errors import GatewayError
from .models import CopyVariant
from .prompt_builder import AnalysisRequest, SynthesisRequest

logger = logging.getLogger(__name__)


class CopyOptionPayload(BaseModel):
    """Wire shape of one variant in the analysis response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    header1: str | None = ""
    header2: str | None = ""
    header3: str | None = ""
    body_text: str | None = Field(default="", alias="bodyText")
    cta: str | None = ""
    badge_text: str | None = Field(default="", alias="badgeText")
    strategy: str | None = ""

    def to_variant(self) -> CopyVariant:
        return CopyVariant(
            header1=self.header1 or "",
            header2=self.header2 or "",
            header3=self.header3 or "",
            body_text=self.body_text or "",
            cta=self.cta or "",
            badge_text=self.badge_text or "",
            strategy=self.strategy or "",
        )


class AnalysisPayload(BaseModel):
    """Wire shape of the whole analysis response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    copy_options: list[CopyOptionPayload] | None = Field(default=None, alias="copyOptions")


def parse_copy_options(text: str | None) -> list[CopyVariant]:
    """Parse the analysis model's JSON text into variants.

    Args:
        text: Raw response text (``None`` or blank is treated as ``{}``)

    Returns:
        Variants in response order; empty when ``copyOptions`` is absent

    Raises:
        GatewayError: If the text is not JSON or does not match the shape
    """
    raw = (text or "").strip() or "{}"
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise GatewayError(f"Analysis response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise GatewayError("Analysis response is not a JSON object")

    try:
        payload = AnalysisPayload.model_validate(data)
    except ValidationError as e:
        raise GatewayError(f"Analysis response has an unexpected shape: {e}") from e

    return [option.to_variant() for option in payload.copy_options or []]


@dataclass(frozen=True)
class GeneratedImage:
    """Raw image returned by the synthesis capability."""

    data: bytes
    mime_type: str = "image/png"


class ModelGatewayBase(ABC):
    """Abstract base class for all model gateways.

    Attributes
    ----------
    name : str
        Registry name (e.g. "Gemini")
    description : str
        Brief description of the backing service
    config : CloneMasterConfig
        Configuration with model names and credentials
    """

    name: str = "Base Model Gateway"
    description: str = "Base class for model gateways"

    def __init__(self, config: CloneMasterConfig, api_key: str | None = None) -> None:
        """Initialize the gateway.

        Args:
            config: Configuration object
            api_key: Credential overriding ``config.gemini_api_key`` (granted
                interactively on the landing step)
        """
        self.config = config
        self.api_key = api_key
        logger.info(f"Initialized {self.name} gateway")

    @abstractmethod
    def analyze(self, request: AnalysisRequest) -> list[CopyVariant]:
        """Run the copy-analysis capability.

        Raises
        ------
        GatewayError
            On transport or parse failure
        """

    @abstractmethod
    def synthesize(self, request: SynthesisRequest) -> GeneratedImage:
        """Run the image-synthesis capability.

        Raises
        ------
        GatewayError
            On transport failure
        NoImageProduced
            If the response carries no inline image
        """

    def get_gateway_info(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "analysis_model": self.config.analysis_model,
            "synthesis_model": self.config.synthesis_model,
        }


class GatewayRegistry:
    """Registry for discovering and instantiating model gateways."""

    def __init__(self) -> None:
        self._gateways: dict[str, type[ModelGatewayBase]] = {}

    def register(self, gateway_class: type[ModelGatewayBase]) -> None:
        """Register a gateway class under its ``name``."""
        gateway_name = gateway_class.name

        if gateway_name in self._gateways:
            logger.warning(f"Model gateway '{gateway_name}' is already registered, overwriting")

        self._gateways[gateway_name] = gateway_class
        logger.info(f"Registered model gateway: {gateway_name}")

    def instantiate(
        self, gateway_name: str, config: CloneMasterConfig, api_key: str | None = None
    ) -> ModelGatewayBase:
        """Create an instance of a registered gateway.

        Raises
        ------
        KeyError
            If gateway_name is not registered
        """
        if gateway_name not in self._gateways:
            available = ", ".join(self.list_available())
            raise KeyError(
                f"Model gateway '{gateway_name}' not found. Available gateways: {available}"
            )

        instance = self._gateways[gateway_name](config=config, api_key=api_key)
        logger.info(f"Instantiated model gateway: {gateway_name}")
        return instance

    def get_gateway_class(self, gateway_name: str) -> type[ModelGatewayBase] | None:
        return self._gateways.get(gateway_name)

    def list_available(self) -> list[str]:
        return list(self._gateways.keys())


# Global gateway registry instance
gateway_registry = GatewayRegistry()
