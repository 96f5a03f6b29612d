"""Gemini model gateway.

This module provides the gateway for Google's Gemini models through the
``google-genai`` SDK. Two models are used:

- **analysis_model** (default ``gemini-3-flash-preview``): reads the reference
  image and answers with schema-constrained JSON copy variants.
- **synthesis_model** (default ``gemini-3-pro-image-preview``): receives the
  subject and reference images plus the composed directive and answers with
  content parts, one of which should be an inline image.

Usage Example
-------------
    >>> from clonemaster.core.adapters.gemini import GeminiGateway
    >>> from clonemaster.core.config import config
    >>>
    >>> gateway = GeminiGateway(config)
    >>> variants = gateway.analyze(build_analysis_request(reference, brief))
    >>> image = gateway.synthesize(build_synthesis_request(...))

Notes
-----
- The client is created lazily on first call, so constructing the gateway
  never touches the network.
- No retries are attempted here.
"""

import logging
import time

from google import genai
from google.genai import types

from clonemaster.core import codec
from clonemaster.core.config import CloneMasterConfig
from clonemaster.core.errors import CloneMasterError, GatewayError, NoImageProduced
from clonemaster.core.gateway import (
    GeneratedImage,
    ModelGatewayBase,
    gateway_registry,
    parse_copy_options,
)
from clonemaster.core.models import CopyVariant
from clonemaster.core.prompt_builder import AnalysisRequest, PromptPart, SynthesisRequest

logger = logging.getLogger(__name__)


def _to_sdk_part(part: PromptPart) -> types.Part:
    if part.kind == "image":
        data = codec.decode(f"data:{part.mime_type};base64,{part.data}")
        return types.Part.from_bytes(data=data, mime_type=part.mime_type)
    return types.Part.from_text(text=part.text)


def extract_first_image(response) -> GeneratedImage | None:
    """Return the first inline image among the response's content parts.

    Only the first candidate is inspected, and its parts are scanned in
    order. Returns None when no part carries image data.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    for part in getattr(content, "parts", None) or []:
        inline = getattr(part, "inline_data", None)
        if inline is not None and getattr(inline, "data", None):
            data = inline.data
            if isinstance(data, str):
                data = codec.decode(f"data:image/png;base64,{data}")
            return GeneratedImage(data=data, mime_type=inline.mime_type or codec.DEFAULT_MIME_TYPE)
    return None


class GeminiGateway(ModelGatewayBase):
    """Model gateway backed by the Gemini API.

    Attributes
    ----------
    name : str
        "Gemini"
    client : genai.Client | None
        SDK client (None until first use)
    """

    name = "Gemini"
    description = "Copy analysis and identity-swap synthesis with Google Gemini"

    def __init__(self, config: CloneMasterConfig, api_key: str | None = None) -> None:
        super().__init__(config, api_key)
        self.client = None

    def _get_client(self) -> genai.Client:
        if self.client is None:
            api_key = self.api_key or self.config.gemini_api_key
            if not api_key:
                raise GatewayError("Gemini API key is not configured")
            self.client = genai.Client(api_key=api_key)
        return self.client

    def _generate(self, model: str, parts, generation_config: types.GenerateContentConfig):
        """Issue one generate_content call, mapping every failure to GatewayError."""
        client = self._get_client()
        start = time.time()
        try:
            response = client.models.generate_content(
                model=model,
                contents=[_to_sdk_part(part) for part in parts],
                config=generation_config,
            )
        except CloneMasterError:
            raise
        except Exception as e:
            logger.error(f"Gemini call to {model} failed: {e}")
            raise GatewayError(str(e) or type(e).__name__) from e

        logger.info(f"Gemini call to {model} finished in {time.time() - start:.1f}s")
        return response

    def analyze(self, request: AnalysisRequest) -> list[CopyVariant]:
        """Ask the analysis model for copy variants.

        Raises:
            GatewayError: On transport failure or non-JSON output
        """
        generation_config = types.GenerateContentConfig(
            response_mime_type=request.response_mime_type,
            response_schema=request.response_schema,
        )
        response = self._generate(self.config.analysis_model, request.parts, generation_config)

        try:
            text = response.text
        except Exception as e:
            raise GatewayError(f"Could not read analysis response: {e}") from e

        variants = parse_copy_options(text)
        logger.info(f"Analysis returned {len(variants)} copy variants")
        return variants

    def synthesize(self, request: SynthesisRequest) -> GeneratedImage:
        """Ask the image model for the composite creative.

        Raises:
            GatewayError: On transport failure
            NoImageProduced: If the response has no inline image
        """
        generation_config = types.GenerateContentConfig(
            image_config=types.ImageConfig(
                aspect_ratio=request.aspect_ratio,
                image_size=request.output_resolution,
            ),
        )
        response = self._generate(self.config.synthesis_model, request.parts, generation_config)

        image = extract_first_image(response)
        if image is None:
            logger.warning("Synthesis call succeeded but returned no image part")
            raise NoImageProduced()

        logger.info(f"Synthesis returned {len(image.data)} bytes ({image.mime_type})")
        return image


# Register adapter with global registry
gateway_registry.register(GeminiGateway)
