"""Request construction for the two generative capabilities.

Both builders are pure: they read a slice of session state and return a
request object that the gateway sends unchanged. Nothing here talks to the
network or knows about the google-genai SDK.

Analysis Request
----------------
One reference image plus an instruction block asking for exactly three copy
variants (Direct, Curiosity, Authority). The response is constrained by a
JSON schema::

    {"copyOptions": [{"header1", "header2", "header3", "bodyText",
                      "cta", "badgeText", "strategy"}, ...]}

with ``header1``, ``bodyText`` and ``strategy`` required.

Synthesis Request
-----------------
Parts are sent in a fixed order::

    [Identity label]  IMAGE 1 (subject)
    [Layout label]    IMAGE 2 (reference)
    [Directive text]

The directive text is assembled from sections separated by blank lines::

    [Fixed: identity replacement rules]

    [Text replacement: headline / body / badge / CTA]

    [Cleanup: removal instructions verbatim]

    [Format: aspect ratio + resolution]

    [Visual directives: style, then optional palette, then optional lighting]
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Literal

from . import codec
from .models import MIMIC, STRATEGIES, CopyFields

ANALYSIS_VARIANT_COUNT = 3

REQUIRED_VARIANT_FIELDS = ["header1", "bodyText", "strategy"]

_VARIANT_PROPERTIES = ["header1", "header2", "header3", "bodyText", "cta", "badgeText", "strategy"]

# Response schema in the OpenAPI subset accepted by the Gemini API.
ANALYSIS_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "copyOptions": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {name: {"type": "STRING"} for name in _VARIANT_PROPERTIES},
                "required": REQUIRED_VARIANT_FIELDS,
            },
        }
    },
}

SUBJECT_LABEL = (
    "IMAGE 1: IDENTITY SOURCE. This is the only identity allowed in the final image "
    "(the specialist to be cloned)."
)
REFERENCE_LABEL = (
    "IMAGE 2: LAYOUT MAP ONLY. Discard its human subject; it is used for composition, "
    "background and text placement."
)

_IDENTITY_RULES = (
    "CRITICAL IDENTITY REPLACEMENT RULES:\n"
    "- IDENTITY: Use ONLY the specialist from IMAGE 1.\n"
    "- REFERENCE: IMAGE 2 is only a layout guide. Completely ignore the person inside it.\n"
    "- PROHIBITION: Do not reuse anything from the face, hair or body of the person in "
    "IMAGE 2. They are a placeholder.\n"
    "- TRANSPLANT: Place the specialist from IMAGE 1 in the same position as the person "
    "in IMAGE 2, matching the lighting of the new scene."
)

_MIMIC_STYLE_DIRECTIVE = (
    "STRICT VISUAL MIMICRY: Replicate the background and composition from IMAGE 2."
)


@dataclass(frozen=True)
class PromptPart:
    """One ordered content part of a model request."""

    kind: Literal["text", "image"]
    text: str = ""
    data: str = ""  # base64 payload, no data-URL framing
    mime_type: str = ""

    @classmethod
    def from_text(cls, text: str) -> "PromptPart":
        return cls(kind="text", text=text)

    @classmethod
    def from_data_url(cls, data_url: str) -> "PromptPart":
        return cls(
            kind="image",
            data=codec.strip(data_url),
            mime_type=codec.mime_type_of(data_url),
        )


@dataclass(frozen=True)
class AnalysisRequest:
    """Reference image + instruction, answered with schema-constrained JSON."""

    parts: tuple[PromptPart, ...]
    instruction: str
    response_schema: dict[str, Any] = field(
        default_factory=lambda: copy.deepcopy(ANALYSIS_RESPONSE_SCHEMA)
    )
    response_mime_type: str = "application/json"
    variant_count: int = ANALYSIS_VARIANT_COUNT


@dataclass(frozen=True)
class SynthesisRequest:
    """Two ordered images + composed directive, answered with an image."""

    parts: tuple[PromptPart, ...]
    directive: str
    aspect_ratio: str
    output_resolution: str


def build_analysis_instruction(product_brief: str) -> str:
    """Instruction block for the copy-analysis capability."""
    strategies = ", ".join(STRATEGIES)
    return (
        "YOU ARE AN EXPERT IN HIGH-CONVERSION DESIGN AND COPYWRITING.\n"
        f"Analyze the reference image and write {ANALYSIS_VARIANT_COUNT} copy options "
        f'for this product: "{product_brief.strip()}".\n'
        "MAP THE TEXTS FOR EDITING:\n"
        "1. Main headline, split in 3 parts (header1, header2, header3).\n"
        "2. Description/body text (bodyText).\n"
        "3. Seals, badges or dates (badgeText).\n"
        "4. Button text (cta).\n"
        f"Write exactly {ANALYSIS_VARIANT_COUNT} variations, one per strategy: {strategies}. "
        "Put the strategy name in the strategy field.\n"
        'Return strictly the JSON format: { "copyOptions": [{ "header1", "header2", '
        '"header3", "bodyText", "cta", "badgeText", "strategy" }] }.'
    )


def build_analysis_request(reference_image: str, product_brief: str) -> AnalysisRequest:
    """Build the copy-analysis request.

    Args:
        reference_image: Data URL of the layout reference
        product_brief: Free-text description of the offer

    Returns:
        AnalysisRequest with the image part first and the instruction second

    Raises:
        MalformedAsset: If the reference image has no payload separator
    """
    instruction = build_analysis_instruction(product_brief)
    parts = (
        PromptPart.from_data_url(reference_image),
        PromptPart.from_text(instruction),
    )
    return AnalysisRequest(parts=parts, instruction=instruction)


def build_visual_directive(copy_edit: CopyFields) -> str:
    """Compose the style/palette/lighting block.

    Each of the three directives is decided independently; palette and
    lighting lines are omitted entirely when they mimic the reference.
    """
    lines: list[str] = []

    if copy_edit.visual_style == MIMIC:
        lines.append(_MIMIC_STYLE_DIRECTIVE)
    else:
        lines.append(f"STYLE OVERRIDE: Apply a {copy_edit.visual_style} design theme.")

    if copy_edit.color_palette != MIMIC:
        lines.append(
            f"COLOR SCHEME: Use a background dominated by {copy_edit.color_palette} colors."
        )

    if copy_edit.lighting_type != MIMIC:
        lines.append(f"LIGHTING SETUP: Use a {copy_edit.lighting_type} lighting effect.")

    return "\n".join(lines)


def build_synthesis_directive(
    copy_edit: CopyFields, aspect_ratio: str, output_resolution: str = "4K"
) -> str:
    """Compose the full text directive sent after the two images."""
    text_block = (
        "TEXTS (REPLACE EVERYTHING):\n"
        f'1. Headline: "{copy_edit.headline}"\n'
        f'2. Body text: "{copy_edit.body_text}"\n'
        f'3. Badge/extra info: "{copy_edit.badge_text}"\n'
        f'4. Button CTA: "{copy_edit.cta}"'
    )
    sections = [
        _IDENTITY_RULES,
        text_block,
        f"CLEANUP: {copy_edit.removal_instructions}",
        f"FORMAT: {aspect_ratio}. {output_resolution} quality.",
        build_visual_directive(copy_edit),
    ]
    return "\n\n".join(sections)


def build_synthesis_request(
    subject_image: str,
    reference_image: str,
    copy_edit: CopyFields,
    aspect_ratio: str,
    output_resolution: str = "4K",
) -> SynthesisRequest:
    """Build the image-synthesis request.

    Args:
        subject_image: Data URL of the identity source
        reference_image: Data URL of the layout map
        copy_edit: Copy and directives to burn in (passed explicitly, never read
            from shared state)
        aspect_ratio: Target framing
        output_resolution: Requested output size

    Returns:
        SynthesisRequest with parts ordered subject label, subject, reference
        label, reference, directive

    Raises:
        MalformedAsset: If either image has no payload separator
    """
    directive = build_synthesis_directive(copy_edit, aspect_ratio, output_resolution)
    parts = (
        PromptPart.from_text(SUBJECT_LABEL),
        PromptPart.from_data_url(subject_image),
        PromptPart.from_text(REFERENCE_LABEL),
        PromptPart.from_data_url(reference_image),
        PromptPart.from_text(directive),
    )
    return SynthesisRequest(
        parts=parts,
        directive=directive,
        aspect_ratio=aspect_ratio,
        output_resolution=output_resolution,
    )
