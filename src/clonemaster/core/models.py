"""Data models for the Clone Master wizard session."""

import logging
from dataclasses import dataclass, field, fields, replace
from enum import Enum, IntEnum

from .config import DEFAULT_REMOVAL_INSTRUCTIONS

logger = logging.getLogger(__name__)

# Sentinel directive value: inherit the property from the reference image
MIMIC = "Mimetizar"

VISUAL_STYLES = [MIMIC, "Cinematic", "Minimalist", "Corporate", "Luxurious", "High-Tech"]
COLOR_PALETTES = [MIMIC, "Warm", "Cold", "Neutral", "Vibrant", "Dark"]
LIGHTING_TYPES = [MIMIC, "Golden Hour", "Studio Soft", "Dramatic", "Natural", "Neon"]

ASPECT_RATIOS = ["3:4", "9:16", "16:9"]
DEFAULT_ASPECT_RATIO = "9:16"

DEFAULT_CTA = "Saiba Mais"

# Copy strategies requested from the analysis model, in order
STRATEGIES = ["Direct", "Curiosity", "Authority"]

_DIRECTIVE_OPTIONS = {
    "visual_style": VISUAL_STYLES,
    "color_palette": COLOR_PALETTES,
    "lighting_type": LIGHTING_TYPES,
}


class WizardStep(IntEnum):
    """Position in the linear wizard."""

    LANDING = 0
    CAPTURE_SUBJECT = 1
    CAPTURE_REFERENCE = 2
    SELECT_COPY = 3
    CUSTOMIZE = 4
    RESULT = 5


class RequestStatus(str, Enum):
    """Single-flight flag for model requests."""

    IDLE = "idle"
    ANALYZING = "analyzing"
    GENERATING = "generating"


@dataclass(frozen=True)
class CopyVariant:
    """One copy set proposed by the analysis model.

    Only ``header1``, ``body_text`` and ``strategy`` are guaranteed by the
    model; everything else may come back empty.
    """

    header1: str = ""
    header2: str = ""
    header3: str = ""
    body_text: str = ""
    cta: str = ""
    badge_text: str = ""
    strategy: str = ""


@dataclass(frozen=True)
class CopyFields:
    """The live, user-editable copy that is burned into the creative."""

    header1: str = ""
    header2: str = ""
    header3: str = ""
    body_text: str = ""
    cta: str = ""
    badge_text: str = ""
    removal_instructions: str = DEFAULT_REMOVAL_INSTRUCTIONS
    visual_style: str = MIMIC
    color_palette: str = MIMIC
    lighting_type: str = MIMIC

    def __post_init__(self) -> None:
        for name, options in _DIRECTIVE_OPTIONS.items():
            value = getattr(self, name)
            if value not in options:
                raise ValueError(f"{name} must be one of {options}, got {value!r}")

    @property
    def headline(self) -> str:
        """The three headline parts joined with single spaces."""
        return " ".join(part for part in (self.header1, self.header2, self.header3) if part)

    def with_changes(self, **changes) -> "CopyFields":
        """Return a copy with the given fields replaced.

        Raises:
            ValueError: If a field name is unknown or a directive value is invalid
        """
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown copy field(s): {', '.join(sorted(unknown))}")
        return replace(self, **changes)


def promote_variant(
    variant: CopyVariant, base: CopyFields, default_cta: str = DEFAULT_CTA
) -> CopyFields:
    """Turn a variant into the live copy.

    This is the only place the CTA/badge fallback rule lives. Removal
    instructions and visual directives are carried over from ``base``.

    Args:
        variant: The variant being promoted
        base: Current live copy (source of the non-text settings)
        default_cta: CTA used when the variant has none

    Returns:
        New CopyFields populated from the variant
    """
    return replace(
        base,
        header1=variant.header1 or "",
        header2=variant.header2 or "",
        header3=variant.header3 or "",
        body_text=variant.body_text or "",
        cta=variant.cta or default_cta,
        badge_text=variant.badge_text or "",
    )


@dataclass(frozen=True)
class PersistedFields:
    """The slice of session state that survives a reload."""

    subject_image: str | None = None
    product_brief: str = ""


@dataclass(frozen=True)
class SessionState:
    """Single source of truth for one wizard session.

    Instances are immutable snapshots; the wizard reducer produces a new one
    for every committed action.

    Attributes
    ----------
    subject_image : str | None
        Data URL of the identity source (persisted)
    product_brief : str
        Free-text description of the offer (persisted)
    reference_image : str | None
        Data URL of the layout reference (session only)
    copy_variants : tuple[CopyVariant, ...]
        Variants produced by the analysis model
    selected_variant_index : int | None
        Index into copy_variants chosen by the user
    copy_edit : CopyFields
        Live copy and visual directives
    aspect_ratio : str
        Output framing, one of ASPECT_RATIOS
    request_status : RequestStatus
        Single-flight flag
    status_message : str
        Progress text shown while a request is outstanding
    result_image : str | None
        Data URL of the last synthesized creative
    last_error : str | None
        Message of the last failed request
    access_granted : bool
        Whether the landing gate has been passed
    step : WizardStep
        Current wizard position
    """

    subject_image: str | None = None
    product_brief: str = ""
    reference_image: str | None = None
    copy_variants: tuple[CopyVariant, ...] = ()
    selected_variant_index: int | None = None
    copy_edit: CopyFields = field(default_factory=CopyFields)
    aspect_ratio: str = DEFAULT_ASPECT_RATIO
    request_status: RequestStatus = RequestStatus.IDLE
    status_message: str = ""
    result_image: str | None = None
    last_error: str | None = None
    access_granted: bool = False
    step: WizardStep = WizardStep.LANDING

    @property
    def is_busy(self) -> bool:
        """True while a model request is outstanding."""
        return self.request_status is not RequestStatus.IDLE

    def __repr__(self) -> str:
        """Compact representation; image payloads are far too large to print."""
        return (
            f"SessionState(step={self.step.name}, status={self.request_status.value}, "
            f"subject={'yes' if self.subject_image else 'no'}, "
            f"reference={'yes' if self.reference_image else 'no'}, "
            f"variants={len(self.copy_variants)}, "
            f"result={'yes' if self.result_image else 'no'})"
        )


def initial_state(
    persisted: PersistedFields | None = None,
    *,
    copy_edit: CopyFields | None = None,
    aspect_ratio: str = DEFAULT_ASPECT_RATIO,
    step: WizardStep = WizardStep.LANDING,
    access_granted: bool = False,
) -> SessionState:
    """Build a fresh session seeded from persisted fields.

    Args:
        persisted: Values loaded from the persistence bridge
        copy_edit: Default live copy (carries configured removal instructions)
        aspect_ratio: Default framing
        step: Starting step (LANDING on startup, CAPTURE_SUBJECT on reset)
        access_granted: Whether the landing gate is already passed

    Returns:
        New SessionState
    """
    persisted = persisted or PersistedFields()
    if aspect_ratio not in ASPECT_RATIOS:
        raise ValueError(f"Aspect ratio must be one of {ASPECT_RATIOS}, got {aspect_ratio!r}")
    return SessionState(
        subject_image=persisted.subject_image,
        product_brief=persisted.product_brief or "",
        copy_edit=copy_edit or CopyFields(),
        aspect_ratio=aspect_ratio,
        access_granted=access_granted,
        step=step,
    )
