"""Step-entry preconditions for the Clone Master wizard.

Each ``require_*`` function raises :class:`PreconditionNotMet` with a short
explanation when the action is not allowed from the given state. The matching
``can_*`` predicates are used by the view layer to enable or disable buttons.
"""

import logging

from .errors import PreconditionNotMet
from .models import SessionState, WizardStep

logger = logging.getLogger(__name__)


def require_step(state: SessionState, *allowed: WizardStep) -> None:
    if state.step not in allowed:
        names = ", ".join(step.name for step in allowed)
        raise PreconditionNotMet(f"Action not available at step {state.step.name} (needs {names})")


def require_can_proceed(state: SessionState) -> None:
    """Step 1 -> 2 needs a subject image and a non-blank product brief.

    Raises:
        PreconditionNotMet: If the step or inputs are not ready
    """
    require_step(state, WizardStep.CAPTURE_SUBJECT)
    if not state.subject_image:
        raise PreconditionNotMet("Upload the specialist image first")
    if not state.product_brief or not state.product_brief.strip():
        raise PreconditionNotMet("Describe the offer before continuing")


def require_can_analyze(state: SessionState) -> None:
    """Analysis runs from step 2 once a reference image is present."""
    require_step(state, WizardStep.CAPTURE_REFERENCE)
    if not state.reference_image:
        raise PreconditionNotMet("Upload a reference image first")


def require_valid_variant(state: SessionState, index: int) -> None:
    """The index must point into the generated variants."""
    if not isinstance(index, int) or isinstance(index, bool):
        raise PreconditionNotMet(f"Variant index must be an integer, got {index!r}")
    if index < 0 or index >= len(state.copy_variants):
        raise PreconditionNotMet(
            f"Variant {index} does not exist ({len(state.copy_variants)} available)"
        )


def require_can_select(state: SessionState, index: int) -> None:
    """Selecting a variant card happens on step 3."""
    require_step(state, WizardStep.SELECT_COPY)
    require_valid_variant(state, index)


def require_images(state: SessionState) -> None:
    """Synthesis needs both the identity source and the layout map."""
    if not state.subject_image:
        raise PreconditionNotMet("Specialist image is missing")
    if not state.reference_image:
        raise PreconditionNotMet("Reference image is missing")


def require_can_generate(state: SessionState) -> None:
    """Generation from the customization step."""
    require_step(state, WizardStep.CUSTOMIZE)
    require_images(state)


def require_can_generate_variation(state: SessionState, index: int) -> None:
    """Picking a variant card directly triggers generation from step 4 or 5."""
    require_step(state, WizardStep.CUSTOMIZE, WizardStep.RESULT)
    require_valid_variant(state, index)
    require_images(state)


def _passes(check, *args) -> bool:
    try:
        check(*args)
    except PreconditionNotMet:
        return False
    return True


def can_proceed(state: SessionState) -> bool:
    return _passes(require_can_proceed, state)


def can_analyze(state: SessionState) -> bool:
    return not state.is_busy and _passes(require_can_analyze, state)


def can_generate(state: SessionState) -> bool:
    return not state.is_busy and _passes(require_can_generate, state)
