"""Derived view-state for the presentation layer.

The UI never inspects :class:`SessionState` directly. It asks for a
:class:`ViewState`, a flat snapshot of what to show and what to enable.
"""

from dataclasses import dataclass

from .models import SessionState, WizardStep
from .validation import can_analyze, can_generate, can_proceed


@dataclass(frozen=True)
class ViewState:
    """What the wizard should display for one state snapshot."""

    step: WizardStep
    show_header: bool
    can_proceed: bool
    can_analyze: bool
    can_generate: bool
    is_busy: bool
    status_message: str
    error_message: str
    active_variant_index: int | None
    variant_labels: tuple[str, ...]
    has_result: bool


def format_variant_label(index: int, strategy: str, header1: str) -> str:
    """Label for a variant card, numbered from 1."""
    return f"Opção {index + 1} — {strategy}: {header1}"


def find_active_variant(state: SessionState) -> int | None:
    """Index of the variant whose first headline matches the live copy.

    Returns None when the live copy does not come from any variant.
    """
    header1 = state.copy_edit.header1
    if not header1:
        return None
    for index, variant in enumerate(state.copy_variants):
        if variant.header1 == header1:
            return index
    return None


def derive_view(state: SessionState) -> ViewState:
    return ViewState(
        step=state.step,
        show_header=state.step > WizardStep.LANDING,
        can_proceed=can_proceed(state),
        can_analyze=can_analyze(state),
        can_generate=can_generate(state),
        is_busy=state.is_busy,
        status_message=state.status_message,
        error_message=state.last_error or "",
        active_variant_index=find_active_variant(state),
        variant_labels=tuple(
            format_variant_label(i, v.strategy, v.header1)
            for i, v in enumerate(state.copy_variants)
        ),
        has_result=state.result_image is not None,
    )
