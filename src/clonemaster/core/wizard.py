"""Pure state transitions for the Clone Master wizard.

Every change to a :class:`~clonemaster.core.models.SessionState` is expressed
as an action object and applied with :func:`reduce`, which returns a new
snapshot and never mutates its input. The reducer applies transitions; it does
not decide whether they are allowed. Precondition checks live in
:mod:`clonemaster.core.validation` and are enforced by the controller before
an action is committed.

Action Overview
---------------
==========================  =====================================================
Action                      Effect
==========================  =====================================================
AccessGranted               mark the landing gate passed, go to step 1
SubjectImageSet             replace the identity source
ProductBriefSet             replace the offer description
ProceedToReference          step 1 -> 2
ReferenceImageSet           replace the layout reference
AnalysisStarted             status ANALYZING, clear last error
AnalysisSucceeded           store variants, status IDLE, step -> 3
AnalysisFailed              store error, status IDLE, step unchanged
VariantSelected             promote variant into copy_edit, step -> 4
CopyEdited                  update copy_edit fields
AspectRatioSet              change output framing
GenerationStarted           optionally overwrite copy_edit, status GENERATING
GenerationSucceeded         store result, status IDLE, step -> 5
GenerationFailed            store error, status IDLE, step unchanged
AdjustRequested             clear result, step 5 -> 4
BackToVariants              step 4 -> 3
ProjectReset                fresh state re-seeded from storage, step -> 1
==========================  =====================================================
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable

from .models import (
    ASPECT_RATIOS,
    CopyFields,
    CopyVariant,
    PersistedFields,
    RequestStatus,
    SessionState,
    WizardStep,
    initial_state,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessGranted:
    pass


@dataclass(frozen=True)
class SubjectImageSet:
    image: str | None


@dataclass(frozen=True)
class ProductBriefSet:
    brief: str


@dataclass(frozen=True)
class ProceedToReference:
    pass


@dataclass(frozen=True)
class ReferenceImageSet:
    image: str | None


@dataclass(frozen=True)
class AnalysisStarted:
    status_message: str = ""


@dataclass(frozen=True)
class AnalysisSucceeded:
    variants: tuple[CopyVariant, ...]


@dataclass(frozen=True)
class AnalysisFailed:
    message: str


@dataclass(frozen=True)
class VariantSelected:
    index: int
    copy_edit: CopyFields


@dataclass(frozen=True)
class CopyEdited:
    copy_edit: CopyFields


@dataclass(frozen=True)
class AspectRatioSet:
    aspect_ratio: str


@dataclass(frozen=True)
class GenerationStarted:
    """Start a synthesis request.

    ``copy_edit`` is set when the request uses copy computed by the caller
    (the "generate variation" path); it is committed together with the
    status flip so the in-flight request and the visible copy agree.
    """

    status_message: str = ""
    copy_edit: CopyFields | None = None
    selected_variant_index: int | None = None


@dataclass(frozen=True)
class GenerationSucceeded:
    image: str


@dataclass(frozen=True)
class GenerationFailed:
    message: str


@dataclass(frozen=True)
class AdjustRequested:
    pass


@dataclass(frozen=True)
class BackToVariants:
    pass


@dataclass(frozen=True)
class ProjectReset:
    persisted: PersistedFields
    copy_edit: CopyFields
    aspect_ratio: str


def _access_granted(state: SessionState, action: AccessGranted) -> SessionState:
    return replace(state, access_granted=True, step=WizardStep.CAPTURE_SUBJECT)


def _subject_image_set(state: SessionState, action: SubjectImageSet) -> SessionState:
    return replace(state, subject_image=action.image)


def _product_brief_set(state: SessionState, action: ProductBriefSet) -> SessionState:
    return replace(state, product_brief=action.brief)


def _proceed_to_reference(state: SessionState, action: ProceedToReference) -> SessionState:
    return replace(state, step=WizardStep.CAPTURE_REFERENCE)


def _reference_image_set(state: SessionState, action: ReferenceImageSet) -> SessionState:
    return replace(state, reference_image=action.image)


def _analysis_started(state: SessionState, action: AnalysisStarted) -> SessionState:
    return replace(
        state,
        request_status=RequestStatus.ANALYZING,
        status_message=action.status_message,
        last_error=None,
    )


def _analysis_succeeded(state: SessionState, action: AnalysisSucceeded) -> SessionState:
    return replace(
        state,
        request_status=RequestStatus.IDLE,
        status_message="",
        copy_variants=tuple(action.variants),
        selected_variant_index=None,
        step=WizardStep.SELECT_COPY,
    )


def _analysis_failed(state: SessionState, action: AnalysisFailed) -> SessionState:
    return replace(
        state,
        request_status=RequestStatus.IDLE,
        status_message="",
        last_error=action.message,
    )


def _variant_selected(state: SessionState, action: VariantSelected) -> SessionState:
    return replace(
        state,
        selected_variant_index=action.index,
        copy_edit=action.copy_edit,
        step=WizardStep.CUSTOMIZE,
    )


def _copy_edited(state: SessionState, action: CopyEdited) -> SessionState:
    return replace(state, copy_edit=action.copy_edit)


def _aspect_ratio_set(state: SessionState, action: AspectRatioSet) -> SessionState:
    if action.aspect_ratio not in ASPECT_RATIOS:
        raise ValueError(
            f"Aspect ratio must be one of {ASPECT_RATIOS}, got {action.aspect_ratio!r}"
        )
    return replace(state, aspect_ratio=action.aspect_ratio)


def _generation_started(state: SessionState, action: GenerationStarted) -> SessionState:
    changes = {
        "request_status": RequestStatus.GENERATING,
        "status_message": action.status_message,
        "last_error": None,
    }
    if action.copy_edit is not None:
        changes["copy_edit"] = action.copy_edit
    if action.selected_variant_index is not None:
        changes["selected_variant_index"] = action.selected_variant_index
    return replace(state, **changes)


def _generation_succeeded(state: SessionState, action: GenerationSucceeded) -> SessionState:
    return replace(
        state,
        request_status=RequestStatus.IDLE,
        status_message="",
        result_image=action.image,
        step=WizardStep.RESULT,
    )


def _generation_failed(state: SessionState, action: GenerationFailed) -> SessionState:
    return replace(
        state,
        request_status=RequestStatus.IDLE,
        status_message="",
        last_error=action.message,
    )


def _adjust_requested(state: SessionState, action: AdjustRequested) -> SessionState:
    return replace(state, result_image=None, step=WizardStep.CUSTOMIZE)


def _back_to_variants(state: SessionState, action: BackToVariants) -> SessionState:
    return replace(state, step=WizardStep.SELECT_COPY)


def _project_reset(state: SessionState, action: ProjectReset) -> SessionState:
    return initial_state(
        action.persisted,
        copy_edit=action.copy_edit,
        aspect_ratio=action.aspect_ratio,
        step=WizardStep.CAPTURE_SUBJECT,
        access_granted=state.access_granted,
    )


_REDUCERS: dict[type, Callable[[SessionState, object], SessionState]] = {
    AccessGranted: _access_granted,
    SubjectImageSet: _subject_image_set,
    ProductBriefSet: _product_brief_set,
    ProceedToReference: _proceed_to_reference,
    ReferenceImageSet: _reference_image_set,
    AnalysisStarted: _analysis_started,
    AnalysisSucceeded: _analysis_succeeded,
    AnalysisFailed: _analysis_failed,
    VariantSelected: _variant_selected,
    CopyEdited: _copy_edited,
    AspectRatioSet: _aspect_ratio_set,
    GenerationStarted: _generation_started,
    GenerationSucceeded: _generation_succeeded,
    GenerationFailed: _generation_failed,
    AdjustRequested: _adjust_requested,
    BackToVariants: _back_to_variants,
    ProjectReset: _project_reset,
}


def reduce(state: SessionState, action: object) -> SessionState:
    """Apply an action to a state snapshot.

    Args:
        state: Current snapshot (left untouched)
        action: One of the action dataclasses in this module

    Returns:
        New snapshot

    Raises:
        TypeError: If the action type is unknown
        ValueError: If the action carries an invalid value
    """
    handler = _REDUCERS.get(type(action))
    if handler is None:
        raise TypeError(f"Unknown wizard action: {type(action).__name__}")
    new_state = handler(state, action)
    if new_state.step != state.step:
        logger.info(f"Wizard step {state.step.name} -> {new_state.step.name}")
    return new_state
