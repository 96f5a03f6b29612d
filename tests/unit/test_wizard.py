"""Unit tests for the pure wizard reducer."""

import pytest

from clonemaster.core.models import (
    CopyFields,
    PersistedFields,
    RequestStatus,
    SessionState,
    WizardStep,
)
from clonemaster.core.wizard import (
    AccessGranted,
    AdjustRequested,
    AnalysisFailed,
    AnalysisStarted,
    AnalysisSucceeded,
    AspectRatioSet,
    BackToVariants,
    GenerationFailed,
    GenerationStarted,
    GenerationSucceeded,
    ProjectReset,
    VariantSelected,
    reduce,
)


class TestReduce:
    """Tests for individual transitions."""

    def test_does_not_mutate_input(self):
        state = SessionState()

        new_state = reduce(state, AccessGranted())

        assert state.step is WizardStep.LANDING
        assert new_state.step is WizardStep.CAPTURE_SUBJECT
        assert new_state.access_granted

    def test_unknown_action(self):
        with pytest.raises(TypeError):
            reduce(SessionState(), object())

    def test_analysis_started_clears_error(self):
        state = SessionState(last_error="old", step=WizardStep.CAPTURE_REFERENCE)

        new_state = reduce(state, AnalysisStarted(status_message="Mapeando"))

        assert new_state.request_status is RequestStatus.ANALYZING
        assert new_state.status_message == "Mapeando"
        assert new_state.last_error is None

    def test_analysis_succeeded(self, sample_variants):
        state = SessionState(
            step=WizardStep.CAPTURE_REFERENCE, request_status=RequestStatus.ANALYZING
        )

        new_state = reduce(state, AnalysisSucceeded(tuple(sample_variants)))

        assert new_state.step is WizardStep.SELECT_COPY
        assert new_state.copy_variants == tuple(sample_variants)
        assert new_state.request_status is RequestStatus.IDLE

    def test_analysis_failed_keeps_step(self):
        state = SessionState(
            step=WizardStep.CAPTURE_REFERENCE, request_status=RequestStatus.ANALYZING
        )

        new_state = reduce(state, AnalysisFailed("timeout"))

        assert new_state.step is WizardStep.CAPTURE_REFERENCE
        assert new_state.last_error == "timeout"
        assert new_state.request_status is RequestStatus.IDLE

    def test_variant_selected(self):
        copy_edit = CopyFields(header1="A")

        new_state = reduce(SessionState(step=WizardStep.SELECT_COPY), VariantSelected(1, copy_edit))

        assert new_state.step is WizardStep.CUSTOMIZE
        assert new_state.selected_variant_index == 1
        assert new_state.copy_edit is copy_edit

    def test_generation_started_with_explicit_copy(self):
        copy_edit = CopyFields(header1="B")
        state = SessionState(step=WizardStep.RESULT, copy_edit=CopyFields(header1="A"))

        new_state = reduce(
            state, GenerationStarted(copy_edit=copy_edit, selected_variant_index=2)
        )

        assert new_state.copy_edit.header1 == "B"
        assert new_state.selected_variant_index == 2
        assert new_state.request_status is RequestStatus.GENERATING

    def test_generation_started_keeps_copy(self):
        state = SessionState(step=WizardStep.CUSTOMIZE, copy_edit=CopyFields(header1="A"))

        new_state = reduce(state, GenerationStarted())

        assert new_state.copy_edit.header1 == "A"

    def test_generation_succeeded(self):
        state = SessionState(step=WizardStep.CUSTOMIZE, request_status=RequestStatus.GENERATING)

        new_state = reduce(state, GenerationSucceeded("data:image/png;base64,AA"))

        assert new_state.step is WizardStep.RESULT
        assert new_state.result_image == "data:image/png;base64,AA"
        assert new_state.request_status is RequestStatus.IDLE

    def test_generation_failed_keeps_result(self):
        state = SessionState(
            step=WizardStep.RESULT,
            result_image="data:image/png;base64,AA",
            request_status=RequestStatus.GENERATING,
        )

        new_state = reduce(state, GenerationFailed("boom"))

        assert new_state.step is WizardStep.RESULT
        assert new_state.result_image == "data:image/png;base64,AA"
        assert new_state.last_error == "boom"

    def test_adjust_clears_result(self):
        state = SessionState(step=WizardStep.RESULT, result_image="data:image/png;base64,AA")

        new_state = reduce(state, AdjustRequested())

        assert new_state.step is WizardStep.CUSTOMIZE
        assert new_state.result_image is None

    def test_back_to_variants(self):
        assert reduce(SessionState(step=WizardStep.CUSTOMIZE), BackToVariants()).step is (
            WizardStep.SELECT_COPY
        )

    def test_aspect_ratio(self):
        assert reduce(SessionState(), AspectRatioSet("16:9")).aspect_ratio == "16:9"

        with pytest.raises(ValueError):
            reduce(SessionState(), AspectRatioSet("4:5"))

    def test_project_reset(self, subject_url, sample_variants):
        state = SessionState(
            subject_image="data:image/png;base64,OLD",
            reference_image="data:image/png;base64,REF",
            copy_variants=tuple(sample_variants),
            result_image="data:image/png;base64,RES",
            last_error="x",
            aspect_ratio="16:9",
            access_granted=True,
            step=WizardStep.RESULT,
        )

        new_state = reduce(
            state,
            ProjectReset(
                persisted=PersistedFields(subject_image=subject_url, product_brief="Curso"),
                copy_edit=CopyFields(),
                aspect_ratio="9:16",
            ),
        )

        assert new_state.step is WizardStep.CAPTURE_SUBJECT
        assert new_state.subject_image == subject_url
        assert new_state.product_brief == "Curso"
        assert new_state.reference_image is None
        assert new_state.copy_variants == ()
        assert new_state.result_image is None
        assert new_state.last_error is None
        assert new_state.aspect_ratio == "9:16"
        assert new_state.access_granted

    def test_project_reset_from_landing(self):
        new_state = reduce(
            SessionState(),
            ProjectReset(persisted=PersistedFields(), copy_edit=CopyFields(), aspect_ratio="9:16"),
        )

        assert new_state.step is WizardStep.CAPTURE_SUBJECT
        assert not new_state.access_granted
