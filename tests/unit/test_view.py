"""Unit tests for derived view-state."""

from clonemaster.core.models import CopyFields, RequestStatus, SessionState, WizardStep
from clonemaster.core.view import derive_view, find_active_variant, format_variant_label


def test_landing_hides_header():
    view = derive_view(SessionState())

    assert view.step is WizardStep.LANDING
    assert not view.show_header
    assert not view.has_result
    assert view.error_message == ""


def test_header_shown_after_landing():
    assert derive_view(SessionState(step=WizardStep.CAPTURE_SUBJECT)).show_header


def test_variant_labels(sample_variants):
    view = derive_view(SessionState(copy_variants=tuple(sample_variants)))

    assert view.variant_labels == (
        "Opção 1 — Direct: Domine",
        "Opção 2 — Curiosity: O segredo",
        "Opção 3 — Authority: 10 anos",
    )


def test_format_variant_label():
    assert format_variant_label(0, "Direct", "Olá") == "Opção 1 — Direct: Olá"


class TestActiveVariant:
    def test_matches_live_header(self, sample_variants):
        state = SessionState(
            copy_variants=tuple(sample_variants), copy_edit=CopyFields(header1="O segredo")
        )

        assert find_active_variant(state) == 1

    def test_edited_header_has_no_match(self, sample_variants):
        state = SessionState(
            copy_variants=tuple(sample_variants), copy_edit=CopyFields(header1="Outro texto")
        )

        assert derive_view(state).active_variant_index is None

    def test_empty_header_has_no_match(self, sample_variants):
        assert find_active_variant(SessionState(copy_variants=tuple(sample_variants))) is None


def test_busy_view():
    state = SessionState(
        step=WizardStep.CUSTOMIZE,
        request_status=RequestStatus.GENERATING,
        status_message="Clonando...",
    )

    view = derive_view(state)

    assert view.is_busy
    assert view.status_message == "Clonando..."
    assert not view.can_generate


def test_error_and_result():
    view = derive_view(SessionState(last_error="timeout", result_image="data:image/png;base64,AA"))

    assert view.error_message == "timeout"
    assert view.has_result
