"""Unit tests for session data models."""

import pytest

from clonemaster.core.config import DEFAULT_REMOVAL_INSTRUCTIONS
from clonemaster.core.models import (
    DEFAULT_CTA,
    MIMIC,
    CopyFields,
    CopyVariant,
    PersistedFields,
    RequestStatus,
    SessionState,
    WizardStep,
    initial_state,
    promote_variant,
)


class TestCopyFields:
    """Tests for the live copy model."""

    def test_defaults(self):
        copy_edit = CopyFields()

        assert copy_edit.header1 == ""
        assert copy_edit.removal_instructions == DEFAULT_REMOVAL_INSTRUCTIONS
        assert copy_edit.visual_style == MIMIC
        assert copy_edit.color_palette == MIMIC
        assert copy_edit.lighting_type == MIMIC

    def test_invalid_directive_rejected(self):
        """Test that directive values are restricted to their option lists."""
        with pytest.raises(ValueError, match="visual_style"):
            CopyFields(visual_style="Baroque")

    def test_headline_joins_non_empty_parts(self):
        copy_edit = CopyFields(header1="Domine", header3="em 30 dias")

        assert copy_edit.headline == "Domine em 30 dias"

    def test_with_changes(self):
        copy_edit = CopyFields(header1="A").with_changes(header1="B", color_palette="Warm")

        assert copy_edit.header1 == "B"
        assert copy_edit.color_palette == "Warm"

    def test_with_changes_unknown_field(self):
        with pytest.raises(ValueError, match="Unknown copy field"):
            CopyFields().with_changes(subtitle="x")

    def test_is_immutable(self):
        with pytest.raises(AttributeError):
            CopyFields().header1 = "x"


class TestPromoteVariant:
    """Tests for variant promotion and its fallback rules."""

    def test_copies_texts(self):
        variant = CopyVariant(
            header1="H1", header2="H2", header3="H3", body_text="B", cta="Go", badge_text="New"
        )

        result = promote_variant(variant, CopyFields())

        assert (result.header1, result.header2, result.header3) == ("H1", "H2", "H3")
        assert result.body_text == "B"
        assert result.cta == "Go"
        assert result.badge_text == "New"

    def test_empty_cta_falls_back_to_default(self):
        result = promote_variant(CopyVariant(header1="X", cta=""), CopyFields())

        assert result.cta == DEFAULT_CTA == "Saiba Mais"

    def test_custom_default_cta(self):
        result = promote_variant(CopyVariant(header1="X"), CopyFields(), default_cta="Compre")

        assert result.cta == "Compre"

    def test_empty_badge_stays_empty(self):
        assert promote_variant(CopyVariant(header1="X"), CopyFields()).badge_text == ""

    def test_keeps_directives_and_removal_instructions(self):
        base = CopyFields(
            removal_instructions="Remove o logo",
            visual_style="Cinematic",
            lighting_type="Neon",
        )

        result = promote_variant(CopyVariant(header1="X"), base)

        assert result.removal_instructions == "Remove o logo"
        assert result.visual_style == "Cinematic"
        assert result.lighting_type == "Neon"


class TestSessionState:
    def test_defaults(self):
        state = SessionState()

        assert state.step is WizardStep.LANDING
        assert state.request_status is RequestStatus.IDLE
        assert state.copy_variants == ()
        assert state.aspect_ratio == "9:16"
        assert not state.is_busy

    def test_is_busy(self):
        assert SessionState(request_status=RequestStatus.ANALYZING).is_busy
        assert SessionState(request_status=RequestStatus.GENERATING).is_busy

    def test_repr_omits_payloads(self, subject_url):
        text = repr(SessionState(subject_image=subject_url))

        assert "base64" not in text
        assert "subject=yes" in text


class TestInitialState:
    def test_seeds_persisted_fields(self, subject_url):
        state = initial_state(PersistedFields(subject_image=subject_url, product_brief="Curso"))

        assert state.subject_image == subject_url
        assert state.product_brief == "Curso"
        assert state.reference_image is None
        assert state.step is WizardStep.LANDING

    def test_without_persisted_fields(self):
        state = initial_state()

        assert state.subject_image is None
        assert state.product_brief == ""

    def test_invalid_aspect_ratio(self):
        with pytest.raises(ValueError):
            initial_state(aspect_ratio="1:1")
