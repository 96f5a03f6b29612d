"""Shared pytest fixtures for Clone Master tests."""

import io
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Generator

import pytest
from PIL import Image

from clonemaster.core import codec
from clonemaster.core.config import CloneMasterConfig
from clonemaster.core.controller import WizardController
from clonemaster.core.gateway import GeneratedImage, ModelGatewayBase
from clonemaster.core.models import CopyVariant
from clonemaster.core.persistence import PersistenceBridge


def make_png(color: str = "red", size: tuple[int, int] = (8, 8)) -> bytes:
    """Encode a small solid-color PNG."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeGateway(ModelGatewayBase):
    """Scriptable stand-in for the Gemini gateway.

    Set ``variants``/``image`` for successful answers, or
    ``analyze_error``/``synthesize_error`` to raise. When ``release`` is an
    Event, calls block until it is set; ``entered`` is set as soon as a call
    starts.
    """

    name = "Fake"
    description = "In-memory gateway for tests"

    def __init__(self, config: CloneMasterConfig, api_key: str | None = None) -> None:
        super().__init__(config, api_key)
        self.variants: list[CopyVariant] = []
        self.image = GeneratedImage(data=make_png("blue"), mime_type="image/png")
        self.analyze_error: Exception | None = None
        self.synthesize_error: Exception | None = None
        self.analysis_requests = []
        self.synthesis_requests = []
        self.entered = threading.Event()
        self.release: threading.Event | None = None

    def _wait(self) -> None:
        self.entered.set()
        if self.release is not None:
            self.release.wait(timeout=5)

    def analyze(self, request):
        self.analysis_requests.append(request)
        self._wait()
        if self.analyze_error is not None:
            raise self.analyze_error
        return list(self.variants)

    def synthesize(self, request):
        self.synthesis_requests.append(request)
        self._wait()
        if self.synthesize_error is not None:
            raise self.synthesize_error
        return self.image


class GrantingAccessProvider:
    """Access provider that always reports a credential."""

    api_key = "test-key"

    def has_credential(self) -> bool:
        return True

    def request_access(self, credential: str | None = None) -> bool:
        return True


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> CloneMasterConfig:
    """Create a test configuration with temporary directories.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        CloneMasterConfig instance for testing
    """
    return CloneMasterConfig(
        gemini_api_key=None,
        data_dir=temp_dir / "data",
        outputs_dir=temp_dir / "outputs",
        default_aspect_ratio="9:16",
        output_resolution="4K",
        _env_file=None,
    )


@pytest.fixture
def png_bytes() -> bytes:
    return make_png("red")


@pytest.fixture
def subject_url() -> str:
    """Data URL of the identity source image."""
    return codec.encode(make_png("red"), "image/png")


@pytest.fixture
def reference_url() -> str:
    """Data URL of the layout reference image."""
    return codec.encode(make_png("green"), "image/png")


@pytest.fixture
def sample_variants() -> list[CopyVariant]:
    """Three variants as the analysis model would return them."""
    return [
        CopyVariant(
            header1="Domine",
            header2="o Marketing",
            header3="em 30 dias",
            body_text="Aulas práticas com especialistas.",
            cta="Quero Entrar",
            badge_text="Vagas limitadas",
            strategy="Direct",
        ),
        CopyVariant(
            header1="O segredo",
            header2="que ninguém conta",
            body_text="Descubra o método por trás dos resultados.",
            strategy="Curiosity",
        ),
        CopyVariant(
            header1="10 anos",
            header2="de experiência",
            body_text="Mais de 5 mil alunos formados.",
            cta="",
            badge_text="",
            strategy="Authority",
        ),
    ]


@pytest.fixture
def fake_gateway(test_config: CloneMasterConfig, sample_variants) -> FakeGateway:
    gateway = FakeGateway(test_config)
    gateway.variants = sample_variants
    return gateway


@pytest.fixture
def persistence(test_config: CloneMasterConfig) -> PersistenceBridge:
    return PersistenceBridge(test_config.store_path)


@pytest.fixture
def controller(test_config, fake_gateway, persistence) -> WizardController:
    """Controller on the landing step, wired to the fake gateway."""
    return WizardController(
        test_config,
        gateway=fake_gateway,
        persistence=persistence,
        access_provider=GrantingAccessProvider(),
    )


@pytest.fixture
def customize_controller(controller, subject_url, reference_url) -> WizardController:
    """Controller advanced to the customization step with variant 0 selected."""
    controller.check_access()
    controller.set_subject_image(subject_url)
    controller.set_product_brief("Curso de marketing digital")
    controller.proceed_to_reference()
    controller.set_reference_image(reference_url)
    controller.analyze_reference()
    controller.select_variant(0)
    return controller
