"""Wizard controller: the single writer of a session's state.

The controller validates each user operation against the current snapshot,
asks the prompt builder for a request, calls the model gateway and reduces
the outcome back into a new :class:`SessionState`. Listeners registered with
:meth:`WizardController.subscribe` receive every committed snapshot.

Single-flight Dispatch
----------------------
Analysis and generation share one request slot. Checking that the slot is
free and committing the "started" action happen together under a lock; the
network call itself runs outside the lock. A dispatch attempted while a
request is outstanding returns ``False`` and leaves the state untouched.

Each accepted dispatch gets a token. A reset invalidates the outstanding
token, so a response that arrives after "new project" is discarded instead
of landing in the fresh session.

Usage Example
-------------
    >>> from clonemaster.core.config import config
    >>> controller = WizardController(config)
    >>> controller.check_access()
    >>> controller.set_subject_image(subject_url)
    >>> controller.set_product_brief("Curso de marketing")
    >>> controller.proceed_to_reference()
    >>> controller.set_reference_image(reference_url)
    >>> controller.analyze_reference()
    >>> controller.select_variant(0)
    >>> controller.generate()
    >>> controller.export_result(config.outputs_dir)
"""

import logging
import threading
import time
from pathlib import Path
from typing import Callable

from . import codec
from .access import AccessProvider, ConfigAccessProvider
from .config import CloneMasterConfig
from .errors import CloneMasterError, GatewayError, MalformedAsset, PreconditionNotMet
from .gateway import ModelGatewayBase, gateway_registry
from .models import (
    CopyFields,
    SessionState,
    WizardStep,
    initial_state,
    promote_variant,
)
from .persistence import PersistenceBridge
from .prompt_builder import build_analysis_request, build_synthesis_request
from .validation import (
    require_can_analyze,
    require_can_generate,
    require_can_generate_variation,
    require_can_proceed,
    require_can_select,
    require_step,
)
from .view import ViewState, derive_view
from .wizard import (
    AccessGranted,
    AdjustRequested,
    AnalysisFailed,
    AnalysisStarted,
    AnalysisSucceeded,
    AspectRatioSet,
    BackToVariants,
    CopyEdited,
    GenerationFailed,
    GenerationStarted,
    GenerationSucceeded,
    ProceedToReference,
    ProductBriefSet,
    ProjectReset,
    ReferenceImageSet,
    SubjectImageSet,
    VariantSelected,
    reduce,
)

logger = logging.getLogger(__name__)

ANALYSIS_STATUS = "Mapeando Estrutura Master..."
GENERATION_STATUS = "Clonando Identidade e Aplicando Estilo Master..."
EXPORT_PREFIX = "criativo_clone_"

StateListener = Callable[[SessionState], None]


def _error_message(error: Exception) -> str:
    if isinstance(error, CloneMasterError) and error.message:
        return error.message
    return str(error) or type(error).__name__


class WizardController:
    """Owns one wizard session.

    Attributes
    ----------
    config : CloneMasterConfig
        Model names, defaults and paths
    persistence : PersistenceBridge
        Storage for the subject image and product brief
    access_provider : AccessProvider
        Landing-step credential check
    """

    def __init__(
        self,
        config: CloneMasterConfig,
        gateway: ModelGatewayBase | None = None,
        persistence: PersistenceBridge | None = None,
        access_provider: AccessProvider | None = None,
    ) -> None:
        """Initialize the controller and seed the session from storage.

        Args:
            config: Configuration object
            gateway: Model gateway to use. When omitted, ``config.default_gateway``
                is instantiated from the registry on first use, with the key
                granted on the landing step.
            persistence: Storage bridge (default: JSON file at ``config.store_path``)
            access_provider: Credential check (default: ConfigAccessProvider)
        """
        self.config = config
        self.persistence = persistence or PersistenceBridge(config.store_path)
        self.access_provider = access_provider or ConfigAccessProvider(config)

        self._gateway = gateway
        self._owns_gateway = gateway is None
        self._lock = threading.Lock()
        self._request_token = 0
        self._listeners: list[StateListener] = []

        self._state = initial_state(
            self.persistence.load(),
            copy_edit=self._default_copy(),
            aspect_ratio=config.default_aspect_ratio,
        )
        logger.info(f"Wizard session started: {self._state!r}")

    # ------------------------------------------------------------------ state

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def view(self) -> ViewState:
        return derive_view(self._state)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener for committed snapshots.

        Returns:
            Callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _default_copy(self) -> CopyFields:
        return CopyFields(removal_instructions=self.config.default_removal_instructions)

    def _apply(self, action: object) -> SessionState:
        # Caller holds self._lock
        self._state = reduce(self._state, action)
        return self._state

    def _notify(self, state: SessionState) -> None:
        for listener in list(self._listeners):
            listener(state)

    def _commit(self, action: object, check: Callable[[SessionState], None] | None = None):
        """Validate and apply a non-dispatch action, then notify listeners."""
        with self._lock:
            if check is not None:
                check(self._state)
            state = self._apply(action)
        self._notify(state)
        return state

    def _get_gateway(self) -> ModelGatewayBase:
        if self._gateway is None:
            api_key = getattr(self.access_provider, "api_key", None)
            self._gateway = gateway_registry.instantiate(
                self.config.default_gateway, self.config, api_key=api_key
            )
            logger.info(f"Model gateway ready: {self._gateway.get_gateway_info()}")
        return self._gateway

    # ----------------------------------------------------------------- access

    def check_access(self) -> bool:
        """Pass the landing step if a credential is already available."""
        if self._state.access_granted:
            return True
        try:
            granted = self.access_provider.has_credential()
        except Exception as e:
            logger.warning(f"Access check failed, treating as not granted: {e}")
            granted = False

        if granted:
            self._commit(AccessGranted())
        return granted

    def grant_access(self, credential: str | None = None) -> bool:
        """Ask the access provider for a credential and pass the landing step.

        Args:
            credential: Key entered by the user (optional)

        Returns:
            True if access was granted
        """
        try:
            granted = self.access_provider.request_access(credential)
        except Exception as e:
            logger.warning(f"Access request failed, treating as not granted: {e}")
            granted = False

        if not granted:
            return False

        if self._owns_gateway:
            # Rebuilt on next use so a newly granted key is picked up
            self._gateway = None
        self._commit(AccessGranted())
        return True

    # ----------------------------------------------------------------- step 1

    def set_subject_image(self, image: str | None) -> SessionState:
        """Replace the identity source and persist it.

        Raises:
            PreconditionNotMet: Outside step 1
            MalformedAsset: If the value is not a data URL
        """
        if image is not None:
            codec.strip(image)
        state = self._commit(
            SubjectImageSet(image),
            lambda s: require_step(s, WizardStep.CAPTURE_SUBJECT),
        )
        self.persistence.save_subject_image(image)
        return state

    def set_product_brief(self, brief: str) -> SessionState:
        """Replace the offer description and persist it."""
        brief = brief or ""
        state = self._commit(
            ProductBriefSet(brief),
            lambda s: require_step(s, WizardStep.CAPTURE_SUBJECT),
        )
        self.persistence.save_product_brief(brief)
        return state

    def proceed_to_reference(self) -> SessionState:
        return self._commit(ProceedToReference(), require_can_proceed)

    # ----------------------------------------------------------------- step 2

    def set_reference_image(self, image: str | None) -> SessionState:
        """Replace the layout reference (session only, never persisted)."""
        if image is not None:
            codec.strip(image)
        return self._commit(
            ReferenceImageSet(image),
            lambda s: require_step(s, WizardStep.CAPTURE_REFERENCE),
        )

    def analyze_reference(self) -> bool:
        """Ask the analysis model for copy variants.

        Returns:
            False if another request is outstanding, True once the dispatched
            request has finished (successfully or with ``last_error`` set)

        Raises:
            PreconditionNotMet: Outside step 2 or without a reference image
        """
        with self._lock:
            if self._state.is_busy:
                logger.warning("Analysis rejected: a request is already in flight")
                return False
            require_can_analyze(self._state)

            self._request_token += 1
            token = self._request_token
            try:
                request = build_analysis_request(
                    self._state.reference_image, self._state.product_brief
                )
            except MalformedAsset as e:
                state = self._apply(AnalysisFailed(_error_message(e)))
                request = None
            else:
                state = self._apply(AnalysisStarted(status_message=ANALYSIS_STATUS))
        self._notify(state)

        if request is None:
            return True

        logger.info("Dispatching copy analysis")
        try:
            variants = self._get_gateway().analyze(request)
        except (GatewayError, MalformedAsset) as e:
            logger.warning(f"Analysis failed: {_error_message(e)}")
            self._finish(token, AnalysisFailed(_error_message(e)))
            return True
        except Exception as e:
            self._finish(token, AnalysisFailed(_error_message(e)))
            raise

        self._finish(token, AnalysisSucceeded(tuple(variants)))
        return True

    # ----------------------------------------------------------------- step 3

    def select_variant(self, index: int) -> SessionState:
        """Promote a variant into the live copy and move to customization."""
        with self._lock:
            require_can_select(self._state, index)
            copy_edit = promote_variant(
                self._state.copy_variants[index],
                self._state.copy_edit,
                self.config.default_cta,
            )
            state = self._apply(VariantSelected(index=index, copy_edit=copy_edit))
        self._notify(state)
        return state

    # ----------------------------------------------------------------- step 4

    def update_copy(self, **changes) -> SessionState:
        """Edit fields of the live copy.

        Raises:
            PreconditionNotMet: Outside step 4
            ValueError: Unknown field or invalid directive value
        """
        with self._lock:
            require_step(self._state, WizardStep.CUSTOMIZE)
            copy_edit = self._state.copy_edit.with_changes(**changes)
            state = self._apply(CopyEdited(copy_edit))
        self._notify(state)
        return state

    def set_aspect_ratio(self, aspect_ratio: str) -> SessionState:
        return self._commit(AspectRatioSet(aspect_ratio))

    def back_to_variants(self) -> SessionState:
        def check(state: SessionState) -> None:
            require_step(state, WizardStep.CUSTOMIZE)
            if state.is_busy:
                raise PreconditionNotMet("Wait for the current generation to finish")

        return self._commit(BackToVariants(), check)

    def generate(self) -> bool:
        """Synthesize the creative from the live copy.

        Returns:
            False if another request is outstanding, True otherwise
        """
        with self._lock:
            if self._state.is_busy:
                logger.warning("Generation rejected: a request is already in flight")
                return False
            require_can_generate(self._state)
            started = self._start_generation(self._state.copy_edit, None)
        return self._run_generation(*started)

    def generate_variation(self, index: int) -> bool:
        """Promote a variant and immediately synthesize with it.

        The promoted copy is computed once here and handed to the request
        builder directly.

        Returns:
            False if another request is outstanding, True otherwise
        """
        with self._lock:
            if self._state.is_busy:
                logger.warning(f"Variation {index} rejected: a request is already in flight")
                return False
            require_can_generate_variation(self._state, index)
            copy_edit = promote_variant(
                self._state.copy_variants[index],
                self._state.copy_edit,
                self.config.default_cta,
            )
            started = self._start_generation(copy_edit, index)
        return self._run_generation(*started)

    def _start_generation(self, copy_edit: CopyFields, variant_index: int | None):
        # Caller holds self._lock
        self._request_token += 1
        try:
            request = build_synthesis_request(
                self._state.subject_image,
                self._state.reference_image,
                copy_edit,
                self._state.aspect_ratio,
                self.config.output_resolution,
            )
        except MalformedAsset as e:
            return self._request_token, None, self._apply(GenerationFailed(_error_message(e)))

        state = self._apply(
            GenerationStarted(
                status_message=GENERATION_STATUS,
                copy_edit=copy_edit if variant_index is not None else None,
                selected_variant_index=variant_index,
            )
        )
        return self._request_token, request, state

    def _run_generation(self, token: int, request, state: SessionState) -> bool:
        self._notify(state)
        if request is None:
            return True

        logger.info(f"Dispatching synthesis ({request.aspect_ratio}, {request.output_resolution})")
        try:
            image = self._get_gateway().synthesize(request)
            result = codec.encode(image.data, image.mime_type)
        except (GatewayError, MalformedAsset) as e:
            logger.warning(f"Generation failed: {_error_message(e)}")
            self._finish(token, GenerationFailed(_error_message(e)))
            return True
        except Exception as e:
            self._finish(token, GenerationFailed(_error_message(e)))
            raise

        self._finish(token, GenerationSucceeded(result))
        return True

    def _finish(self, token: int, action: object) -> None:
        with self._lock:
            if token != self._request_token:
                logger.info(f"Discarding stale {type(action).__name__} after reset")
                return
            state = self._apply(action)
        self._notify(state)

    # ----------------------------------------------------------------- step 5

    def adjust(self) -> SessionState:
        """Drop the result and go back to customization."""
        return self._commit(
            AdjustRequested(), lambda s: require_step(s, WizardStep.RESULT)
        )

    def new_project(self) -> SessionState:
        """Start over from step 1 (the result page's "Novo Projeto" button)."""
        return self.reset()

    def reset(self) -> SessionState:
        """Start over from step 1, keeping the persisted subject and brief."""
        persisted = self.persistence.load()
        with self._lock:
            self._request_token += 1
            state = self._apply(
                ProjectReset(
                    persisted=persisted,
                    copy_edit=self._default_copy(),
                    aspect_ratio=self.config.default_aspect_ratio,
                )
            )
        logger.info("Project reset")
        self._notify(state)
        return state

    def export_result(self, directory: Path | None = None) -> Path:
        """Write the result image to disk for download.

        Args:
            directory: Target directory (default: ``config.outputs_dir``)

        Returns:
            Path of the written file (``criativo_clone_<epoch-ms>.<ext>``)

        Raises:
            PreconditionNotMet: If there is no result yet
            MalformedAsset: If the stored result cannot be decoded
        """
        result = self._state.result_image
        if result is None:
            raise PreconditionNotMet("There is no generated creative to download")

        directory = Path(directory or self.config.outputs_dir)
        directory.mkdir(parents=True, exist_ok=True)

        extension = codec.extension_for(codec.mime_type_of(result))
        path = directory / f"{EXPORT_PREFIX}{int(time.time() * 1000)}.{extension}"
        path.write_bytes(codec.decode(result))

        logger.info(f"Exported result to {path}")
        return path
