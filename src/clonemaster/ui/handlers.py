"""Gradio event handlers for the Clone Master wizard.

Every handler takes the session's controller (or None) as its last input,
performs exactly one controller operation, and returns the controller
followed by :func:`render`, the full list of component updates in
``RENDER_KEYS`` order. Handlers that dispatch a model request are generators
so the progress message is shown while the request is outstanding.
"""

import logging
import queue
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

import gradio as gr

from clonemaster.core import codec
from clonemaster.core.controller import WizardController
from clonemaster.core.errors import CloneMasterError, MalformedAsset, PreconditionNotMet
from clonemaster.core.models import WizardStep
from clonemaster.core.view import derive_view

from .state import initialize_controller

logger = logging.getLogger(__name__)

STEP_TITLES = {
    WizardStep.CAPTURE_SUBJECT: "Especialista",
    WizardStep.CAPTURE_REFERENCE: "Referência",
    WizardStep.SELECT_COPY: "Estratégia de Copy",
    WizardStep.CUSTOMIZE: "Ajustes",
    WizardStep.RESULT: "Resultado",
}

GROUP_KEYS = {
    WizardStep.LANDING: "landing_group",
    WizardStep.CAPTURE_SUBJECT: "subject_group",
    WizardStep.CAPTURE_REFERENCE: "reference_group",
    WizardStep.SELECT_COPY: "variants_group",
    WizardStep.CUSTOMIZE: "customize_group",
    WizardStep.RESULT: "result_group",
}

COPY_TEXT_FIELDS = [
    "header1",
    "header2",
    "header3",
    "body_text",
    "cta",
    "badge_text",
    "removal_instructions",
]
DIRECTIVE_FIELDS = ["visual_style", "color_palette", "lighting_type"]

RENDER_KEYS = [
    "header",
    "status",
    "error",
    *GROUP_KEYS.values(),
    "subject_image",
    "product_brief",
    "proceed_btn",
    "reference_image",
    "analyze_btn",
    "variant_choice",
    *COPY_TEXT_FIELDS,
    *DIRECTIVE_FIELDS,
    "aspect_ratio",
    "generate_btn",
    "back_btn",
    "result_image",
    "variation_choice",
    "adjust_btn",
    "new_project_btn",
    "download_btn",
]


def _preview(data_url: str | None):
    if not data_url:
        return None
    try:
        return codec.to_pil(data_url)
    except MalformedAsset as e:
        logger.warning(f"Could not render stored image: {e.message}")
        return None


def render(
    controller: WizardController, *, error: str | None = None, light: bool = False
) -> list[dict]:
    """Build the component updates for the controller's current snapshot.

    Args:
        controller: Session controller
        error: Banner text overriding the session's last error
        light: Leave image and copy text values untouched (used while the
            user is typing, so the box being edited is not overwritten)

    Returns:
        One ``gr.update`` per entry of RENDER_KEYS, in that order
    """
    state = controller.state
    view = derive_view(state)
    idle = not view.is_busy
    updates: dict[str, dict] = {}

    title = STEP_TITLES.get(view.step, "")
    updates["header"] = gr.update(
        value=f"**Passo {int(view.step)} de {len(STEP_TITLES)}** · {title}",
        visible=view.show_header,
    )
    updates["status"] = gr.update(
        value=f"⏳ {view.status_message}" if view.is_busy else "",
        visible=view.is_busy,
    )
    message = error or view.error_message
    updates["error"] = gr.update(value=f"❌ {message}" if message else "", visible=bool(message))

    for step, key in GROUP_KEYS.items():
        updates[key] = gr.update(visible=view.step == step)

    # Step 1
    updates["subject_image"] = (
        gr.update() if light else gr.update(value=_preview(state.subject_image))
    )
    updates["product_brief"] = gr.update() if light else gr.update(value=state.product_brief)
    updates["proceed_btn"] = gr.update(interactive=view.can_proceed)

    # Step 2
    updates["reference_image"] = (
        gr.update() if light else gr.update(value=_preview(state.reference_image))
    )
    updates["analyze_btn"] = gr.update(interactive=view.can_analyze)

    # Step 3
    labels = list(view.variant_labels)
    selected = state.selected_variant_index
    updates["variant_choice"] = gr.update(
        choices=labels,
        value=labels[selected] if selected is not None and selected < len(labels) else None,
    )

    # Step 4
    copy_edit = state.copy_edit
    for name in COPY_TEXT_FIELDS:
        updates[name] = (
            gr.update(interactive=idle)
            if light
            else gr.update(value=getattr(copy_edit, name), interactive=idle)
        )
    for name in DIRECTIVE_FIELDS:
        updates[name] = gr.update(value=getattr(copy_edit, name), interactive=idle)
    updates["aspect_ratio"] = gr.update(value=state.aspect_ratio, interactive=idle)
    updates["generate_btn"] = gr.update(interactive=view.can_generate)
    updates["back_btn"] = gr.update(interactive=idle)

    # Step 5
    updates["result_image"] = gr.update() if light else gr.update(value=_preview(state.result_image))
    active = view.active_variant_index
    updates["variation_choice"] = gr.update(
        choices=labels,
        value=labels[active] if active is not None else None,
        interactive=idle,
    )
    updates["adjust_btn"] = gr.update(interactive=idle)
    updates["new_project_btn"] = gr.update(interactive=idle)
    updates["download_btn"] = gr.update(interactive=idle and view.has_result)

    return [updates[key] for key in RENDER_KEYS]


def _run(
    controller: WizardController | None,
    operation: Callable[[WizardController], object],
    *,
    light: bool = False,
) -> tuple:
    """Apply one controller operation and render the outcome."""
    controller = initialize_controller(controller)
    error = None
    try:
        operation(controller)
    except PreconditionNotMet as e:
        logger.debug(f"Action blocked: {e.message}")
    except CloneMasterError as e:
        logger.warning(f"Action failed: {e.message}")
        error = e.message
    except Exception as e:
        logger.error(f"Unexpected error in wizard handler: {e}", exc_info=True)
        error = f"Erro inesperado: {e}"
    return (controller, *render(controller, error=error, light=light))


def _stream(controller: WizardController | None, operation: Callable[[WizardController], bool]):
    """Run a dispatching operation in a worker, yielding a render per snapshot."""
    controller = initialize_controller(controller)
    snapshots: queue.Queue = queue.Queue()
    unsubscribe = controller.subscribe(snapshots.put)
    error = None
    try:
        with ThreadPoolExecutor(max_workers=1) as pool:
            future = pool.submit(operation, controller)
            while not future.done():
                try:
                    snapshots.get(timeout=0.1)
                except queue.Empty:
                    continue
                yield (controller, *render(controller))
            future.result()
    except PreconditionNotMet as e:
        logger.debug(f"Request blocked: {e.message}")
    except Exception as e:
        logger.error(f"Unexpected error during model request: {e}", exc_info=True)
        error = f"Erro inesperado: {e}"
    finally:
        unsubscribe()
    yield (controller, *render(controller, error=error))


def load_session(controller):
    """Create the session's controller on page load and render it."""
    return _run(controller, lambda c: None)


def enter_app(api_key: str, controller):
    """Landing page: grant access with the typed key (or the configured one)."""
    controller = initialize_controller(controller)
    granted = controller.grant_access(api_key or None)
    error = None if granted else "Informe uma chave de API válida para continuar."
    return (controller, *render(controller, error=error))


def upload_subject_image(path: str | None, controller):
    return _run(
        controller,
        lambda c: c.set_subject_image(codec.encode_image_file(path) if path else None),
    )


def update_product_brief(brief: str, controller):
    return _run(controller, lambda c: c.set_product_brief(brief), light=True)


def proceed_to_reference(controller):
    return _run(controller, lambda c: c.proceed_to_reference())


def upload_reference_image(path: str | None, controller):
    return _run(
        controller,
        lambda c: c.set_reference_image(codec.encode_image_file(path) if path else None),
    )


def analyze_reference(controller):
    """Step 2 -> 3. Shows the progress message while the analysis runs."""
    yield from _stream(controller, lambda c: c.analyze_reference())


def select_variant(index: int | None, controller):
    if index is None:
        return _run(controller, lambda c: None)
    return _run(controller, lambda c: c.select_variant(index))


def make_copy_field_handler(field_name: str):
    """Build the handler for one copy/directive input.

    Args:
        field_name: CopyFields attribute the input edits

    Returns:
        Handler taking (value, controller)
    """

    def handler(value, controller):
        return _run(
            controller,
            lambda c: c.update_copy(**{field_name: value or ""}),
            light=True,
        )

    handler.__name__ = f"update_{field_name}"
    return handler


def set_aspect_ratio(aspect_ratio: str, controller):
    return _run(controller, lambda c: c.set_aspect_ratio(aspect_ratio), light=True)


def back_to_variants(controller):
    return _run(controller, lambda c: c.back_to_variants())


def generate_creative(controller):
    """Step 4 -> 5. Shows the progress message while synthesis runs."""
    yield from _stream(controller, lambda c: c.generate())


def generate_variation(index: int | None, controller):
    """Pick another variant on the result page and synthesize it right away."""
    if index is None:
        yield _run(controller, lambda c: None)
        return
    yield from _stream(controller, lambda c: c.generate_variation(index))


def adjust_result(controller):
    return _run(controller, lambda c: c.adjust())


def start_new_project(controller):
    return _run(controller, lambda c: c.new_project())


def download_result(controller):
    """Export the result image and offer it through the file component.

    Returns:
        Tuple of (controller, file_update, error_update)
    """
    controller = initialize_controller(controller)
    try:
        path = controller.export_result()
    except PreconditionNotMet as e:
        logger.debug(f"Download blocked: {e.message}")
        return controller, gr.update(value=None, visible=False), gr.update()
    except (CloneMasterError, OSError) as e:
        logger.error(f"Failed to export result: {e}", exc_info=True)
        return (
            controller,
            gr.update(value=None, visible=False),
            gr.update(value=f"❌ Falha ao salvar o criativo: {e}", visible=True),
        )
    return controller, gr.update(value=str(path), visible=True), gr.update()
