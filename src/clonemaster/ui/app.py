"""Gradio UI for Clone Master."""

import logging

import gradio as gr

from clonemaster.core.config import config
from clonemaster.core.gateway import gateway_registry
from clonemaster.core.models import (
    ASPECT_RATIOS,
    COLOR_PALETTES,
    LIGHTING_TYPES,
    VISUAL_STYLES,
)

from .handlers import (
    COPY_TEXT_FIELDS,
    DIRECTIVE_FIELDS,
    RENDER_KEYS,
    adjust_result,
    analyze_reference,
    back_to_variants,
    download_result,
    enter_app,
    generate_creative,
    generate_variation,
    load_session,
    make_copy_field_handler,
    proceed_to_reference,
    select_variant,
    set_aspect_ratio,
    start_new_project,
    update_product_brief,
    upload_reference_image,
    upload_subject_image,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

COPY_FIELD_LABELS = {
    "header1": "Headline (parte 1)",
    "header2": "Headline (parte 2)",
    "header3": "Headline (parte 3)",
    "body_text": "Texto de apoio",
    "cta": "Botão (CTA)",
    "badge_text": "Selo / informação extra",
    "removal_instructions": "Instruções de limpeza",
}

DIRECTIVE_CHOICES = {
    "visual_style": ("Estilo visual", VISUAL_STYLES),
    "color_palette": ("Paleta de cores", COLOR_PALETTES),
    "lighting_type": ("Iluminação", LIGHTING_TYPES),
}


def create_ui() -> tuple[gr.Blocks, str]:
    """Create the wizard UI.

    Returns:
        Tuple of (Gradio Blocks app, custom CSS string)
    """
    custom_css = """
    .error-banner { color: #f87171; }
    .status-banner { color: #fbbf24; }
    """

    app = gr.Blocks(title="Clone Master")

    with app:
        # Session state - one controller per user, created on page load
        session = gr.State(None)
        components: dict[str, gr.components.Component] = {}

        gr.Markdown("# Clone Master\n### Criativos de alta conversão com a sua identidade")
        components["header"] = gr.Markdown(visible=False)
        components["status"] = gr.Markdown(visible=False, elem_classes=["status-banner"])
        components["error"] = gr.Markdown(visible=False, elem_classes=["error-banner"])

        # Step 0 - access gate
        with gr.Group(visible=True) as components["landing_group"]:
            gr.Markdown("Informe sua chave de API do Gemini para começar.")
            api_key_input = gr.Textbox(label="Chave de API", type="password")
            enter_btn = gr.Button("Entrar", variant="primary")

        # Step 1 - identity source and offer
        with gr.Group(visible=False) as components["subject_group"]:
            components["subject_image"] = gr.Image(
                label="Foto do especialista", type="filepath", sources=["upload"]
            )
            components["product_brief"] = gr.Textbox(
                label="O que você está vendendo?",
                placeholder="Ex.: Mentoria de marketing digital para nutricionistas",
                lines=3,
            )
            components["proceed_btn"] = gr.Button("Continuar", variant="primary")

        # Step 2 - layout reference
        with gr.Group(visible=False) as components["reference_group"]:
            components["reference_image"] = gr.Image(
                label="Criativo de referência", type="filepath", sources=["upload"]
            )
            components["analyze_btn"] = gr.Button("Analisar Referência", variant="primary")

        # Step 3 - copy strategy
        with gr.Group(visible=False) as components["variants_group"]:
            components["variant_choice"] = gr.Radio(
                label="Escolha uma estratégia de copy", choices=[], type="index"
            )

        # Step 4 - customization
        with gr.Group(visible=False) as components["customize_group"]:
            with gr.Row():
                with gr.Column():
                    for name in COPY_TEXT_FIELDS:
                        components[name] = gr.Textbox(
                            label=COPY_FIELD_LABELS[name],
                            lines=3 if name in ("body_text", "removal_instructions") else 1,
                        )
                with gr.Column():
                    for name in DIRECTIVE_FIELDS:
                        label, choices = DIRECTIVE_CHOICES[name]
                        components[name] = gr.Dropdown(label=label, choices=choices)
                    components["aspect_ratio"] = gr.Radio(
                        label="Formato", choices=ASPECT_RATIOS, value=config.default_aspect_ratio
                    )
            with gr.Row():
                components["back_btn"] = gr.Button("Trocar Estratégia de Copy")
                components["generate_btn"] = gr.Button("Gerar Criativo", variant="primary")

        # Step 5 - result
        with gr.Group(visible=False) as components["result_group"]:
            components["result_image"] = gr.Image(label="Criativo final", interactive=False)
            components["variation_choice"] = gr.Radio(
                label="Gerar outra versão", choices=[], type="index"
            )
            with gr.Row():
                components["adjust_btn"] = gr.Button("Ajustar")
                components["new_project_btn"] = gr.Button("Novo Projeto")
                components["download_btn"] = gr.Button("Baixar", variant="primary")
            download_file = gr.File(label="Download", visible=False, interactive=False)

        outputs = [session, *[components[key] for key in RENDER_KEYS]]

        app.load(fn=load_session, inputs=[session], outputs=outputs)

        enter_btn.click(fn=enter_app, inputs=[api_key_input, session], outputs=outputs)

        components["subject_image"].upload(
            fn=upload_subject_image, inputs=[components["subject_image"], session], outputs=outputs
        )
        components["subject_image"].clear(
            fn=upload_subject_image, inputs=[components["subject_image"], session], outputs=outputs
        )
        components["product_brief"].input(
            fn=update_product_brief, inputs=[components["product_brief"], session], outputs=outputs
        )
        components["proceed_btn"].click(fn=proceed_to_reference, inputs=[session], outputs=outputs)

        components["reference_image"].upload(
            fn=upload_reference_image,
            inputs=[components["reference_image"], session],
            outputs=outputs,
        )
        components["reference_image"].clear(
            fn=upload_reference_image,
            inputs=[components["reference_image"], session],
            outputs=outputs,
        )
        components["analyze_btn"].click(fn=analyze_reference, inputs=[session], outputs=outputs)

        components["variant_choice"].input(
            fn=select_variant, inputs=[components["variant_choice"], session], outputs=outputs
        )

        # .input so programmatic updates from render() do not echo back
        for name in [*COPY_TEXT_FIELDS, *DIRECTIVE_FIELDS]:
            components[name].input(
                fn=make_copy_field_handler(name),
                inputs=[components[name], session],
                outputs=outputs,
            )
        components["aspect_ratio"].input(
            fn=set_aspect_ratio, inputs=[components["aspect_ratio"], session], outputs=outputs
        )
        components["back_btn"].click(fn=back_to_variants, inputs=[session], outputs=outputs)
        components["generate_btn"].click(fn=generate_creative, inputs=[session], outputs=outputs)

        components["variation_choice"].input(
            fn=generate_variation,
            inputs=[components["variation_choice"], session],
            outputs=outputs,
        )
        components["adjust_btn"].click(fn=adjust_result, inputs=[session], outputs=outputs)
        components["new_project_btn"].click(
            fn=start_new_project, inputs=[session], outputs=outputs
        )
        components["download_btn"].click(
            fn=download_result,
            inputs=[session],
            outputs=[session, download_file, components["error"]],
        )

    return app, custom_css


def main():
    """Main entry point for the application."""
    logger.info("Starting Clone Master...")
    logger.info(f"Configuration: {config.model_dump(exclude={'gemini_api_key'})}")
    for gateway_name in gateway_registry.list_available():
        gateway_class = gateway_registry.get_gateway_class(gateway_name)
        logger.info(f"Available model gateway: {gateway_name} - {gateway_class.description}")

    app, custom_css = create_ui()

    logger.info(f"Launching Gradio UI on {config.gradio_server_name}:{config.gradio_server_port}")

    app.launch(
        server_name=config.gradio_server_name,
        server_port=config.gradio_server_port,
        share=config.gradio_share,
        show_error=True,
        inbrowser=False,
        css=custom_css,
    )


if __name__ == "__main__":
    main()
