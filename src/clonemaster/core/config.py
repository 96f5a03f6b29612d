"""Configuration management for Clone Master.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the CLONEMASTER_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (CLONEMASTER_* prefix)
2. .env file in the project root
3. Default values defined in CloneMasterConfig

The Gemini API key is the one exception to the prefix rule: it is also picked
up from ``GEMINI_API_KEY`` or ``GOOGLE_API_KEY``, the names the google-genai
SDK documents.

Example .env file:
    CLONEMASTER_GEMINI_API_KEY=...
    CLONEMASTER_ANALYSIS_MODEL=gemini-3-flash-preview
    CLONEMASTER_SYNTHESIS_MODEL=gemini-3-pro-image-preview
    CLONEMASTER_OUTPUT_RESOLUTION=4K
    CLONEMASTER_DATA_DIR=data

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.

    from clonemaster.core.config import config

    print(config.synthesis_model)
    print(config.store_path)

Directory Management
--------------------
The configuration automatically creates required directories on initialization:
- data_dir: Holds the persisted subject image and product brief
- outputs_dir: Receives exported result images for download
"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REMOVAL_INSTRUCTIONS = (
    "SUBSTITUIÇÃO TOTAL: Delete a pessoa da referência. "
    "Use APENAS o rosto/corpo do Especialista da Imagem 1. "
    "Remova logos e datas antigas."
)


class CloneMasterConfig(BaseSettings):
    """Main configuration for Clone Master.

    Attributes
    ----------
    Gateway Settings:
        gemini_api_key : str | None
            API key handed to the google-genai client
        default_gateway : str
            Name of the registered model gateway used by the UI
        analysis_model : str
            Model used to derive copy variants from the reference image
        synthesis_model : str
            Image model used to compose the final creative
        output_resolution : Literal["1K", "2K", "4K"]
            Requested size of the synthesized image

    Wizard Defaults:
        default_aspect_ratio : Literal["3:4", "9:16", "16:9"]
            Framing preselected in the customization step
        default_cta : str
            Call-to-action used when a variant does not provide one
        default_removal_instructions : str
            Cleanup directive preloaded into the copy editor

    Paths:
        data_dir : Path
            Directory for the persisted session slots
        store_filename : str
            JSON file name inside data_dir
        outputs_dir : Path
            Directory for exported result images

    UI Settings:
        gradio_server_name : str
            Server bind address (0.0.0.0 for local network)
        gradio_server_port : int
            Server port (1024-65535)
        gradio_share : bool
            Create public gradio.live link (keep False for local-only)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CLONEMASTER_",
        case_sensitive=False,
    )

    # Gateway settings
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "gemini_api_key",
            "CLONEMASTER_GEMINI_API_KEY",
            "GEMINI_API_KEY",
            "GOOGLE_API_KEY",
        ),
        description="API key for the Gemini generative models",
    )
    default_gateway: str = Field(
        default="Gemini",
        description="Registered model gateway used by the UI",
    )
    analysis_model: str = Field(
        default="gemini-3-flash-preview",
        description="Model that reads the reference image and writes copy variants",
    )
    synthesis_model: str = Field(
        default="gemini-3-pro-image-preview",
        description="Image model that composes the final creative",
    )
    output_resolution: Literal["1K", "2K", "4K"] = Field(
        default="4K",
        description="Requested output image size",
    )

    # Wizard defaults
    default_aspect_ratio: Literal["3:4", "9:16", "16:9"] = Field(default="9:16")
    default_cta: str = Field(
        default="Saiba Mais",
        description="CTA used when a copy variant leaves it empty",
    )
    default_removal_instructions: str = Field(default=DEFAULT_REMOVAL_INSTRUCTIONS)

    # Paths
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory for persisted session slots",
    )
    store_filename: str = Field(default="session_store.json")
    outputs_dir: Path = Field(
        default=Path("outputs"),
        description="Directory for exported result images",
    )

    # UI settings
    gradio_server_name: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    gradio_server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )
    gradio_share: bool = Field(
        default=False,
        description="Create public gradio.live link (keep False for local-only)",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create required directories.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.outputs_dir.mkdir(parents=True, exist_ok=True)

    @property
    def store_path(self) -> Path:
        """Location of the JSON document backing the persistence bridge."""
        return self.data_dir / self.store_filename


# Global configuration instance
# Loads values from environment variables (CLONEMASTER_* prefix) and .env file.
config = CloneMasterConfig()
