from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from reelwright.models.instance import OutputFormat, Quality


_PROJECT_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Bundled template definitions ---
    templates_dir: str = str(Path(__file__).resolve().parent / "templates" / "data")
    preload_templates: bool = True

    # --- Validation ---
    segment_duration_tolerance: float = 2.0  # seconds
    # Restore the catch-all behaviour of the boolean customization check
    permissive_validation: bool = False

    # --- Instances ---
    instance_id_prefix: str = "instance"
    default_output_format: OutputFormat = "mp4"
    default_quality: Quality = "high"

    # --- Logging ---
    log_level: str = "INFO"


settings = Settings()
