"""Runtime settings for the image resizer."""

from pathlib import Path
from typing import ClassVar

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ResizerSettings(BaseSettings):
    """Settings read from ``CL_IMAGE_RESIZER_*`` environment variables."""

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="CL_IMAGE_RESIZER_",
        env_file=".env",
        extra="ignore",
    )

    home_dir: Path = Field(
        default_factory=lambda: Path.home() / ".cache" / "cl_image_resizer",
        description="Root for the managed cache directory and app-private folders",
    )
    upload_dir_name: str = "upload-dir"
    default_quality: int = Field(default=85, ge=0, le=100)
    max_workers: int = Field(default=4, ge=1)
