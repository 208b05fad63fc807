"""
Application settings and configuration
"""
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application configuration"""

    # Paths
    base_dir: Path = Path(__file__).parent.parent
    data_dir: Path = Field(default_factory=lambda: Path(__file__).parent.parent / "data")
    output_dir: Path = Field(default_factory=lambda: Path(__file__).parent.parent / "data" / "output")

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 7002
    cors_origins: list = ["*"]

    # Input limits
    max_dimension: int = 2000  # Max width/height in pixels handed to the core
    max_upload_bytes: int = 10 * 1024 * 1024

    # Edge detection / tracing
    default_threshold: int = 128
    threshold_scale: float = 0.3  # Edge magnitudes run much higher than raw intensities
    min_path_length: int = 10
    max_trace_length: int = 1000

    # Output
    stroke_width: int = 1

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    class Config:
        env_prefix = "VECTORIZER_"
        env_file = ".env"


settings = Settings()
