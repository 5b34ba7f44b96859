"""Configuration management."""

import os
from pathlib import Path
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_WATERMARK_URL = "https://ai-edit-v1.s3.us-east-1.amazonaws.com/cdn/images/editia-logo.png"


class Config(BaseModel):
    """Application configuration."""

    # API Keys
    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""),
        description="Anthropic API key"
    )

    # Paths
    plan_store_path: Path = Field(
        default_factory=lambda: Path(os.getenv("REELFORGE_PLAN_STORE", "user_usage.yaml")),
        description="YAML file mapping user ids to their current plan"
    )

    # Model settings
    default_model: str = Field(
        default_factory=lambda: os.getenv("REELFORGE_MODEL", "claude-sonnet-4-20250514"),
        description="Default Claude model"
    )

    # Rendering
    watermark_image_url: str = Field(
        default_factory=lambda: os.getenv("REELFORGE_WATERMARK_URL") or DEFAULT_WATERMARK_URL,
        description="Image used as the watermark for free-tier renders"
    )
    log_level: str = Field(
        default_factory=lambda: os.getenv("REELFORGE_LOG_LEVEL", "INFO"),
        description="Root log level used by the CLI"
    )

    class Config:
        """Pydantic config."""
        frozen = False

    def validate_required(self) -> None:
        """Validate that required credentials are set."""
        if not self.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY not set")


# Global config instance
config = Config()
