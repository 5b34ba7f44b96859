"""Data models for plans, templates and requests."""

from .scene import Scene, ScenePlan, SelectedVideo, VideoAsset
from .template import (
    AudioElement,
    Composition,
    ImageElement,
    RenderTemplate,
    TextElement,
    VideoElement,
)
from .request import CaptionStructure, PipelineResult, ValidationConfig

__all__ = [
    "Scene",
    "ScenePlan",
    "SelectedVideo",
    "VideoAsset",
    "AudioElement",
    "Composition",
    "ImageElement",
    "RenderTemplate",
    "TextElement",
    "VideoElement",
    "CaptionStructure",
    "PipelineResult",
    "ValidationConfig",
]
