"""Validation and repair pipeline for scene plans and render templates."""

from .durations import DurationViolation, validate_scene_durations, word_count
from .repair import RepairLoop, RepairOutcome, apply_simplified_video_strategy
from .normalizer import normalize_template
from .voices import reconcile_voices
from .captions import apply_captions, caption_config_to_properties
from .watermark import WatermarkService
from .orchestrator import TemplateOrchestrator

__all__ = [
    "DurationViolation",
    "validate_scene_durations",
    "word_count",
    "RepairLoop",
    "RepairOutcome",
    "apply_simplified_video_strategy",
    "normalize_template",
    "reconcile_voices",
    "apply_captions",
    "caption_config_to_properties",
    "WatermarkService",
    "TemplateOrchestrator",
]
