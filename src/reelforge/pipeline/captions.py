"""Caption styling and removal."""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from ..models import CaptionStructure, RenderTemplate, TextElement

logger = logging.getLogger(__name__)

DEFAULT_TRANSCRIPT_COLOR = "#ffffff"
DEFAULT_TRANSCRIPT_EFFECT = "highlight"
DEFAULT_PLACEMENT = "bottom"

PLACEMENT_ALIGNMENT = {
    "top": "10%",
    "middle": "50%",
    "center": "50%",
    "bottom": "90%",
}

_CAPTION_NAME_HINTS = ("subtitle", "caption")


@dataclass
class CaptionPreset:
    """Font and outline settings for a caption look."""

    font_family: str = "Montserrat"
    font_size: str = "8 vmin"
    font_weight: str = "700"
    stroke_color: Optional[str] = "#000000"
    stroke_width: Optional[str] = "1.05 vmin"
    background_color: Optional[str] = None
    transcript_effect: str = DEFAULT_TRANSCRIPT_EFFECT


# Preset styles
PRESETS = {
    "default": CaptionPreset(),
    "karaoke": CaptionPreset(transcript_effect="karaoke"),
    "beasty": CaptionPreset(
        font_size="9.5 vmin",
        font_weight="900",
        stroke_width="1.6 vmin",
        transcript_effect="highlight",
    ),
    "minimal": CaptionPreset(
        font_family="Inter",
        font_size="6 vmin",
        font_weight="600",
        stroke_color=None,
        stroke_width=None,
        background_color="rgba(0,0,0,0.55)",
        transcript_effect="fade",
    ),
}


def caption_config_to_properties(structure: CaptionStructure) -> Dict[str, Any]:
    """Translate caption options into text element properties.

    The preset supplies the base look; explicit options win over it.
    Unset options fall back to white, "highlight" and bottom placement.
    """
    preset_id = structure.preset_id or "default"
    preset = PRESETS.get(preset_id)
    if preset is None:
        logger.warning(f"Unknown caption preset {preset_id!r}, using default")
        preset = PRESETS["default"]

    placement = (structure.placement or DEFAULT_PLACEMENT).lower()
    if placement not in PLACEMENT_ALIGNMENT:
        logger.warning(f"Unknown caption placement {placement!r}, using {DEFAULT_PLACEMENT}")
        placement = DEFAULT_PLACEMENT

    properties = {key: value for key, value in asdict(preset).items() if value is not None}
    properties.update(
        transcript_color=structure.transcript_color or DEFAULT_TRANSCRIPT_COLOR,
        transcript_effect=structure.transcript_effect or preset.transcript_effect,
        x_alignment="50%",
        y_alignment=PLACEMENT_ALIGNMENT[placement],
    )
    if structure.font_family:
        properties["font_family"] = structure.font_family
    if structure.font_size:
        properties["font_size"] = structure.font_size
    return properties


def is_caption_element(element: Any) -> bool:
    """True for text elements that render the narration transcript."""
    if not isinstance(element, TextElement):
        return False
    if element.transcript_source:
        return True
    name = str(element.name or "").lower()
    return any(hint in name for hint in _CAPTION_NAME_HINTS)


def apply_captions(
    template: RenderTemplate, structure: Optional[CaptionStructure]
) -> RenderTemplate:
    """Return a copy with captions styled, or stripped when disabled.

    Only caption text elements are touched; other text, video, audio and
    image elements are left as they are.
    """
    structure = structure or CaptionStructure()
    result = template.model_copy(deep=True)

    if not structure.enabled:
        removed = 0
        for composition in result.elements:
            kept = [el for el in composition.elements if not is_caption_element(el)]
            removed += len(composition.elements) - len(kept)
            composition.elements = kept
        logger.info(f"Captions disabled, removed {removed} caption element(s)")
        return result

    properties = caption_config_to_properties(structure)
    styled = 0
    for composition in result.elements:
        for element in composition.elements:
            if not is_caption_element(element):
                continue
            for key, value in properties.items():
                setattr(element, key, value)
            styled += 1

    logger.info(
        f"Styled {styled} caption element(s) "
        f"(effect={properties['transcript_effect']}, color={properties['transcript_color']})"
    )
    return result
