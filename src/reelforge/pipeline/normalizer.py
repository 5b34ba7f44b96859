"""Deterministic structural fix-ups of generated render templates."""

import copy
import logging
from typing import Any, Mapping, Union

from pydantic import ValidationError

from ..errors import TemplateStructureError
from ..models import AudioElement, RenderTemplate, TextElement, VideoElement
from ..models.template import (
    AUDIO_TRACK,
    ELEMENT_TYPES,
    TEMPLATE_HEIGHT,
    TEMPLATE_WIDTH,
    TEXT_TRACK,
    VIDEO_TRACK,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("output_format", "width", "height", "elements")

_DEFAULT_TRACKS = {
    VideoElement: VIDEO_TRACK,
    TextElement: TEXT_TRACK,
    AudioElement: AUDIO_TRACK,
}


def check_structure(raw: Any) -> None:
    """Reject documents the normalizer cannot safely fix.

    Runs before anything is modified, so a rejected template is left
    exactly as it was.

    Raises:
        TemplateStructureError: On missing fields, non-portrait
            dimensions, non-list ``elements`` or unknown element kinds.
    """
    if not isinstance(raw, Mapping):
        raise TemplateStructureError(
            f"Invalid template: expected an object, got {type(raw).__name__}"
        )

    missing = [name for name in REQUIRED_FIELDS if raw.get(name) is None]
    if missing:
        raise TemplateStructureError(
            f"Invalid template: missing required field(s): {', '.join(missing)}"
        )

    if raw["width"] != TEMPLATE_WIDTH or raw["height"] != TEMPLATE_HEIGHT:
        raise TemplateStructureError(
            f"Invalid template: Must be {TEMPLATE_WIDTH}x{TEMPLATE_HEIGHT} for vertical video "
            f"(got {raw['width']}x{raw['height']})"
        )

    compositions = raw["elements"]
    if not isinstance(compositions, list):
        raise TemplateStructureError(
            f"Invalid template: elements must be a list, got {type(compositions).__name__}"
        )

    for position, composition in enumerate(compositions, start=1):
        if not isinstance(composition, Mapping) or composition.get("type") != "composition":
            raise TemplateStructureError(
                f"Invalid template: top-level element {position} is not a composition"
            )
        children = composition.get("elements", [])
        if not isinstance(children, list):
            raise TemplateStructureError(
                f"Invalid template: composition {position} elements must be a list, "
                f"got {type(children).__name__}"
            )
        for child in children:
            kind = child.get("type") if isinstance(child, Mapping) else None
            if kind not in ELEMENT_TYPES:
                raise TemplateStructureError(
                    f"Invalid template: unsupported element type {kind!r} "
                    f"in composition {position}"
                )


def parse_template(raw: Union[Mapping[str, Any], RenderTemplate]) -> RenderTemplate:
    """Check and parse a template into a fresh model.

    The input is never modified; callers always get a new object.
    """
    if isinstance(raw, RenderTemplate):
        raw = raw.to_dict()

    check_structure(raw)

    try:
        return RenderTemplate.model_validate(copy.deepcopy(dict(raw)))
    except ValidationError as e:
        raise TemplateStructureError(f"Invalid template: {e}") from e


def _move_audio_text(element: AudioElement) -> bool:
    extras = element.model_extra
    if element.source is not None or not extras or "text" not in extras:
        return False
    element.source = extras.pop("text")
    return True


def _fix_video(element: VideoElement, first_in_composition: bool) -> None:
    element.fit = "cover"
    element.duration = None
    element.volume = 0
    # First clip anchors the scene; the rest chain after it.
    element.time = 0 if first_in_composition else "auto"


def normalize_template(raw: Union[Mapping[str, Any], RenderTemplate]) -> RenderTemplate:
    """Return a structurally valid copy of a generated template.

    - Audio elements carrying narration in ``text`` get it moved to ``source``.
    - Video elements are silent, cover the frame and have natural length.
    - In each composition the first video starts at 0 and later ones at "auto".
    - Elements without a track get the default layer for their kind.

    Running it again on its own output changes nothing.

    Raises:
        TemplateStructureError: If the template fails the structural checks.
    """
    template = parse_template(raw)
    moved = 0
    videos = 0

    for composition in template.elements:
        seen_video = False
        for element in composition.elements:
            if isinstance(element, AudioElement) and _move_audio_text(element):
                moved += 1
            elif isinstance(element, VideoElement):
                _fix_video(element, first_in_composition=not seen_video)
                seen_video = True
                videos += 1

            if element.track is None and type(element) in _DEFAULT_TRACKS:
                element.track = _DEFAULT_TRACKS[type(element)]

    logger.info(
        f"Normalized template: {len(template.elements)} compositions, "
        f"{videos} video elements, {moved} audio text fields moved to source"
    )
    return template
