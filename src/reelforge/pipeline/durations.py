"""Narration length versus clip length checks."""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..models import Scene, ScenePlan, SelectedVideo

logger = logging.getLogger(__name__)

# Policy constants; expectations downstream are pinned to these values.
SECONDS_PER_WORD = 0.5
SAFETY_MARGIN = 0.95
_SAFETY_MARGIN_PERCENT = 95


@dataclass(frozen=True)
class DurationViolation:
    """A scene whose narration does not fit its clip."""

    scene_index: int
    text_length_seconds: float
    video_length_seconds: float
    overage_seconds: float

    @property
    def allowed_seconds(self) -> float:
        """Narration length the clip can hold after the safety margin."""
        return usable_seconds(self.video_length_seconds)


def word_count(text: Optional[str]) -> int:
    """Count whitespace-separated words, ignoring empty tokens."""
    if not text:
        return 0
    return len(text.split())


def narration_seconds(text: Optional[str]) -> float:
    """Estimated speaking time of ``text``."""
    return word_count(text) * SECONDS_PER_WORD


def usable_seconds(video_length: float) -> float:
    """Clip length available to narration after the safety margin."""
    # Integer percent keeps round lengths exact (10s -> 9.5s).
    return video_length * _SAFETY_MARGIN_PERCENT / 100


def parse_seconds(value: Optional[str]) -> Optional[float]:
    """Parse a trim value; anything non-positive or unparsable is unknown."""
    if value is None:
        return None
    try:
        seconds = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(seconds) or seconds <= 0:
        return None
    return seconds


def clip_seconds(scene: Scene, videos_by_id: Dict[str, SelectedVideo]) -> Optional[float]:
    """Length of the clip a scene plays, or None when nothing is known.

    A usable ``trim_duration`` wins; otherwise the full length of the
    selected video is used.
    """
    asset = scene.video_asset
    if asset is None:
        return None

    trimmed = parse_seconds(asset.trim_duration)
    if trimmed is not None:
        return trimmed

    video = videos_by_id.get(asset.id)
    if video is not None and video.duration_seconds > 0:
        return float(video.duration_seconds)
    return None


def check_scene(
    index: int, scene: Scene, videos_by_id: Dict[str, SelectedVideo]
) -> Optional[DurationViolation]:
    """Judge one scene; None means it fits or cannot be judged."""
    video_length = clip_seconds(scene, videos_by_id)
    if video_length is None:
        logger.debug(f"Scene {scene.scene_number}: no clip duration, skipping")
        return None

    text_length = narration_seconds(scene.script_text)
    allowed = usable_seconds(video_length)
    if text_length <= allowed:
        return None

    return DurationViolation(
        scene_index=index,
        text_length_seconds=text_length,
        video_length_seconds=video_length,
        overage_seconds=text_length - allowed,
    )


def validate_scene_durations(
    plan: ScenePlan, videos: Iterable[SelectedVideo]
) -> List[DurationViolation]:
    """Return one violation per scene whose narration overruns its clip.

    Args:
        plan: Scene plan to check.
        videos: Selected videos, used when a scene has no usable trim.

    Returns:
        Violations in scene order. Scenes without duration data are
        skipped, never reported.
    """
    videos_by_id = {video.id: video for video in videos}
    violations: List[DurationViolation] = []

    for index, scene in enumerate(plan.scenes):
        violation = check_scene(index, scene, videos_by_id)
        if violation is None:
            continue
        logger.info(
            f"Scene {scene.scene_number} narration is {violation.text_length_seconds:.1f}s "
            f"for a {violation.video_length_seconds:.1f}s clip "
            f"(over by {violation.overage_seconds:.2f}s)"
        )
        violations.append(violation)

    return violations
