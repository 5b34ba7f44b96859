"""Bounded AI repair of scenes whose narration overruns the clip."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from ..models import ScenePlan, SelectedVideo, ValidationConfig
from .durations import DurationViolation, parse_seconds, validate_scene_durations
from .protocols import PlanningCollaborator

logger = logging.getLogger(__name__)

MAX_REPAIR_ATTEMPTS = 3


@dataclass
class RepairOutcome:
    """Best plan reached and whatever violations it still has."""

    plan: ScenePlan
    violations: List[DurationViolation] = field(default_factory=list)
    attempts: int = 0

    @property
    def clean(self) -> bool:
        """True when every scene fits its clip."""
        return not self.violations

    def warnings(self) -> List[str]:
        """Human readable description of the remaining violations."""
        return [
            f"Scene {v.scene_index + 1}: narration {v.text_length_seconds:.1f}s exceeds "
            f"{v.allowed_seconds:.2f}s available in a {v.video_length_seconds:.1f}s clip "
            f"by {v.overage_seconds:.2f}s"
            for v in self.violations
        ]


def scenes_missing_timing(plan: ScenePlan) -> List[int]:
    """Indices of scenes whose trim data is present but unusable."""
    indices = []
    for index, scene in enumerate(plan.scenes):
        asset = scene.video_asset
        if asset is None:
            continue
        has_trim = asset.trim_start is not None or asset.trim_duration is not None
        if has_trim and parse_seconds(asset.trim_duration) is None:
            indices.append(index)
    return indices


def apply_simplified_video_strategy(
    plan: ScenePlan,
    scene_indices: Optional[Iterable[int]] = None,
    log: Optional[logging.Logger] = None,
) -> int:
    """Drop trims so the renderer plays full clips.

    The trim fields are reset to ``None`` rather than removed, keeping
    every asset the same shape. Scenes without an asset are skipped.

    Args:
        plan: Plan to modify in place.
        scene_indices: Scenes to simplify. All scenes when omitted.
        log: Logger to report to. Defaults to the module logger.

    Returns:
        Number of assets that were changed.
    """
    log = log or logger
    targets = range(len(plan.scenes)) if scene_indices is None else scene_indices
    changed = 0

    for index in targets:
        asset = plan.scenes[index].video_asset
        if asset is None:
            continue
        if asset.trim_start is None and asset.trim_duration is None:
            continue
        asset.trim_start = None
        asset.trim_duration = None
        changed += 1
        log.info(f"Scene {index + 1}: using full clip {asset.id} without trim")

    return changed


class RepairLoop:
    """Ask the generative model to shorten scenes until they fit.

    Rounds are sequential and capped; running out of rounds is not an
    error. The caller gets the last candidate plan and the violations it
    still has.
    """

    def __init__(
        self,
        collaborator: PlanningCollaborator,
        max_attempts: int = MAX_REPAIR_ATTEMPTS,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self._collaborator = collaborator
        self._max_attempts = max_attempts
        self._log = log or logger

    def repair(
        self,
        plan: ScenePlan,
        videos: Sequence[SelectedVideo],
        config: ValidationConfig,
    ) -> RepairOutcome:
        """Validate and repair ``plan`` in place.

        Only violating scenes are ever replaced. A failed generative call
        ends the loop early with the best plan so far.
        """
        untimed = scenes_missing_timing(plan)
        if untimed:
            apply_simplified_video_strategy(plan, untimed, log=self._log)

        violations = validate_scene_durations(plan, videos)
        attempts = 0

        while violations and attempts < self._max_attempts:
            attempts += 1
            indices = [v.scene_index for v in violations]
            self._log.info(
                f"Repair attempt {attempts}/{self._max_attempts} "
                f"for scenes {[i + 1 for i in indices]} ({config.output_language})"
            )

            try:
                candidate = self._collaborator.repair_scenes(plan, indices, violations)
            except Exception as e:
                self._log.warning(f"Repair attempt {attempts} failed, keeping current plan: {e}")
                break

            if len(candidate.scenes) != len(plan.scenes):
                self._log.warning(
                    f"Repair attempt {attempts} returned {len(candidate.scenes)} scenes "
                    f"instead of {len(plan.scenes)}; discarding it"
                )
                continue

            for index in indices:
                replacement = candidate.scenes[index].model_copy(deep=True)
                replacement.scene_number = index + 1
                plan.scenes[index] = replacement

            violations = validate_scene_durations(plan, videos)

        if violations:
            self._log.warning(
                f"{len(violations)} scene(s) still too long after {attempts} repair attempt(s); "
                "continuing with the best plan"
            )
        elif attempts:
            self._log.info(f"All scenes fit after {attempts} repair attempt(s)")

        return RepairOutcome(plan=plan, violations=violations, attempts=attempts)
