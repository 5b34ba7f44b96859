"""Claude-backed scene planning, repair and template writing."""

import json
import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from ..errors import GenerationError, PlanStructureError
from ..models import ScenePlan, SelectedVideo, ValidationConfig
from ..models.template import (
    AUDIO_TRACK,
    TEMPLATE_HEIGHT,
    TEMPLATE_WIDTH,
    TEXT_TRACK,
    VIDEO_TRACK,
)
from ..pipeline.durations import SECONDS_PER_WORD, DurationViolation
from .base import BaseAgent

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a short-form video editor.
You cut a narration script into scenes and match each scene with one of the
user's clips so the narration fits the clip it plays over.

Output valid JSON only, with no additional text or markdown formatting."""


def _plan_from_response(data: Any, urls: Optional[Mapping[str, str]] = None) -> ScenePlan:
    """Build a plan from untrusted model output.

    Scenes are renumbered by position and missing clip URLs are filled in
    from ``urls``, keyed by clip id.

    Raises:
        PlanStructureError: If the output is not a usable plan.
    """
    scenes_data = data.get("scenes") if isinstance(data, dict) else data
    if not isinstance(scenes_data, list):
        raise PlanStructureError("Response does not contain a scenes array")

    scenes = []
    for position, scene_data in enumerate(scenes_data, start=1):
        if not isinstance(scene_data, dict):
            raise PlanStructureError(f"Scene {position} is not an object")
        scene = dict(scene_data, scene_number=position)
        asset = scene.get("video_asset")
        if isinstance(asset, dict) and not asset.get("url") and urls and asset.get("id") in urls:
            scene["video_asset"] = dict(asset, url=urls[asset["id"]])
        scenes.append(scene)

    try:
        return ScenePlan(scenes=scenes)
    except ValidationError as e:
        raise PlanStructureError(f"Invalid scene plan: {e}") from e


def max_words_for(violation: DurationViolation) -> int:
    """Largest narration that fits the violating scene's clip."""
    return max(1, math.floor(violation.allowed_seconds / SECONDS_PER_WORD))


class ScenePlannerAgent(BaseAgent):
    """Generative collaborator of the pipeline.

    Plans scenes from a script, rewrites scenes that are too long and
    writes the render template for a finished plan. Output is parsed but
    not trusted; the pipeline validates everything it returns.
    """

    @property
    def name(self) -> str:
        """Return the agent's name."""
        return "ScenePlannerAgent"

    @property
    def system_prompt(self) -> str:
        """Return the system prompt shared by all operations."""
        return SYSTEM_PROMPT

    def plan_scenes(
        self,
        script_text: str,
        videos: Sequence[SelectedVideo],
        config: ValidationConfig,
    ) -> ScenePlan:
        """Split ``script_text`` into scenes bound to the selected videos."""
        self._logger.info(
            f"Planning scenes for a {len(script_text.split())}-word script "
            f"over {len(videos)} clip(s)"
        )
        prompt = "\n".join([
            "Split this narration script into scenes and pick a clip for each one.",
            "",
            f"SCRIPT ({config.output_language}):",
            script_text,
            "",
            "AVAILABLE CLIPS:",
            self._describe_videos(videos),
            "",
            f"EDITORIAL PROFILE: {json.dumps(config.editorial_profile, ensure_ascii=False)}",
            "",
            "Narration is read at two words per second. A scene's words must fit in",
            "95% of its clip (or of its trim_duration when you trim the clip).",
            "",
            'Respond with {"scenes": [{"scene_number": 1, "script_text": "...",',
            '"video_asset": {"id": "...", "trim_start": "0", "trim_duration": "5", "url": "..."}}]}.',
        ])
        data = self._ask_json(prompt, temperature=0.7)
        plan = _plan_from_response(data, {video.id: video.url for video in videos if video.url})
        self._logger.info(f"Planned {len(plan.scenes)} scenes")
        return plan

    def repair_scenes(
        self,
        plan: ScenePlan,
        violating_indices: List[int],
        overage_info: List[DurationViolation],
    ) -> ScenePlan:
        """Rewrite only the listed scenes so their narration fits."""
        problems = []
        for violation in overage_info:
            scene = plan.scenes[violation.scene_index]
            problems.append(
                f"- Scene {scene.scene_number}: {violation.text_length_seconds:.1f}s of narration "
                f"for {violation.allowed_seconds:.2f}s of usable clip; "
                f"use at most {max_words_for(violation)} words or pick a longer clip/trim."
            )

        prompt = "\n".join([
            "Some scenes have more narration than their clip can hold.",
            "",
            "CURRENT PLAN:",
            json.dumps(plan.model_dump(), ensure_ascii=False, indent=2),
            "",
            "SCENES TO FIX:",
            *problems,
            "",
            f"Change only scenes {[i + 1 for i in violating_indices]}. Shorten their",
            "script_text or change their video_asset. Keep the meaning of the script.",
            "Return the complete plan with the same number of scenes, other scenes",
            'copied unchanged, as {"scenes": [...]}.',
        ])
        data = self._ask_json(prompt, temperature=0.4)
        known_urls = {
            scene.video_asset.id: scene.video_asset.url
            for scene in plan.scenes
            if scene.video_asset and scene.video_asset.url
        }
        return _plan_from_response(data, known_urls)

    def generate_template(self, plan: ScenePlan, config: ValidationConfig) -> Dict[str, Any]:
        """Write the render template document for ``plan``.

        The raw document is returned; structural checks happen downstream.
        """
        captions = config.effective_captions
        prompt = "\n".join([
            "Write a render template for this scene plan.",
            "",
            "SCENE PLAN:",
            json.dumps(plan.model_dump(), ensure_ascii=False, indent=2),
            "",
            f'Top level: {{"output_format": "mp4", "width": {TEMPLATE_WIDTH}, '
            f'"height": {TEMPLATE_HEIGHT}, "elements": [...]}}.',
            'One {"type": "composition", "elements": [...]} per scene, containing:',
            f'- a "video" element on track {VIDEO_TRACK} with the clip url as source '
            "and the scene's trim_start/trim_duration;",
            f'- an "audio" element on track {AUDIO_TRACK} whose source is the scene '
            f'narration, id "voice-scene-N", provider "elevenlabs model_id=eleven_multilingual_v2'
            f' voice_id={config.voice_id or "<voice>"}";',
            f'- {"a" if captions.enabled else "no"} "text" caption element on track {TEXT_TRACK} '
            'named "subtitle-N" with transcript_source set to the audio id.',
            f"Narration language: {config.output_language}.",
        ])
        data = self._ask_json(prompt, max_tokens=8192, temperature=0.2)
        if not isinstance(data, dict):
            raise GenerationError("Template response is not a JSON object")
        return data

    @staticmethod
    def _describe_videos(videos: Sequence[SelectedVideo]) -> str:
        lines = []
        for video in videos:
            title = f" - {video.title}" if video.title else ""
            lines.append(f"- {video.id}: {video.duration_seconds:.1f}s{title} ({video.url or 'no url'})")
        return "\n".join(lines) or "(none)"
