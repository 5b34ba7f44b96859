from __future__ import annotations

import copy
from typing import Any, Callable, Dict, List, Optional

import pytest

from reelforge.models import ScenePlan, SelectedVideo, ValidationConfig


def words(n: int) -> str:
    return " ".join(f"w{i}" for i in range(n))


class DummyPlanner:
    """Planning collaborator returning canned results."""

    def __init__(
        self,
        plan: Optional[ScenePlan] = None,
        repairs: Optional[List[Callable[[ScenePlan], ScenePlan]]] = None,
        template: Optional[Dict[str, Any]] = None,
        fail_plan: bool = False,
        fail_repair: bool = False,
    ) -> None:
        self._plan = plan
        self._repairs = list(repairs or [])
        self._template = template
        self._fail_plan = fail_plan
        self._fail_repair = fail_repair
        self.repair_calls: List[Dict[str, Any]] = []
        self.template_calls = 0

    def plan_scenes(self, script_text, videos, config):
        if self._fail_plan:
            raise RuntimeError("planner unavailable")
        return self._plan.model_copy(deep=True)

    def repair_scenes(self, plan, violating_indices, overage_info):
        self.repair_calls.append(
            {"indices": list(violating_indices), "overage": list(overage_info)}
        )
        if self._fail_repair:
            raise RuntimeError("model timed out")
        fix = self._repairs.pop(0) if self._repairs else (lambda p: p)
        return fix(plan.model_copy(deep=True))

    def generate_template(self, plan, config):
        self.template_calls += 1
        if self._template is not None:
            return copy.deepcopy(self._template)
        return template_for(plan)


def rewrite(**texts: str) -> Callable[[ScenePlan], ScenePlan]:
    """Repair step replacing scene texts, keyed ``s1``, ``s2``..."""

    def apply(plan: ScenePlan) -> ScenePlan:
        for key, text in texts.items():
            plan.scenes[int(key[1:]) - 1].script_text = text
        return plan

    return apply


def template_for(plan: ScenePlan) -> Dict[str, Any]:
    compositions = []
    for scene in plan.scenes:
        n = scene.scene_number
        compositions.append(
            {
                "type": "composition",
                "elements": [
                    {
                        "type": "video",
                        "track": 1,
                        "source": scene.video_asset.url if scene.video_asset else "",
                        "fit": "contain",
                        "volume": 40,
                    },
                    {"type": "audio", "id": f"voice-scene-{n}", "track": 3, "text": scene.script_text},
                    {"type": "text", "name": f"subtitle-{n}", "track": 2, "transcript_source": f"voice-scene-{n}"},
                ],
            }
        )
    return {"output_format": "mp4", "width": 1080, "height": 1920, "elements": compositions}


@pytest.fixture
def make_plan() -> Callable[..., ScenePlan]:
    """Build a plan from ``(script_text, trim_duration, video_id)`` tuples."""

    def build(*scenes) -> ScenePlan:
        return ScenePlan(
            scenes=[
                {
                    "scene_number": i,
                    "script_text": text,
                    "video_asset": None
                    if video_id is None
                    else {"id": video_id, "trim_start": None, "trim_duration": trim, "url": f"https://cdn.test/{video_id}.mp4"},
                }
                for i, (text, trim, video_id) in enumerate(scenes, start=1)
            ]
        )

    return build


@pytest.fixture
def videos() -> List[SelectedVideo]:
    return [
        SelectedVideo(id="video-1", duration_seconds=10, url="https://cdn.test/video-1.mp4"),
        SelectedVideo(id="video-2", duration_seconds=3, url="https://cdn.test/video-2.mp4"),
    ]


@pytest.fixture
def request_config(videos) -> ValidationConfig:
    return ValidationConfig(
        script_text="A short script about coffee.",
        selected_videos=videos,
        caption_config={"enabled": True, "placement": "bottom", "transcript_color": "#ffffff"},
        voice_id="correct-voice-id",
        output_language="en",
    )
