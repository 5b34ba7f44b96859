from __future__ import annotations

from typing import Any, Dict, List

import pytest

from reelforge.agents.planner import ScenePlannerAgent, max_words_for
from reelforge.errors import GenerationError, PlanStructureError
from reelforge.pipeline.durations import validate_scene_durations

from conftest import words


class DummyClient:
    def __init__(self, payload: Any) -> None:
        self._payload = payload
        self.prompts: List[Dict[str, Any]] = []

    def create_json(self, prompt, max_tokens=4096, system=None, temperature=0.7):
        self.prompts.append({"prompt": prompt, "system": system, "temperature": temperature})
        return self._payload


def test_plan_scenes_renumbers_and_fills_urls(videos, request_config):
    client = DummyClient(
        {
            "scenes": [
                {"scene_number": 4, "script_text": "Morning coffee", "video_asset": {"id": "video-1", "trim_duration": 5}},
                {"scene_number": 9, "script_text": "Evening tea", "video_asset": {"id": "video-2", "url": "https://other/x.mp4"}},
            ]
        }
    )
    agent = ScenePlannerAgent(client=client, model="test-model")

    plan = agent.plan_scenes(request_config.script_text, videos, request_config)

    assert [s.scene_number for s in plan.scenes] == [1, 2]
    assert plan.scenes[0].video_asset.url == "https://cdn.test/video-1.mp4"
    assert plan.scenes[0].video_asset.trim_duration == "5"
    assert plan.scenes[1].video_asset.url == "https://other/x.mp4"
    assert "video-2: 3.0s" in client.prompts[0]["prompt"]
    assert client.prompts[0]["system"] == agent.system_prompt


@pytest.mark.parametrize("payload", [{"scenes": []}, {"plan": "nope"}, ["not-a-scene"]])
def test_plan_scenes_rejects_malformed_output(payload, videos, request_config):
    agent = ScenePlannerAgent(client=DummyClient(payload))

    with pytest.raises(PlanStructureError):
        agent.plan_scenes(request_config.script_text, videos, request_config)


def test_repair_prompt_names_scenes_and_word_budget(make_plan):
    plan = make_plan(("Fine", "5", "video-1"), (words(15), "6", "video-2"))
    violations = validate_scene_durations(plan, [])
    client = DummyClient({"scenes": [s.model_dump() for s in plan.scenes]})

    repaired = ScenePlannerAgent(client=client).repair_scenes(plan, [1], violations)

    prompt = client.prompts[0]["prompt"]
    assert "Change only scenes [2]" in prompt
    assert "use at most 11 words" in prompt
    assert len(repaired.scenes) == 2


def test_repair_keeps_clip_urls_of_rewritten_scenes(make_plan):
    plan = make_plan(("Fine", "5", "video-1"), (words(15), "6", "video-2"))
    violations = validate_scene_durations(plan, [])
    client = DummyClient(
        {
            "scenes": [
                plan.scenes[0].model_dump(),
                {"scene_number": 2, "script_text": "Short now", "video_asset": {"id": "video-2", "trim_duration": "6"}},
            ]
        }
    )

    repaired = ScenePlannerAgent(client=client).repair_scenes(plan, [1], violations)

    assert repaired.scenes[1].video_asset.url == "https://cdn.test/video-2.mp4"


def test_max_words_for(make_plan):
    violation = validate_scene_durations(make_plan((words(15), "6", "video-1")), [])[0]
    assert max_words_for(violation) == 11


def test_generate_template_returns_raw_document(make_plan, request_config):
    document = {"output_format": "mp4", "width": 1080, "height": 1920, "elements": []}
    client = DummyClient(document)

    result = ScenePlannerAgent(client=client).generate_template(make_plan(("Hi", "5", "video-1")), request_config)

    assert result == document
    assert "voice_id=correct-voice-id" in client.prompts[0]["prompt"]


def test_generate_template_rejects_non_object(make_plan, request_config):
    agent = ScenePlannerAgent(client=DummyClient(["not", "a", "template"]))

    with pytest.raises(GenerationError):
        agent.generate_template(make_plan(("Hi", "5", "video-1")), request_config)
