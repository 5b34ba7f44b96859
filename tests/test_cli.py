from __future__ import annotations

import json

from typer.testing import CliRunner

from reelforge.cli import app

from conftest import words

runner = CliRunner()


def _write(path, data):
    path.write_text(json.dumps(data))
    return path


def test_validate_writes_normalized_template(tmp_path):
    template = _write(
        tmp_path / "template.json",
        {
            "output_format": "mp4",
            "width": 1080,
            "height": 1920,
            "elements": [
                {
                    "type": "composition",
                    "elements": [
                        {"type": "video", "source": "a.mp4", "volume": 80},
                        {"type": "audio", "text": "Hello"},
                        {"type": "text", "name": "subtitle-1"},
                    ],
                }
            ],
        },
    )
    output = tmp_path / "out.json"

    result = runner.invoke(
        app, ["validate", str(template), "--voice-id", "v1", "--no-captions", "--output", str(output)]
    )

    assert result.exit_code == 0, result.output
    elements = json.loads(output.read_text())["elements"][0]["elements"]
    assert [el["type"] for el in elements] == ["video", "audio"]
    assert elements[0]["volume"] == 0
    assert elements[1]["source"] == "Hello"
    assert elements[1]["provider"].endswith("voice_id=v1")


def test_validate_rejects_landscape(tmp_path):
    template = _write(
        tmp_path / "template.json",
        {"output_format": "mp4", "width": 1920, "height": 1080, "elements": []},
    )

    result = runner.invoke(app, ["validate", str(template)])

    assert result.exit_code == 1
    assert "1080x1920" in result.output


def test_check_durations_reports_violations(tmp_path):
    plan = _write(
        tmp_path / "plan.json",
        {
            "scenes": [
                {"scene_number": 1, "script_text": words(15), "video_asset": {"id": "v1", "trim_duration": "6"}},
                {"scene_number": 2, "script_text": "Fine", "video_asset": {"id": "v2"}},
            ]
        },
    )
    videos = _write(tmp_path / "videos.json", [{"id": "v2", "duration_seconds": 4}])

    result = runner.invoke(app, ["check-durations", str(plan), "--videos", str(videos)])

    assert result.exit_code == 2
    assert "Scene 1" in result.output
    assert "Scene 2" not in result.output


def test_watermark_check(tmp_path):
    store = tmp_path / "usage.yaml"
    store.write_text("paid:\n  current_plan_id: pro\n")

    paid = runner.invoke(app, ["watermark-check", "paid", "--store", str(store)])
    unknown = runner.invoke(app, ["watermark-check", "someone", "--store", str(store)])

    assert "no watermark" in paid.output
    assert "someone: watermark" in unknown.output
