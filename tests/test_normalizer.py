from __future__ import annotations

import copy

import pytest

from reelforge.errors import TemplateStructureError
from reelforge.models import RenderTemplate
from reelforge.pipeline.normalizer import normalize_template


def _template(*compositions):
    return {
        "output_format": "mp4",
        "width": 1080,
        "height": 1920,
        "elements": [{"type": "composition", "elements": list(els)} for els in compositions],
    }


def test_valid_empty_template():
    result = normalize_template(_template())

    assert isinstance(result, RenderTemplate)
    assert result.output_format == "mp4"
    assert (result.width, result.height) == (1080, 1920)
    assert result.elements == []


def test_missing_required_fields_fail_fast():
    raw = {"width": 1080, "height": 1920}

    with pytest.raises(TemplateStructureError, match="output_format, elements"):
        normalize_template(raw)
    assert raw == {"width": 1080, "height": 1920}


def test_wrong_dimensions_rejected_before_any_fix():
    raw = _template([{"type": "video", "fit": "contain"}])
    raw["width"], raw["height"] = 1920, 1080
    original = copy.deepcopy(raw)

    with pytest.raises(TemplateStructureError, match="Must be 1080x1920 for vertical video"):
        normalize_template(raw)
    assert raw == original


def test_elements_must_be_a_list():
    raw = _template()
    raw["elements"] = "not-an-array"

    with pytest.raises(TemplateStructureError, match="elements must be a list"):
        normalize_template(raw)


def test_composition_elements_must_be_a_list():
    raw = _template()
    raw["elements"] = [{"type": "composition", "elements": {"type": "video"}}]

    with pytest.raises(TemplateStructureError, match="composition 1 elements must be a list"):
        normalize_template(raw)


def test_unknown_element_kind_rejected():
    raw = _template([{"type": "video"}, {"type": "shape", "path": "M0 0"}])

    with pytest.raises(TemplateStructureError, match="unsupported element type 'shape'"):
        normalize_template(raw)


def test_audio_text_moves_to_source():
    raw = _template([{"type": "audio", "id": "audio-1", "text": "This should become source"}])

    result = normalize_template(raw)

    audio = result.to_dict()["elements"][0]["elements"][0]
    assert audio["source"] == "This should become source"
    assert "text" not in audio
    assert raw["elements"][0]["elements"][0]["text"] == "This should become source"


def test_audio_with_source_keeps_both_fields():
    raw = _template([{"type": "audio", "source": "Narration", "text": "stale"}])

    audio = normalize_template(raw).to_dict()["elements"][0]["elements"][0]

    assert audio["source"] == "Narration"
    assert audio["text"] == "stale"


def test_video_fields_forced():
    raw = _template([{"type": "video", "fit": "contain", "duration": 10, "volume": 50}])

    video = normalize_template(raw).to_dict()["elements"][0]["elements"][0]

    assert video["fit"] == "cover"
    assert video["duration"] is None
    assert video["volume"] == 0
    assert video["time"] == 0


def test_time_strategy_per_composition():
    raw = _template(
        [
            {"type": "audio", "id": "audio-1"},
            {"type": "video", "id": "video-1", "time": 5},
            {"type": "video", "id": "video-2", "time": 10},
            {"type": "video", "id": "video-3", "time": 15},
        ],
        [{"type": "video", "id": "video-4", "time": 3}],
    )

    result = normalize_template(raw).to_dict()
    first, second = (c["elements"] for c in result["elements"])

    assert "time" not in first[0]
    assert [el["time"] for el in first[1:]] == [0, "auto", "auto"]
    assert second[0]["time"] == 0


def test_normalizing_twice_changes_nothing():
    raw = _template(
        [
            {"type": "video", "fit": "contain", "duration": 4, "volume": 20, "time": 2},
            {"type": "video", "fit": "fill"},
            {"type": "audio", "text": "Hello there"},
        ]
    )

    once = normalize_template(raw)
    twice = normalize_template(once)

    assert twice.to_dict() == once.to_dict()


def test_missing_tracks_get_layer_defaults():
    raw = _template(
        [
            {"type": "video"},
            {"type": "text", "name": "title", "track": 7},
            {"type": "text", "name": "subtitle-1"},
            {"type": "audio"},
        ]
    )

    elements = normalize_template(raw).elements[0].elements

    assert [el.track for el in elements] == [1, 7, 2, 3]


def test_extra_keys_survive():
    raw = _template([{"type": "video", "source": "clip.mp4", "trim_start": "2", "color_overlay": "#00000033"}])
    raw["frame_rate"] = 30

    result = normalize_template(raw).to_dict()

    assert result["frame_rate"] == 30
    assert result["elements"][0]["elements"][0]["color_overlay"] == "#00000033"
    assert result["elements"][0]["elements"][0]["trim_start"] == "2"


def test_numeric_ids_and_names_pass_through():
    raw = _template(
        [
            {"type": "video", "id": 1, "source": "clip.mp4"},
            {"type": "text", "id": 2, "name": 42},
        ]
    )

    result = normalize_template(raw).to_dict()

    video, text = result["elements"][0]["elements"]
    assert video["id"] == 1
    assert video["volume"] == 0
    assert (text["id"], text["name"]) == (2, 42)


def test_image_percent_values_pass_through():
    raw = _template(
        [
            {
                "type": "image",
                "source": "logo.png",
                "opacity": "50%",
                "width": "20 vmin",
                "x": 540,
                "x_padding": 12,
            }
        ]
    )

    image = normalize_template(raw).to_dict()["elements"][0]["elements"][0]

    assert image["opacity"] == "50%"
    assert image["width"] == "20 vmin"
    assert (image["x"], image["x_padding"]) == (540, 12)
