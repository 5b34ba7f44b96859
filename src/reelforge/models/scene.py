"""Scene plan data models."""

from typing import Any, List, Optional
from pathlib import Path
from pydantic import BaseModel, Field, field_validator, model_validator
import yaml


class VideoAsset(BaseModel):
    """Reference from a scene to the source clip it plays."""

    id: str = Field(..., description="Selected video identifier")
    trim_start: Optional[str] = Field(None, description="Trim start in seconds")
    trim_duration: Optional[str] = Field(None, description="Trim length in seconds")
    url: str = Field(default="", description="Clip URL")

    class Config:
        """Pydantic config."""
        frozen = False

    @field_validator("trim_start", "trim_duration", mode="before")
    @classmethod
    def _stringify_timing(cls, value: Any) -> Optional[str]:
        # The planner emits trims as numbers or strings; keep one shape.
        if value is None or isinstance(value, str):
            return value
        return str(value)


class SelectedVideo(BaseModel):
    """A clip the user picked for the video, with its full length."""

    id: str = Field(..., description="Video identifier")
    duration_seconds: float = Field(..., description="Full clip length in seconds")
    url: Optional[str] = Field(None, description="Clip URL")
    title: Optional[str] = Field(None, description="Human readable title")


class Scene(BaseModel):
    """One narrated segment bound to one clip."""

    scene_number: int = Field(..., description="1-based position in the plan")
    script_text: str = Field(default="", description="Narration for this scene")
    video_asset: Optional[VideoAsset] = Field(None, description="Clip shown during the scene")

    class Config:
        """Pydantic config."""
        frozen = False


class ScenePlan(BaseModel):
    """Ordered scenes produced by the planning step."""

    scenes: List[Scene] = Field(..., description="Scenes in playback order")

    class Config:
        """Pydantic config."""
        frozen = False

    @model_validator(mode="after")
    def _check_numbering(self) -> "ScenePlan":
        if not self.scenes:
            raise ValueError("Scene plan must contain at least one scene")
        for position, scene in enumerate(self.scenes, start=1):
            if scene.scene_number != position:
                raise ValueError(
                    f"Scene numbers must be contiguous from 1: "
                    f"found {scene.scene_number} at position {position}"
                )
        return self

    @classmethod
    def from_yaml(cls, path: Path) -> "ScenePlan":
        """Load a plan from a YAML (or JSON) file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls(**data)

    def to_yaml(self, path: Path) -> None:
        """Save the plan to a YAML file."""
        with open(path, "w") as f:
            yaml.safe_dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)
