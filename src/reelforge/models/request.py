"""Per-request inputs and outputs of the pipeline."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from .scene import ScenePlan, SelectedVideo
from .template import RenderTemplate


class CaptionStructure(BaseModel):
    """Caption options chosen by the user."""

    enabled: bool = Field(default=True, description="Render captions at all")
    preset_id: Optional[str] = Field(None, description="Named caption style preset")
    placement: Optional[str] = Field(None, description="top, middle or bottom")
    transcript_color: Optional[str] = Field(None, description="Highlight color, e.g. #ffffff")
    transcript_effect: Optional[str] = Field(None, description="Caption animation")
    font_family: Optional[str] = Field(None, description="Overrides the preset font")
    font_size: Optional[str] = Field(None, description="Overrides the preset font size")

    class Config:
        """Pydantic config."""
        frozen = True


class ValidationConfig(BaseModel):
    """Immutable bundle passed by reference through every phase."""

    script_text: str = Field(..., description="Full narration script")
    selected_videos: List[SelectedVideo] = Field(default_factory=list, description="Clips to use")
    caption_config: CaptionStructure = Field(default_factory=CaptionStructure)
    editorial_profile: Dict[str, Any] = Field(default_factory=dict, description="Tone and persona hints")
    voice_id: Optional[str] = Field(None, description="Voice every narration must use")
    output_language: str = Field(default="en", description="Narration language")
    caption_structure: Optional[CaptionStructure] = Field(
        None, description="Overrides caption_config when set"
    )
    user_id: Optional[str] = Field(None, description="Requesting user, gates watermarking")

    class Config:
        """Pydantic config."""
        frozen = True

    @property
    def effective_captions(self) -> CaptionStructure:
        """Caption options actually applied to the template."""
        return self.caption_structure or self.caption_config


class PipelineResult(BaseModel):
    """Render-ready template plus what happened on the way."""

    template: RenderTemplate
    plan: ScenePlan
    warnings: List[str] = Field(default_factory=list)
    repair_attempts: int = 0
    watermarked: bool = False
