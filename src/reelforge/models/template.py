"""Render template data models.

Templates arrive as untyped JSON from the generative step. They are parsed
into a closed set of element kinds: anything outside ``video``, ``audio``,
``text`` and ``image`` is rejected rather than passed through. Unknown keys
on a known kind are kept so renderer-specific options survive a round trip.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field

TEMPLATE_WIDTH = 1080
TEMPLATE_HEIGHT = 1920

# Layer contract: higher tracks draw on top.
VIDEO_TRACK = 1
TEXT_TRACK = 2
AUDIO_TRACK = 3
WATERMARK_TRACK = 4

TimeValue = Union[int, float, str]
# Renderer values passed through untouched: numbers or unit strings ("50%", "4 vmin").
LooseValue = Union[int, float, str]


class _ElementBase(BaseModel):
    """Fields shared by every element kind."""

    id: Optional[Union[str, int]] = Field(None, description="Element identifier")
    name: Optional[Union[str, int]] = Field(None, description="Element name")
    track: Optional[int] = Field(None, description="Layer index")
    time: Optional[TimeValue] = Field(None, description="Start time or 'auto'")
    duration: Optional[TimeValue] = Field(None, description="Length, null for natural length")

    class Config:
        """Pydantic config."""
        extra = "allow"


class VideoElement(_ElementBase):
    """Background clip of a scene."""

    type: Literal["video"] = "video"
    source: Optional[str] = Field(None, description="Clip URL")
    fit: Optional[str] = Field(None, description="Scaling mode")
    volume: Optional[TimeValue] = Field(None, description="Playback volume")
    trim_start: Optional[TimeValue] = Field(None, description="Trim start in seconds")
    trim_duration: Optional[TimeValue] = Field(None, description="Trim length in seconds")


class AudioElement(_ElementBase):
    """Narration rendered by a text-to-speech provider."""

    type: Literal["audio"] = "audio"
    source: Optional[str] = Field(None, description="Narration text or audio URL")
    provider: Optional[str] = Field(None, description="Encoded voice engine and voice")
    volume: Optional[TimeValue] = Field(None, description="Playback volume")


class TextElement(_ElementBase):
    """On-screen text, usually the narration captions."""

    type: Literal["text"] = "text"
    text: Optional[str] = Field(None, description="Static text content")
    transcript_source: Optional[str] = Field(None, description="Audio element captioned by this text")
    transcript_color: Optional[str] = Field(None, description="Highlight color")
    transcript_effect: Optional[str] = Field(None, description="Caption animation")


class ImageElement(_ElementBase):
    """Still image overlay."""

    type: Literal["image"] = "image"
    source: Optional[str] = Field(None, description="Image URL")
    fit: Optional[str] = Field(None, description="Scaling mode")
    width: Optional[LooseValue] = None
    height: Optional[LooseValue] = None
    x: Optional[LooseValue] = None
    y: Optional[LooseValue] = None
    x_anchor: Optional[LooseValue] = None
    y_anchor: Optional[LooseValue] = None
    x_alignment: Optional[LooseValue] = None
    y_alignment: Optional[LooseValue] = None
    x_padding: Optional[LooseValue] = None
    y_padding: Optional[LooseValue] = None
    opacity: Optional[LooseValue] = None


Element = Annotated[
    Union[VideoElement, AudioElement, TextElement, ImageElement],
    Field(discriminator="type"),
]

ELEMENT_TYPES = ("video", "audio", "text", "image")


class Composition(BaseModel):
    """The element group of one scene."""

    type: Literal["composition"] = "composition"
    elements: List[Element] = Field(default_factory=list, description="Scene elements")

    class Config:
        """Pydantic config."""
        extra = "allow"


class RenderTemplate(BaseModel):
    """Document consumed by the rendering backend."""

    output_format: str = Field(..., description="Container format, e.g. mp4")
    width: int = Field(..., description="Frame width in pixels")
    height: int = Field(..., description="Frame height in pixels")
    elements: List[Composition] = Field(..., description="One composition per scene")

    class Config:
        """Pydantic config."""
        extra = "allow"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the renderer's JSON shape.

        Only keys present in the source document or set by the pipeline
        are emitted, so explicit nulls (``duration: null``) survive.
        """
        return self.model_dump(mode="json", exclude_unset=True)
