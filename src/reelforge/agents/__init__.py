"""AI agents for planning and template generation."""

from .base import BaseAgent
from .planner import ScenePlannerAgent

__all__ = ["BaseAgent", "ScenePlannerAgent"]
