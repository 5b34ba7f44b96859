"""Collaborator interfaces the pipeline depends on."""

from typing import Any, List, Mapping, Protocol, Sequence, Union

from ..models import RenderTemplate, ScenePlan, SelectedVideo, ValidationConfig
from .durations import DurationViolation


class PlanningCollaborator(Protocol):
    """Generative model that plans scenes and writes templates.

    Every return value is untrusted and goes through the validators.
    Implementations raise on failure.
    """

    def plan_scenes(
        self,
        script_text: str,
        videos: Sequence[SelectedVideo],
        config: ValidationConfig,
    ) -> ScenePlan:
        ...

    def repair_scenes(
        self,
        plan: ScenePlan,
        violating_indices: List[int],
        overage_info: List[DurationViolation],
    ) -> ScenePlan:
        ...

    def generate_template(
        self, plan: ScenePlan, config: ValidationConfig
    ) -> Union[RenderTemplate, Mapping[str, Any]]:
        ...
