"""Fixed-order pipeline from script to render-ready template."""

import logging
from typing import Any, Mapping, Optional, Tuple, Union

from ..errors import GenerationError, InputValidationError, ReelforgeError
from ..models import PipelineResult, RenderTemplate, ScenePlan, ValidationConfig
from .captions import apply_captions
from .normalizer import normalize_template
from .protocols import PlanningCollaborator
from .repair import MAX_REPAIR_ATTEMPTS, RepairLoop
from .voices import reconcile_voices
from .watermark import WatermarkService

logger = logging.getLogger(__name__)

RawTemplate = Union[RenderTemplate, Mapping[str, Any]]


class TemplateOrchestrator:
    """Single entry point of the pipeline.

    Phases always run in this order, each consuming only the previous
    phase's output:

    1. input validation
    2. scene planning, then duration validation and repair
    3. template generation
    4. structural normalization
    5. captions
    6. voice reconciliation
    7. watermarking

    Structural problems and failed planning/templating calls fail the
    request. Duration problems and watermark lookups never do.
    """

    def __init__(
        self,
        collaborator: PlanningCollaborator,
        watermark_service: Optional[WatermarkService] = None,
        max_repair_attempts: int = MAX_REPAIR_ATTEMPTS,
        log: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            collaborator: Generative model used for planning, repair and templates.
            watermark_service: Plan-gated watermarking. Without it no
                watermark is ever added.
            max_repair_attempts: Repair rounds before giving up on long scenes.
            log: Logger to report to. Defaults to the module logger.
        """
        self._collaborator = collaborator
        self._watermark = watermark_service
        self._log = log or logger
        self._repair_loop = RepairLoop(collaborator, max_attempts=max_repair_attempts, log=self._log)

    def run(self, config: ValidationConfig) -> PipelineResult:
        """Turn the request's script and clips into a render-ready template.

        Raises:
            InputValidationError: If the request cannot be planned.
            PlanStructureError: If the planner returns a malformed plan.
            GenerationError: If planning or template generation fails.
            TemplateStructureError: If the generated template is malformed.
        """
        self._check_input(config)

        plan = self._plan(config)
        outcome = self._repair_loop.repair(plan, config.selected_videos, config)
        warnings = outcome.warnings()
        for warning in warnings:
            self._log.warning(warning)

        raw = self._generate_template(outcome.plan, config)
        template, watermarked = self.finalize_template(raw, config)

        self._log.info(
            f"Pipeline finished: {len(template.elements)} compositions, "
            f"{outcome.attempts} repair attempt(s), {len(warnings)} warning(s), "
            f"watermark: {watermarked}"
        )
        return PipelineResult(
            template=template,
            plan=outcome.plan,
            warnings=warnings,
            repair_attempts=outcome.attempts,
            watermarked=watermarked,
        )

    def validate_template(self, raw: RawTemplate, config: ValidationConfig) -> RenderTemplate:
        """Normalize, caption and voice-fix a template produced elsewhere."""
        template = normalize_template(raw)
        template = apply_captions(template, config.effective_captions)
        return reconcile_voices(template, config.voice_id)

    def finalize_template(
        self, raw: RawTemplate, config: ValidationConfig
    ) -> Tuple[RenderTemplate, bool]:
        """Validate a template and watermark it when the user's plan requires.

        Returns:
            The render-ready template and whether a watermark was added.
        """
        template = self.validate_template(raw, config)
        return self._apply_watermark(template, config)

    def _check_input(self, config: ValidationConfig) -> None:
        if not config.script_text or not config.script_text.strip():
            raise InputValidationError("Script text is empty")
        if not config.selected_videos:
            raise InputValidationError("At least one selected video is required")

    def _plan(self, config: ValidationConfig) -> ScenePlan:
        try:
            return self._collaborator.plan_scenes(
                config.script_text, config.selected_videos, config
            )
        except ReelforgeError:
            raise
        except Exception as e:
            raise GenerationError(f"Scene planning failed: {e}") from e

    def _generate_template(self, plan: ScenePlan, config: ValidationConfig) -> RawTemplate:
        try:
            return self._collaborator.generate_template(plan, config)
        except ReelforgeError:
            raise
        except Exception as e:
            raise GenerationError(f"Template generation failed: {e}") from e

    def _apply_watermark(
        self, template: RenderTemplate, config: ValidationConfig
    ) -> Tuple[RenderTemplate, bool]:
        if not config.user_id:
            self._log.debug("No user id on request, skipping watermark check")
            return template, False
        if self._watermark is None:
            self._log.warning("No watermark service configured, skipping watermark check")
            return template, False

        # Work on a copy so a failure never leaves a half-watermarked template.
        candidate = template.model_copy(deep=True)
        try:
            added = self._watermark.inject_if_needed(config.user_id, candidate)
            return candidate, added
        except Exception as e:
            self._log.error(f"Watermark check failed for user {config.user_id}: {e}")

        fallback = template.model_copy(deep=True)
        try:
            return fallback, self._watermark.inject(fallback) > 0
        except Exception as e:
            self._log.error(f"Could not add watermark for user {config.user_id}: {e}")
            return template, False
