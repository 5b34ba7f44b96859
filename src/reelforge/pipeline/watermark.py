"""Plan-gated watermarking of rendered videos."""

import logging
from typing import Optional

from ..config import config
from ..models import ImageElement, RenderTemplate
from ..models.template import WATERMARK_TRACK
from ..services.plan_store import PlanStore

logger = logging.getLogger(__name__)

FREE_PLAN_TOKENS = ("free", "trial", "basic", "starter")


def is_free_plan(plan_id: Optional[str]) -> bool:
    """True when the plan id is empty or names a free tier."""
    if not plan_id:
        return True
    plan = plan_id.lower()
    return any(token in plan for token in FREE_PLAN_TOKENS)


class WatermarkService:
    """Adds a logo overlay to videos of users without a paid plan.

    Anything that prevents proving a paid plan (lookup error, missing
    usage row, unexpected exception) results in a watermark.
    """

    def __init__(
        self,
        store: PlanStore,
        log: Optional[logging.Logger] = None,
        image_url: Optional[str] = None,
    ) -> None:
        """Initialize the service.

        Args:
            store: Plan store queried on every check; results are not cached.
            log: Logger to report to. Defaults to the module logger.
            image_url: Watermark image. Defaults to config.watermark_image_url.
        """
        self._store = store
        self._log = log or logger
        self._image_url = image_url or config.watermark_image_url

    def should_watermark(self, user_id: str) -> bool:
        """Decide whether ``user_id``'s videos need the watermark."""
        try:
            record = self._store.get_current_plan(user_id)
        except Exception as e:
            self._log.error(f"Plan lookup failed for user {user_id}, adding watermark: {e}")
            return True

        if record is None:
            self._log.warning(f"No usage data for user {user_id}, adding watermark")
            return True

        try:
            needs_watermark = is_free_plan(record.current_plan_id)
        except Exception as e:
            self._log.error(f"Unexpected plan id for user {user_id}, adding watermark: {e}")
            return True

        self._log.info(
            f"User {user_id} plan {record.current_plan_id!r} -> watermark: {needs_watermark}"
        )
        return needs_watermark

    def create_watermark_element(self) -> ImageElement:
        """Watermark pinned to the bottom-right corner for the whole scene."""
        return ImageElement(
            type="image",
            name="watermark",
            track=WATERMARK_TRACK,
            source=self._image_url,
            fit="contain",
            width="20 vmin",
            height="20 vmin",
            x="100%",
            y="100%",
            x_anchor="100%",
            y_anchor="100%",
            x_alignment="100%",
            y_alignment="100%",
            x_padding="4 vmin",
            y_padding="4 vmin",
            opacity=0.8,
            time=0,
            duration=None,
        )

    def inject(self, template: RenderTemplate) -> int:
        """Append a watermark to every composition of ``template`` in place.

        Returns:
            Number of compositions that received a watermark.
        """
        if not template.elements:
            self._log.warning("Template has no compositions, cannot add watermark")
            return 0

        for composition in template.elements:
            composition.elements.append(self.create_watermark_element())

        self._log.info(f"Added watermark to {len(template.elements)} composition(s)")
        return len(template.elements)

    def inject_if_needed(self, user_id: str, template: RenderTemplate) -> bool:
        """Watermark ``template`` when the user is not on a paid plan.

        Returns:
            True if a watermark was added.
        """
        if not self.should_watermark(user_id):
            self._log.info(f"No watermark needed for paid user {user_id}")
            return False

        added = self.inject(template)
        if added:
            self._log.info(f"Watermark added for free user {user_id}")
        return added > 0
