"""Read-only access to users' subscription plans."""

import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..errors import PlanLookupError

logger = logging.getLogger(__name__)


class PlanRecord(BaseModel):
    """Usage row of one user."""

    user_id: str = Field(..., description="User identifier")
    current_plan_id: Optional[str] = Field(None, description="Active plan, empty for none")


class PlanStore(Protocol):
    """Source of the user's current plan.

    Returns None when the user has no usage record and raises
    PlanLookupError when the lookup itself fails.
    """

    def get_current_plan(self, user_id: str) -> Optional[PlanRecord]:
        ...


class InMemoryPlanStore:
    """Plan store backed by a dict of user id to plan id."""

    def __init__(self, plans: Optional[Dict[str, Optional[str]]] = None) -> None:
        self._plans = dict(plans or {})

    def set_plan(self, user_id: str, plan_id: Optional[str]) -> None:
        """Change a user's plan."""
        self._plans[user_id] = plan_id

    def get_current_plan(self, user_id: str) -> Optional[PlanRecord]:
        if user_id not in self._plans:
            return None
        return PlanRecord(user_id=user_id, current_plan_id=self._plans[user_id])


class YamlPlanStore:
    """Plan store reading a YAML file of usage rows.

    The file maps user ids to rows::

        user-123:
          current_plan_id: pro_monthly

    It is read again on every lookup since plans change between requests.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Return the backing file."""
        return self._path

    def get_current_plan(self, user_id: str) -> Optional[PlanRecord]:
        try:
            with open(self._path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise PlanLookupError(f"Cannot read plan store {self._path}: {e}") from e

        if not isinstance(data, dict):
            raise PlanLookupError(f"Plan store {self._path} must contain a mapping")

        row = data.get(user_id)
        if row is None:
            logger.debug(f"No usage row for user {user_id} in {self._path}")
            return None

        try:
            return PlanRecord(user_id=user_id, **row)
        except (TypeError, ValidationError) as e:
            raise PlanLookupError(f"Malformed usage row for user {user_id}: {e}") from e
