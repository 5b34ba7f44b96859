"""External service integrations."""

from .anthropic import AnthropicClient, extract_json
from .plan_store import InMemoryPlanStore, PlanRecord, PlanStore, YamlPlanStore

__all__ = [
    "AnthropicClient",
    "extract_json",
    "InMemoryPlanStore",
    "PlanRecord",
    "PlanStore",
    "YamlPlanStore",
]
