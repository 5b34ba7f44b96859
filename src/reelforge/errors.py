"""Exception types raised by the pipeline."""


class ReelforgeError(Exception):
    """Base class for pipeline errors."""


class InputValidationError(ReelforgeError, ValueError):
    """The request configuration cannot start a pipeline run."""


class PlanStructureError(ReelforgeError, ValueError):
    """A scene plan does not have the expected shape."""


class TemplateStructureError(ReelforgeError, ValueError):
    """A render template is malformed and cannot be normalized.

    These are fatal for the request: the repair loop only fixes content,
    never document structure.
    """


class GenerationError(ReelforgeError):
    """The generative model failed or returned unusable output."""


class PlanLookupError(ReelforgeError):
    """The user's subscription plan could not be read."""
