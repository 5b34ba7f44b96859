"""Scene-plan validation and render-template repair pipeline."""

__version__ = "0.1.0"
