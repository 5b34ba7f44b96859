"""Keep every narration on the voice the user picked."""

import logging
import re
from typing import Dict, Optional, Tuple

from ..models import AudioElement, RenderTemplate

logger = logging.getLogger(__name__)

DEFAULT_ENGINE = "elevenlabs"
DEFAULT_VOICE_MODEL = "eleven_multilingual_v2"

_VOICE_TOKEN = re.compile(r"(?<!\S)voice_id=\S*")


def default_provider(voice_id: str) -> str:
    """Provider string used when the model left one out."""
    return f"{DEFAULT_ENGINE} model_id={DEFAULT_VOICE_MODEL} voice_id={voice_id}"


def parse_provider(provider: str) -> Tuple[str, Dict[str, str]]:
    """Split ``"engine key=value ..."`` into the engine and its options."""
    tokens = provider.split()
    if not tokens:
        return "", {}
    options = {}
    for token in tokens[1:]:
        key, sep, value = token.partition("=")
        if sep:
            options[key] = value
    return tokens[0], options


def fix_provider(provider: Optional[str], voice_id: str) -> str:
    """Return ``provider`` pointing at ``voice_id``, other tokens untouched."""
    if not provider or not provider.strip():
        return default_provider(voice_id)
    if _VOICE_TOKEN.search(provider) is None:
        return f"{provider.rstrip()} voice_id={voice_id}"
    return _VOICE_TOKEN.sub(lambda _: f"voice_id={voice_id}", provider)


def reconcile_voices(template: RenderTemplate, voice_id: Optional[str]) -> RenderTemplate:
    """Return a copy where every audio element uses ``voice_id``.

    An empty ``voice_id`` means the caller opted out; the template is
    returned unchanged.
    """
    if not voice_id:
        logger.debug("No voice id configured, skipping voice reconciliation")
        return template

    result = template.model_copy(deep=True)
    fixed = 0

    for position, composition in enumerate(result.elements, start=1):
        for element in composition.elements:
            if not isinstance(element, AudioElement):
                continue
            updated = fix_provider(element.provider, voice_id)
            if updated != element.provider:
                logger.info(
                    f"Scene {position}: audio {element.id or element.name or '?'} "
                    f"provider {element.provider!r} -> {updated!r}"
                )
                element.provider = updated
                fixed += 1

    logger.info(f"Voice reconciliation updated {fixed} audio element(s)")
    return result
