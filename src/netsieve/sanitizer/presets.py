"""Named classifier presets.

Presets only vary the engine's inputs:

- strict: failures and requests slower than 5s (API patterns disabled)
- balanced: all defaults, the recommended baseline
- verbose: 1s slow threshold and no third-party ignore list
- debug: keeps everything, bypassing the rule chain
"""

from typing import Callable, Optional, Union

from netsieve.core.constants import PRESET_DESCRIPTIONS, PresetName
from netsieve.core.exceptions import PresetNotFoundError
from netsieve.core.models import SanitizerOptions
from netsieve.sanitizer.engine import Classifier, PassthroughClassifier, build_classifier


PRESET_OPTIONS: dict[PresetName, SanitizerOptions] = {
    PresetName.STRICT: SanitizerOptions(slow_request_threshold_ms=5000, api_patterns=()),
    PresetName.BALANCED: SanitizerOptions(),
    PresetName.VERBOSE: SanitizerOptions(slow_request_threshold_ms=1000, ignored_domains=()),
}


def strict(page_hostname: Optional[str] = None) -> Classifier:
    return build_classifier(
        PRESET_OPTIONS[PresetName.STRICT],
        page_hostname=page_hostname,
        name=PresetName.STRICT.value,
    )


def balanced(page_hostname: Optional[str] = None) -> Classifier:
    return build_classifier(
        PRESET_OPTIONS[PresetName.BALANCED],
        page_hostname=page_hostname,
        name=PresetName.BALANCED.value,
    )


def verbose(page_hostname: Optional[str] = None) -> Classifier:
    return build_classifier(
        PRESET_OPTIONS[PresetName.VERBOSE],
        page_hostname=page_hostname,
        name=PresetName.VERBOSE.value,
    )


def debug(page_hostname: Optional[str] = None) -> Classifier:
    # page_hostname is accepted for a uniform signature; nothing is filtered
    return PassthroughClassifier(name=PresetName.DEBUG.value)


PRESETS: dict[PresetName, Callable[[Optional[str]], Classifier]] = {
    PresetName.STRICT: strict,
    PresetName.BALANCED: balanced,
    PresetName.VERBOSE: verbose,
    PresetName.DEBUG: debug,
}


def get_preset(
    name: Union[str, PresetName],
    page_hostname: Optional[str] = None,
) -> Classifier:
    """Build a preset classifier by name.

    Args:
        name: Preset name (strict, balanced, verbose, debug), case-insensitive
        page_hostname: Hostname of the recorded page, the default own domain

    Returns:
        Classifier for the preset

    Raises:
        PresetNotFoundError: If no preset has that name
    """
    try:
        preset = PresetName(name.lower() if isinstance(name, str) else name)
    except ValueError:
        available = ", ".join(p.value for p in PresetName)
        raise PresetNotFoundError(
            f"Preset '{name}' not found. Available presets: {available}"
        ) from None

    return PRESETS[preset](page_hostname)


def list_presets() -> list[tuple[str, str]]:
    """Return (name, description) for every preset."""
    return [(preset.value, PRESET_DESCRIPTIONS[preset]) for preset in PresetName]
