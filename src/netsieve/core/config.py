"""Configuration loader for netsieve.

This module loads classifier configuration from YAML files. A file holds
exactly one of:

- ``preset: <name>`` on its own
- a ``sanitizer`` section (optionally based on a preset)
- a ``scoped`` section with ``capture_only`` / ``ignore`` scopes
"""

from pathlib import Path
from typing import Any, Optional

import yaml

from netsieve.core.constants import PresetName
from netsieve.core.exceptions import ConfigError
from netsieve.core.models import SanitizerOptions


SANITIZER_KEYS = {
    "preset",
    "slow_request_threshold_ms",
    "error_status_threshold",
    "ignored_domains",
    "api_patterns",
    "ignored_extensions",
    "own_domains",
}

LIST_KEYS = ("ignored_domains", "api_patterns", "ignored_extensions", "own_domains")


# ============================================================================
# Configuration Paths
# ============================================================================

def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to configs directory (./configs relative to project root)
    """
    # core/ -> netsieve/ -> src/ -> root
    project_root = Path(__file__).parent.parent.parent.parent
    return project_root / "configs"


def _read_yaml(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config YAML: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {e}") from e

    if not data:
        raise ConfigError("Configuration is empty")

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    sections = [key for key in ("preset", "sanitizer", "scoped") if key in data]
    if len(sections) != 1:
        raise ConfigError(
            "Configuration must contain exactly one of 'preset', 'sanitizer' or 'scoped'"
        )

    return data


# ============================================================================
# Sanitizer Options Loader
# ============================================================================

def parse_sanitizer_options(data: dict[str, Any]) -> SanitizerOptions:
    """Validate a ``sanitizer`` section and convert it to options.

    Args:
        data: Mapping with sanitizer option keys

    Returns:
        SanitizerOptions, layered over the base preset when one is named

    Raises:
        ConfigError: If keys are unknown or values have the wrong type
    """
    if not isinstance(data, dict):
        raise ConfigError("'sanitizer' section must be a mapping")

    unknown = set(data) - SANITIZER_KEYS
    if unknown:
        raise ConfigError(f"Unknown sanitizer options: {', '.join(sorted(unknown))}")

    for key in LIST_KEYS:
        if key in data and not isinstance(data[key], list):
            raise ConfigError(f"'{key}' must be a list")

    for key in ("slow_request_threshold_ms", "error_status_threshold"):
        value = data.get(key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
            raise ConfigError(f"'{key}' must be a number")

    # Imported here: the sanitizer package builds on core
    from netsieve.sanitizer.presets import PRESET_OPTIONS

    base = SanitizerOptions()
    preset_name = data.get("preset")
    if preset_name is not None:
        try:
            preset = PresetName(str(preset_name).lower())
        except ValueError:
            raise ConfigError(f"Unknown base preset '{preset_name}'") from None
        if preset not in PRESET_OPTIONS:
            raise ConfigError(f"Preset '{preset.value}' cannot be used as a base")
        base = PRESET_OPTIONS[preset]

    options = SanitizerOptions(
        slow_request_threshold_ms=data.get("slow_request_threshold_ms"),
        error_status_threshold=data.get("error_status_threshold"),
        ignored_domains=data.get("ignored_domains"),
        api_patterns=data.get("api_patterns"),
        ignored_extensions=data.get("ignored_extensions"),
        own_domains=data.get("own_domains"),
    )
    return base.merged(options)


def load_sanitizer_options(config_file: Path | str) -> SanitizerOptions:
    """Load sanitizer options from a YAML file.

    Args:
        config_file: Path to a YAML file with a ``sanitizer`` section

    Returns:
        SanitizerOptions

    Raises:
        ConfigError: If the file is missing, unparsable, or has no
            ``sanitizer`` section
    """
    data = _read_yaml(Path(config_file))

    if "sanitizer" not in data:
        raise ConfigError("Missing 'sanitizer' section in config")

    return parse_sanitizer_options(data["sanitizer"])


# ============================================================================
# Classifier Loader
# ============================================================================

def load_classifier(config_file: Path | str, page_hostname: Optional[str] = None):
    """Build a classifier from any supported YAML configuration.

    Args:
        config_file: Path to YAML configuration
        page_hostname: Hostname of the recorded page, the default own domain

    Returns:
        Classifier described by the file

    Raises:
        ConfigError: If the configuration is missing or invalid
    """
    # Imported here: the sanitizer package builds on core
    from netsieve.sanitizer.engine import build_classifier
    from netsieve.sanitizer.presets import get_preset
    from netsieve.sanitizer.scoped import build_scoped_classifier

    config_path = Path(config_file)
    data = _read_yaml(config_path)

    if "preset" in data:
        return get_preset(str(data["preset"]), page_hostname=page_hostname)

    if "sanitizer" in data:
        options = parse_sanitizer_options(data["sanitizer"])
        return build_classifier(options, page_hostname=page_hostname, name=config_path.stem)

    scoped = data["scoped"]
    if not isinstance(scoped, dict):
        raise ConfigError("'scoped' section must be a mapping")

    unknown = set(scoped) - {"capture_only", "ignore"}
    if unknown:
        raise ConfigError(f"Unknown scoped keys: {', '.join(sorted(unknown))}")

    return build_scoped_classifier(
        capture_only=scoped.get("capture_only"),
        ignore=scoped.get("ignore"),
        page_hostname=page_hostname,
        name=config_path.stem,
    )
