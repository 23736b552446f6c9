"""
Configuration management for linkcanon.
"""

import os
from dataclasses import dataclass, field

from linkcanon.canonicalizer import UrlCanonicalizer
from linkcanon.params import TrackingParameterPolicy

DEFAULT_TRACKING_PRESET = "default"
DEFAULT_LOG_LEVEL = "INFO"


def get_env(name: str, default: str | None) -> str:
    """
    Read an environment variable.

    Parameters
    ----------
    name : str
        Environment variable name.
    default : str | None
        Value used when the variable is unset. None marks the variable as
        required.

    Returns
    -------
    str
        The variable's value, or ``default``.

    Raises
    ------
    ValueError
        If the variable is required and not set.
    """
    value = os.getenv(name)
    if value is None:
        if default is None:
            raise ValueError(f"Required environment variable '{name}' is not set")
        return default
    return value


def _parse_list(value: str) -> tuple[str, ...]:
    """Parse a comma separated list, ignoring blanks."""
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass
class Config:
    """
    Application configuration loaded from environment variables.
    """

    # Denylist: preset name ("default" or "extended")
    tracking_preset: str = DEFAULT_TRACKING_PRESET

    # Appended to the preset (LINKCANON_EXTRA_PARAMETERS)
    extra_parameters: tuple[str, ...] = field(default_factory=tuple)

    # Removed from the preset (LINKCANON_PRESERVED_PARAMETERS), e.g. "t" for YouTube timestamps
    preserved_parameters: tuple[str, ...] = field(default_factory=tuple)

    # Logging
    log_level: str = DEFAULT_LOG_LEVEL
    log_json: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """
        Load configuration from environment variables.
        """
        return cls(
            tracking_preset=get_env("LINKCANON_TRACKING_PRESET", DEFAULT_TRACKING_PRESET),
            extra_parameters=_parse_list(get_env("LINKCANON_EXTRA_PARAMETERS", "")),
            preserved_parameters=_parse_list(get_env("LINKCANON_PRESERVED_PARAMETERS", "")),
            log_level=get_env("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
            log_json=get_env("LOG_JSON", "false").lower() == "true",
        )

    def build_policy(self) -> TrackingParameterPolicy:
        """
        Build the tracking parameter policy described by this config.

        Preserved parameters win over extra ones.

        Raises
        ------
        ValueError
            If ``tracking_preset`` is unknown.
        """
        return (
            TrackingParameterPolicy.from_preset(self.tracking_preset)
            .extend(self.extra_parameters)
            .without(self.preserved_parameters)
        )


# Global instances (lazy loaded)
_config: Config | None = None
_canonicalizer: UrlCanonicalizer | None = None


def get_config() -> Config:
    """
    Get the global configuration instance.
    """
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def get_canonicalizer() -> UrlCanonicalizer:
    """
    Get the canonicalizer configured from the environment.
    """
    global _canonicalizer
    if _canonicalizer is None:
        _canonicalizer = UrlCanonicalizer(get_config().build_policy())
    return _canonicalizer


def reset_config() -> None:
    """Drop cached config and canonicalizer so the environment is re-read."""
    global _config, _canonicalizer
    _config = None
    _canonicalizer = None
