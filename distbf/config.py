"""Filter configuration.

Controls the default false positive rate for filters built without one.
"""
from dataclasses import dataclass

from . import constants
from .errors import InvalidArgument


@dataclass
class FilterConfig:
    """Configuration for filters built in this process."""
    false_positive_rate: float = constants.DEFAULT_FPR  # used when no rate is passed


# Global filter configuration
_config = FilterConfig()


def set_filter_config(config: FilterConfig) -> None:
    """Set the global filter configuration."""
    global _config
    if not 0.0 < config.false_positive_rate < 1.0:
        raise InvalidArgument(f"false positive rate must be in (0, 1), got {config.false_positive_rate!r}")
    _config = config


def get_filter_config() -> FilterConfig:
    """Get the current filter configuration."""
    return _config


def reset_filter_config() -> None:
    """Reset to default configuration (for testing)."""
    global _config
    _config = FilterConfig()
