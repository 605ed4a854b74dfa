"""
Exceptions raised by the section splitter.
"""


class SectionCutError(Exception):
    """Base class for section splitter errors."""


class ConfigError(SectionCutError, ValueError):
    """Raised when split heights resolved for an image are inconsistent."""


class ImageLoadError(SectionCutError):
    """Raised when an image path cannot be opened or decoded."""
