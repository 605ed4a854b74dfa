"""
Split tall composite images into horizontal sections.
"""

import logging
from typing import Optional

from sectioncut.config import SplitConfig, Settings, settings
from sectioncut.exceptions import SectionCutError, ConfigError, ImageLoadError
from sectioncut.splitting import SectionSplitter, SplitResult, create_splitter

__version__ = "0.1.0"

__all__ = [
    "SplitConfig",
    "Settings",
    "settings",
    "SectionCutError",
    "ConfigError",
    "ImageLoadError",
    "SectionSplitter",
    "SplitResult",
    "create_splitter",
    "configure_logging",
]


def configure_logging(debug: Optional[bool] = None) -> None:
    """Configure root logging the way the service entry point does."""
    if debug is None:
        debug = settings.debug

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
