import logging
from dataclasses import dataclass
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings

from sectioncut.exceptions import ConfigError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedHeights:
    """Section height limits after width-based defaults are applied."""

    min_height: int
    """Minimum section height in rows."""

    max_height: int
    """Maximum section height in rows (0 disables max-height enforcement)."""


class SplitConfig(BaseModel):
    """Configuration for splitting a tall image into sections."""

    model_config = ConfigDict(frozen=True)

    variance_threshold: float = Field(default=10.0, ge=0.0, description="Rows with variance below this are uniform")
    min_gap_height: int = Field(default=50, ge=1, description="Minimum height of a uniform region")
    min_section_height: Optional[int] = Field(
        default=None, gt=0, description="Minimum section height (None = 2/3 of image width)"
    )
    max_section_height: Optional[int] = Field(
        default=None, ge=0, description="Maximum section height (None = 1.5x image width, 0 = unlimited)"
    )

    @model_validator(mode="after")
    def _check_section_heights(self) -> "SplitConfig":
        min_height = self.min_section_height
        max_height = self.max_section_height
        if min_height is not None and max_height and min_height >= max_height:
            raise ValueError(
                f"min_section_height ({min_height}) must be smaller than "
                f"max_section_height ({max_height})"
            )
        return self

    def resolve(self, width: int) -> ResolvedHeights:
        """
        Fill in width-derived defaults for the section heights.

        Args:
            width: Image width in pixels.

        Returns:
            ResolvedHeights for this image.

        Raises:
            ConfigError: If the resolved minimum is not below the resolved maximum.
        """
        if self.min_section_height is not None:
            min_height = self.min_section_height
        else:
            min_height = max(width * 2 // 3, 1)

        if self.max_section_height is not None:
            max_height = self.max_section_height
        else:
            max_height = max(int(width * 1.5), 2)

        if max_height and min_height >= max_height:
            raise ConfigError(
                f"Resolved min section height {min_height}px is not below "
                f"max section height {max_height}px for image width {width}px"
            )

        logger.debug(f"[Config] Resolved section heights for width {width}: min={min_height}, max={max_height}")
        return ResolvedHeights(min_height=min_height, max_height=max_height)


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    debug: bool = False

    # Export settings
    output_dir_name: str = "sections"
    jpeg_quality: int = Field(default=95, ge=1, le=100)

    # Default splitting settings
    splitting: SplitConfig = SplitConfig()

    class Config:
        env_prefix = "SECTIONCUT_"
        env_nested_delimiter = "__"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
