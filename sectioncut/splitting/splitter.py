"""
Section splitter for tall composite images.

Cuts a tall image (such as a product detail page) into horizontal sections:
1. Row signals - per-row color variance and edge complexity
2. Candidates - uniform bands, divider lines, background transitions
3. Aggregation - minimum height filter, then complexity splits for tall sections
"""

import logging
from pathlib import Path
from typing import Optional, Union
import numpy as np

from sectioncut.config import SplitConfig, settings

from .aggregation import apply_max_height_splits, merge_split_points
from .analyzer import RowAnalyzer
from .base import Candidates, SplitResult
from .detector import SplitPointDetector
from .imaging import ImageInput, crop_sections, prepare_output_dir, save_sections, to_numpy


logger = logging.getLogger(__name__)


class SectionSplitter:
    """
    Decides where to cut a tall image and crops the sections.

    Split points always start at 0, end at the image height and are strictly
    increasing. An image with no usable candidates yields ``[0, height]``.
    """

    def __init__(self, config: Optional[SplitConfig] = None):
        """
        Initialize the section splitter.

        Args:
            config: Split configuration. Defaults to the settings' splitting config.
        """
        self.config = config or settings.splitting

    def find_split_points(
        self,
        image: ImageInput,
        edge_map: Optional[np.ndarray] = None,
    ) -> SplitResult:
        """
        Decide where to cut an image without cropping it.

        Args:
            image: Image as numpy array, PIL Image, or path.
            edge_map: Optional precomputed edge magnitudes (height, width).

        Returns:
            SplitResult with the split points and detection diagnostics.
        """
        img_array = to_numpy(image)
        return self._find_split_points(img_array, edge_map)

    def split(
        self,
        image: ImageInput,
        edge_map: Optional[np.ndarray] = None,
    ) -> SplitResult:
        """
        Split an image into sections.

        Args:
            image: Image as numpy array, PIL Image, or path.
            edge_map: Optional precomputed edge magnitudes (height, width).

        Returns:
            SplitResult with the cropped sections.
        """
        img_array = to_numpy(image)
        result = self._find_split_points(img_array, edge_map)

        if result.num_sections > 0:
            result.sections = crop_sections(img_array, result.split_points)

        return result

    def split_to_directory(
        self,
        image_path: Union[Path, str],
        output_dir: Optional[Union[Path, str]] = None,
        quality: Optional[int] = None,
    ) -> SplitResult:
        """
        Split an image file and save each section as JPEG.

        Args:
            image_path: Path to the image.
            output_dir: Output directory. Defaults to a ``sections`` folder
                next to the image.
            quality: JPEG quality. Defaults to the configured quality.

        Returns:
            SplitResult with ``output_files`` filled.
        """
        image_path = Path(image_path)
        result = self.split(image_path)

        if not result.sections:
            logger.warning(f"No sections produced for {image_path}")
            return result

        target_dir = prepare_output_dir(
            image_path,
            Path(output_dir) if output_dir is not None else None,
            settings.output_dir_name,
        )
        result.output_files = save_sections(
            result.sections,
            target_dir,
            image_path.stem,
            quality=quality or settings.jpeg_quality,
        )
        return result

    def _find_split_points(
        self,
        img_array: np.ndarray,
        edge_map: Optional[np.ndarray],
    ) -> SplitResult:
        analyzer = RowAnalyzer(img_array, edge_map=edge_map)
        height, width = analyzer.height, analyzer.width
        heights = self.config.resolve(width)

        logger.info(f"Image size: {width} x {height}")
        logger.info(f"Min section height: {heights.min_height}px, max section height: {heights.max_height}px")

        if analyzer.is_degenerate:
            logger.info("Image has no pixel data, nothing to split")
            candidates = Candidates()
        else:
            detector = SplitPointDetector(analyzer, self.config)
            candidates = detector.detect()
            self._log_candidates(candidates)

        split_points = merge_split_points(
            candidates.uniform_regions,
            candidates.divider_lines,
            candidates.background_transitions,
            height,
            heights.min_height,
        )

        complexity_splits = []
        if not analyzer.is_degenerate:
            split_points, complexity_splits = apply_max_height_splits(
                split_points,
                heights.max_height,
                heights.min_height,
                detector.find_best_split_in_range,
            )

        logger.info(f"Split points: {split_points}")
        logger.info(f"Sections: {max(len(split_points) - 1, 0)}")

        return SplitResult(
            split_points=split_points,
            original_size=(width, height),
            min_section_height=heights.min_height,
            max_section_height=heights.max_height,
            uniform_regions=candidates.uniform_regions,
            divider_lines=candidates.divider_lines,
            background_transitions=candidates.background_transitions,
            complexity_splits=complexity_splits,
            metadata={
                "channels": analyzer.channels,
                "variance_threshold": self.config.variance_threshold,
                "min_gap_height": self.config.min_gap_height,
            },
        )

    def _log_candidates(self, candidates: Candidates) -> None:
        logger.info(f"Uniform regions found: {len(candidates.uniform_regions)}")
        for i, region in enumerate(candidates.uniform_regions, start=1):
            logger.debug(f"  {i}. rows {region.start} ~ {region.end} (height: {region.height}px)")

        logger.info(f"Divider lines found: {len(candidates.divider_lines)}")
        for i, y in enumerate(candidates.divider_lines, start=1):
            logger.debug(f"  {i}. row {y}")

        logger.info(f"Background transitions found: {len(candidates.background_transitions)}")
        for i, y in enumerate(candidates.background_transitions, start=1):
            logger.debug(f"  {i}. row {y}")


def create_splitter(
    variance_threshold: float = 10.0,
    min_gap_height: int = 50,
    min_section_height: Optional[int] = None,
    max_section_height: Optional[int] = None,
) -> SectionSplitter:
    """
    Factory function to create a configured SectionSplitter.

    Args:
        variance_threshold: Rows with variance below this are uniform.
        min_gap_height: Minimum height of a uniform region.
        min_section_height: Minimum section height (None = 2/3 of image width).
        max_section_height: Maximum section height (None = 1.5x image width, 0 = unlimited).

    Returns:
        Configured SectionSplitter.
    """
    config = SplitConfig(
        variance_threshold=variance_threshold,
        min_gap_height=min_gap_height,
        min_section_height=min_section_height,
        max_section_height=max_section_height,
    )
    return SectionSplitter(config)
