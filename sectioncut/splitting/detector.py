"""
Candidate split point detection from row signals.

Finds three independent kinds of cut candidates (uniform color bands, thin
divider lines and background color transitions) and searches a row range
for the visually quietest cut.
"""

import logging
from typing import Optional, Sequence
import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from sectioncut.config import SplitConfig

from .analyzer import RowAnalyzer
from .base import Candidates, Region


logger = logging.getLogger(__name__)

CLUSTER_THRESHOLD = 5
DIVIDER_COLOR_DIFF = 10.0
SMOOTHING_WINDOW = 20


def merge_nearby_points(points: Sequence[int], threshold: int = CLUSTER_THRESHOLD) -> list[int]:
    """
    Collapse runs of nearby points into their midpoints.

    A point joins the current cluster when it lies within ``threshold`` rows
    of the cluster's last point; otherwise it starts a new cluster.

    Args:
        points: Sorted row indices.
        threshold: Maximum distance to the running cluster end.

    Returns:
        Floor midpoint of each cluster, in order.
    """
    if len(points) == 0:
        return []

    merged = []
    group_start = group_end = int(points[0])

    for y in points[1:]:
        y = int(y)
        if y <= group_end + threshold:
            group_end = y
        else:
            merged.append((group_start + group_end) // 2)
            group_start = group_end = y

    merged.append((group_start + group_end) // 2)
    return merged


class SplitPointDetector:
    """Finds candidate split rows from a RowAnalyzer's signals."""

    def __init__(self, analyzer: RowAnalyzer, config: Optional[SplitConfig] = None):
        self.analyzer = analyzer
        self.config = config or SplitConfig()

    def detect(self) -> Candidates:
        """Run all three candidate detectors."""
        return Candidates(
            uniform_regions=self.find_uniform_regions(),
            divider_lines=self.find_divider_lines(),
            background_transitions=self.find_background_transitions(),
        )

    def find_uniform_regions(self) -> list[Region]:
        """
        Find runs of consecutive uniform rows.

        A row is uniform when its variance is below ``variance_threshold``.
        Runs shorter than ``min_gap_height`` are discarded.

        Returns:
            Non-overlapping regions in row order.
        """
        if self.analyzer.is_degenerate:
            return []

        is_uniform = self.analyzer.variance < self.config.variance_threshold
        min_gap = self.config.min_gap_height

        regions = []
        in_region = False
        region_start = 0

        for i, uniform in enumerate(is_uniform):
            if uniform and not in_region:
                region_start = i
                in_region = True
            elif not uniform and in_region:
                if i - region_start >= min_gap:
                    regions.append(Region(region_start, i))
                in_region = False

        # Run still open at the bottom edge
        if in_region and self.analyzer.height - region_start >= min_gap:
            regions.append(Region(region_start, self.analyzer.height))

        return regions

    def find_divider_lines(
        self,
        line_variance_threshold: float = 3.0,
        margin_check: int = 30,
        margin_variance_threshold: float = 5.0,
    ) -> list[int]:
        """
        Find thin horizontal divider lines.

        A divider is a near-uniform row framed by near-uniform bands of
        ``margin_check`` rows whose average brightness differs from the
        row's by more than 10.

        Args:
            line_variance_threshold: Maximum variance of the line row itself.
            margin_check: Height of the bands checked above and below.
            margin_variance_threshold: Maximum average variance of each band.

        Returns:
            Clustered divider rows.
        """
        analyzer = self.analyzer
        if analyzer.is_degenerate:
            return []

        variance = analyzer.variance
        dividers = []

        for y in range(margin_check, analyzer.height - margin_check):
            if variance[y] > line_variance_threshold:
                continue

            above = (y - margin_check, y)
            below = (y + 1, y + 1 + margin_check)

            if analyzer.band_variance(*above) > margin_variance_threshold:
                continue
            if analyzer.band_variance(*below) > margin_variance_threshold:
                continue

            above_mean = analyzer.band_mean(*above)
            below_mean = analyzer.band_mean(*below)
            line_mean = analyzer.row_mean(y)

            color_diff = abs(line_mean - (above_mean + below_mean) / 2.0)
            if color_diff > DIVIDER_COLOR_DIFF:
                dividers.append(y)

        return merge_nearby_points(dividers)

    def find_background_transitions(
        self,
        variance_threshold: float = 5.0,
        min_uniform_height: int = 20,
        color_diff_threshold: float = 15.0,
    ) -> list[int]:
        """
        Find rows where one flat background color gives way to another.

        Args:
            variance_threshold: Rows below this variance count as uniform.
            min_uniform_height: Uniform rows required on each side.
            color_diff_threshold: Minimum Euclidean distance between the
                mean colors of the two bands.

        Returns:
            Clustered transition rows.
        """
        analyzer = self.analyzer
        if analyzer.is_degenerate:
            return []

        is_uniform = analyzer.variance < variance_threshold
        # uniform_count[b] - uniform_count[a] = uniform rows in [a, b)
        uniform_count = np.concatenate(([0], np.cumsum(is_uniform)))
        transitions = []

        for y in range(min_uniform_height, analyzer.height - min_uniform_height):
            above = (y - min_uniform_height, y)
            below = (y, y + min_uniform_height)

            if uniform_count[above[1]] - uniform_count[above[0]] < min_uniform_height:
                continue
            if uniform_count[below[1]] - uniform_count[below[0]] < min_uniform_height:
                continue

            above_color = analyzer.band_mean_color(*above)
            below_color = analyzer.band_mean_color(*below)

            color_diff = float(np.linalg.norm(above_color - below_color))
            if color_diff > color_diff_threshold:
                transitions.append(y)

        return merge_nearby_points(transitions)

    def find_best_split_in_range(self, start: int, end: int, margin: int = 50) -> int:
        """
        Find the least complex row in ``[start + margin, end - margin)``.

        Complexity is smoothed with a moving average of 20 rows before the
        minimum is taken; ties go to the first minimum.

        Args:
            start: First row of the range.
            end: End of the range (exclusive).
            margin: Rows to keep clear of each end.

        Returns:
            The chosen row, or the midpoint when the trimmed range is empty.
        """
        search_start = start + margin
        search_end = end - margin

        if search_start >= search_end:
            return (start + end) // 2

        region = self.analyzer.complexity[search_start:search_end]
        if region.size == 0:
            return (start + end) // 2

        if region.size < SMOOTHING_WINDOW:
            return search_start + int(np.argmin(region))

        # Moving average over windows region[i:i + SMOOTHING_WINDOW] for i < len - SMOOTHING_WINDOW;
        # a region of exactly one window keeps that single window
        windows = sliding_window_view(region, SMOOTHING_WINDOW)
        if region.size > SMOOTHING_WINDOW:
            windows = windows[:-1]
        smoothed = windows.mean(axis=1)

        best_idx = int(np.argmin(smoothed)) + SMOOTHING_WINDOW // 2
        return search_start + best_idx
