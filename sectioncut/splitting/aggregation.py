"""
Merging candidate points into the final split point list.
"""

import logging
from typing import Callable, Iterable, Sequence

from .base import Region


logger = logging.getLogger(__name__)

RangeSearch = Callable[..., int]


def merge_split_points(
    uniform_regions: Iterable[Region],
    divider_lines: Iterable[int],
    background_transitions: Iterable[int],
    height: int,
    min_height: int,
) -> list[int]:
    """
    Combine candidate sets into sorted split points honoring a minimum height.

    Candidates closer than ``min_height`` to the last kept point either
    replace it (when the replacement is still far enough from the point
    before it) or are dropped. The leading 0 is never replaced.

    Args:
        uniform_regions: Uniform bands; their midpoints are candidates.
        divider_lines: Divider rows.
        background_transitions: Background transition rows.
        height: Image height.
        min_height: Minimum section height.

    Returns:
        Split points starting at 0 and ending at ``height``.
    """
    split_y = [0]
    split_y.extend(region.midpoint for region in uniform_regions)
    split_y.extend(divider_lines)
    split_y.extend(background_transitions)
    split_y.append(height)

    split_y = sorted(set(int(y) for y in split_y))

    filtered = [0]
    for y in split_y[1:]:
        if y - filtered[-1] >= min_height:
            filtered.append(y)
        elif len(filtered) >= 2:
            if y - filtered[-2] >= min_height:
                filtered[-1] = y
        # Otherwise only the leading 0 is kept: wait for a later candidate

    if filtered[-1] != height:
        filtered.append(height)

    return filtered


def apply_max_height_splits(
    split_points: Sequence[int],
    max_height: int,
    min_height: int,
    find_split: RangeSearch,
) -> tuple[list[int], list[int]]:
    """
    Subdivide sections taller than ``max_height``.

    Each oversized section is walked from the top: a cut is searched for in
    ``[start + min_height, min(start + max_height, end - min_height)]`` with
    ``find_split(search_start, search_end, margin=...)``. When that window is
    empty the cut falls halfway to ``start + max_height``.

    Args:
        split_points: Sorted split points.
        max_height: Maximum section height (0 disables).
        min_height: Minimum section height.
        find_split: Range search, normally SplitPointDetector.find_best_split_in_range.

    Returns:
        Tuple of (split points with cuts inserted, inserted cuts).
    """
    points = list(split_points)
    if max_height <= 0:
        return points, []

    needs_split = any(b - a > max_height for a, b in zip(points[:-1], points[1:]))
    if not needs_split:
        return points, []

    logger.info("Sections over max height detected, adding complexity-based splits")

    complexity_splits = []
    final_splits = points[:1]

    for section_start, section_end in zip(points[:-1], points[1:]):
        current_start = section_start

        while section_end - current_start > max_height:
            search_start = current_start + min_height
            search_end = min(current_start + max_height, section_end - min_height)

            if search_start >= search_end:
                best_split = (current_start + min(current_start + max_height, section_end)) // 2
            else:
                margin = min(50, (search_end - search_start) // 4)
                best_split = find_split(search_start, search_end, margin=margin)

            if not current_start < best_split < section_end:
                raise ValueError(
                    f"Split at row {best_split} does not advance section "
                    f"[{current_start}, {section_end}) (min={min_height}, max={max_height})"
                )

            final_splits.append(best_split)
            complexity_splits.append(best_split)
            logger.debug(f"Complexity split at row {best_split}")

            current_start = best_split

        final_splits.append(section_end)

    return sorted(set(final_splits)), complexity_splits
