"""
Row-signal image splitting.

Decides where to cut a tall composite image into horizontal sections using
per-row color uniformity and edge complexity, without cutting through content.
"""

from .base import Region, CandidatePoint, PointSource, Candidates, Section, SplitResult
from .analyzer import RowAnalyzer
from .detector import SplitPointDetector, merge_nearby_points
from .aggregation import merge_split_points, apply_max_height_splits
from .imaging import to_numpy, compute_edge_map, crop_sections, save_sections
from .splitter import SectionSplitter, create_splitter

__all__ = [
    "Region",
    "CandidatePoint",
    "PointSource",
    "Candidates",
    "Section",
    "SplitResult",
    "RowAnalyzer",
    "SplitPointDetector",
    "merge_nearby_points",
    "merge_split_points",
    "apply_max_height_splits",
    "to_numpy",
    "compute_edge_map",
    "crop_sections",
    "save_sections",
    "SectionSplitter",
    "create_splitter",
]
