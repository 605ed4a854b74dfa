"""
Data types shared by the row analyzer, detector and splitter.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
import numpy as np
from PIL import Image


class PointSource(str, Enum):
    """Where a candidate split point came from."""

    UNIFORM_REGION = "uniform_region"
    DIVIDER_LINE = "divider_line"
    BACKGROUND_TRANSITION = "background_transition"
    COMPLEXITY_SPLIT = "complexity_split"


@dataclass(frozen=True)
class Region:
    """A half-open band of rows ``[start, end)``."""

    start: int
    end: int

    def __post_init__(self):
        if not 0 <= self.start < self.end:
            raise ValueError(f"Invalid region [{self.start}, {self.end})")

    @property
    def height(self) -> int:
        return self.end - self.start

    @property
    def midpoint(self) -> int:
        return (self.start + self.end) // 2


@dataclass(frozen=True)
class CandidatePoint:
    """A row index proposed as a cut, tagged with its detector."""

    y: int
    source: PointSource


@dataclass
class Candidates:
    """The three independent candidate sets found by the detector."""

    uniform_regions: list[Region] = field(default_factory=list)
    divider_lines: list[int] = field(default_factory=list)
    background_transitions: list[int] = field(default_factory=list)

    def tagged(self) -> list[CandidatePoint]:
        """Return every candidate as a CandidatePoint, ordered by row."""
        points = [CandidatePoint(r.midpoint, PointSource.UNIFORM_REGION) for r in self.uniform_regions]
        points.extend(CandidatePoint(y, PointSource.DIVIDER_LINE) for y in self.divider_lines)
        points.extend(CandidatePoint(y, PointSource.BACKGROUND_TRANSITION) for y in self.background_transitions)
        return sorted(points, key=lambda p: p.y)


@dataclass
class Section:
    """A full-width horizontal section cropped from the source image."""

    image: np.ndarray
    """The section pixels as numpy array."""

    index: int
    """Sequential index of this section (0-indexed, top to bottom)."""

    y_offset: int
    """First row of the section in the original image."""

    width: int
    """Width of the section."""

    height: int
    """Height of the section."""

    @property
    def bounds(self) -> tuple[int, int]:
        """Return the ``(y_start, y_end)`` row range in the original image."""
        return (self.y_offset, self.y_offset + self.height)

    def to_pil(self) -> Image.Image:
        """Convert section to PIL Image."""
        image = self.image
        if image.ndim == 3 and image.shape[2] == 1:
            image = image[:, :, 0]
        return Image.fromarray(image)

    def save(self, path: Path, quality: int = 95) -> Path:
        """Save section to file, flattening alpha for JPEG output."""
        pil_image = self.to_pil()
        if Path(path).suffix.lower() in (".jpg", ".jpeg") and pil_image.mode not in ("RGB", "L"):
            pil_image = pil_image.convert("RGB")
        pil_image.save(path, quality=quality)
        return Path(path)


@dataclass
class SplitResult:
    """Result of deciding where to cut an image."""

    split_points: list[int]
    """Strictly increasing cut rows, starting at 0 and ending at the image height."""

    original_size: tuple[int, int]
    """Original image size (width, height)."""

    min_section_height: int
    """Minimum section height used for this image."""

    max_section_height: int
    """Maximum section height used for this image (0 = unlimited)."""

    uniform_regions: list[Region] = field(default_factory=list)
    divider_lines: list[int] = field(default_factory=list)
    background_transitions: list[int] = field(default_factory=list)

    complexity_splits: list[int] = field(default_factory=list)
    """Points inserted to keep sections under the maximum height."""

    sections: list[Section] = field(default_factory=list)
    """Cropped sections (filled by SectionSplitter.split)."""

    output_files: list[Path] = field(default_factory=list)
    """Written section files (filled by SectionSplitter.split_to_directory)."""

    metadata: dict = field(default_factory=dict)

    @property
    def num_sections(self) -> int:
        return max(len(self.split_points) - 1, 0)

    @property
    def was_split(self) -> bool:
        """Whether any cut was found beyond the image edges."""
        return len(self.split_points) > 2

    @property
    def section_bounds(self) -> list[tuple[int, int]]:
        """Consecutive ``(y_start, y_end)`` pairs."""
        return list(zip(self.split_points[:-1], self.split_points[1:]))

    @property
    def candidates(self) -> list[CandidatePoint]:
        """All candidate points including complexity splits, ordered by row."""
        detected = Candidates(
            uniform_regions=self.uniform_regions,
            divider_lines=self.divider_lines,
            background_transitions=self.background_transitions,
        ).tagged()
        detected.extend(CandidatePoint(y, PointSource.COMPLEXITY_SPLIT) for y in self.complexity_splits)
        return sorted(detected, key=lambda p: p.y)
