"""
Image I/O around the row-signal engine.

Loads images into numpy arrays, computes the Sobel edge map consumed by
RowAnalyzer, and crops/saves the sections described by a split point list.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Union
import numpy as np
import cv2
from PIL import Image

from sectioncut.exceptions import ImageLoadError

from .base import Section


logger = logging.getLogger(__name__)

ImageInput = Union[np.ndarray, Image.Image, Path, str]


def to_numpy(image: ImageInput) -> np.ndarray:
    """Convert various image types to numpy array."""
    if isinstance(image, np.ndarray):
        return image

    if isinstance(image, (str, Path)):
        try:
            with Image.open(image) as opened:
                opened.load()
                image = opened.copy()
        except OSError as e:
            raise ImageLoadError(f"Cannot open image {image}: {e}") from e

    if isinstance(image, Image.Image):
        # Convert to RGB if needed
        if image.mode not in ('RGB', 'L'):
            image = image.convert('RGB')
        return np.array(image)

    raise TypeError(f"Unsupported image type: {type(image)}")


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Reduce a 2-D or 3-D pixel array to a single uint8 channel."""
    if image.dtype != np.uint8:
        image = np.clip(image, 0, 255).astype(np.uint8)

    if image.ndim == 2:
        return image

    channels = image.shape[2]
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_RGBA2GRAY)
    elif channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
    elif channels == 1:
        return image[:, :, 0]

    # Unusual channel counts: plain average
    return image.mean(axis=2).astype(np.uint8)


def compute_edge_map(image: np.ndarray) -> np.ndarray:
    """
    Compute a per-pixel edge magnitude map.

    Applies a 3x3 Sobel filter in both directions to a grayscale conversion
    of the image and saturates the gradient magnitude to uint8.

    Args:
        image: Image as numpy array (grayscale or color).

    Returns:
        uint8 array of shape (height, width).
    """
    if image.size == 0:
        return np.zeros(image.shape[:2], dtype=np.uint8)

    gray = to_grayscale(image)
    gx = cv2.Sobel(gray, cv2.CV_64F, 1, 0, ksize=3)
    gy = cv2.Sobel(gray, cv2.CV_64F, 0, 1, ksize=3)
    return cv2.convertScaleAbs(cv2.magnitude(gx, gy))


def crop_sections(image: np.ndarray, split_points: Sequence[int]) -> list[Section]:
    """
    Crop full-width sections between consecutive split points.

    Args:
        image: Original image.
        split_points: Strictly increasing rows within [0, height].

    Returns:
        List of Section objects, top to bottom.

    Raises:
        ValueError: If the split points are out of range or not increasing.
    """
    height, width = image.shape[:2]
    points = list(split_points)

    if any(y < 0 or y > height for y in points):
        raise ValueError(f"Split points must lie within [0, {height}]: {points}")
    if any(a >= b for a, b in zip(points[:-1], points[1:])):
        raise ValueError(f"Split points must be strictly increasing: {points}")

    sections = []
    for index, (y_start, y_end) in enumerate(zip(points[:-1], points[1:])):
        sections.append(Section(
            image=image[y_start:y_end].copy(),
            index=index,
            y_offset=y_start,
            width=width,
            height=y_end - y_start,
        ))

    return sections


def prepare_output_dir(
    image_path: Path,
    output_dir: Optional[Path] = None,
    dir_name: str = "sections",
) -> Path:
    """Return the output directory, defaulting to a folder next to the image."""
    if output_dir is None:
        output_dir = Path(image_path).parent / dir_name
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def save_sections(
    sections: Sequence[Section],
    output_dir: Path,
    stem: str,
    quality: int = 95,
) -> list[Path]:
    """
    Write sections as ``<stem>_section_NN.jpg`` files.

    Returns:
        Paths of the written files, in section order.
    """
    output_files = []
    for section in sections:
        path = Path(output_dir) / f"{stem}_section_{section.index + 1:02d}.jpg"
        section.save(path, quality=quality)
        output_files.append(path)
        logger.debug(f"Saved {path.name} (height: {section.height}px)")

    logger.info(f"Saved {len(output_files)} sections to {output_dir}")
    return output_files
