"""
Per-row signals for split decisions.
"""

import logging
from typing import Callable, Optional
import numpy as np

from .imaging import compute_edge_map


logger = logging.getLogger(__name__)

EdgeProvider = Callable[[np.ndarray], np.ndarray]

# Rows converted to float at a time when computing row statistics
ROW_BLOCK = 256


class RowAnalyzer:
    """
    Computes row-level uniformity and complexity signals for one image.

    Both signals are computed on first access and cached on the instance:

    - ``variance[y]``: mean over channels of the standard deviation of the
      channel's samples in row ``y``. Low values mean a flat row.
    - ``complexity[y]``: ``0.7 * edge_density + 0.3 * variance``, each
      normalized by its maximum over the image. Low values mean a quiet row.

    The edge map is either supplied up front or requested from
    ``edge_provider`` the first time complexity is needed.
    """

    EDGE_WEIGHT = 0.7
    VARIANCE_WEIGHT = 0.3

    def __init__(
        self,
        image: np.ndarray,
        edge_map: Optional[np.ndarray] = None,
        edge_provider: Optional[EdgeProvider] = None,
    ):
        """
        Initialize the analyzer.

        Args:
            image: Pixel buffer of shape (height, width) or (height, width, channels).
            edge_map: Precomputed edge magnitudes of shape (height, width).
            edge_provider: Callable producing an edge map from the image
                when none was given. Defaults to a Sobel filter.
        """
        pixels = np.asarray(image)
        if pixels.ndim == 2:
            pixels = pixels[:, :, np.newaxis]
        elif pixels.ndim != 3:
            raise ValueError(f"Expected a 2-D or 3-D pixel array, got shape {pixels.shape}")

        pixels = pixels.view()
        pixels.flags.writeable = False
        self._image = image
        self._pixels = pixels
        self.height, self.width, self.channels = pixels.shape

        if edge_map is not None:
            edge_map = np.asarray(edge_map)
            if edge_map.shape[:2] != (self.height, self.width):
                raise ValueError(
                    f"Edge map shape {edge_map.shape} does not match image "
                    f"({self.height}, {self.width})"
                )

        self._edge_map = edge_map
        self._edge_provider = edge_provider or compute_edge_map

        self._variance: Optional[np.ndarray] = None
        self._complexity: Optional[np.ndarray] = None
        self._row_means: Optional[np.ndarray] = None
        self._row_color_means: Optional[np.ndarray] = None

    @property
    def pixels(self) -> np.ndarray:
        """Read-only (height, width, channels) view of the image."""
        return self._pixels

    @property
    def is_degenerate(self) -> bool:
        """Whether the buffer has no rows, columns or channels."""
        return self.height == 0 or self.width == 0 or self.channels == 0

    @property
    def variance(self) -> np.ndarray:
        """Per-row mean of channel standard deviations, computed once."""
        if self._variance is None:
            self._variance = self._calculate_variance()
        return self._variance

    @property
    def complexity(self) -> np.ndarray:
        """Per-row blend of normalized edge density and variance, computed once."""
        if self._complexity is None:
            self._complexity = self._calculate_complexity()
        return self._complexity

    @property
    def row_means(self) -> np.ndarray:
        """Mean of all samples in each row."""
        if self._row_means is None:
            if self.is_degenerate:
                self._row_means = np.zeros(self.height)
            else:
                # Every row has the same sample count, so this is the mean over all samples
                self._row_means = self.row_color_means.mean(axis=1)
        return self._row_means

    @property
    def row_color_means(self) -> np.ndarray:
        """Per-channel mean of each row, shape (height, channels)."""
        if self._row_color_means is None:
            if self.is_degenerate:
                self._row_color_means = np.zeros((self.height, self.channels))
            else:
                self._row_color_means = self._pixels.mean(axis=1, dtype=np.float64)
        return self._row_color_means

    def band_variance(self, start: int, end: int) -> float:
        """Average row variance over rows ``[start, end)``."""
        band = self.variance[start:end]
        return float(band.mean()) if band.size else 0.0

    def band_mean(self, start: int, end: int) -> float:
        """Mean of every sample over rows ``[start, end)``."""
        band = self.row_means[start:end]
        return float(band.mean()) if band.size else 0.0

    def band_mean_color(self, start: int, end: int) -> np.ndarray:
        """Per-channel mean color over rows ``[start, end)``."""
        band = self.row_color_means[start:end]
        if not band.size:
            return np.zeros(self.channels)
        return band.mean(axis=0)

    def row_mean(self, y: int) -> float:
        return self.band_mean(y, y + 1)

    def _calculate_variance(self) -> np.ndarray:
        """
        Calculate the per-row color variance.

        Returns:
            1D float array of length height.
        """
        result = np.zeros(self.height, dtype=np.float64)
        if self.is_degenerate:
            return result

        for block_start in range(0, self.height, ROW_BLOCK):
            block = self._pixels[block_start:block_start + ROW_BLOCK].astype(np.float64)
            # Population std per (row, channel), then average the channels
            result[block_start:block_start + ROW_BLOCK] = block.std(axis=1).mean(axis=1)

        return result

    def _calculate_complexity(self) -> np.ndarray:
        """
        Calculate the per-row content complexity.

        Returns:
            1D float array of length height.
        """
        if self.is_degenerate:
            return np.zeros(self.height, dtype=np.float64)

        edge_map = self._resolve_edge_map()
        edge_density = edge_map.reshape(self.height, -1).mean(axis=1, dtype=np.float64)

        edge_norm = self._normalize(edge_density)
        color_norm = self._normalize(self.variance)

        return edge_norm * self.EDGE_WEIGHT + color_norm * self.VARIANCE_WEIGHT

    def _resolve_edge_map(self) -> np.ndarray:
        if self._edge_map is None:
            logger.debug(f"Computing edge map for {self.width}x{self.height} image")
            edge_map = np.asarray(self._edge_provider(np.asarray(self._image)))
            if edge_map.shape[:2] != (self.height, self.width):
                raise ValueError(
                    f"Edge provider returned shape {edge_map.shape}, expected "
                    f"({self.height}, {self.width})"
                )
            self._edge_map = edge_map
        return self._edge_map

    @staticmethod
    def _normalize(signal: np.ndarray) -> np.ndarray:
        """Divide by the global maximum; an all-zero signal is returned as is."""
        max_val = signal.max() if signal.size else 0.0
        if max_val > 0:
            return signal / max_val
        return signal
