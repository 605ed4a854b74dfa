"""Shared pytest fixtures for the sectioncut test suite.

Images are synthesized as stacks of horizontal bands so that every row
statistic is known exactly:

    solid:  every pixel has the same value (row variance 0)
    noisy:  columns alternate between 0 and 255 (row variance 127.5)
"""

import numpy as np
import pytest


def _band(kind: str, height: int, width: int, value=255, channels: int = 3) -> np.ndarray:
    band = np.empty((height, width, channels), dtype=np.uint8)
    if kind == "solid":
        band[:] = value
    elif kind == "noisy":
        band[:] = 0
        band[:, 1::2] = 255
    else:
        raise ValueError(f"Unknown band kind: {kind}")
    return band


@pytest.fixture
def build_image():
    """Return a factory stacking bands into one image.

    Usage: build_image([("solid", 100), ("noisy", 50), ("solid", 30, 0)], width=40)
    """

    def _build(bands, width: int = 40, channels: int = 3) -> np.ndarray:
        parts = [_band(kind, height, width, *value, channels=channels) for kind, height, *value in bands]
        return np.concatenate(parts, axis=0)

    return _build


@pytest.fixture
def flat_edges():
    """Return a factory for edge maps with a constant value per row."""

    def _build(row_values, width: int = 40) -> np.ndarray:
        values = np.asarray(row_values, dtype=np.float64)
        return np.repeat(values[:, np.newaxis], width, axis=1)

    return _build
