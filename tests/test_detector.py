"""Unit tests for SplitPointDetector and point clustering."""

import numpy as np
import pytest

from sectioncut.config import SplitConfig
from sectioncut.splitting import Region, RowAnalyzer, SplitPointDetector, merge_nearby_points


def make_detector(image, edge_map=None, **config):
    return SplitPointDetector(RowAnalyzer(image, edge_map=edge_map), SplitConfig(**config))


class TestMergeNearbyPoints:

    def test_clusters_to_floor_midpoints(self):
        assert merge_nearby_points([1, 2, 3, 50, 51, 100]) == [2, 50, 100]

    def test_empty(self):
        assert merge_nearby_points([]) == []

    def test_chain_follows_running_end(self):
        # 10 is within 5 of 5 (the running end) even though it is 10 from 0
        assert merge_nearby_points([0, 5, 10, 16]) == [5, 16]

    def test_custom_threshold(self):
        assert merge_nearby_points([0, 8, 20], threshold=10) == [4, 20]

    def test_accepts_numpy_input(self):
        assert merge_nearby_points(np.array([4, 6])) == [5]


class TestFindUniformRegions:

    def test_regions_respect_min_gap(self, build_image):
        image = build_image([
            ("solid", 60),
            ("noisy", 40),
            ("solid", 30),   # too short
            ("noisy", 70),
            ("solid", 100),  # runs to the bottom edge
        ])
        regions = make_detector(image, min_gap_height=50).find_uniform_regions()
        assert regions == [Region(0, 60), Region(200, 300)]

    def test_no_region_shorter_than_min_gap(self, build_image):
        image = build_image([("noisy", 5), ("solid", 49), ("noisy", 5), ("solid", 50)])
        regions = make_detector(image, min_gap_height=50).find_uniform_regions()
        assert regions == [Region(59, 109)]
        assert all(r.height >= 50 for r in regions)

    def test_threshold_is_strict(self):
        image = np.zeros((60, 4, 1), dtype=np.uint8)
        image[:, 1::2] = 20  # variance exactly 10
        assert make_detector(image, variance_threshold=10.0).find_uniform_regions() == []
        assert make_detector(image, variance_threshold=10.01).find_uniform_regions() == [Region(0, 60)]

    def test_regions_do_not_overlap(self, build_image):
        image = build_image([("solid", 50), ("noisy", 1)] * 4)
        regions = make_detector(image, min_gap_height=50).find_uniform_regions()
        assert len(regions) == 4
        for prev, nxt in zip(regions, regions[1:]):
            assert prev.end <= nxt.start

    def test_degenerate_buffer(self):
        detector = make_detector(np.zeros((100, 0, 3), dtype=np.uint8))
        assert detector.find_uniform_regions() == []


class TestFindDividerLines:

    def test_two_row_line_on_white(self, build_image):
        image = build_image([("solid", 100), ("solid", 2, 0), ("solid", 98)])
        assert make_detector(image).find_divider_lines() == [100]

    def test_single_row_line(self, build_image):
        image = build_image([("solid", 100, 240), ("solid", 1, 0), ("solid", 99, 240)])
        assert make_detector(image).find_divider_lines() == [100]

    def test_noisy_margin_rejects_line(self, build_image):
        image = build_image([("solid", 100), ("solid", 1, 0), ("solid", 19), ("noisy", 80)])
        assert make_detector(image).find_divider_lines() == []

    def test_low_contrast_line_ignored(self, build_image):
        image = build_image([("solid", 100), ("solid", 1, 250), ("solid", 99)])
        assert make_detector(image).find_divider_lines() == []

    def test_image_shorter_than_margins(self, build_image):
        assert make_detector(build_image([("solid", 50)])).find_divider_lines() == []


class TestFindBackgroundTransitions:

    def test_white_to_black(self, build_image):
        image = build_image([("solid", 100, 255), ("solid", 100, 0)])
        assert make_detector(image).find_background_transitions() == [100]

    def test_small_color_change_ignored(self, build_image):
        image = build_image([("solid", 100, 255), ("solid", 100, 250)])
        assert make_detector(image).find_background_transitions() == []

    def test_requires_uniform_bands(self, build_image):
        image = build_image([("solid", 100, 255), ("noisy", 10), ("solid", 100, 0)])
        transitions = make_detector(image).find_background_transitions()
        assert transitions == []

    def test_multiple_transitions(self, build_image):
        image = build_image([("solid", 100, 255), ("solid", 100, 0), ("solid", 100, 255)])
        assert make_detector(image).find_background_transitions() == [100, 200]


class TestFindBestSplitInRange:

    def test_picks_quiet_band(self, build_image, flat_edges):
        edges = np.full(400, 100.0)
        edges[200:230] = 0
        detector = make_detector(build_image([("solid", 400)]), edge_map=flat_edges(edges))
        assert detector.find_best_split_in_range(0, 400, margin=50) == 210

    def test_midpoint_when_trimmed_range_empty(self, build_image):
        detector = make_detector(build_image([("noisy", 400)]))
        assert detector.find_best_split_in_range(0, 80, margin=50) == 40
        assert detector.find_best_split_in_range(10, 110, margin=50) == 60

    def test_short_range_uses_raw_minimum(self, build_image, flat_edges):
        edges = np.full(200, 100.0)
        edges[57] = 0
        detector = make_detector(build_image([("solid", 200)]), edge_map=flat_edges(edges))
        assert detector.find_best_split_in_range(0, 115, margin=50) == 57

    def test_first_minimum_wins(self, build_image, flat_edges):
        detector = make_detector(build_image([("solid", 400)]), edge_map=flat_edges(np.ones(400)))
        assert detector.find_best_split_in_range(0, 400, margin=50) == 60

    def test_last_window_not_scored(self, build_image, flat_edges):
        edges = np.full(400, 100.0)
        edges[330:350] = 0
        detector = make_detector(build_image([("solid", 400)]), edge_map=flat_edges(edges))
        # The fully quiet window at the end of the range is skipped; the one before it wins
        assert detector.find_best_split_in_range(0, 400, margin=50) == 339

    def test_single_window_range(self, build_image, flat_edges):
        edges = np.full(400, 100.0)
        detector = make_detector(build_image([("solid", 400)]), edge_map=flat_edges(edges))
        assert detector.find_best_split_in_range(100, 120, margin=0) == 110

    @pytest.mark.parametrize("start,end,margin", [
        (0, 400, 50), (100, 130, 0), (0, 21, 0), (300, 400, 10), (5, 6, 0), (0, 399, 100),
    ])
    def test_result_stays_in_range(self, build_image, flat_edges, start, end, margin):
        edges = (np.arange(400) * 7919) % 101
        detector = make_detector(build_image([("solid", 400)]), edge_map=flat_edges(edges))
        y = detector.find_best_split_in_range(start, end, margin=margin)
        assert start <= y < end


def test_detect_bundles_all_candidates(build_image):
    image = build_image([
        ("noisy", 100),
        ("solid", 100, 255),
        ("solid", 100, 0),
        ("noisy", 100),
    ])
    candidates = make_detector(image, min_gap_height=50).detect()
    assert candidates.uniform_regions == [Region(100, 300)]
    assert candidates.background_transitions == [200]
    assert candidates.divider_lines == [199]
    assert [p.y for p in candidates.tagged()] == [199, 200, 200]
