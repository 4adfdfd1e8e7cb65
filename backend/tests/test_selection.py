"""
Tests for selection.py - path-aware slicing of one shared result list.
"""
import pytest

from trajectory.services.selection import select_results_for_path


class TestBoundaryFallback:
    """With fewer than 2 * limit results every path gets the head."""

    @pytest.mark.parametrize("total", [0, 1, 4, 7])
    @pytest.mark.parametrize("rank", [1, 2, 3])
    def test_short_lists_return_head(self, total, rank):
        results = list(range(total))
        assert select_results_for_path(results, limit=4, path_rank=rank) == results[:4]

    def test_zero_limit(self):
        assert select_results_for_path(list(range(10)), limit=0, path_rank=2) == []


class TestDiversity:

    @pytest.mark.parametrize("total", [8, 9, 10, 12, 20])
    def test_slices_pairwise_different_and_full(self, total):
        results = list(range(total))
        slices = [select_results_for_path(results, limit=4, path_rank=r) for r in (1, 2, 3)]
        for s in slices:
            assert len(s) == 4
        assert slices[0] != slices[1]
        assert slices[1] != slices[2]
        assert slices[0] != slices[2]

    def test_rank_two_of_ten_is_middle(self):
        """floor(10 / 3) = 3, so path 2 gets indexes 3..6."""
        results = list(range(10))
        assert select_results_for_path(results, limit=4, path_rank=2) == [3, 4, 5, 6]

    def test_rank_three_of_ten_is_late(self):
        results = list(range(10))
        assert select_results_for_path(results, limit=4, path_rank=3) == [4, 5, 6, 7]

    def test_rank_one_is_head(self):
        results = list(range(10))
        assert select_results_for_path(results, limit=4, path_rank=1) == [0, 1, 2, 3]

    def test_label_used_when_rank_missing(self):
        results = list(range(10))
        assert select_results_for_path(results, limit=4, path_label="Project & Portfolio Heavy") == [3, 4, 5, 6]
        assert select_results_for_path(results, limit=4, path_label="Unconventional / Cross-Discipline") == [4, 5, 6, 7]

    def test_does_not_mutate_input(self):
        results = list(range(10))
        select_results_for_path(results, limit=4, path_rank=3)
        assert results == list(range(10))
