# tests/test_layout_and_reorder.py
# Cell sizing and drag reorder index policy

import pytest

from conftest import make_photo, make_results
from core.models import GridPosition
from core.services.layout_service import GridMetrics, LayoutService, SectionInsets
from core.services.reorder_service import ReorderService


class TestLayoutService:
    def test_thumbnail_side_default_metrics(self):
        # (375 - 10 * 4) / 3 = 111.67 -> 111
        assert LayoutService().thumbnail_side(375) == 111

    def test_thumbnail_side_custom_row(self):
        layout = LayoutService(GridMetrics(items_per_row=4, insets=SectionInsets(left=20)))
        # (500 - 20 * 5) / 4 = 100
        assert layout.thumbnail_side(500) == 100

    def test_thumbnail_side_never_negative(self):
        assert LayoutService().thumbnail_side(10) == 0

    def test_line_spacing_matches_left_inset(self):
        assert GridMetrics(insets=SectionInsets(left=7)).line_spacing == 7

    def test_expanded_landscape_is_width_bound(self):
        # available box: 400 - 20 = 380 wide, 800 - 100 = 700 high
        assert LayoutService().expanded_size(1.5, 400, 800) == (380, 253)

    def test_expanded_portrait_is_height_bound(self):
        # available box 980 x 500, ratio 0.5 -> 250 x 500
        assert LayoutService().expanded_size(0.5, 1000, 600) == (250, 500)

    def test_expanded_unknown_ratio_is_square(self):
        assert LayoutService().expanded_size(0, 400, 500) == (380, 380)

    def test_expanded_without_room(self):
        assert LayoutService().expanded_size(1.0, 15, 500) == (0, 0)


class TestReorderService:
    def test_move_forward_within_group(self):
        groups = [make_results("cats", ["p1", "p2", "p3"])]
        final = ReorderService().move(groups, GridPosition(0, 0), GridPosition(0, 2))
        assert [p.photo_id for p in groups[0].photos] == ["p2", "p3", "p1"]
        assert final == GridPosition(0, 2)

    def test_move_backward_within_group(self):
        groups = [make_results("cats", ["p1", "p2", "p3"])]
        ReorderService().move(groups, GridPosition(0, 2), GridPosition(0, 0))
        assert [p.photo_id for p in groups[0].photos] == ["p3", "p1", "p2"]

    def test_move_to_same_position_is_noop(self):
        groups = [make_results("cats", ["p1", "p2", "p3"])]
        ReorderService().move(groups, GridPosition(0, 1), GridPosition(0, 1))
        assert [p.photo_id for p in groups[0].photos] == ["p1", "p2", "p3"]

    def test_move_across_groups(self):
        groups = [make_results("dogs", ["d1", "d2"]), make_results("cats", ["c1", "c2"])]
        final = ReorderService().move(groups, GridPosition(1, 0), GridPosition(0, 1))
        assert [p.photo_id for p in groups[0].photos] == ["d1", "c1", "d2"]
        assert [p.photo_id for p in groups[1].photos] == ["c2"]
        assert final == GridPosition(0, 1)

    def test_destination_index_is_clamped(self):
        groups = [make_results("dogs", ["d1"]), make_results("cats", ["c1", "c2"])]
        final = ReorderService().move(groups, GridPosition(1, 0), GridPosition(0, 99))
        assert final == GridPosition(0, 1)
        assert [p.photo_id for p in groups[0].photos] == ["d1", "c1"]

    def test_preserves_total_count(self):
        groups = [make_results("a", ["1", "2", "3"]), make_results("b", ["4", "5"])]
        ReorderService().move(groups, GridPosition(0, 1), GridPosition(1, 2))
        assert sum(len(g.photos) for g in groups) == 5

    def test_invalid_source_raises(self):
        groups = [make_results("a", ["1"])]
        with pytest.raises(IndexError):
            ReorderService().move(groups, GridPosition(0, 3), GridPosition(0, 0))
        with pytest.raises(IndexError):
            ReorderService().move(groups, GridPosition(0, 0), GridPosition(4, 0))
        assert [p.photo_id for p in groups[0].photos] == ["1"]

    def test_negative_source_section_raises(self):
        groups = [make_results("a", ["1"]), make_results("b", ["2", "3"])]
        with pytest.raises(IndexError):
            ReorderService().move(groups, GridPosition(-1, 0), GridPosition(0, 0))
        assert [p.photo_id for p in groups[1].photos] == ["2", "3"]
        assert [p.photo_id for p in groups[0].photos] == ["1"]


def test_photo_record_urls_and_ratio():
    photo = make_photo("42", width=300, height=200)
    assert photo.thumbnail_url == "https://live.staticflickr.com/65535/42_s42_m.jpg"
    assert photo.large_url == "https://live.staticflickr.com/65535/42_s42_b.jpg"
    assert photo.aspect_ratio == pytest.approx(1.5)
    assert make_photo("x", width=0, height=0).aspect_ratio == 1.0
