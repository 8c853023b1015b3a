import itertools

import pytest

from facetrack.geometry import center_of, clip_rect, expand_double, offset_rect, select_representative

BOUNDS = (0, 0, 640, 480)


def test_expand_double_recenters_inside_frame():
    assert expand_double((100, 100, 50, 50), BOUNDS) == (75, 75, 100, 100)


def test_expand_double_odd_sizes_use_floor_half():
    assert expand_double((11, 11, 5, 5), BOUNDS) == (9, 9, 10, 10)


def test_expand_double_shrinks_on_left_and_top_overflow():
    assert expand_double((10, 20, 40, 40), BOUNDS) == (0, 0, 70, 80)


def test_expand_double_truncates_on_right_and_bottom_overflow():
    assert expand_double((600, 440, 40, 40), BOUNDS) == (580, 420, 60, 60)


def test_expand_double_always_contained_in_bounds():
    for x, y, w, h in itertools.product(range(0, 640, 97), range(0, 480, 83), (1, 7, 60, 250), (1, 9, 45, 300)):
        if x + w > 640 or y + h > 480:
            continue
        ox, oy, ow, oh = expand_double((x, y, w, h), BOUNDS)
        assert ow >= 0 and oh >= 0
        assert ox >= 0 and oy >= 0
        assert ox + ow <= 640
        assert oy + oh <= 480


def test_center_of_rounds_down():
    assert center_of((10, 20, 31, 41)) == (25, 40)


def test_clip_and_offset():
    assert clip_rect((-10, -10, 30, 30), (0, 0, 100, 100)) == (0, 0, 20, 20)
    assert clip_rect((150, 150, 10, 10), (0, 0, 100, 100))[2:] == (0, 0)
    assert offset_rect((5, 6, 7, 8), (10, 20)) == (15, 26, 7, 8)


def test_select_representative_smallest_is_default():
    faces = [(0, 0, 50, 50), (10, 10, 30, 30), (5, 5, 40, 40)]
    assert select_representative(faces) == (10, 10, 30, 30)


def test_select_representative_largest_policy():
    faces = [(0, 0, 50, 50), (10, 10, 30, 30), (5, 5, 40, 40)]
    assert select_representative(faces, policy="largest") == (0, 0, 50, 50)


@pytest.mark.parametrize("policy,expected", [("smallest", (0, 0, 30, 30)), ("largest", (40, 40, 60, 60))])
def test_select_representative_ignores_input_order(policy, expected):
    faces = [(100, 100, 30, 30), (0, 0, 30, 30), (40, 40, 60, 60), (300, 10, 60, 60)]
    picks = {select_representative(list(order), policy=policy) for order in itertools.permutations(faces)}
    assert picks == {expected}


def test_select_representative_rejects_empty_and_unknown_policy():
    with pytest.raises(ValueError):
        select_representative([])
    with pytest.raises(ValueError):
        select_representative([(0, 0, 1, 1)], policy="median")
