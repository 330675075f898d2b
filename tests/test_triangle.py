"""Tests for the implicit right-triangle hierarchy."""
import numpy as np
import pytest

from rtin_terrain.world.triangle import (
    RightTriangle,
    decode_triangles,
    parent_triangle_count,
    triangle_count,
)


def _orientation(tri):
    (ax, ay), (bx, by), (cx, cy) = tri.a, tri.b, tri.c
    return (bx - ax) * (cy - ay) - (by - ay) * (cx - ax)


def test_counts():
    assert triangle_count(4) == 30
    assert parent_triangle_count(4) == 14
    assert triangle_count(1) == 0


def test_roots_from_id():
    assert RightTriangle.from_id(3, 4) == RightTriangle(a=(0, 0), b=(4, 4), c=(4, 0))
    assert RightTriangle.from_id(2, 4) == RightTriangle(a=(4, 4), b=(0, 0), c=(0, 4))


def test_from_id_rejects_small_ids():
    with pytest.raises(ValueError):
        RightTriangle.from_id(1, 4)


def test_children():
    root = RightTriangle.bottom_left_root(4)
    assert root.midpoint() == (2, 2)
    assert root.left_child() == RightTriangle(a=(4, 0), b=(0, 0), c=(2, 2))
    assert root.right_child() == RightTriangle(a=(4, 4), b=(4, 0), c=(2, 2))
    assert root.left_child_midpoint() == root.left_child().midpoint() == (2, 0)
    assert root.right_child_midpoint() == root.right_child().midpoint() == (4, 2)


def test_id_bits_select_children():
    # 0b110: top-right root, then left; 0b101: bottom-left root, then right
    assert RightTriangle.from_id(6, 8) == RightTriangle.top_right_root(8).left_child()
    assert RightTriangle.from_id(5, 8) == RightTriangle.bottom_left_root(8).right_child()
    # 0b1011: bottom-left, left, right
    assert RightTriangle.from_id(11, 8) == RightTriangle.bottom_left_root(8).left_child().right_child()


def test_is_leaf():
    assert RightTriangle.bottom_left_root(1).is_leaf()
    assert not RightTriangle.bottom_left_root(4).is_leaf()
    tri = RightTriangle.bottom_left_root(2).left_child().left_child()
    assert tri.is_leaf()


def test_decode_matches_from_id():
    tile = 8
    ids = np.arange(2, triangle_count(tile) + 2)
    ax, ay, bx, by, cx, cy = decode_triangles(ids, tile)
    for k, tri_id in enumerate(ids):
        tri = RightTriangle.from_id(int(tri_id), tile)
        assert tri.a == (ax[k], ay[k])
        assert tri.b == (bx[k], by[k])
        assert tri.c == (cx[k], cy[k])


def test_decode_rejects_small_ids():
    with pytest.raises(ValueError):
        decode_triangles(np.array([0, 2]), 4)


def test_children_keep_winding():
    tile = 8
    for tri_id in range(2, triangle_count(tile) + 2):
        tri = RightTriangle.from_id(tri_id, tile)
        assert _orientation(tri) < 0
        assert _orientation(tri.left_child()) < 0
        assert _orientation(tri.right_child()) < 0


def test_leg_length_halves_with_depth():
    tile = 16
    for tri_id in range(2, triangle_count(tile) + 2):
        tri = RightTriangle.from_id(tri_id, tile)
        depth = tri_id.bit_length() - 2
        leg2 = (tri.a[0] - tri.c[0]) ** 2 + (tri.a[1] - tri.c[1]) ** 2
        assert leg2 == tile * tile / 2 ** depth


def test_each_midpoint_belongs_to_one_level():
    tile = 8
    levels = {}
    for tri_id in range(2, triangle_count(tile) + 2):
        m = RightTriangle.from_id(tri_id, tile).midpoint()
        levels.setdefault(m, set()).add(tri_id.bit_length())
    assert all(len(v) == 1 for v in levels.values())
    corners = {(0, 0), (0, tile), (tile, 0), (tile, tile)}
    every_point = {(x, y) for x in range(tile + 1) for y in range(tile + 1)}
    assert set(levels) == every_point - corners


def test_finest_level_holds_tile_squared_triangles():
    tile = 8
    finest = [i for i in range(2, triangle_count(tile) + 2) if i >= parent_triangle_count(tile) + 2]
    assert len(finest) == tile * tile
    for tri_id in finest:
        tri = RightTriangle.from_id(tri_id, tile)
        assert tri.left_child().is_leaf()
