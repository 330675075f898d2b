from __future__ import annotations

from dataclasses import dataclass
import numpy as np

Coord = tuple[int, int]


def triangle_count(tile_size: int) -> int:
    """Triangles in the hierarchy whose hypotenuse midpoint lies on the grid."""
    return 2 * tile_size * tile_size - 2


def parent_triangle_count(tile_size: int) -> int:
    return triangle_count(tile_size) - tile_size * tile_size


@dataclass(frozen=True)
class RightTriangle:
    """Right triangle on the grid.

    a and b are the hypotenuse endpoints, c is the right-angle corner.
    Bisecting the hypotenuse yields two children whose right angle sits
    at the midpoint; orientation (winding) is preserved by both children.
    """

    a: Coord
    b: Coord
    c: Coord

    @classmethod
    def bottom_left_root(cls, tile_size: int) -> "RightTriangle":
        return cls(a=(0, 0), b=(tile_size, tile_size), c=(tile_size, 0))

    @classmethod
    def top_right_root(cls, tile_size: int) -> "RightTriangle":
        return cls(a=(tile_size, tile_size), b=(0, 0), c=(0, tile_size))

    @classmethod
    def from_id(cls, tri_id: int, tile_size: int) -> "RightTriangle":
        """Rebuild a triangle from its id.

        Bit 0 picks the root (odd: bottom-left, even: top-right). Each
        further bit, read upward until only the leading 1 remains, picks
        the left (1) or right (0) child.
        """
        if tri_id < 2:
            raise ValueError(f"triangle id must be >= 2, got {tri_id}")
        tri = cls.bottom_left_root(tile_size) if tri_id & 1 else cls.top_right_root(tile_size)
        node = tri_id >> 1
        while node > 1:
            tri = tri.left_child() if node & 1 else tri.right_child()
            node >>= 1
        return tri

    def midpoint(self) -> Coord:
        return ((self.a[0] + self.b[0]) // 2, (self.a[1] + self.b[1]) // 2)

    def left_child(self) -> "RightTriangle":
        return RightTriangle(a=self.c, b=self.a, c=self.midpoint())

    def right_child(self) -> "RightTriangle":
        return RightTriangle(a=self.b, b=self.c, c=self.midpoint())

    def left_child_midpoint(self) -> Coord:
        return ((self.a[0] + self.c[0]) // 2, (self.a[1] + self.c[1]) // 2)

    def right_child_midpoint(self) -> Coord:
        return ((self.b[0] + self.c[0]) // 2, (self.b[1] + self.c[1]) // 2)

    def is_leaf(self) -> bool:
        # legs of length 1: the hypotenuse midpoint falls between grid samples
        return abs(self.a[0] - self.c[0]) + abs(self.a[1] - self.c[1]) == 1


def decode_triangles(ids: np.ndarray, tile_size: int) -> tuple[np.ndarray, ...]:
    """Vectorized RightTriangle.from_id.

    Returns corner arrays (ax, ay, bx, by, cx, cy), one entry per id.
    """
    ids = np.asarray(ids, dtype=np.int64)
    if ids.size and int(ids.min()) < 2:
        raise ValueError("triangle ids must be >= 2")

    bottom_left = (ids & 1).astype(bool)
    t = np.int64(tile_size)
    zero = np.int64(0)
    ax = np.where(bottom_left, zero, t)
    ay = ax.copy()
    bx = np.where(bottom_left, t, zero)
    by = bx.copy()
    cx = np.where(bottom_left, t, zero)
    cy = np.where(bottom_left, zero, t)

    node = ids >> 1
    active = node > 1
    while np.any(active):
        mx = (ax + bx) // 2
        my = (ay + by) // 2
        left = active & ((node & 1) == 1)
        right = active & ~left

        # left child: a'=c, b'=a ; right child: a'=b, b'=c
        nax = np.where(left, cx, np.where(right, bx, ax))
        nay = np.where(left, cy, np.where(right, by, ay))
        nbx = np.where(left, ax, np.where(right, cx, bx))
        nby = np.where(left, ay, np.where(right, cy, by))
        cx = np.where(active, mx, cx)
        cy = np.where(active, my, cy)
        ax, ay, bx, by = nax, nay, nbx, nby

        node = np.where(active, node >> 1, node)
        active = node > 1

    return ax, ay, bx, by, cx, cy
