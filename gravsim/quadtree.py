"""Barnes-Hut quadtree for approximate gravity.

The tree is rebuilt from scratch every integration step. Each node covers
an axis-aligned square and tracks the aggregate mass and center of mass of
everything inserted beneath it. A node is empty, a leaf holding one body,
or internal with exactly four children (NW, NE, SW, SE).

Force queries open a node only when its edge length over the distance to
its center of mass is at least theta; otherwise the whole node acts as a
single point mass.

Example:
    >>> from gravsim.quadtree import QuadTree
    >>>
    >>> tree = QuadTree.build(bodies)
    >>> fx, fy = tree.force_on(bodies[0], theta=0.5, g=0.8, softening=5.0)
"""

import math
from collections.abc import Sequence
from typing import Any

# Below this edge length coincident bodies share one aggregate leaf
MIN_NODE_SIZE = 1e-9
SELF_EPSILON = 0.001


class QuadTree:
    """One square node of the Barnes-Hut tree.

    Attributes:
        x, y: Top-left corner of the region
        size: Edge length of the region
        mass: Aggregate mass of inserted bodies
        com_x, com_y: Aggregate center of mass
        body: The single body of a leaf (None otherwise)
        children: Four child quadrants of an internal node (None otherwise)
    """

    __slots__ = ("x", "y", "size", "mass", "com_x", "com_y", "body", "children")

    def __init__(self, x: float, y: float, size: float) -> None:
        self.x = x
        self.y = y
        self.size = size
        self.mass = 0.0
        self.com_x = 0.0
        self.com_y = 0.0
        self.body: Any | None = None
        self.children: list["QuadTree"] | None = None

    @classmethod
    def build(
        cls,
        bodies: Sequence[Any],
        padding: float = 1000.0,
        min_extent: float = 1000.0,
    ) -> "QuadTree":
        """Build a square tree covering all bodies plus padding and insert them."""
        min_x = min(b.x for b in bodies)
        max_x = max(b.x for b in bodies)
        min_y = min(b.y for b in bodies)
        max_y = max(b.y for b in bodies)

        width = max(max_x - min_x, min_extent) + 2 * padding
        height = max(max_y - min_y, min_extent) + 2 * padding
        size = max(width, height)
        cx = (min_x + max_x) / 2
        cy = (min_y + max_y) / 2

        tree = cls(cx - size / 2, cy - size / 2, size)
        for body in bodies:
            tree.insert(body)
        return tree

    @property
    def is_empty(self) -> bool:
        return self.body is None and self.children is None

    @property
    def is_leaf(self) -> bool:
        return self.children is None

    def insert(self, body: Any) -> None:
        """Insert a body, updating aggregate mass and center of mass."""
        if self.is_empty:
            self.body = body
            self.mass = body.mass
            self.com_x = body.x
            self.com_y = body.y
            return

        if self.children is None:
            if self.size <= MIN_NODE_SIZE:
                # Coincident bodies: absorb into the aggregate only
                self._accumulate(body)
                return
            self._subdivide()
            resident = self.body
            self.body = None
            self._child_for(resident).insert(resident)

        self._accumulate(body)
        self._child_for(body).insert(body)

    def _accumulate(self, body: Any) -> None:
        total = self.mass + body.mass
        if total > 0:
            self.com_x = (self.com_x * self.mass + body.x * body.mass) / total
            self.com_y = (self.com_y * self.mass + body.y * body.mass) / total
        self.mass = total

    def _subdivide(self) -> None:
        half = self.size / 2
        self.children = [
            QuadTree(self.x, self.y, half),                # NW
            QuadTree(self.x + half, self.y, half),         # NE
            QuadTree(self.x, self.y + half, half),         # SW
            QuadTree(self.x + half, self.y + half, half),  # SE
        ]

    def _child_for(self, body: Any) -> "QuadTree":
        half = self.size / 2
        index = 0
        if body.x >= self.x + half:
            index += 1
        if body.y >= self.y + half:
            index += 2
        return self.children[index]

    def force_on(self, body: Any, theta: float, g: float, softening: float) -> tuple[float, float]:
        """Approximate net gravitational force on ``body``.

        Uses the softened law F = G*m1*m2 / (d^2 + softening).

        Args:
            body: Body to evaluate (need not be in the tree)
            theta: Opening-angle threshold
            g: Gravitational constant
            softening: Additive softening term

        Returns:
            (fx, fy) force components
        """
        if self.mass == 0:
            return (0.0, 0.0)

        dx = self.com_x - body.x
        dy = self.com_y - body.y
        dist_sq = dx * dx + dy * dy
        dist = math.sqrt(dist_sq)

        if self.children is None:
            if self.body is body or dist < SELF_EPSILON:
                return (0.0, 0.0)
            if dist <= body.radius + self.body.radius:
                return (0.0, 0.0)
            f = g * body.mass * self.mass / (dist_sq + softening)
            return (f * dx / dist, f * dy / dist)

        if dist > 0 and self.size / dist < theta:
            f = g * body.mass * self.mass / (dist_sq + softening)
            return (f * dx / dist, f * dy / dist)

        fx = fy = 0.0
        for child in self.children:
            cfx, cfy = child.force_on(body, theta, g, softening)
            fx += cfx
            fy += cfy
        return (fx, fy)

    def count(self) -> int:
        """Number of leaf bodies stored (coincident extras excluded)."""
        if self.children is None:
            return 0 if self.body is None else 1
        return sum(child.count() for child in self.children)
