"""Host-side figure descriptions.

A figure is one of:
    SphereFigure: center and radius
    RhombusFigure: a parallelogram spanned by two edges from an origin corner
    CompositeFigure: an ordered group of child figures

Figures are validated on construction and flattened into leaf primitives when
a scene is uploaded. Sampling a composite picks one child uniformly, so every
leaf carries the probability of being reached from its root; the area density
of a point on that leaf is ``select_prob * leaf.pdf_area()``.

Example:
    >>> box = parallelepiped((0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1))
    >>> len(list(box.leaves()))
    6
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Union

import numpy as np

Vec3Tuple = tuple[float, float, float]

# Edges whose cross product is shorter than this are considered parallel
_DEGENERATE_AREA = 1e-12


def _as_vec3(values: Sequence[float], name: str) -> Vec3Tuple:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


@dataclass(frozen=True)
class SphereFigure:
    """A sphere.

    Raises:
        ValueError: If the radius is not positive.
    """

    center: Vec3Tuple
    radius: float

    def __post_init__(self):
        object.__setattr__(self, "center", _as_vec3(self.center, "center"))
        if not self.radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")

    def area(self) -> float:
        return 4.0 * math.pi * self.radius * self.radius

    def pdf_area(self) -> float:
        """Density per unit area of uniform surface sampling."""
        return 1.0 / self.area()

    def leaves(self, select_prob: float = 1.0) -> Iterator[tuple[LeafFigure, float]]:
        yield self, select_prob

    def to_dict(self) -> dict:
        return {"type": "sphere", "center": list(self.center), "radius": self.radius}


@dataclass(frozen=True)
class RhombusFigure:
    """A parallelogram with corners origin, origin+a, origin+a+b, origin+b.

    Raises:
        ValueError: If the edges are parallel or zero-length.
    """

    origin: Vec3Tuple
    edge_a: Vec3Tuple
    edge_b: Vec3Tuple

    def __post_init__(self):
        object.__setattr__(self, "origin", _as_vec3(self.origin, "origin"))
        object.__setattr__(self, "edge_a", _as_vec3(self.edge_a, "edge_a"))
        object.__setattr__(self, "edge_b", _as_vec3(self.edge_b, "edge_b"))
        if self.area() <= _DEGENERATE_AREA:
            raise ValueError(f"Rhombus edges {self.edge_a} and {self.edge_b} are degenerate")

    def cross(self) -> np.ndarray:
        return np.cross(np.asarray(self.edge_a), np.asarray(self.edge_b))

    def normal(self) -> np.ndarray:
        """Unit geometric normal normalize(cross(a, b))."""
        n = self.cross()
        return n / np.linalg.norm(n)

    def area(self) -> float:
        return float(np.linalg.norm(self.cross()))

    def pdf_area(self) -> float:
        return 1.0 / self.area()

    def leaves(self, select_prob: float = 1.0) -> Iterator[tuple[LeafFigure, float]]:
        yield self, select_prob

    def to_dict(self) -> dict:
        return {
            "type": "rhombus",
            "origin": list(self.origin),
            "edge_a": list(self.edge_a),
            "edge_b": list(self.edge_b),
        }


@dataclass(frozen=True)
class CompositeFigure:
    """An ordered group of figures treated as one object.

    Raises:
        ValueError: If there are no children.
    """

    children: tuple[Figure, ...]

    def __post_init__(self):
        object.__setattr__(self, "children", tuple(self.children))
        if not self.children:
            raise ValueError("A composite figure needs at least one child")

    def area(self) -> float:
        return sum(child.area() for child in self.children)

    def leaves(self, select_prob: float = 1.0) -> Iterator[tuple[LeafFigure, float]]:
        """Yield (leaf, probability that uniform child selection reaches it)."""
        child_prob = select_prob / len(self.children)
        for child in self.children:
            yield from child.leaves(child_prob)

    def to_dict(self) -> dict:
        return {"type": "composite", "children": [c.to_dict() for c in self.children]}


LeafFigure = Union[SphereFigure, RhombusFigure]
Figure = Union[SphereFigure, RhombusFigure, CompositeFigure]


def parallelepiped(
    origin: Sequence[float],
    a: Sequence[float],
    b: Sequence[float],
    c: Sequence[float],
) -> CompositeFigure:
    """Build the six-face box spanned by edges a, b, c from origin."""
    o = np.asarray(_as_vec3(origin, "origin"))
    ea = _as_vec3(a, "a")
    eb = _as_vec3(b, "b")
    ec = _as_vec3(c, "c")

    def face(corner, e1, e2) -> RhombusFigure:
        return RhombusFigure(tuple(corner.tolist()), e1, e2)

    return CompositeFigure(
        (
            face(o, ea, eb),
            face(o + np.asarray(ec), ea, eb),
            face(o, eb, ec),
            face(o + np.asarray(ea), eb, ec),
            face(o, ec, ea),
            face(o + np.asarray(eb), ec, ea),
        )
    )


def figure_from_dict(data: dict) -> Figure:
    """Rebuild a figure from its ``to_dict`` form.

    Raises:
        ValueError: If the figure type is missing or unknown.
    """
    kind = data.get("type")
    if kind == "sphere":
        return SphereFigure(center=tuple(data["center"]), radius=float(data["radius"]))
    if kind == "rhombus":
        return RhombusFigure(
            origin=tuple(data["origin"]),
            edge_a=tuple(data["edge_a"]),
            edge_b=tuple(data["edge_b"]),
        )
    if kind == "composite":
        return CompositeFigure(tuple(figure_from_dict(c) for c in data["children"]))
    raise ValueError(f"Unknown figure type: {kind!r}")
