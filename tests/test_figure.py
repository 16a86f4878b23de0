"""Tests for host-side figures and scene objects."""

import math

import numpy as np
import pytest

from pathlight.core.color import Color
from pathlight.materials import Glossy, Phong
from pathlight.scene.figure import (
    CompositeFigure,
    RhombusFigure,
    SphereFigure,
    figure_from_dict,
    parallelepiped,
)
from pathlight.scene.objects import SceneObject


class TestSphereFigure:
    def test_area_and_pdf(self):
        s = SphereFigure((1, 2, 3), 2.0)
        assert s.center == (1.0, 2.0, 3.0)
        assert s.area() == pytest.approx(16.0 * math.pi)
        assert s.pdf_area() == pytest.approx(1.0 / (16.0 * math.pi))

    @pytest.mark.parametrize("radius", [0.0, -1.0])
    def test_rejects_non_positive_radius(self, radius):
        with pytest.raises(ValueError):
            SphereFigure((0, 0, 0), radius)

    def test_rejects_bad_center(self):
        with pytest.raises(ValueError):
            SphereFigure((0, 0), 1.0)


class TestRhombusFigure:
    def test_normal_and_area(self):
        r = RhombusFigure((0, 0, 0), (2, 0, 0), (1, 3, 0))
        assert r.area() == pytest.approx(6.0)
        assert np.allclose(r.normal(), [0.0, 0.0, 1.0])
        assert r.pdf_area() == pytest.approx(1.0 / 6.0)

    @pytest.mark.parametrize(
        "edge_a,edge_b",
        [((1, 0, 0), (2, 0, 0)), ((0, 0, 0), (0, 1, 0))],
    )
    def test_rejects_degenerate(self, edge_a, edge_b):
        with pytest.raises(ValueError):
            RhombusFigure((0, 0, 0), edge_a, edge_b)


class TestCompositeFigure:
    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            CompositeFigure(())

    def test_leaf_probabilities_split_uniformly(self):
        inner = CompositeFigure(
            (SphereFigure((0, 0, 0), 1.0), SphereFigure((3, 0, 0), 1.0))
        )
        outer = CompositeFigure((inner, RhombusFigure((0, 0, 0), (1, 0, 0), (0, 1, 0))))
        leaves = list(outer.leaves())
        probs = [p for _, p in leaves]
        assert probs == pytest.approx([0.25, 0.25, 0.5])
        assert sum(probs) == pytest.approx(1.0)

    def test_parallelepiped_faces(self):
        box = parallelepiped((0, 0, 0), (2, 0, 0), (0, 3, 0), (0, 0, 4))
        leaves = [leaf for leaf, _ in box.leaves()]
        assert len(leaves) == 6
        assert all(isinstance(leaf, RhombusFigure) for leaf in leaves)
        assert box.area() == pytest.approx(2 * (6 + 12 + 8))

    def test_dict_round_trip(self):
        box = parallelepiped((0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1))
        figure = CompositeFigure((box, SphereFigure((5, 5, 5), 0.5)))
        assert figure_from_dict(figure.to_dict()) == figure

    def test_unknown_figure_type(self):
        with pytest.raises(ValueError):
            figure_from_dict({"type": "torus"})


class TestSceneObject:
    def test_defaults(self):
        obj = SceneObject(SphereFigure((0, 0, 0), 1.0))
        assert obj.color.is_black()
        assert obj.emission.is_black()
        assert not obj.is_light
        assert obj.reflectance.to_dict() == {"type": "diffuse"}

    def test_tuple_colours_are_converted(self):
        obj = SceneObject(SphereFigure((0, 0, 0), 1.0), color=(0.5, 0.5, 0.5), emission=(4, 4, 4))
        assert obj.color == Color(0.5, 0.5, 0.5)
        assert obj.is_light

    def test_rejects_negative_emission(self):
        with pytest.raises(ValueError):
            SceneObject(SphereFigure((0, 0, 0), 1.0), emission=Color(-1.0, 0.0, 0.0))

    @pytest.mark.parametrize("reflectance", [Glossy(0.1), Phong(0.2, 0.5, 50.0)])
    def test_dict_round_trip(self, reflectance):
        obj = SceneObject(
            RhombusFigure((0, 0, 0), (1, 0, 0), (0, 1, 0)),
            color=Color(0.1, 0.2, 0.3),
            emission=Color(1.0, 2.0, 3.0),
            reflectance=reflectance,
        )
        assert SceneObject.from_dict(obj.to_dict()) == obj
