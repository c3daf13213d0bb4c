"""
Tests for coordinate normalization.

Validates:
  - Target center and radius come from the image geometry
  - denormalize() inverts normalize()
  - Bad image dimensions fail loudly
"""

import pytest

from marksman.models.shot import NormalizedShot, Shot
from marksman.normalizer import (
    InvalidGeometry,
    denormalize,
    normalize,
    normalize_all,
)


class TestNormalize:
    """Pixel → target-relative coordinates."""

    def test_image_center_maps_to_origin(self):
        ns = normalize(Shot(100, 50), 200, 100)
        assert ns.u == pytest.approx(0.0)
        assert ns.v == pytest.approx(0.0)

    def test_radius_is_half_the_short_side(self):
        """On a 200x100 image the radius is 50 px, so +50 px in x is u = 1."""
        ns = normalize(Shot(150, 50), 200, 100)
        assert ns.u == pytest.approx(1.0)
        assert ns.v == pytest.approx(0.0)

    def test_portrait_image(self):
        ns = normalize(Shot(300, 100), 600, 800)
        # center (300, 400), radius 300
        assert ns.u == pytest.approx(0.0)
        assert ns.v == pytest.approx(-1.0)

    def test_high_left_shot_has_negative_components(self):
        ns = normalize(Shot(10, 10), 100, 100)
        assert ns.u < 0
        assert ns.v < 0

    def test_normalize_all_matches_single(self):
        pixels = [Shot(0, 0), Shot(37.5, 80), Shot(99, 1)]
        batch = normalize_all(pixels, 120, 90)
        assert batch == [normalize(p, 120, 90) for p in pixels]


class TestRoundTrip:
    """denormalize(normalize(p)) == p."""

    @pytest.mark.parametrize("x,y,w,h", [
        (0, 0, 100, 100),
        (123.4, 567.8, 1024, 768),
        (-20, 3000, 640, 480),
        (4031.5, 1.25, 4032, 3024),
    ])
    def test_round_trip(self, x, y, w, h):
        back = denormalize(normalize(Shot(x, y), w, h), w, h)
        assert back.x == pytest.approx(x, abs=1e-9)
        assert back.y == pytest.approx(y, abs=1e-9)

    def test_denormalize_origin_is_center(self):
        p = denormalize(NormalizedShot(0, 0), 300, 200)
        assert (p.x, p.y) == (150, 100)


class TestInvalidGeometry:
    """Zero or negative image sizes cannot be analyzed."""

    @pytest.mark.parametrize("w,h", [(0, 100), (100, 0), (-5, 100), (100, -1)])
    def test_normalize_rejects(self, w, h):
        with pytest.raises(InvalidGeometry):
            normalize(Shot(1, 1), w, h)

    def test_denormalize_rejects(self):
        with pytest.raises(InvalidGeometry):
            denormalize(NormalizedShot(0, 0), 0, 0)

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            normalize_all([Shot(1, 1)], 0, 10)


class TestNormalizedShot:
    """Derived geometry on target-relative points."""

    def test_radial_distance(self):
        assert NormalizedShot(0.3, -0.4).radial_distance == pytest.approx(0.5)

    def test_distance_to(self):
        a, b = NormalizedShot(0.1, 0.1), NormalizedShot(0.4, 0.5)
        assert a.distance_to(b) == pytest.approx(0.5)

    def test_angle_flips_vertical(self):
        """Negative v is high, which is 90 degrees."""
        assert NormalizedShot(0.0, -1.0).angle_degrees == pytest.approx(90.0)
        assert NormalizedShot(1.0, 0.0).angle_degrees == pytest.approx(0.0)
