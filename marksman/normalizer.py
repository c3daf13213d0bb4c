"""
Coordinate normalization for Marksman.

The target center is the geometric center of the photo and the target
radius is half the shorter image side, so a shot at u = 1.0 sits on the
nearest image edge.
"""

from marksman.models.shot import NormalizedShot, Shot


class InvalidGeometry(ValueError):
    """Raised when image dimensions cannot define a target."""


def _target_geometry(image_width: float, image_height: float) -> tuple[float, float, float]:
    """Return (center_x, center_y, radius) for an image."""
    if image_width <= 0 or image_height <= 0:
        raise InvalidGeometry(
            f"Image dimensions must be positive, got {image_width}x{image_height}"
        )
    return image_width / 2, image_height / 2, min(image_width, image_height) / 2


def normalize(shot: Shot, image_width: float, image_height: float) -> NormalizedShot:
    """Map a pixel position to target-relative unit coordinates.

    Raises:
        InvalidGeometry: If either image dimension is zero or negative.
    """
    cx, cy, radius = _target_geometry(image_width, image_height)
    return NormalizedShot(u=(shot.x - cx) / radius, v=(shot.y - cy) / radius)


def denormalize(shot: NormalizedShot, image_width: float, image_height: float) -> Shot:
    """Inverse of normalize()."""
    cx, cy, radius = _target_geometry(image_width, image_height)
    return Shot(x=shot.u * radius + cx, y=shot.v * radius + cy)


def normalize_all(shots: list[Shot], image_width: float,
                  image_height: float) -> list[NormalizedShot]:
    """Normalize every shot against the same image."""
    cx, cy, radius = _target_geometry(image_width, image_height)
    return [NormalizedShot(u=(s.x - cx) / radius, v=(s.y - cy) / radius)
            for s in shots]
