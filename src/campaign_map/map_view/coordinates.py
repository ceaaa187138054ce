"""Conversions between container, image-pixel and percent coordinate spaces.

``container`` space is the pointer space of the hosting widget (origin at its
top-left corner), ``image`` space is the native pixel grid of the raster map and
``percent`` space normalises the image to ``0..100`` on both axes.  Waypoints
are stored in percent space so they survive container resizes.
"""

from __future__ import annotations

from .viewport import ImageDimensions, Point, ViewportState


def container_to_image(point: Point, viewport: ViewportState) -> Point:
    """Map a container pixel onto the image pixel underneath it."""

    return Point(
        (point.x - viewport.offset_x) / viewport.scale,
        (point.y - viewport.offset_y) / viewport.scale,
    )


def image_to_container(point: Point, viewport: ViewportState) -> Point:
    """Map an image pixel onto the container pixel where it is drawn."""

    return Point(
        viewport.offset_x + point.x * viewport.scale,
        viewport.offset_y + point.y * viewport.scale,
    )


def image_to_percent(point: Point, image: ImageDimensions) -> Point:
    """Normalise an image pixel against the native image size."""

    if image.is_empty():
        return Point(0.0, 0.0)
    return Point(point.x / image.width * 100.0, point.y / image.height * 100.0)


def percent_to_image(point: Point, image: ImageDimensions) -> Point:
    if image.is_empty():
        return Point(0.0, 0.0)
    return Point(point.x / 100.0 * image.width, point.y / 100.0 * image.height)


def container_to_percent(point: Point, image: ImageDimensions, viewport: ViewportState) -> Point:
    """Compose :func:`container_to_image` and :func:`image_to_percent`."""

    return image_to_percent(container_to_image(point, viewport), image)


def percent_to_container(point: Point, image: ImageDimensions, viewport: ViewportState) -> Point:
    """Project a stored percent coordinate into the current container space."""

    return image_to_container(percent_to_image(point, image), viewport)


def is_within_percent_bounds(point: Point) -> bool:
    """Return ``True`` when *point* lies on the image, edges included."""

    return 0.0 <= point.x <= 100.0 and 0.0 <= point.y <= 100.0


def clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


__all__ = [
    "clamp_percent",
    "container_to_image",
    "container_to_percent",
    "image_to_container",
    "image_to_percent",
    "is_within_percent_bounds",
    "percent_to_container",
    "percent_to_image",
]
