"""Viewport data types and the fit-to-container computation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    """A 2D position expressed in whichever coordinate space the caller uses."""

    x: float
    y: float

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Size:
    """Width/height pair used for both the raster image and its container."""

    width: int
    height: int

    def is_empty(self) -> bool:
        """Return ``True`` when either dimension is zero or negative."""

        return self.width <= 0 or self.height <= 0

    def center(self) -> Point:
        return Point(self.width / 2.0, self.height / 2.0)


# The same shape serves both roles; the aliases keep signatures self-describing.
ImageDimensions = Size
ContainerDimensions = Size

EMPTY_SIZE = Size(0, 0)


@dataclass(frozen=True)
class ViewportState:
    """Affine transform applied to the raw image.

    An image pixel ``(px, py)`` renders at container pixel
    ``(offset_x + px * scale, offset_y + py * scale)``.
    """

    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def __post_init__(self) -> None:
        if not self.scale > 0.0:
            raise ValueError(f"viewport scale must be positive, got {self.scale!r}")

    @property
    def offset(self) -> Point:
        return Point(self.offset_x, self.offset_y)

    def with_offset(self, offset_x: float, offset_y: float) -> ViewportState:
        return ViewportState(self.scale, offset_x, offset_y)


IDENTITY_VIEWPORT = ViewportState()


def compute_fit_scale(image: ImageDimensions, container: ContainerDimensions) -> float:
    """Return the scale that makes *image* fully visible inside *container*."""

    if image.is_empty() or container.is_empty():
        return 1.0
    width_ratio = container.width / float(image.width)
    height_ratio = container.height / float(image.height)
    return min(width_ratio, height_ratio)


def compute_fit_viewport(image: ImageDimensions, container: ContainerDimensions) -> ViewportState:
    """Return the viewport that fits and centres *image* inside *container*.

    Degenerate geometry (no image loaded yet, or a collapsed container) yields
    the identity transform.
    """

    if image.is_empty() or container.is_empty():
        return IDENTITY_VIEWPORT

    scale = compute_fit_scale(image, container)
    return ViewportState(
        scale=scale,
        offset_x=(container.width - image.width * scale) / 2.0,
        offset_y=(container.height - image.height * scale) / 2.0,
    )


__all__ = [
    "ContainerDimensions",
    "EMPTY_SIZE",
    "IDENTITY_VIEWPORT",
    "ImageDimensions",
    "Point",
    "Size",
    "ViewportState",
    "compute_fit_scale",
    "compute_fit_viewport",
]
