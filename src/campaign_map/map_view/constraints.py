"""Clamp candidate viewports so the map never leaves the container."""

from __future__ import annotations

from ..config import MAX_SCALE_FACTOR, MIN_SCALE_FACTOR, MIN_VISIBLE_MARGIN
from .viewport import ContainerDimensions, ImageDimensions, ViewportState, compute_fit_scale


def scale_bounds(image: ImageDimensions, container: ContainerDimensions) -> tuple[float, float]:
    """Return the ``(minimum, maximum)`` scale allowed for the current geometry.

    The bounds are derived from the fit scale every time so a resized container
    or a freshly loaded image immediately moves them.
    """

    fit_scale = compute_fit_scale(image, container)
    return fit_scale * MIN_SCALE_FACTOR, fit_scale * MAX_SCALE_FACTOR


def clamp_scale(scale: float, image: ImageDimensions, container: ContainerDimensions) -> float:
    """Clamp *scale* into :func:`scale_bounds`."""

    minimum, maximum = scale_bounds(image, container)
    return max(minimum, min(maximum, scale))


def clamp_axis_offset(
    offset: float,
    image_extent: float,
    container_extent: float,
    scale: float,
    margin: float = MIN_VISIBLE_MARGIN,
) -> float:
    """Clamp a single axis so at least *margin* pixels of the image stay visible.

    The allowed range is ``[margin - scaled, container - margin]``.  When the
    rendered image is narrower than twice the margin, or the container is too
    small for the range to exist, the axis is centred instead.
    """

    scaled = image_extent * scale
    lower = margin - scaled
    upper = container_extent - margin
    if scaled < 2.0 * margin or lower > upper:
        return (container_extent - scaled) / 2.0
    return max(lower, min(upper, offset))


def apply_constraints(
    candidate: ViewportState,
    image: ImageDimensions,
    container: ContainerDimensions,
    margin: float = MIN_VISIBLE_MARGIN,
) -> ViewportState:
    """Return *candidate* with its scale and translation clamped.

    Without an image or with a collapsed container there is nothing to protect,
    so the candidate passes through untouched.
    """

    if image.is_empty() or container.is_empty():
        return candidate

    scale = clamp_scale(candidate.scale, image, container)
    offset_x = clamp_axis_offset(candidate.offset_x, image.width, container.width, scale, margin)
    offset_y = clamp_axis_offset(candidate.offset_y, image.height, container.height, scale, margin)
    return ViewportState(scale=scale, offset_x=offset_x, offset_y=offset_y)


__all__ = ["apply_constraints", "clamp_axis_offset", "clamp_scale", "scale_bounds"]
