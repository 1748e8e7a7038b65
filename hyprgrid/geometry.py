"""
Grid Geometry

Data model for the grid overlay and the resolver that turns a grid position
into pixel coordinates on a screen.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GridSpec:
    """Logical grid overlay."""

    rows: int = 3
    columns: int = 3
    gap: int = 5


@dataclass(frozen=True)
class PositionSpec:
    """Grid-relative window position.

    ``x``/``y`` are the cell origin, ``width``/``height`` the cell span.
    When ``centered`` is set and ``scale`` is in (0, 1) the cell fields are
    ignored and the window is centered at ``scale`` of the screen size.
    """

    x: int = 0
    y: int = 0
    width: int = 1
    height: int = 1
    centered: bool = False
    scale: float = 1.0

    @property
    def is_scale_centered(self) -> bool:
        return self.centered and 0.0 < self.scale < 1.0


@dataclass(frozen=True)
class ScreenGeometry:
    """Size of the focused screen in pixels."""

    width: int
    height: int
    scale: float = 1.0

    @property
    def is_usable(self) -> bool:
        return self.width > 0 and self.height > 0


@dataclass(frozen=True)
class PixelRect:
    """Resolved window geometry in pixels."""

    x: int
    y: int
    width: int
    height: int

    def within(self, other: PixelRect, position_tolerance: int, size_tolerance: int) -> bool:
        """Check whether ``other`` matches this rect within the given tolerances."""
        return (
            abs(self.x - other.x) <= position_tolerance
            and abs(self.y - other.y) <= position_tolerance
            and abs(self.width - other.width) <= size_tolerance
            and abs(self.height - other.height) <= size_tolerance
        )


def normalize_scale(scale: float) -> float:
    """Default a non-positive scale to 1.0 and cap it at 1.0."""
    if scale <= 0.0:
        logger.debug(f"Non-positive scale {scale} defaulted to 1.0")
        return 1.0
    if scale > 1.0:
        logger.debug(f"Scale {scale} capped to 1.0")
        return 1.0
    return scale


def clamp_to_grid(spec: PositionSpec, grid: GridSpec) -> PositionSpec:
    """Clamp a position so its cell span fits inside the grid.

    Args:
        spec: Position as stored in configuration
        grid: Grid the position will be resolved against

    Returns:
        A position with origin and span inside ``grid``
    """
    columns = max(1, grid.columns)
    rows = max(1, grid.rows)

    x = min(max(0, spec.x), columns - 1)
    y = min(max(0, spec.y), rows - 1)
    width = min(max(1, spec.width), columns - x)
    height = min(max(1, spec.height), rows - y)

    clamped = replace(spec, x=x, y=y, width=width, height=height)
    if clamped != spec:
        logger.debug(f"Position {spec} clamped to {clamped} for {rows}x{columns} grid")
    return clamped


def resolve(spec: PositionSpec, grid: GridSpec, screen: ScreenGeometry) -> PixelRect:
    """
    Resolve a grid position to a pixel rectangle on ``screen``.

    Scale-centered positions are sized at ``scale`` of the screen and centered.
    Everything else is laid out on the grid: the screen is split into
    ``columns`` x ``rows`` cells separated (and bordered) by ``gap`` pixels,
    and the position spans ``width`` x ``height`` cells including the gaps
    between them.

    Out-of-range input is clamped, never rejected.

    Args:
        spec: Grid-relative position
        grid: Grid overlay
        screen: Focused screen geometry

    Returns:
        PixelRect in screen coordinates
    """
    if spec.is_scale_centered:
        scale = spec.scale
        scaled_width = round(screen.width * scale)
        scaled_height = round(screen.height * scale)
        return PixelRect(
            (screen.width - scaled_width) // 2,
            (screen.height - scaled_height) // 2,
            scaled_width,
            scaled_height,
        )

    columns = max(1, grid.columns)
    rows = max(1, grid.rows)
    gap = max(0, grid.gap)

    cell_width = max(1, (screen.width - gap * (columns + 1)) // columns)
    cell_height = max(1, (screen.height - gap * (rows + 1)) // rows)

    span_width = max(1, spec.width)
    span_height = max(1, spec.height)

    return PixelRect(
        gap + max(0, spec.x) * (cell_width + gap),
        gap + max(0, spec.y) * (cell_height + gap),
        span_width * cell_width + (span_width - 1) * gap,
        span_height * cell_height + (span_height - 1) * gap,
    )
