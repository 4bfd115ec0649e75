"""Resize directives and target dimension resolution."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

# Explicit dimension meaning "keep the source size on this axis".
KEEP_DIMENSION = -1


@dataclass(frozen=True)
class NoResize:
    """Leave the raster at its source dimensions."""


@dataclass(frozen=True)
class Explicit:
    """Resize to the given pixel dimensions."""

    width: int
    height: int


@dataclass(frozen=True)
class Percentage:
    """Scale both axes by ``percent`` / 100."""

    percent: int


ResizeDirective = NoResize | Explicit | Percentage


def directive_from_params(
    width: int = KEEP_DIMENSION,
    height: int = KEEP_DIMENSION,
    percentage: int = 0,
    new_file_type_only: bool = False,
) -> ResizeDirective:
    """Build a directive from raw request parameters.

    ``new_file_type_only`` wins over everything, then a positive percentage,
    then the explicit width and height.
    """
    if new_file_type_only:
        return NoResize()
    if percentage > 0:
        return Percentage(percentage)
    return Explicit(width, height)


def _scale(value: int, percent: int) -> int:
    scaled = Decimal(value) * Decimal(percent) / Decimal(100)
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def resolve(source_width: int, source_height: int, directive: ResizeDirective) -> tuple[int, int]:
    """Compute the target (width, height) for a directive.

    Percentages round to the nearest pixel with ties away from zero. A
    non-positive percentage never reaches this point as a ``Percentage``
    when built through :func:`directive_from_params`; if one does, the
    source dimensions are returned.
    """
    match directive:
        case Percentage(percent=percent) if percent > 0:
            return _scale(source_width, percent), _scale(source_height, percent)
        case Explicit(width=width, height=height):
            return width, height
        case _:
            return source_width, source_height
