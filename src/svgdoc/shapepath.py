"""Methods for converting SVG shape elements to path commands.

All commands produced here are absolute and in the shape's own
user space. Transforms are applied afterwards by the caller.

Shape decomposition follows https://www.w3.org/TR/SVG2/shapes.html
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import geom2d

from .elements import (
    Circle,
    Ellipse,
    Group,
    Line,
    Path,
    Polygon,
    Polyline,
    Rectangle,
    Text,
)
from .errors import ParseError, ShapeError
from .pathcmd import ArcTo, ClosePath, LineTo, MoveTo, path_tokenizer

if TYPE_CHECKING:
    from .elements import TElement
    from .pathcmd import TCommand

logger = logging.getLogger(__name__)


def shape_commands(shape: TElement, clockwise: bool = True) -> list[TCommand]:
    """Convert a shape element to an equivalent list of path commands.

    Args:
        shape: A shape or path element.
        clockwise: Winding direction for circles, ellipses, and
            rectangles. Default is True.
            Lines, polylines, and polygons follow their point order.

    Returns:
        A list of absolute path commands. Paths return a copy
        of their own commands.

    Raises:
        ShapeError: If the geometry is invalid or the element
            is a Group or Text.
    """
    if isinstance(shape, Circle):
        return convert_circle(shape, clockwise)
    if isinstance(shape, Ellipse):
        return convert_ellipse(shape, clockwise)
    if isinstance(shape, Rectangle):
        return convert_rect(shape, clockwise)
    if isinstance(shape, Line):
        return convert_line(shape)
    if isinstance(shape, Polygon):
        return convert_polygon(shape)
    if isinstance(shape, Polyline):
        return convert_polyline(shape)
    if isinstance(shape, Path):
        return list(shape.commands)
    if isinstance(shape, Group):
        raise ShapeError('A group must be flattened, not converted.')
    if isinstance(shape, Text):
        raise ShapeError('Text has no path outline.')
    raise ShapeError(f'Unrecognized SVG element: {shape!r}')


def _check_finite(shape: TElement, **values: float | None) -> None:
    for name, value in values.items():
        if (
            isinstance(value, bool)
            or not isinstance(value, (int, float))
            or not math.isfinite(value)
        ):
            raise ShapeError(
                f'{type(shape).__name__} {name} must be a finite number: {value!r}'
            )


def convert_circle(circle: Circle, clockwise: bool = True) -> list[TCommand]:
    """Convert an SVG circle to two half-circle arcs.

    The path starts at the "3 o'clock" point and closes
    after the second arc. A full circle can't be drawn with
    one arc command since the start and end points coincide.

    Args:
        circle: A Circle element.
        clockwise: Sweep direction.

    Returns:
        [M, A, A, Z], or a single M to the center
        if the radius is not positive.
    """
    _check_finite(circle, cx=circle.cx, cy=circle.cy, r=circle.r)
    return _ellipse_arcs(circle.cx, circle.cy, circle.r, circle.r, clockwise)


def convert_ellipse(ellipse: Ellipse, clockwise: bool = True) -> list[TCommand]:
    """Convert an SVG ellipse to two half-ellipse arcs.

    Same as :func:`convert_circle` but with separate x and y radii.
    """
    _check_finite(
        ellipse, cx=ellipse.cx, cy=ellipse.cy, rx=ellipse.rx, ry=ellipse.ry
    )
    return _ellipse_arcs(ellipse.cx, ellipse.cy, ellipse.rx, ellipse.ry, clockwise)


def _ellipse_arcs(
    cx: float, cy: float, rx: float, ry: float, clockwise: bool
) -> list[TCommand]:
    if rx <= 0 or ry <= 0:
        logger.debug('Degenerate ellipse at %f,%f', cx, cy)
        return [MoveTo(cx, cy)]
    return [
        MoveTo(cx + rx, cy),
        ArcTo(rx, ry, 0.0, False, clockwise, cx - rx, cy),
        ArcTo(rx, ry, 0.0, False, clockwise, cx + rx, cy),
        ClosePath(),
    ]


def corner_radii(rect: Rectangle) -> tuple[float, float]:
    """The effective corner radii of a rectangle.

    An unset (or negative) radius takes the value of the other one,
    radii are clamped to half the width/height, and if
    either one is zero there are no rounded corners.
    """
    rx = rect.rx if rect.rx is not None and rect.rx >= 0 else None
    ry = rect.ry if rect.ry is not None and rect.ry >= 0 else None
    if rx is None and ry is None:
        return (0.0, 0.0)
    if rx is None:
        rx = ry
    elif ry is None:
        ry = rx
    rx = min(rx, rect.width / 2)  # type: ignore [type-var]
    ry = min(ry, rect.height / 2)  # type: ignore [type-var]
    if geom2d.is_zero(rx) or geom2d.is_zero(ry):
        return (0.0, 0.0)
    return (rx, ry)


def convert_rect(rect: Rectangle, clockwise: bool = True) -> list[TCommand]:
    """Convert an SVG rect to a closed path.

    The path starts at the top left corner
    (or at the end of the top left corner arc for rounded rectangles)
    and proceeds right, down, left, and up if `clockwise`,
    or down, right, up, and left otherwise.

    Args:
        rect: A Rectangle element.
        clockwise: Winding direction.

    Returns:
        A list of path commands, or a single M to (x, y) if the
        width or height is not positive.
    """
    _check_finite(rect, x=rect.x, y=rect.y, width=rect.width, height=rect.height)
    if rect.rx is not None:
        _check_finite(rect, rx=rect.rx)
    if rect.ry is not None:
        _check_finite(rect, ry=rect.ry)

    x1, y1 = rect.x, rect.y
    if rect.width <= 0 or rect.height <= 0:
        logger.debug('Degenerate rect at %f,%f', x1, y1)
        return [MoveTo(x1, y1)]
    x2 = x1 + rect.width
    y2 = y1 + rect.height

    rx, ry = corner_radii(rect)
    if not rx:
        corners = [(x2, y1), (x2, y2), (x1, y2)]
        if not clockwise:
            corners.reverse()
        return [
            MoveTo(x1, y1),
            *(LineTo(x, y) for x, y in corners),
            LineTo(x1, y1),
            ClosePath(),
        ]

    def arc(x: float, y: float) -> ArcTo:
        return ArcTo(rx, ry, 0.0, False, clockwise, x, y)

    if clockwise:
        return [
            MoveTo(x1 + rx, y1),
            LineTo(x2 - rx, y1),
            arc(x2, y1 + ry),
            LineTo(x2, y2 - ry),
            arc(x2 - rx, y2),
            LineTo(x1 + rx, y2),
            arc(x1, y2 - ry),
            LineTo(x1, y1 + ry),
            arc(x1 + rx, y1),
            ClosePath(),
        ]
    return [
        MoveTo(x1 + rx, y1),
        arc(x1, y1 + ry),
        LineTo(x1, y2 - ry),
        arc(x1 + rx, y2),
        LineTo(x2 - rx, y2),
        arc(x2, y2 - ry),
        LineTo(x2, y1 + ry),
        arc(x2 - rx, y1),
        LineTo(x1 + rx, y1),
        ClosePath(),
    ]


def convert_line(line: Line) -> list[TCommand]:
    """Convert an SVG line to a move and a line command. Not closed."""
    _check_finite(line, x1=line.x1, y1=line.y1, x2=line.x2, y2=line.y2)
    return [MoveTo(line.x1, line.y1), LineTo(line.x2, line.y2)]


def parse_points(points: str) -> list[tuple[float, float]]:
    """Parse an SVG `points` attribute value.

    Args:
        points: A list of coordinates separated by whitespace
            and/or commas, i.e. "x1,y1 x2,y2 x3,y3 [...]".

    Returns:
        A list of (x, y) tuples.

    Raises:
        ShapeError: If a coordinate is not a number or there
            is an odd number of coordinates.
    """
    try:
        tokens = list(path_tokenizer(points))
    except ParseError as e:
        raise ShapeError(f'Invalid points: "{points}"') from e
    values: list[float] = []
    for token, is_command in tokens:
        try:
            value = float(token)
        except ValueError as e:
            raise ShapeError(f'Invalid points: "{points}"') from e
        if is_command or not math.isfinite(value):
            raise ShapeError(f'Invalid points: "{points}"')
        values.append(value)
    if len(values) % 2:
        raise ShapeError(f'Odd number of coordinates in points: "{points}"')
    return list(zip(values[0::2], values[1::2]))


def convert_polyline(polyline: Polyline | Polygon) -> list[TCommand]:
    """Convert an SVG polyline to a move followed by line commands.

    Returns:
        A list of path commands. Empty if there are no points.
    """
    vertices = parse_points(polyline.points)
    if not vertices:
        return []
    return [MoveTo(*vertices[0]), *(LineTo(*p) for p in vertices[1:])]


def convert_polygon(polygon: Polygon) -> list[TCommand]:
    """Convert an SVG polygon to a closed path.

    Same as a polyline with an implicit closing segment
    back to the first point.
    """
    commands = convert_polyline(polygon)
    if commands:
        commands.append(ClosePath())
    return commands
