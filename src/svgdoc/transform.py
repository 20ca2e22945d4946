"""SVG transform lists and 2D affine transform composition.

Transform functions are modeled as small immutable values that know how
to build their geom2d affine matrix. A transform list composes in SVG
order: the leftmost transform is applied last, so
``translate(10) rotate(45)`` maps a point ``p`` to ``T * R * p``.

See: https://www.w3.org/TR/SVG11/coords.html#TransformAttribute
"""

from __future__ import annotations

import dataclasses
import math
import re
from typing import TYPE_CHECKING, Union

import geom2d
from geom2d import transform2d

from .errors import ParseError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from geom2d.point import TPoint
    from geom2d.transform2d import TMatrix
    from typing_extensions import TypeAlias

IDENTITY: TMatrix = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0))

# One transform function followed by an optional comma separator.
_TRANSFORM_RE = re.compile(
    r'\s*(matrix|translate|scale|rotate|skewX|skewY)\s*\(([^)]*)\)\s*,?'
)
# Arguments can run together when the sign or decimal point
# separates them, i.e. "10-5" or ".5.5".
_NUMBER_RE = re.compile(
    r'[-+]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][-+]?[0-9]+)?'
)
_ARGS_SEP_RE = re.compile(r'\s*,?\s*')

# Allowed argument counts per transform function
_ARG_COUNTS = {
    'matrix': (6,),
    'translate': (1, 2),
    'scale': (1, 2),
    'rotate': (1, 3),
    'skewX': (1,),
    'skewY': (1,),
}


def floatystr(value: float) -> str:
    """Format a float without trailing zeros or scientific notation."""
    s = f'{value:f}'.rstrip('0').rstrip('.')
    return '0' if s in {'-0', ''} else s


@dataclasses.dataclass(frozen=True)
class Translate:
    """translate(dx [dy])."""

    dx: float
    dy: float = 0.0

    def matrix(self) -> TMatrix:
        return transform2d.matrix_translate(self.dx, self.dy)

    def __str__(self) -> str:
        return f'translate({floatystr(self.dx)},{floatystr(self.dy)})'


@dataclasses.dataclass(frozen=True)
class Scale:
    """scale(sx [sy]). If `sy` is not specified it is the same as `sx`."""

    sx: float
    sy: float | None = None

    def matrix(self) -> TMatrix:
        sy = self.sx if self.sy is None else self.sy
        return transform2d.matrix_scale(self.sx, sy)

    def __str__(self) -> str:
        if self.sy is None:
            return f'scale({floatystr(self.sx)})'
        return f'scale({floatystr(self.sx)},{floatystr(self.sy)})'


@dataclasses.dataclass(frozen=True)
class Rotate:
    """rotate(angle [cx cy]).

    The angle is in degrees. If a center is specified the rotation
    is about that point, otherwise about the origin.
    """

    angle: float
    cx: float | None = None
    cy: float | None = None

    def matrix(self) -> TMatrix:
        a = math.radians(self.angle)
        return transform2d.matrix_rotate(a, (self.cx or 0.0, self.cy or 0.0))

    def __str__(self) -> str:
        if self.cx is None and self.cy is None:
            return f'rotate({floatystr(self.angle)})'
        return (
            f'rotate({floatystr(self.angle)},'
            f'{floatystr(self.cx or 0.0)},{floatystr(self.cy or 0.0)})'
        )


@dataclasses.dataclass(frozen=True)
class SkewX:
    """skewX(angle), angle in degrees."""

    angle: float

    def matrix(self) -> TMatrix:
        return transform2d.matrix_skew_x(math.radians(self.angle))

    def __str__(self) -> str:
        return f'skewX({floatystr(self.angle)})'


@dataclasses.dataclass(frozen=True)
class SkewY:
    """skewY(angle), angle in degrees."""

    angle: float

    def matrix(self) -> TMatrix:
        return transform2d.matrix_skew_y(math.radians(self.angle))

    def __str__(self) -> str:
        return f'skewY({floatystr(self.angle)})'


@dataclasses.dataclass(frozen=True)
class Matrix:
    """matrix(a b c d e f).

    Maps (x, y) to (a*x + c*y + e, b*x + d*y + f).
    """

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @classmethod
    def from_matrix(cls, matrix: TMatrix) -> Matrix:
        """Create a Matrix transform from a geom2d 2x3 matrix."""
        return cls(
            matrix[0][0],
            matrix[1][0],
            matrix[0][1],
            matrix[1][1],
            matrix[0][2],
            matrix[1][2],
        )

    def matrix(self) -> TMatrix:
        return ((self.a, self.c, self.e), (self.b, self.d, self.f))

    def __str__(self) -> str:
        values = ','.join(
            floatystr(v) for v in (self.a, self.b, self.c, self.d, self.e, self.f)
        )
        return f'matrix({values})'


TTransform: TypeAlias = Union[Translate, Scale, Rotate, SkewX, SkewY, Matrix]


def parse_transform_list(text: str | None) -> list[TTransform]:
    """Parse an SVG transform attribute value.

    Args:
        text: A string containing zero or more transform functions,
            i.e. "translate(10 20) rotate(45)".

    Returns:
        A list of transforms in document (left to right) order.

    Raises:
        ParseError: If the function syntax is malformed or a function
            has the wrong number of arguments.
    """
    transforms: list[TTransform] = []
    if not text:
        return transforms
    text = text.strip()
    pos = 0
    while pos < len(text):
        m = _TRANSFORM_RE.match(text, pos)
        if m is None:
            raise ParseError(f'Malformed transform list: "{text}"')
        name, args = m.groups()
        transforms.append(_make_transform(name, _parse_args(name, args)))
        pos = m.end()
    return transforms


def _parse_args(name: str, args: str) -> list[float]:
    args = args.strip()
    values: list[float] = []
    pos = 0
    while pos < len(args):
        if values:
            pos = _ARGS_SEP_RE.match(args, pos).end()
        m = _NUMBER_RE.match(args, pos)
        if m is None:
            raise ParseError(f'Invalid {name} argument: "{args}"')
        values.append(float(m.group()))
        pos = m.end()
    if len(values) not in _ARG_COUNTS[name]:
        raise ParseError(
            f'Wrong number of arguments for {name}: {len(values)}'
        )
    return values


def _make_transform(name: str, values: Sequence[float]) -> TTransform:
    if name == 'translate':
        return Translate(*values)
    if name == 'scale':
        return Scale(*values)
    if name == 'rotate':
        return Rotate(*values)
    if name == 'skewX':
        return SkewX(values[0])
    if name == 'skewY':
        return SkewY(values[0])
    return Matrix(*values)


def to_matrix(transforms: Iterable[TTransform]) -> TMatrix:
    """Compose a transform list into a single affine matrix.

    Transforms are composed left to right (T1 * T2 * ... * Tn),
    which means the last transform is applied to a point first.
    """
    result = IDENTITY
    for t in transforms:
        result = transform2d.compose_transform(result, t.matrix())
    return result


def compose(a: TTransform, b: TTransform) -> Matrix:
    """Compose two transforms into one equivalent matrix transform.

    `b` is applied first, then `a`.
    """
    return Matrix.from_matrix(
        transform2d.compose_transform(a.matrix(), b.matrix())
    )


def apply(point: TPoint, transforms: Iterable[TTransform]) -> tuple[float, float]:
    """Apply a transform list to a 2D point."""
    p = geom2d.P(point).transform(to_matrix(transforms))
    return (p[0], p[1])


def apply_matrix(matrix: TMatrix, x: float, y: float) -> tuple[float, float]:
    """Apply an affine matrix to the point (x, y)."""
    p = geom2d.P(x, y).transform(matrix)
    return (p[0], p[1])
