"""SVG path commands and path data (the `d` attribute) parsing/formatting.

Each drawing instruction is a small immutable value. Coordinates can be
absolute or relative to the current pen position, which is only known
by walking the command sequence from the start.

See: https://www.w3.org/TR/SVG11/paths.html#PathDataBNF
"""

from __future__ import annotations

import dataclasses
import logging
import math
from typing import TYPE_CHECKING, ClassVar, Union

import geom2d

from . import transform
from .errors import ParseError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Sequence

    from geom2d.transform2d import TMatrix
    from typing_extensions import TypeAlias

logger = logging.getLogger(__name__)

# Default number of digits after the decimal point for path output.
DEFAULT_PRECISION = 5


@dataclasses.dataclass(frozen=True)
class MoveTo:
    """M/m: start a new sub-path at (x, y)."""

    letter: ClassVar[str] = 'M'

    x: float
    y: float
    relative: bool = False


@dataclasses.dataclass(frozen=True)
class LineTo:
    """L/l: straight line to (x, y)."""

    letter: ClassVar[str] = 'L'

    x: float
    y: float
    relative: bool = False


@dataclasses.dataclass(frozen=True)
class HorizontalLineTo:
    """H/h: horizontal line to x."""

    letter: ClassVar[str] = 'H'

    x: float
    relative: bool = False


@dataclasses.dataclass(frozen=True)
class VerticalLineTo:
    """V/v: vertical line to y."""

    letter: ClassVar[str] = 'V'

    y: float
    relative: bool = False


@dataclasses.dataclass(frozen=True)
class CubicCurveTo:
    """C/c: cubic Bezier with two control points."""

    letter: ClassVar[str] = 'C'

    x1: float
    y1: float
    x2: float
    y2: float
    x: float
    y: float
    relative: bool = False


@dataclasses.dataclass(frozen=True)
class SmoothCubicCurveTo:
    """S/s: cubic Bezier whose first control point is a reflection."""

    letter: ClassVar[str] = 'S'

    x2: float
    y2: float
    x: float
    y: float
    relative: bool = False


@dataclasses.dataclass(frozen=True)
class QuadraticCurveTo:
    """Q/q: quadratic Bezier."""

    letter: ClassVar[str] = 'Q'

    x1: float
    y1: float
    x: float
    y: float
    relative: bool = False


@dataclasses.dataclass(frozen=True)
class SmoothQuadraticCurveTo:
    """T/t: quadratic Bezier whose control point is a reflection."""

    letter: ClassVar[str] = 'T'

    x: float
    y: float
    relative: bool = False


@dataclasses.dataclass(frozen=True)
class ArcTo:
    """A/a: elliptical arc to (x, y).

    The x-axis rotation `angle` is in degrees.
    """

    letter: ClassVar[str] = 'A'

    rx: float
    ry: float
    angle: float
    large_arc: bool
    sweep: bool
    x: float
    y: float
    relative: bool = False


@dataclasses.dataclass(frozen=True)
class ClosePath:
    """Z/z: close the current sub-path."""

    letter: ClassVar[str] = 'Z'

    relative: bool = False


TCommand: TypeAlias = Union[
    MoveTo,
    LineTo,
    HorizontalLineTo,
    VerticalLineTo,
    CubicCurveTo,
    SmoothCubicCurveTo,
    QuadraticCurveTo,
    SmoothQuadraticCurveTo,
    ArcTo,
    ClosePath,
]

# Path command letter to command type and number of parameters.
_COMMANDS: dict[str, tuple[type, int]] = {
    'M': (MoveTo, 2),
    'L': (LineTo, 2),
    'H': (HorizontalLineTo, 1),
    'V': (VerticalLineTo, 1),
    'C': (CubicCurveTo, 6),
    'S': (SmoothCubicCurveTo, 4),
    'Q': (QuadraticCurveTo, 4),
    'T': (SmoothQuadraticCurveTo, 2),
    'A': (ArcTo, 7),
    'Z': (ClosePath, 0),
}

# Parameter indices of the arc flags
_ARC_FLAGS = (3, 4)

DIGIT_EXP = '0123456789eE'
COMMA_WSP = ', \t\n\r\f\v'
DRAWTO_COMMAND = 'MmZzLlHhVvCcSsQqTtAa'
SIGN = '+-'
EXPONENT = 'eE'


def path_tokenizer(path_data: str) -> Iterator[tuple[str, bool]]:
    """Tokenize SVG path data.

    A generator that yields tokens from path data.
    This will yield a tuple containing a
    command token or a numeric parameter token
    followed by a boolean flag that is True if the token
    is a command and False if the token is a numeric parameter.

    Args:
        path_data: The 'd' attribute of an SVG path.

    Yields:
        A 2-tuple with token and token type hint.

    Raises:
        ParseError: If an unexpected character is found.
    """
    # Char-by-char scan is significantly faster than using regexp.
    # See: https://codereview.stackexchange.com/questions/28502/svg-path-parsing
    in_float = False
    entity = ''
    for char in path_data:
        if char in DIGIT_EXP:
            entity += char
        elif char in COMMA_WSP:
            if entity:
                yield (entity, False)  # Number parameter
                in_float = False
                entity = ''
        elif char in DRAWTO_COMMAND:
            if entity:
                yield (entity, False)  # Number parameter
                in_float = False
                entity = ''
            yield (char, True)  # Yield a command
        elif char == '.':
            if in_float:
                yield (entity, False)  # Number parameter
                entity = '.'
            else:
                entity += '.'
                in_float = True
        elif char in SIGN:
            if entity and entity[-1] not in EXPONENT:
                yield (entity, False)  # Number parameter
                in_float = False
                entity = char
            else:
                entity += char
        else:
            raise ParseError(f'Unexpected character in path data: "{char}"')
    if entity:
        yield (entity, False)  # Number parameter


def parse_path_data(path_data: str) -> list[TCommand]:  # noqa: PLR0912
    """Parse an SVG path definition string into path commands.

    Command kinds and relative/absolute coordinates are preserved.
    Repeated parameter groups produce repeated commands, and extra
    coordinate pairs after a moveto are implicit linetos.

    Args:
        path_data: The 'd' attribute value of a SVG path element.

    Returns:
        A list of path commands.

    Raises:
        ParseError: If the path data is malformed.
    """
    commands: list[TCommand] = []
    letter: str | None = None
    params: list[float] = []
    tokens = list(path_tokenizer(path_data))
    tokens.reverse()
    while tokens:
        token, is_command = tokens.pop()
        if is_command:
            if params:
                raise ParseError(f'Incomplete "{letter}" command: {path_data}')
            if letter is None and token not in 'Mm':
                raise ParseError(f'Path data must start with a moveto: {path_data}')
            letter = token
            if letter in 'Zz':
                commands.append(ClosePath(relative=letter == 'z'))
            continue

        if letter is None:
            raise ParseError(f'Path data must start with a moveto: {path_data}')
        cmd_type, num_params = _COMMANDS[letter.upper()]
        if num_params == 0:
            raise ParseError(f'Unexpected parameter after "{letter}": {token}')

        if letter in 'Aa' and len(params) in _ARC_FLAGS and len(token) > 1:
            # Flags can be packed without separators, i.e. "a1,1 0 01,1"
            tokens.append((token[1:], False))
            token = token[0]
        try:
            value = float(token)
        except ValueError as e:
            raise ParseError(f'Invalid number in path data: "{token}"') from e
        if letter in 'Aa' and len(params) in _ARC_FLAGS and value not in {0, 1}:
            raise ParseError(f'Invalid arc flag: "{token}"')
        params.append(value)

        if len(params) == num_params:
            relative = letter.islower()
            if cmd_type is ArcTo:
                rx, ry, angle, large_arc, sweep, x, y = params
                commands.append(
                    ArcTo(rx, ry, angle, bool(large_arc), bool(sweep), x, y, relative)
                )
            else:
                commands.append(cmd_type(*params, relative=relative))
            params = []
            if letter in 'Mm':
                # Subsequent parameters are for an implicit lineto
                letter = 'l' if relative else 'L'

    if params:
        raise ParseError(f'Incomplete "{letter}" command: {path_data}')
    return commands


def end_point(cmd: TCommand, pen: tuple[float, float]) -> tuple[float, float]:
    """The pen position after an absolute command is drawn from `pen`.

    ClosePath leaves `pen` as is since the sub-path start is not known here.
    """
    if isinstance(cmd, HorizontalLineTo):
        return (cmd.x, pen[1])
    if isinstance(cmd, VerticalLineTo):
        return (pen[0], cmd.y)
    if isinstance(cmd, ClosePath):
        return pen
    return (cmd.x, cmd.y)


def to_absolute(commands: Iterable[TCommand]) -> list[TCommand]:
    """Convert relative commands to absolute commands of the same kind."""
    result: list[TCommand] = []
    pen = (0.0, 0.0)
    start = pen
    for cmd in commands:
        if cmd.relative:
            cmd = _absolute(cmd, pen)  # noqa: PLW2901
        if isinstance(cmd, ClosePath):
            pen = start
        else:
            pen = end_point(cmd, pen)
            if isinstance(cmd, MoveTo):
                start = pen
        result.append(cmd)
    return result


def _absolute(cmd: TCommand, pen: tuple[float, float]) -> TCommand:
    px, py = pen
    if isinstance(cmd, (MoveTo, LineTo, SmoothQuadraticCurveTo)):
        return type(cmd)(cmd.x + px, cmd.y + py)
    if isinstance(cmd, HorizontalLineTo):
        return HorizontalLineTo(cmd.x + px)
    if isinstance(cmd, VerticalLineTo):
        return VerticalLineTo(cmd.y + py)
    if isinstance(cmd, CubicCurveTo):
        return CubicCurveTo(
            cmd.x1 + px, cmd.y1 + py, cmd.x2 + px, cmd.y2 + py, cmd.x + px, cmd.y + py
        )
    if isinstance(cmd, SmoothCubicCurveTo):
        return SmoothCubicCurveTo(cmd.x2 + px, cmd.y2 + py, cmd.x + px, cmd.y + py)
    if isinstance(cmd, QuadraticCurveTo):
        return QuadraticCurveTo(cmd.x1 + px, cmd.y1 + py, cmd.x + px, cmd.y + py)
    if isinstance(cmd, ArcTo):
        return dataclasses.replace(cmd, x=cmd.x + px, y=cmd.y + py, relative=False)
    return ClosePath()


def final_point(commands: Iterable[TCommand]) -> tuple[float, float]:
    """Return the pen position after drawing all the commands."""
    pen = (0.0, 0.0)
    start = pen
    for cmd in to_absolute(commands):
        if isinstance(cmd, ClosePath):
            pen = start
            continue
        pen = end_point(cmd, pen)
        if isinstance(cmd, MoveTo):
            start = pen
    return pen


def transform_commands(
    commands: Iterable[TCommand], matrix: TMatrix
) -> list[TCommand]:
    """Apply an affine transform matrix to path commands.

    The result is in absolute coordinates. Horizontal and vertical
    lines become plain lines since they are not preserved by
    rotation or skew.

    Args:
        commands: Path commands, absolute or relative.
        matrix: A geom2d 2x3 transform matrix.

    Returns:
        A new list of absolute path commands.
    """

    def xf(x: float, y: float) -> tuple[float, float]:
        return transform.apply_matrix(matrix, x, y)

    result: list[TCommand] = []
    pen = (0.0, 0.0)
    start = pen
    for cmd in to_absolute(commands):
        if isinstance(cmd, ClosePath):
            result.append(cmd)
            pen = start
            continue
        if isinstance(cmd, MoveTo):
            result.append(MoveTo(*xf(cmd.x, cmd.y)))
        elif isinstance(cmd, (LineTo, HorizontalLineTo, VerticalLineTo)):
            result.append(LineTo(*xf(*end_point(cmd, pen))))
        elif isinstance(cmd, CubicCurveTo):
            result.append(
                CubicCurveTo(*xf(cmd.x1, cmd.y1), *xf(cmd.x2, cmd.y2), *xf(cmd.x, cmd.y))
            )
        elif isinstance(cmd, SmoothCubicCurveTo):
            result.append(SmoothCubicCurveTo(*xf(cmd.x2, cmd.y2), *xf(cmd.x, cmd.y)))
        elif isinstance(cmd, QuadraticCurveTo):
            result.append(QuadraticCurveTo(*xf(cmd.x1, cmd.y1), *xf(cmd.x, cmd.y)))
        elif isinstance(cmd, SmoothQuadraticCurveTo):
            result.append(SmoothQuadraticCurveTo(*xf(cmd.x, cmd.y)))
        elif isinstance(cmd, ArcTo):
            result.append(transform_arc(cmd, matrix))
        pen = end_point(cmd, pen)
        if isinstance(cmd, MoveTo):
            start = pen
    return result


def transform_arc(arc: ArcTo, matrix: TMatrix) -> ArcTo:
    """Apply an affine transform to an absolute elliptical arc command.

    The transformed ellipse radii and x-axis rotation are the singular
    values and left singular vector angle of the matrix that maps the
    unit circle onto the transformed ellipse.
    A reflection (negative determinant) reverses the sweep direction.
    """
    x, y = transform.apply_matrix(matrix, arc.x, arc.y)
    (a, c, _e), (b, d, _f) = matrix
    sweep = arc.sweep if a * d - b * c >= 0 else not arc.sweep
    if geom2d.is_zero(arc.rx) or geom2d.is_zero(arc.ry):
        # Zero radius arcs are drawn as straight lines anyway
        logger.debug('Degenerate arc: %s', arc)
        return ArcTo(arc.rx, arc.ry, arc.angle, arc.large_arc, sweep, x, y)

    phi = math.radians(arc.angle)
    cos_phi = math.cos(phi)
    sin_phi = math.sin(phi)
    # [p q]
    # [r s] = M * R(phi) * diag(rx, ry)
    p = (a * cos_phi + c * sin_phi) * arc.rx
    q = (c * cos_phi - a * sin_phi) * arc.ry
    r = (b * cos_phi + d * sin_phi) * arc.rx
    s = (d * cos_phi - b * sin_phi) * arc.ry

    # Closed form 2x2 SVD
    e1 = (p + s) / 2
    f1 = (p - s) / 2
    g1 = (r + q) / 2
    h1 = (r - q) / 2
    q1 = math.hypot(e1, h1)
    r1 = math.hypot(f1, g1)
    rx = abs(q1 + r1)
    ry = abs(q1 - r1)
    angle = math.degrees((math.atan2(h1, e1) + math.atan2(g1, f1)) / 2)
    if geom2d.float_eq(rx, ry):
        # A circle has no meaningful rotation
        angle = 0.0
    return ArcTo(rx, ry, angle, arc.large_arc, sweep, x, y)


def apply_transforms(
    commands: Sequence[TCommand], transforms: Sequence[transform.TTransform]
) -> list[TCommand]:
    """Apply an ordered transform list to path commands.

    An empty transform list leaves the commands untouched,
    including relative and shorthand commands.
    """
    if not transforms:
        return list(commands)
    return transform_commands(commands, transform.to_matrix(transforms))


def format_path_data(
    commands: Iterable[TCommand], precision: int | None = DEFAULT_PRECISION
) -> str:
    """Format path commands as an SVG path `d` attribute value.

    Args:
        commands: The path commands.
        precision: Number of digits after the decimal point.
            If None numbers are written in their shortest form.

    Returns:
        Path data, i.e. "M0,0 L10,0 L10,10 Z" for precision=None.
    """
    fmt: Callable[[float], str]
    if precision is None:
        fmt = transform.floatystr
    else:
        fmt = f'{{:.{precision}f}}'.format
    return ' '.join(format_command(cmd, fmt) for cmd in commands)


def format_command(cmd: TCommand, fmt: Callable[[float], str]) -> str:
    """Format a single path command using `fmt` to format numbers."""
    letter = cmd.letter.lower() if cmd.relative else cmd.letter
    if isinstance(cmd, ClosePath):
        return letter
    if isinstance(cmd, HorizontalLineTo):
        return f'{letter}{fmt(cmd.x)}'
    if isinstance(cmd, VerticalLineTo):
        return f'{letter}{fmt(cmd.y)}'
    if isinstance(cmd, ArcTo):
        return (
            f'{letter}{fmt(cmd.rx)},{fmt(cmd.ry)} {fmt(cmd.angle)}'
            f' {cmd.large_arc:d} {cmd.sweep:d} {fmt(cmd.x)},{fmt(cmd.y)}'
        )
    if isinstance(cmd, CubicCurveTo):
        points = [(cmd.x1, cmd.y1), (cmd.x2, cmd.y2), (cmd.x, cmd.y)]
    elif isinstance(cmd, SmoothCubicCurveTo):
        points = [(cmd.x2, cmd.y2), (cmd.x, cmd.y)]
    elif isinstance(cmd, QuadraticCurveTo):
        points = [(cmd.x1, cmd.y1), (cmd.x, cmd.y)]
    else:
        points = [(cmd.x, cmd.y)]
    return letter + ' '.join(f'{fmt(x)},{fmt(y)}' for x, y in points)
