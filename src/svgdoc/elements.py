"""Typed SVG document entities.

Every element is a plain mutable dataclass composed from three
attribute capabilities:

- :class:`CoreAttributes` (id)
- :class:`PresentationAttributes` (fill, stroke, transform)
- :class:`StylingAttributes` (inline style)

plus its own geometry. Containers (:class:`Group` and
:class:`Document`) hold their children as one ordered list so that
document order survives a decode/encode round trip.
"""

from __future__ import annotations

import dataclasses
import re
from typing import TYPE_CHECKING, Union

from . import units
from .errors import ParseError
from .pathcmd import format_path_data, parse_path_data
from .transform import parse_transform_list

if TYPE_CHECKING:
    from collections.abc import Iterator

    from typing_extensions import Self, TypeAlias

    from .pathcmd import TCommand
    from .style import Fill, FillRule, LineCap, LineJoin, Stroke
    from .transform import TTransform

_RE_VIEWBOX_SEP = re.compile(r'[,\s]+')
_VIEWBOX_LEN = 4


@dataclasses.dataclass(kw_only=True)
class CoreAttributes:
    """Core attributes."""

    id: str | None = None


@dataclasses.dataclass(kw_only=True)
class PresentationAttributes:
    """Presentation attributes controlling fill, stroke and transform."""

    fill_color: str | None = None
    fill_opacity: float | None = None
    fill_rule: FillRule | None = None
    stroke_color: str | None = None
    stroke_width: float | None = None
    stroke_opacity: float | None = None
    stroke_linecap: LineCap | None = None
    stroke_linejoin: LineJoin | None = None
    stroke_miterlimit: float | None = None
    transform: str | None = None

    def transformations(self) -> list[TTransform]:
        """The parsed `transform` attribute.

        Raises:
            ParseError: If the transform attribute is malformed.
        """
        return parse_transform_list(self.transform)


@dataclasses.dataclass(kw_only=True)
class StylingAttributes:
    """The inline CSS `style` attribute."""

    style: str | None = None


@dataclasses.dataclass
class Circle(CoreAttributes, PresentationAttributes, StylingAttributes):
    """A circle defined by a center point and a radius.

    https://www.w3.org/TR/SVG11/shapes.html#CircleElement
    """

    cx: float = 0.0
    cy: float = 0.0
    r: float = 0.0


@dataclasses.dataclass
class Ellipse(CoreAttributes, PresentationAttributes, StylingAttributes):
    """An axis aligned ellipse defined by a center point and two radii.

    https://www.w3.org/TR/SVG11/shapes.html#EllipseElement
    """

    cx: float = 0.0
    cy: float = 0.0
    rx: float = 0.0
    ry: float = 0.0


@dataclasses.dataclass
class Rectangle(CoreAttributes, PresentationAttributes, StylingAttributes):
    """An axis aligned rectangle with optional rounded corners.

    If only one of the corner radii is set the other one
    takes the same value.

    https://www.w3.org/TR/SVG11/shapes.html#RectElement
    """

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    rx: float | None = None
    ry: float | None = None


@dataclasses.dataclass
class Line(CoreAttributes, PresentationAttributes, StylingAttributes):
    """A straight line segment."""

    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0


@dataclasses.dataclass
class Polyline(CoreAttributes, PresentationAttributes, StylingAttributes):
    """An open set of connected line segments.

    `points` is the SVG points list, i.e. "0,0 10,0 10,10".
    """

    points: str = ''


@dataclasses.dataclass
class Polygon(CoreAttributes, PresentationAttributes, StylingAttributes):
    """A closed set of connected line segments.

    `points` is the SVG points list, i.e. "0,0 10,0 10,10".
    """

    points: str = ''


@dataclasses.dataclass
class Path(CoreAttributes, PresentationAttributes, StylingAttributes):
    """A sequence of path commands.

    Paths produced by flattening also carry the resolved
    `fill` and `stroke` styles.
    """

    commands: list[TCommand] = dataclasses.field(default_factory=list)
    fill: Fill | None = None
    stroke: Stroke | None = None

    @classmethod
    def from_data(cls, path_data: str, **kwargs) -> Self:  # noqa: ANN003
        """Create a Path from SVG path data (the `d` attribute value)."""
        return cls(commands=parse_path_data(path_data), **kwargs)

    def data(self, precision: int | None = None) -> str:
        """Return the SVG path data for this path."""
        return format_path_data(self.commands, precision=precision)


@dataclasses.dataclass
class Text(CoreAttributes, PresentationAttributes, StylingAttributes):
    """A text element.

    Text is kept so that it survives a decode/encode round trip
    but it is never converted to a path. Only the position and the
    character content are kept, nested `tspan` markup is flattened
    to its text. `x` and `y` are kept as written since they can be
    coordinate lists.

    https://www.w3.org/TR/SVG11/text.html#TextElement
    """

    x: str | None = None
    y: str | None = None
    content: str = ''


@dataclasses.dataclass
class Group(CoreAttributes, PresentationAttributes, StylingAttributes):
    """A container used to group other elements.

    https://www.w3.org/TR/SVG11/struct.html#Groups
    """

    children: list[TElement] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Document(CoreAttributes, PresentationAttributes, StylingAttributes):
    """The outermost `svg` element.

    `width`, `height`, and `view_box` are kept as they appear
    in the markup, i.e. "10mm" or "0 0 100 100".
    """

    width: str | None = None
    height: str | None = None
    view_box: str | None = None
    title: str | None = None
    desc: str | None = None
    children: list[TElement] = dataclasses.field(default_factory=list)

    @classmethod
    def create(cls, width: int, height: int) -> Self:
        """Create an empty document of the specified size in pixels."""
        return cls(
            width=f'{width}px',
            height=f'{height}px',
            view_box=f'0 0 {width} {height}',
        )

    def get_document_size(self) -> tuple[float, float]:
        """Return width and height of document in user units as a tuple (W, H).

        The viewBox size is used if there is one,
        otherwise the width and height attributes converted to pixels.

        Raises:
            ParseError: If the viewBox or size attributes are malformed.
        """
        if self.view_box:
            try:
                viewbox = [
                    float(v) for v in _RE_VIEWBOX_SEP.split(self.view_box.strip())
                ]
            except ValueError as e:
                raise ParseError(f'Invalid viewBox: "{self.view_box}"') from e
            if len(viewbox) != _VIEWBOX_LEN:
                raise ParseError(f'Invalid viewBox: "{self.view_box}"')
            return (viewbox[2], viewbox[3])
        width = units.parse_length(self.width) if self.width else 0.0
        height = units.parse_length(self.height) if self.height else 0.0
        return (width, height)


TElement: TypeAlias = Union[
    Circle, Ellipse, Rectangle, Line, Polygon, Polyline, Path, Text, Group
]
TStyledElement: TypeAlias = Union[TElement, Document]
TContainer: TypeAlias = Union[Group, Document]


def iter_elements(node: TContainer) -> Iterator[TElement]:
    """Depth-first iteration over all the elements under a container."""
    for child in node.children:
        yield child
        if isinstance(child, Group):
            yield from iter_elements(child)


def get_element_by_id(node: TContainer, element_id: str) -> TElement | None:
    """Find an element by id attribute.

    Args:
        node: The container to search.
        element_id: The element id attribute value.

    Returns:
        The first matching element in document order, otherwise None.
    """
    for element in iter_elements(node):
        if element.id == element_id:
            return element
    return None
