"""Stroke and fill presentation styles.

Style values come from three places, highest precedence first:

1. A property in the element's inline `style` attribute.
2. A presentation attribute on the element, i.e. `stroke="red"`.
3. The resolved style of the nearest ancestor group or document.

Anything still unset after that stays None (the renderer default).
"""

from __future__ import annotations

import dataclasses
import enum
import math
from typing import TYPE_CHECKING, Any

from . import css, transform, units
from .errors import ParseError, StyleError

if TYPE_CHECKING:
    from collections.abc import Callable

    from .elements import TStyledElement


# Explicit request for the parent value
_INHERIT = 'inherit'


class LineCap(str, enum.Enum):
    """stroke-linecap values."""

    BUTT = 'butt'
    ROUND = 'round'
    SQUARE = 'square'


class LineJoin(str, enum.Enum):
    """stroke-linejoin values."""

    MITER = 'miter'
    ROUND = 'round'
    BEVEL = 'bevel'


class FillRule(str, enum.Enum):
    """fill-rule values."""

    NONZERO = 'nonzero'
    EVENODD = 'evenodd'


@dataclasses.dataclass
class Stroke:
    """Resolved stroke style. None means unset."""

    color: str | None = None
    width: float | None = None
    opacity: float | None = None
    line_cap: LineCap | None = None
    line_join: LineJoin | None = None
    miter_limit: float | None = None

    def inherit(self, parent: Stroke) -> None:
        """Fill in unset fields from the parent stroke."""
        _inherit(self, parent)


@dataclasses.dataclass
class Fill:
    """Resolved fill style. None means unset."""

    color: str | None = None
    opacity: float | None = None
    rule: FillRule | None = None

    def inherit(self, parent: Fill) -> None:
        """Fill in unset fields from the parent fill."""
        _inherit(self, parent)


def _inherit(child: Stroke | Fill, parent: Stroke | Fill) -> None:
    for field in dataclasses.fields(child):
        if getattr(child, field.name) is None:
            setattr(child, field.name, getattr(parent, field.name))


def parse_color(value: str) -> str:
    """Color values are kept as is."""
    return value.strip()


def parse_number(value: str) -> float:
    """Parse a plain number.

    Raises:
        StyleError: If the value is not a finite number.
    """
    try:
        number = float(value)
    except ValueError as e:
        raise StyleError(f'Invalid number: "{value}"') from e
    if not math.isfinite(number):
        raise StyleError(f'Invalid number: "{value}"')
    return number


def parse_width(value: str) -> float:
    """Parse a length with an optional unit suffix, in user units."""
    try:
        return units.parse_length(value)
    except ParseError as e:
        raise StyleError(str(e)) from e


def parse_opacity(value: str) -> float:
    """Parse an opacity value (number or percentage) clamped to 0.0 - 1.0."""
    value = value.strip()
    if value.endswith('%'):
        opacity = parse_number(value[:-1]) / 100
    else:
        opacity = parse_number(value)
    return min(max(opacity, 0.0), 1.0)


def _enum_parser(enum_type: type[enum.Enum]) -> Callable[[str], Any]:
    def parse(value: str) -> enum.Enum:
        try:
            return enum_type(value.strip())
        except ValueError as e:
            raise StyleError(
                f'Invalid {enum_type.__name__} value: "{value}"'
            ) from e

    return parse


parse_line_cap = _enum_parser(LineCap)
parse_line_join = _enum_parser(LineJoin)
parse_fill_rule = _enum_parser(FillRule)

# CSS property name -> (Stroke field, value parser)
STROKE_PROPERTIES: dict[str, tuple[str, Callable[[str], Any]]] = {
    'stroke': ('color', parse_color),
    'stroke-width': ('width', parse_width),
    'stroke-opacity': ('opacity', parse_opacity),
    'stroke-linecap': ('line_cap', parse_line_cap),
    'stroke-linejoin': ('line_join', parse_line_join),
    'stroke-miterlimit': ('miter_limit', parse_number),
}

# CSS property name -> (Fill field, value parser)
FILL_PROPERTIES: dict[str, tuple[str, Callable[[str], Any]]] = {
    'fill': ('color', parse_color),
    'fill-opacity': ('opacity', parse_opacity),
    'fill-rule': ('rule', parse_fill_rule),
}


def parse_property(name: str, value: str | None) -> Any:  # noqa: ANN401
    """Convert a stroke/fill property value to its typed form.

    Args:
        name: CSS property (or presentation attribute) name.
        value: The raw string value.

    Returns:
        The typed value, or None if the value is missing or `inherit`.

    Raises:
        StyleError: If the value is malformed.
        KeyError: If `name` is not a stroke or fill property.
    """
    _field, parse = STROKE_PROPERTIES.get(name) or FILL_PROPERTIES[name]
    if value is None or value.strip() == _INHERIT:
        return None
    return parse(value)


def resolve_stroke(
    element: TStyledElement, inherited: Stroke | None = None
) -> Stroke:
    """Resolve the effective stroke of an element.

    Args:
        element: An element with presentation and styling attributes.
        inherited: The resolved stroke of the parent container, if any.

    Returns:
        A new Stroke.

    Raises:
        StyleError: If an inline style value is malformed.
    """
    return resolve_style(element, inherited_stroke=inherited)[0]


def resolve_fill(element: TStyledElement, inherited: Fill | None = None) -> Fill:
    """Resolve the effective fill of an element.

    Args:
        element: An element with presentation and styling attributes.
        inherited: The resolved fill of the parent container, if any.

    Returns:
        A new Fill.

    Raises:
        StyleError: If an inline style value is malformed.
    """
    return resolve_style(element, inherited_fill=inherited)[1]


def resolve_style(
    element: TStyledElement,
    inherited_stroke: Stroke | None = None,
    inherited_fill: Fill | None = None,
) -> tuple[Stroke, Fill]:
    """Resolve both stroke and fill, parsing the inline style once."""
    stroke = Stroke(
        color=element.stroke_color,
        width=element.stroke_width,
        opacity=element.stroke_opacity,
        line_cap=element.stroke_linecap,
        line_join=element.stroke_linejoin,
        miter_limit=element.stroke_miterlimit,
    )
    fill = Fill(
        color=element.fill_color,
        opacity=element.fill_opacity,
        rule=element.fill_rule,
    )

    # Inline style properties override presentation attributes
    for name, value in css.parse_style_string(element.style).items():
        if name in STROKE_PROPERTIES:
            target: Stroke | Fill = stroke
            field = STROKE_PROPERTIES[name][0]
        elif name in FILL_PROPERTIES:
            target = fill
            field = FILL_PROPERTIES[name][0]
        else:
            continue
        # An explicit `inherit` also clears the presentation attribute
        setattr(target, field, parse_property(name, value))

    if inherited_stroke is not None:
        stroke.inherit(inherited_stroke)
    if inherited_fill is not None:
        fill.inherit(inherited_fill)
    return stroke, fill


def style_to_attributes(stroke: Stroke | None, fill: Fill | None) -> dict[str, str]:
    """Convert resolved styles back to presentation attribute values.

    Unset fields are omitted.
    """
    values: dict[str, Any] = {}
    if stroke is not None:
        for name, (field, _parse) in STROKE_PROPERTIES.items():
            values[name] = getattr(stroke, field)
    if fill is not None:
        for name, (field, _parse) in FILL_PROPERTIES.items():
            values[name] = getattr(fill, field)
    attrs = {}
    for name, value in values.items():
        if value is None:
            continue
        if isinstance(value, enum.Enum):
            value = value.value  # noqa: PLW2901
        elif isinstance(value, float):
            value = transform.floatystr(value)  # noqa: PLW2901
        attrs[name] = str(value)
    return attrs
