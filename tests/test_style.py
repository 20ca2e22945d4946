"""Test inline CSS parsing and stroke/fill resolution."""

from __future__ import annotations

import pytest

from svgdoc import css, style, units
from svgdoc.elements import Circle, Group
from svgdoc.errors import ParseError, StyleError
from svgdoc.style import Fill, FillRule, LineCap, LineJoin, Stroke


def test_parse_style_string() -> None:
    assert css.parse_style_string(None) == {}
    assert css.parse_style_string('') == {}
    assert css.parse_style_string(
        ' fill : red ; stroke:blue;;bogus; fill:green ;font: 12px "a:b"'
    ) == {
        'fill': 'green',
        'stroke': 'blue',
        'font': '12px "a:b"',
    }


def test_parse_length() -> None:
    assert units.parse_length('10') == 10
    assert units.parse_length(' 2.5px ') == 2.5
    assert units.parse_length('1in') == 96
    assert units.parse_length('-1e1') == -10
    assert units.parse_length('25.4mm') == pytest.approx(96)
    for value in ['', 'px', '10 furlongs', '1,5', 'abc']:
        with pytest.raises(ParseError):
            units.parse_length(value)


def test_parse_values() -> None:
    assert style.parse_opacity('0.5') == 0.5
    assert style.parse_opacity('50%') == 0.5
    assert style.parse_opacity('2') == 1
    assert style.parse_opacity('-1') == 0
    assert style.parse_width('2') == 2
    assert style.parse_width('1pt') == pytest.approx(96 / 72)
    assert style.parse_line_cap('round') is LineCap.ROUND
    assert style.parse_line_join(' bevel ') is LineJoin.BEVEL
    assert style.parse_fill_rule('evenodd') is FillRule.EVENODD
    assert style.parse_property('stroke', 'inherit') is None
    assert style.parse_property('stroke-miterlimit', '4') == 4


@pytest.mark.parametrize(
    ('name', 'value'),
    [
        ('stroke-width', 'wide'),
        ('stroke-opacity', 'half'),
        ('stroke-opacity', 'nan'),
        ('fill-opacity', '%'),
        ('stroke-linecap', 'pointy'),
        ('stroke-linejoin', 'MITER'),
        ('fill-rule', 'odd'),
        ('stroke-miterlimit', 'inf'),
    ],
)
def test_parse_value_errors(name: str, value: str) -> None:
    with pytest.raises(StyleError):
        style.parse_property(name, value)


def test_resolve_precedence() -> None:
    circle = Circle(stroke_color='blue', stroke_width=3.0, style='stroke:green')
    stroke = style.resolve_stroke(circle)
    # Style property beats presentation attribute
    assert stroke.color == 'green'
    assert stroke.width == 3
    assert stroke.opacity is None

    parent = Stroke(color='red', width=1.0, opacity=0.5)
    stroke = style.resolve_stroke(circle, parent)
    assert stroke.color == 'green'
    assert stroke.width == 3
    assert stroke.opacity == 0.5

    # Explicit inherit takes the parent value
    circle = Circle(stroke_color='blue', style='stroke:inherit')
    assert style.resolve_stroke(circle, parent).color == 'red'
    assert style.resolve_stroke(circle).color is None


def test_resolve_fill() -> None:
    circle = Circle(style='fill:#00ff00;fill-opacity:25%;fill-rule:evenodd')
    fill = style.resolve_fill(circle, Fill(color='red', opacity=1.0))
    assert fill == Fill(color='#00ff00', opacity=0.25, rule=FillRule.EVENODD)

    fill = style.resolve_fill(Circle(), Fill(color='red'))
    assert fill == Fill(color='red')


def test_style_inheritance() -> None:
    group = Group(stroke_color='red')
    group_stroke = style.resolve_stroke(group)

    child = Circle(5, 5, 5)
    assert style.resolve_stroke(child, group_stroke).color == 'red'

    child = Circle(5, 5, 5, stroke_color='blue')
    assert style.resolve_stroke(child, group_stroke).color == 'blue'


def test_resolve_style_errors() -> None:
    with pytest.raises(StyleError):
        style.resolve_style(Circle(style='stroke-width:thick'))
    with pytest.raises(StyleError):
        style.resolve_style(Circle(style='fill-rule:sometimes'))
    # Unknown properties are ignored
    stroke, fill = style.resolve_style(Circle(style='font-size:bogus'))
    assert stroke == Stroke()
    assert fill == Fill()


def test_inherit_only_fills_unset_fields() -> None:
    stroke = Stroke(color='blue')
    stroke.inherit(Stroke(color='red', width=2.0, line_cap=LineCap.SQUARE))
    assert stroke == Stroke(color='blue', width=2.0, line_cap=LineCap.SQUARE)


def test_style_to_attributes() -> None:
    stroke = Stroke(color='red', width=2.0, line_join=LineJoin.ROUND)
    fill = Fill(color='none', opacity=0.5)
    assert style.style_to_attributes(stroke, fill) == {
        'stroke': 'red',
        'stroke-width': '2',
        'stroke-linejoin': 'round',
        'fill': 'none',
        'fill-opacity': '0.5',
    }
    assert style.style_to_attributes(None, None) == {}
