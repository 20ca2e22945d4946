"""Test decoding and encoding SVG markup."""

from __future__ import annotations

import io
import pathlib

import pytest
from lxml import etree

from svgdoc import svg
from svgdoc.elements import (
    Circle,
    Document,
    Ellipse,
    Group,
    Line,
    Path,
    Polygon,
    Polyline,
    Rectangle,
    Text,
    get_element_by_id,
    iter_elements,
)
from svgdoc.errors import NotFoundError, ParseError, StyleError
from svgdoc.pathcmd import ClosePath, LineTo, MoveTo
from svgdoc.style import FillRule, LineCap, Stroke


def test_round_trip_minimal() -> None:
    document = svg.parse_document(
        '<svg width="10" height="10"><circle cx="5" cy="5" r="5"/></svg>'
    )
    assert document.width == '10'
    assert document.height == '10'
    assert document.children == [Circle(5, 5, 5)]

    markup = svg.to_markup(document)
    root = etree.fromstring(markup)
    assert root.tag == svg.svg_ns('svg')
    assert root.get('width') == '10'
    (circle,) = root
    assert circle.tag == svg.svg_ns('circle')
    assert float(circle.get('cx')) == pytest.approx(5, abs=1e-5)
    assert float(circle.get('cy')) == pytest.approx(5, abs=1e-5)
    assert float(circle.get('r')) == pytest.approx(5, abs=1e-5)
    assert circle.get('r') == '5.00000'

    assert svg.parse_document(markup) == document


def test_load_document(files_dir: pathlib.Path) -> None:
    document = svg.load_document(files_dir / 'shapes.svg')
    assert document.title == 'Shapes'
    assert document.desc == 'One of each shape'
    assert document.view_box == '0 0 200 100'
    assert document.get_document_size() == (200, 100)

    # Document order is preserved
    kinds = [type(e) for e in document.children]
    assert kinds == [Group, Line, Polyline, Polygon, Path, Text]
    layer = document.children[0]
    assert [type(e) for e in layer.children] == [Rectangle, Group, Ellipse]
    assert layer.stroke_color == 'red'
    assert layer.stroke_width == 2
    assert layer.fill_color == 'none'

    ids = [e.id for e in iter_elements(document)]
    assert ids == [
        'layer1',
        'rect1',
        'inner',
        'circle1',
        'ellipse1',
        'line1',
        'polyline1',
        'polygon1',
        'path1',
        'text1',
    ]

    circle = get_element_by_id(document, 'circle1')
    assert circle == Circle(20, 20, 10, id='circle1', stroke_color='blue')
    assert get_element_by_id(document, 'inner').transform == 'translate(100,0)'
    assert get_element_by_id(document, 'nope') is None

    path = get_element_by_id(document, 'path1')
    assert path.commands[0] == MoveTo(150, 50)
    assert isinstance(path.commands[-1], ClosePath)

    text = get_element_by_id(document, 'text1')
    assert text == Text(
        x='0', y='95', content='Shapes only', id='text1', fill_color='black'
    )


def test_load_document_errors(files_dir: pathlib.Path, tmp_path: pathlib.Path) -> None:
    with pytest.raises(NotFoundError):
        svg.load_document(tmp_path / 'missing.svg')
    with pytest.raises(FileNotFoundError):
        svg.load_document(tmp_path / 'missing.svg')
    with pytest.raises(ParseError):
        svg.load_document(files_dir / 'not-svg.xml')

    broken = tmp_path / 'broken.svg'
    broken.write_text('<svg><circle></svg>')
    with pytest.raises(ParseError):
        svg.load_document(broken)


@pytest.mark.parametrize(
    ('markup', 'error'),
    [
        ('<svg', ParseError),
        ('<html/>', ParseError),
        ('<svg><circle r="big"/></svg>', ParseError),
        ('<svg><path d="L1,1"/></svg>', ParseError),
        ('<svg><g transform="spin(1)"/></svg>', ParseError),
        ('<svg><rect stroke-width="thick"/></svg>', StyleError),
        ('<svg><rect fill-rule="odd"/></svg>', StyleError),
    ],
)
def test_parse_document_errors(markup: str, error: type[Exception]) -> None:
    with pytest.raises(error):
        svg.parse_document(markup)


def test_parse_document_keep_going() -> None:
    markup = (
        '<svg><circle id="bad" r="abc"/>'
        '<circle id="good" cx="5" cy="5" r="5"/>'
        '<g id="layer"><rect stroke-width="wide"/><line id="ok"/></g>'
        '</svg>'
    )
    with pytest.raises(ParseError):
        svg.parse_document(markup)

    errors: list[Exception] = []
    document = svg.parse_document(markup, errors=errors)
    assert [e.id for e in iter_elements(document)] == ['good', 'layer', 'ok']
    assert len(errors) == 2
    assert isinstance(errors[0], ParseError)
    assert 'r="abc"' in str(errors[0])
    assert isinstance(errors[1], StyleError)


def test_load_document_keep_going(files_dir: pathlib.Path) -> None:
    errors: list[Exception] = []
    document = svg.load_document(files_dir / 'bad-attribute.svg', errors=errors)
    assert [e.id for e in iter_elements(document)] == [
        'good',
        'layer1',
        'also-good',
    ]
    assert [type(e) for e in errors] == [ParseError, StyleError]

    # Errors on the root element are not skipped
    with pytest.raises(ParseError):
        svg.parse_document('<svg transform="spin(1)"/>', errors=[])


def test_text_round_trip() -> None:
    document = svg.parse_document(
        '<svg><text id="t" x="1 2 3" y="4" style="font-size:12px">'
        'Hello <tspan fill="red">world</tspan>!</text></svg>'
    )
    (text,) = document.children
    assert text == Text(
        x='1 2 3', y='4', content='Hello world!', id='t', style='font-size:12px'
    )

    root = svg.encode_element(document)
    element = root[0]
    assert element.tag == svg.svg_ns('text')
    assert element.get('x') == '1 2 3'
    assert element.text == 'Hello world!'
    assert svg.parse_document(etree.tostring(root)) == document


def test_decode_attributes() -> None:
    document = svg.parse_document(
        '<svg xmlns="http://www.w3.org/2000/svg">'
        '<!-- comment -->'
        '<rect x="1mm" y="2" width="1in" height="10" rx="1"'
        ' stroke-linecap="round" fill-rule="evenodd" fill-opacity="50%"'
        ' stroke="inherit" style="stroke:red"/>'
        '<unknown><circle r="1"/></unknown>'
        '</svg>'
    )
    (rect,) = document.children
    assert rect.x == pytest.approx(96 / 25.4)
    assert rect.width == 96
    assert rect.rx == 1
    assert rect.ry is None
    assert rect.stroke_linecap is LineCap.ROUND
    assert rect.fill_rule is FillRule.EVENODD
    assert rect.fill_opacity == 0.5
    assert rect.stroke_color is None
    assert rect.style == 'stroke:red'


def test_create_document() -> None:
    document = Document.create(100, 50)
    assert document.width == '100px'
    assert document.height == '50px'
    assert document.view_box == '0 0 100 50'
    assert document.children == []
    assert document.get_document_size() == (100, 50)

    # Without a viewBox the size attributes are used
    document.view_box = None
    document.width = '1in'
    assert document.get_document_size() == (96, 50)

    document.view_box = '0 0 10'
    with pytest.raises(ParseError):
        document.get_document_size()


def test_encode_document() -> None:
    document = Document.create(100, 50)
    document.title = 'Test'
    document.children = [
        Group(
            id='g1',
            transform='rotate(45)',
            stroke_linecap=LineCap.BUTT,
            children=[Rectangle(0, 0, 10, 5), Polygon(points='0,0 1,1 2,0')],
        ),
        Path(commands=[MoveTo(0, 0), LineTo(1.5, 0), ClosePath()]),
    ]
    root = svg.encode_element(document)
    assert root.get('width') == '100px'
    assert root.get('viewBox') == '0 0 100 50'
    assert [strip(e.tag) for e in root] == ['title', 'g', 'path']
    assert root[0].text == 'Test'
    group = root[1]
    assert group.get('id') == 'g1'
    assert group.get('transform') == 'rotate(45)'
    assert group.get('stroke-linecap') == 'butt'
    assert [strip(e.tag) for e in group] == ['rect', 'polygon']
    rect = group[0]
    assert rect.get('width') == '10.00000'
    assert rect.get('rx') is None
    assert group[1].get('points') == '0,0 1,1 2,0'
    assert root[2].get('d') == (
        'M0.00000,0.00000 L1.50000,0.00000 Z'
    )

    root = svg.encode_element(document, precision=None)
    assert root[2].get('d') == 'M0,0 L1.5,0 Z'
    assert root[1][0].get('width') == '10'

    decoded = svg.parse_document(etree.tostring(root))
    assert decoded == document


def test_encode_path_styles() -> None:
    path = Path(
        commands=[MoveTo(0, 0), LineTo(1, 1)],
        stroke=Stroke(color='red', width=0.5),
        stroke_color='blue',
    )
    element = svg.encode_element(path)
    # Presentation attributes take precedence over resolved styles
    assert element.get('stroke') == 'blue'
    assert element.get('stroke-width') == '0.5'
    assert element.get('fill') is None


def test_write_document() -> None:
    document = Document.create(10, 10)
    document.children.append(Circle(5, 5, 5))
    f = io.StringIO()
    svg.write_document(document, f, pretty_print=True)
    output = f.getvalue()
    assert output.startswith('<?xml version="1.0" encoding="UTF-8"')
    assert 'xmlns="http://www.w3.org/2000/svg"' in output
    assert svg.parse_document(output) == document


def test_node_encoding() -> None:
    assert svg.node_encoding(Circle, 'cx') is svg.NodeEncoding.ATTRIBUTE
    assert svg.node_encoding(Path, 'd') is svg.NodeEncoding.ATTRIBUTE
    assert svg.node_encoding(Group, 'circle') is svg.NodeEncoding.ELEMENT
    assert svg.node_encoding(Group, 'text') is svg.NodeEncoding.ELEMENT
    assert svg.node_encoding(Document, 'text') is svg.NodeEncoding.ELEMENT
    assert svg.node_encoding(Text, 'x') is svg.NodeEncoding.ATTRIBUTE
    assert svg.node_encoding(Document, 'title') is svg.NodeEncoding.ELEMENT
    assert svg.node_encoding(Document, 'viewBox') is svg.NodeEncoding.ATTRIBUTE
    with pytest.raises(KeyError):
        svg.node_encoding(Circle, 'd')


def test_strip_ns() -> None:
    assert svg.strip_ns('{http://www.w3.org/2000/svg}rect') == 'rect'
    assert svg.strip_ns('rect') == 'rect'


def strip(tag: str) -> str:
    return svg.strip_ns(tag)
