"""XML binding between SVG markup and the typed document entities.

Each entity kind has a fixed table of field bindings that says which
XML attribute or child element a field maps to. The decoder and
encoder only consult these tables.
"""

from __future__ import annotations

import enum
import functools
import logging
import pathlib
from typing import TYPE_CHECKING, Any, NamedTuple

from lxml import etree

from . import style
from .elements import (
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
)
from .errors import NotFoundError, ParseError, SVGError
from .pathcmd import format_path_data, parse_path_data
from .transform import floatystr, parse_transform_list
from .units import parse_length

if TYPE_CHECKING:
    import os
    from collections.abc import Callable
    from typing import TextIO

    from typing_extensions import TypeAlias

    from .elements import TElement, TStyledElement

    TXMLElement: TypeAlias = (
        etree._Element  # noqa: SLF001 pylint: disable=protected-access
    )

logger = logging.getLogger(__name__)

# : SVG Namespaces
SVG_NS = {
    'svg': 'http://www.w3.org/2000/svg',
    'xlink': 'http://www.w3.org/1999/xlink',
    'xml': 'http://www.w3.org/XML/1998/namespace',
}

# Namespace map for new documents (SVG is the default namespace)
_NSMAP = {None: SVG_NS['svg'], 'xlink': SVG_NS['xlink']}

# Number of digits after the decimal point for shape geometry.
GEOMETRY_PRECISION = 5


def add_ns(tag: str, ns_map: dict[str, str], ns: str) -> str:
    """Prepend a mapped namespace to `tag`."""
    uri = ns_map[ns]
    return f'{{{uri}}}{tag}'


def svg_ns(tag: str) -> str:
    """Shortcut to prepend SVG namespace to `tag`."""
    return add_ns(tag, SVG_NS, 'svg')


def strip_ns(tag: str) -> str:
    """Strip the namespace part from the tag if any."""
    return tag.rpartition('}')[2]


class NodeEncoding(enum.Enum):
    """How an entity field is represented in markup."""

    ATTRIBUTE = 'attribute'
    ELEMENT = 'element'


def _format_text(value: str, _precision: int | None) -> str:
    return value


class FieldBinding(NamedTuple):
    """Binds an entity field to an XML attribute or child element.

    `format` takes the field value and the number of digits after
    the decimal point for numeric output.
    """

    field: str
    name: str
    encoding: NodeEncoding
    parse: Callable[[str], Any] = str
    format: Callable[[Any, int | None], str] = _format_text


def _format_geometry(value: float, precision: int | None) -> str:
    if precision is None:
        return floatystr(value)
    return f'{value:.{precision}f}'


def _format_style_value(value: Any, _precision: int | None) -> str:  # noqa: ANN401
    if isinstance(value, enum.Enum):
        return str(value.value)
    if isinstance(value, float):
        return floatystr(value)
    return str(value)


def _geometry(*names: str) -> tuple[FieldBinding, ...]:
    return tuple(
        FieldBinding(
            name,
            name,
            NodeEncoding.ATTRIBUTE,
            parse_length,
            _format_geometry,
        )
        for name in names
    )


def _presentation(field: str, name: str) -> FieldBinding:
    return FieldBinding(
        field,
        name,
        NodeEncoding.ATTRIBUTE,
        functools.partial(style.parse_property, name),
        _format_style_value,
    )


def _parse_transform(value: str) -> str:
    """Validate a transform list but keep it as written."""
    parse_transform_list(value)
    return value


def _children(*tags: str) -> tuple[FieldBinding, ...]:
    return tuple(
        FieldBinding('children', tag, NodeEncoding.ELEMENT) for tag in tags
    )


CORE_BINDINGS = (FieldBinding('id', 'id', NodeEncoding.ATTRIBUTE),)

PRESENTATION_BINDINGS = (
    _presentation('fill_color', 'fill'),
    _presentation('fill_opacity', 'fill-opacity'),
    _presentation('fill_rule', 'fill-rule'),
    _presentation('stroke_color', 'stroke'),
    _presentation('stroke_width', 'stroke-width'),
    _presentation('stroke_opacity', 'stroke-opacity'),
    _presentation('stroke_linecap', 'stroke-linecap'),
    _presentation('stroke_linejoin', 'stroke-linejoin'),
    _presentation('stroke_miterlimit', 'stroke-miterlimit'),
    FieldBinding(
        'transform', 'transform', NodeEncoding.ATTRIBUTE, _parse_transform
    ),
)

STYLING_BINDINGS = (FieldBinding('style', 'style', NodeEncoding.ATTRIBUTE),)

_ELEMENT_BINDINGS = CORE_BINDINGS + PRESENTATION_BINDINGS + STYLING_BINDINGS

# Entity kind to SVG element tag
ELEMENT_TAGS: dict[type, str] = {
    Circle: 'circle',
    Ellipse: 'ellipse',
    Group: 'g',
    Line: 'line',
    Path: 'path',
    Polygon: 'polygon',
    Polyline: 'polyline',
    Rectangle: 'rect',
    Text: 'text',
    Document: 'svg',
}

# SVG element tag to entity kind
ELEMENT_TYPES: dict[str, type] = {tag: kind for kind, tag in ELEMENT_TAGS.items()}

# Child elements a container can hold
_CONTAINER_CHILDREN = _children(
    'circle',
    'ellipse',
    'g',
    'line',
    'path',
    'polygon',
    'polyline',
    'rect',
    'text',
)

# : Per-kind field bindings consulted by the decoder and encoder.
NODE_ENCODING: dict[type, tuple[FieldBinding, ...]] = {
    Circle: _geometry('cx', 'cy', 'r') + _ELEMENT_BINDINGS,
    Ellipse: _geometry('cx', 'cy', 'rx', 'ry') + _ELEMENT_BINDINGS,
    Rectangle: _geometry('x', 'y', 'width', 'height', 'rx', 'ry')
    + _ELEMENT_BINDINGS,
    Line: _geometry('x1', 'y1', 'x2', 'y2') + _ELEMENT_BINDINGS,
    Polygon: (FieldBinding('points', 'points', NodeEncoding.ATTRIBUTE),)
    + _ELEMENT_BINDINGS,
    Polyline: (FieldBinding('points', 'points', NodeEncoding.ATTRIBUTE),)
    + _ELEMENT_BINDINGS,
    Path: (
        FieldBinding(
            'commands',
            'd',
            NodeEncoding.ATTRIBUTE,
            parse_path_data,
            format_path_data,
        ),
    )
    + _ELEMENT_BINDINGS,
    Text: (
        FieldBinding('x', 'x', NodeEncoding.ATTRIBUTE),
        FieldBinding('y', 'y', NodeEncoding.ATTRIBUTE),
    )
    + _ELEMENT_BINDINGS,
    Group: _ELEMENT_BINDINGS + _CONTAINER_CHILDREN,
    Document: (
        FieldBinding('width', 'width', NodeEncoding.ATTRIBUTE),
        FieldBinding('height', 'height', NodeEncoding.ATTRIBUTE),
        FieldBinding('view_box', 'viewBox', NodeEncoding.ATTRIBUTE),
        FieldBinding('title', 'title', NodeEncoding.ELEMENT),
        FieldBinding('desc', 'desc', NodeEncoding.ELEMENT),
    )
    + _ELEMENT_BINDINGS
    + _CONTAINER_CHILDREN,
}


def node_encoding(kind: type, name: str) -> NodeEncoding:
    """Get the markup encoding of an XML attribute or child element name.

    Args:
        kind: The entity type, i.e. Circle.
        name: The XML attribute or element name, i.e. 'cx'.

    Returns:
        NodeEncoding.ATTRIBUTE or NodeEncoding.ELEMENT

    Raises:
        KeyError: If the name is not bound for this kind of entity.
    """
    for binding in NODE_ENCODING[kind]:
        if binding.name == name:
            return binding.encoding
    raise KeyError(f'{kind.__name__} has no binding for "{name}"')


def parse_document(
    data: str | bytes,
    huge_tree: bool = True,
    errors: list[Exception] | None = None,
) -> Document:
    """Parse SVG markup and return a Document.

    Args:
        data: SVG document markup.
        huge_tree: Disable security restrictions and
            support very deep trees.
        errors: Optional list that collects the errors of elements
            that could not be decoded. If None the first error is raised,
            otherwise the element is logged and left out of the document.

    Returns:
        A Document.

    Raises:
        ParseError: If the XML is malformed or the root is not `svg`.
        StyleError: If a presentation attribute is malformed.
    """
    if isinstance(data, str):
        data = data.encode('utf-8')
    parser = etree.XMLParser(huge_tree=huge_tree)
    try:
        root = etree.fromstring(data, parser=parser)
    except etree.XMLSyntaxError as e:
        raise ParseError(f'Malformed XML: {e}') from e
    return decode_document(root, errors)


def load_document(
    path: str | os.PathLike,
    huge_tree: bool = True,
    errors: list[Exception] | None = None,
) -> Document:
    """Load an SVG file and return a Document.

    See :func:`parse_document` for `errors`.

    Raises:
        NotFoundError: If the file does not exist.
        ParseError: If the XML is malformed or the root is not `svg`.
        StyleError: If a presentation attribute is malformed.
    """
    path = pathlib.Path(path)
    if not path.is_file():
        raise NotFoundError(f'No such file: {path}')
    logger.debug('Loading %s', path)
    parser = etree.XMLParser(huge_tree=huge_tree)
    try:
        with path.open('rb') as f:
            document = etree.parse(f, parser=parser)
    except etree.XMLSyntaxError as e:
        raise ParseError(f'Malformed XML in {path}: {e}') from e
    return decode_document(document.getroot(), errors)


def decode_document(
    root: TXMLElement, errors: list[Exception] | None = None
) -> Document:
    """Decode an `svg` root element.

    Malformed attributes on the root element itself are always raised.
    """
    if not isinstance(root.tag, str) or strip_ns(root.tag) != 'svg':
        raise ParseError(f'Not an SVG document: <{root.tag}>')
    document = Document()
    _decode_node(root, document, errors)
    return document


def decode_element(
    node: TXMLElement, errors: list[Exception] | None = None
) -> TElement | None:
    """Decode an SVG element.

    Args:
        node: An lxml element.
        errors: Optional list that collects the errors of descendant
            elements that could not be decoded.

    Returns:
        A new entity, or None if the element is not supported.

    Raises:
        ParseError: If a geometry, transform or path attribute is malformed.
        StyleError: If a presentation attribute is malformed.
    """
    if not isinstance(node.tag, str):
        # Comments and processing instructions
        return None
    tag = strip_ns(node.tag)
    kind = ELEMENT_TYPES.get(tag)
    if kind is None or kind is Document:
        logger.debug('Skipping unsupported element: <%s>', tag)
        return None
    entity = kind()
    _decode_node(node, entity, errors)
    return entity


def _decode_node(
    node: TXMLElement,
    entity: TStyledElement | Document,
    errors: list[Exception] | None = None,
) -> None:
    bindings = NODE_ENCODING[type(entity)]
    tag = strip_ns(node.tag)
    for binding in bindings:
        if binding.encoding is not NodeEncoding.ATTRIBUTE:
            continue
        value = node.get(binding.name)
        if value is None:
            continue
        try:
            setattr(entity, binding.field, binding.parse(value))
        except SVGError as e:
            raise type(e)(f'<{tag} {binding.name}="{value}">: {e}') from e

    if isinstance(entity, Text):
        entity.content = ''.join(node.itertext())

    elements = {
        b.name: b for b in bindings if b.encoding is NodeEncoding.ELEMENT
    }
    if not elements:
        return
    for child in node:
        if not isinstance(child.tag, str):
            continue
        binding = elements.get(strip_ns(child.tag))
        if binding is None:
            logger.debug('Skipping unsupported element: <%s>', child.tag)
        elif binding.field == 'children':
            try:
                element = decode_element(child, errors)
            except SVGError as e:
                _skip_element(child, e, errors)
                continue
            if element is not None:
                entity.children.append(element)  # type: ignore [union-attr]
        else:
            setattr(entity, binding.field, child.text or '')


def _skip_element(
    node: TXMLElement, error: SVGError, errors: list[Exception] | None
) -> None:
    if errors is None:
        raise error
    logger.warning(
        'Skipping <%s> %s: %s',
        strip_ns(node.tag),
        node.get('id') or '(no id)',
        error,
    )
    errors.append(error)


def encode_element(
    entity: TStyledElement | Document,
    parent: TXMLElement | None = None,
    precision: int | None = GEOMETRY_PRECISION,
) -> TXMLElement:
    """Create an SVG element from an entity.

    The resolved fill and stroke of a flattened Path are written as
    presentation attributes.

    Args:
        entity: A document, group, shape or path.
        parent: Optional parent element to append the new element to.
        precision: Number of digits after the decimal point for shape
            geometry and path data. Default is five.
            If None numbers are written in their shortest form.

    Returns:
        An lxml element.
    """
    bindings = NODE_ENCODING[type(entity)]
    attrs = {}
    for binding in bindings:
        if binding.encoding is NodeEncoding.ATTRIBUTE:
            value = getattr(entity, binding.field)
            if value is not None:
                attrs[binding.name] = binding.format(value, precision)
    if isinstance(entity, Path):
        # Resolved styles fill in for missing presentation attributes
        for name, value in style.style_to_attributes(
            entity.stroke, entity.fill
        ).items():
            attrs.setdefault(name, value)

    tag = svg_ns(ELEMENT_TAGS[type(entity)])
    if parent is None:
        element = etree.Element(tag, attrs, nsmap=_NSMAP)
    else:
        element = etree.SubElement(parent, tag, attrs)
    if isinstance(entity, Text):
        element.text = entity.content

    children_done = False
    for binding in bindings:
        if binding.encoding is not NodeEncoding.ELEMENT:
            continue
        if binding.field == 'children':
            if not children_done:
                for child in entity.children:  # type: ignore [union-attr]
                    encode_element(child, element, precision)
                children_done = True
        else:
            text = getattr(entity, binding.field)
            if text is not None:
                etree.SubElement(element, svg_ns(binding.name)).text = text
    return element


def to_markup(
    entity: TStyledElement | Document,
    pretty_print: bool = False,
    precision: int | None = GEOMETRY_PRECISION,
) -> str:
    """Render an entity (and its children) as SVG markup."""
    return etree.tostring(
        encode_element(entity, precision=precision),
        encoding='unicode',
        pretty_print=pretty_print,
    )


def write_document(
    document: Document,
    stream: TextIO,
    pretty_print: bool = False,
    precision: int | None = GEOMETRY_PRECISION,
) -> None:
    """Write the SVG document to a stream output."""
    stream.write('<?xml version="1.0" encoding="UTF-8" standalone="no"?>\n')
    stream.write(
        to_markup(document, pretty_print=pretty_print, precision=precision)
    )
    stream.write('\n')
