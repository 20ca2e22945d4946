"""Exceptions raised while decoding and flattening SVG documents."""

from __future__ import annotations


class SVGError(Exception):
    """Base class for all svgdoc errors."""


class ParseError(SVGError, ValueError):
    """Malformed attribute syntax or malformed XML."""


class ShapeError(SVGError, ValueError):
    """Missing or invalid geometric parameters."""


class StyleError(SVGError, ValueError):
    """Malformed style property value."""


class NotFoundError(SVGError, FileNotFoundError):
    """Missing input file or resource."""
