"""Parse CSS inline style properties."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

# SVG whitespace
_SVG_WS = ' \t\r\n\f'


def parse_style_string(inline_style: str | None) -> dict[str, str]:
    """Create a dictionary of style properties from an inline style attribute.

    Declarations are separated by `;` and names are separated from
    values by the first `:`. If a property is declared more than once
    the last declaration wins. Empty or malformed declarations
    (without a `:`) are skipped.

    Args:
        inline_style: A string containing the value of a CSS `style` attribute.

    Returns:
        A dictionary of style properties.
    """
    style_map: dict[str, str] = {}
    if inline_style is not None and inline_style:
        for style_property in inline_style.split(';'):
            if not style_property.strip(_SVG_WS):
                continue
            name, sep, value = style_property.partition(':')
            if not sep:
                logger.debug('Skipping style declaration: "%s"', style_property)
                continue
            name = name.strip(_SVG_WS)
            value = value.strip(_SVG_WS)
            if name and value:
                style_map[name] = value
    return style_map
