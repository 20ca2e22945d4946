"""CSS/SVG length units.

See http://www.w3.org/TR/SVG/coords.html#Units
"""

from __future__ import annotations

import re

from .errors import ParseError

PPI = 96.0  # Pixels per inch per https://www.w3.org/TR/css-values-3/#px

# A dictionary of supported css unit to px conversion factors
UNIT_CONV = {
    'cm': PPI / 2.54,
    'mm': PPI / (2.54 * 10),
    'Q': PPI / (2.54 * 40),
    'in': PPI,
    'pc': PPI / 6,
    'pt': PPI / 72,
    'px': 1,
    # These are relative to the current font size which is unknown
    # so just assume 12pt, and uniform square font (?)
    'em': 16,
    'ex': 16,
    'ch': 16,
    'rem': 16,
    # These are non-standard
    'm': PPI / 0.0254,
    'ft': PPI * 12,
    'yd': PPI * 36,
}

_RE_FLOAT = re.compile(
    r'(([-+]?[0-9]+(\.[0-9]*)?|[-+]?\.[0-9]+)([eE][-+]?[0-9]+)?)'
)
_RE_LENGTH = re.compile(
    rf'\s*{_RE_FLOAT.pattern}\s*({"|".join(UNIT_CONV.keys())})?\s*$'
)


def parse_length(value: str) -> float:
    """Parse a length attribute value into user units (px).

    Args:
        value: A number with an optional unit suffix, i.e. '3', '3mm'.

    Returns:
        The length in user units.

    Raises:
        ParseError: If the value is not a number with an optional
            known unit suffix.
    """
    m = _RE_LENGTH.match(value)
    if m is None:
        raise ParseError(f'Invalid length: "{value}"')
    number = float(m.group(1))
    unit = m.group(5) or 'px'
    return number * UNIT_CONV[unit]
