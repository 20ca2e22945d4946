"""SVG document model with shape to path flattening.

Decodes SVG markup into typed entities, converts basic shapes
(circle, ellipse, rect, line, polyline, polygon) to path commands,
applies nested transforms, and resolves inherited stroke and fill
styles. The result is a flat list of absolute, styled paths.
"""

import importlib.metadata

__version__ = importlib.metadata.version('utl-svgdoc')
