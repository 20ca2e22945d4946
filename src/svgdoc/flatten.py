"""Flatten a document tree into a list of transformed, styled paths."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from . import shapepath, style
from .elements import Group, Path, Text
from .errors import ParseError, ShapeError, StyleError
from .pathcmd import apply_transforms

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .elements import TContainer, TElement
    from .transform import TTransform

logger = logging.getLogger(__name__)

# Errors that only spoil a single element
_ELEMENT_ERRORS = (ParseError, ShapeError, StyleError)


def flatten_paths(
    node: TContainer,
    transforms: Sequence[TTransform] = (),
    stroke: style.Stroke | None = None,
    fill: style.Fill | None = None,
    *,
    clockwise: bool = True,
    errors: list[Exception] | None = None,
) -> list[Path]:
    """Convert all the shapes under a container to paths.

    The container's own transform is appended to the inherited
    transforms and its style is resolved over the inherited style.
    Direct child shapes are converted first, in document order,
    then nested groups are flattened recursively.
    Text elements are left out.

    The input tree is not modified.

    Args:
        node: A Group or Document.
        transforms: Inherited transforms, outermost first.
        stroke: Inherited resolved stroke.
        fill: Inherited resolved fill.
        clockwise: Winding direction for circles, ellipses,
            and rectangles.
        errors: If a list is passed then elements that fail to
            convert are skipped and their errors appended to it.
            Otherwise the first error is raised.

    Returns:
        A list of paths with absolute coordinates and resolved styles.

    Raises:
        ParseError: Malformed transform or path data.
        ShapeError: Invalid shape geometry.
        StyleError: Malformed style value.
    """
    node_transforms = [*transforms, *node.transformations()]
    node_stroke, node_fill = style.resolve_style(node, stroke, fill)

    paths: list[Path] = []
    groups: list[Group] = []
    for child in node.children:
        if isinstance(child, Group):
            groups.append(child)
            continue
        if isinstance(child, Text):
            logger.debug('Skipping text element %s', child.id or '(no id)')
            continue
        try:
            paths.append(
                element_path(
                    child, node_transforms, node_stroke, node_fill, clockwise
                )
            )
        except _ELEMENT_ERRORS as e:
            _collect_error(child, e, errors)

    for group in groups:
        try:
            paths.extend(
                flatten_paths(
                    group,
                    node_transforms,
                    node_stroke,
                    node_fill,
                    clockwise=clockwise,
                    errors=errors,
                )
            )
        except _ELEMENT_ERRORS as e:
            _collect_error(group, e, errors)

    return paths


def _collect_error(
    element: TElement, error: Exception, errors: list[Exception] | None
) -> None:
    if errors is None:
        raise error
    logger.warning(
        'Skipping %s %s: %s',
        type(element).__name__,
        element.id or '(no id)',
        error,
    )
    errors.append(error)


def element_path(
    element: TElement,
    transforms: Sequence[TTransform] = (),
    stroke: style.Stroke | None = None,
    fill: style.Fill | None = None,
    clockwise: bool = True,
) -> Path:
    """Convert a single shape or path element to a transformed, styled Path.

    Args:
        element: A shape or path element (not a Group).
        transforms: Inherited transforms, outermost first.
        stroke: Inherited resolved stroke.
        fill: Inherited resolved fill.
        clockwise: Winding direction for closed shapes.

    Returns:
        A new Path with absolute coordinates (unless there are no
        transforms at all) and resolved fill and stroke.
    """
    element_transforms = [*transforms, *element.transformations()]
    element_stroke, element_fill = style.resolve_style(element)
    if isinstance(element, Path):
        # Styles already resolved on a path take precedence over the parent's
        if element.stroke is not None:
            element_stroke.inherit(element.stroke)
        if element.fill is not None:
            element_fill.inherit(element.fill)
    if stroke is not None:
        element_stroke.inherit(stroke)
    if fill is not None:
        element_fill.inherit(fill)

    commands = shapepath.shape_commands(element, clockwise=clockwise)
    return Path(
        commands=apply_transforms(commands, element_transforms),
        fill=element_fill,
        stroke=element_stroke,
        id=element.id,
    )
