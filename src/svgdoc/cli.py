"""Command line SVG shape flattener.

Reads an SVG document, converts every shape to a transformed path with
resolved stroke and fill, and writes a new document of the same size
containing only those paths.
"""

from __future__ import annotations

import argparse
import datetime
import logging
import pathlib
import sys
from typing import TYPE_CHECKING, Any

from . import flatten, svg
from .elements import Document
from .errors import SVGError

if TYPE_CHECKING:
    import os

logger = logging.getLogger(__name__)

_LOG_FORMAT = '%(levelname)s:%(name)s: %(message)s'


def errormsg(*args: Any, **kwargs: Any) -> None:  # noqa: ANN401
    """Write an error msg to stderr.

    Intended for end-user-visible messages (usually error conditions).
    """
    print(*args, file=sys.stderr, **kwargs)  # noqa: T201


def flatten_document(
    document: Document,
    clockwise: bool = True,
    errors: list[Exception] | None = None,
) -> Document:
    """Create a new document containing only the flattened paths.

    The new document has the same size, viewBox, title, and
    description as the source document.
    """
    paths = flatten.flatten_paths(document, clockwise=clockwise, errors=errors)
    logger.info('Flattened %d paths', len(paths))
    return Document(
        width=document.width,
        height=document.height,
        view_box=document.view_box,
        title=document.title,
        desc=document.desc,
        children=list(paths),
    )


def _create_log(
    log_path: str | os.PathLike | None, log_level: str | None
) -> None:
    """Configure logging.

    Args:
        log_path: Path to log file. If None or empty log output
            goes to stderr.
        log_level: Log level:
            'DEBUG', 'INFO', 'WARNING', 'ERROR', or 'CRITICAL'.
            Default is 'WARNING'.
    """
    if not log_level:
        log_level = 'WARNING'
    if log_path:
        logging.basicConfig(
            filename=pathlib.Path(log_path).expanduser(),
            filemode='w',
            format=_LOG_FORMAT,
            level=log_level.upper(),
        )
    else:
        logging.basicConfig(format=_LOG_FORMAT, level=log_level.upper())
    logger.info(
        'Log started %s, level=%s',
        datetime.datetime.now(tz=datetime.timezone.utc),
        logging.getLevelName(logger.getEffectiveLevel()),
    )


def _precision(value: str) -> int | None:
    """Argparse type for the number of digits after the decimal point.

    A negative value means shortest form.
    """
    try:
        precision = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(
            f'Invalid precision value: {value}'
        ) from e
    return None if precision < 0 else precision


def _process_options(argv: list[str] | None) -> argparse.Namespace:
    """Set up options and parse command line options."""
    parser = argparse.ArgumentParser(
        prog='svgdoc-flatten',
        description='Convert SVG shapes to transformed, styled paths.',
    )
    parser.add_argument(
        '--output-file', '-o', type=pathlib.Path, help='Output file.'
    )
    parser.add_argument(
        '--counter-clockwise',
        action='store_true',
        help='Draw circles, ellipses, and rectangles counter-clockwise',
    )
    parser.add_argument(
        '--keep-going',
        action='store_true',
        help='Skip elements that fail to decode or convert instead of stopping',
    )
    parser.add_argument(
        '--precision',
        type=_precision,
        default=svg.GEOMETRY_PRECISION,
        help='Digits after the decimal point (negative for shortest form)',
    )
    parser.add_argument('--log-level', default='WARNING', help='Log level')
    parser.add_argument(
        '--log-filename',
        default=None,
        help='Full pathname of log file (default is stderr)',
    )
    # Path to input file if any
    parser.add_argument(
        'input_file',
        nargs='?',
        type=pathlib.Path,
        help='Path name of input file (default is stdin)',
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Command line entry point.

    Args:
        argv: Command line options, default is sys.argv[1:]

    Returns:
        Exit status: 0 on success, 1 if the input could not be read
        or converted, 2 if elements were skipped with --keep-going.
    """
    options = _process_options(argv)
    _create_log(options.log_filename, options.log_level)

    errors: list[Exception] | None = [] if options.keep_going else None
    try:
        if options.input_file:
            document = svg.load_document(options.input_file, errors=errors)
        else:
            document = svg.parse_document(
                sys.stdin.buffer.read(), errors=errors
            )
    except (SVGError, OSError) as e:
        errormsg(f'Unable to parse SVG input: {e}')
        return 1

    try:
        output = flatten_document(
            document, clockwise=not options.counter_clockwise, errors=errors
        )
    except SVGError as e:
        errormsg(f'Unable to convert SVG shapes: {e}')
        return 1

    try:
        if options.output_file:
            with options.output_file.open('w', encoding='utf8') as f:
                svg.write_document(output, f, precision=options.precision)
        else:
            svg.write_document(output, sys.stdout, precision=options.precision)
    except OSError as e:
        errormsg(f'Unable to write SVG output: {e}')
        return 1

    if errors:
        errormsg(f'{len(errors)} element(s) skipped.')
        return 2
    return 0
